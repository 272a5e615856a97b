# Path and File Name : /home/datastack/rebuild/datastack_installer/installer.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Main provisioning orchestrator - prerequisites, fetch/configure per component, storage init, service start, verification, supervisor emission

"""
Datastack Provisioner: main orchestrator for a single-host Hadoop/Hive/Pig install.

Stages run strictly in sequence. A stage raising InstallerError becomes a FATAL
result: the run stops with exit code 1 and whatever was done so far stays in
place. WARNING results are surfaced and the run continues.
"""

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from .components import (
    ComponentDescriptor, build_components, data_area, install_paths, install_target,
)
from .config.materializer import ConfigMaterializer
from .config.profile_editor import ProfileEditor, build_block
from .config.property_sets import (
    HADOOP_CONF_DIR, HIVE_CONF_DIR, hadoop_env_exports, hadoop_property_sets, hive_property_sets,
)
from .decisions import DecisionProvider, InteractiveDecisions, PresetDecisions
from .errors import ConfigError, InstallerError
from .fetch.artifact_fetcher import ArtifactFetcher
from .run_log import get_logger, setup_logging, success
from .services.liveness import LivenessChecker
from .services.roles import namenode_liveness, service_env
from .services.supervisor import ServiceSupervisor, build_supervisor
from .services.supervisor_writer import write_launcher
from .settings import InstallerSettings, load_settings
from .shell import CommandRunner
from .stages import StageOutcome, StageResult, warnings_in
from .storage.metastore_initializer import MetastoreInitializer
from .storage.storage_initializer import StorageInitializer
from .system.env_probe import EnvironmentProber
from .system.runtime_check import RuntimeChecker
from .system.ssh_setup import SSHSetup

STORAGE_ROLES = ("hdfs", "yarn")
QUERY_ROLES = ("metastore", "hiveserver2")

StageReturn = Union[None, StageResult, List[StageResult]]


class Provisioner:
    """Provisioning pipeline orchestrator."""

    VERSION = "1.0.0"

    def __init__(
        self,
        settings: InstallerSettings,
        decisions: DecisionProvider,
        log_path: Optional[Path] = None,
        runner: Optional[CommandRunner] = None,
        fetcher: Optional[ArtifactFetcher] = None,
        prober: Optional[EnvironmentProber] = None,
        runtime_checker: Optional[RuntimeChecker] = None,
        ssh_setup: Optional[SSHSetup] = None,
        supervisor_factory: Optional[Callable[[InstallerSettings], ServiceSupervisor]] = None,
        namenode: Optional[LivenessChecker] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.settings = settings
        self.decisions = decisions
        self.log_path = log_path
        self.logger = logger or get_logger()
        self.namenode = namenode or namenode_liveness()
        self.runner = runner or CommandRunner()
        self.fetcher = fetcher or ArtifactFetcher(
            retries=settings.download_retries,
            backoff_seconds=settings.retry_backoff_seconds,
            timeout_seconds=settings.download_timeout_seconds,
            logger=self.logger,
        )
        self.prober = prober or EnvironmentProber(settings, logger=self.logger)
        self.runtime_checker = runtime_checker or RuntimeChecker(
            settings, runner=self.runner, log_path=log_path, logger=self.logger,
        )
        self.ssh_setup = ssh_setup or SSHSetup(settings, runner=self.runner, logger=self.logger)
        self.supervisor_factory = supervisor_factory or (
            lambda s: build_supervisor(s, log_path=self.log_path, runner=self.runner, logger=self.logger)
        )
        self.components: Dict[str, ComponentDescriptor] = build_components(settings)
        self.paths: Dict[str, Path] = install_paths(settings)
        self.results: List[StageResult] = []
        self._supervisor: Optional[ServiceSupervisor] = None

    @property
    def supervisor(self) -> ServiceSupervisor:
        # Built on first use so a JAVA_HOME override from the runtime check applies
        if self._supervisor is None:
            self._supervisor = self.supervisor_factory(self.settings)
        return self._supervisor

    def stages(self) -> List[tuple]:
        """(name, callable) in execution order."""
        stages = [
            ("prerequisites", self._check_prerequisites),
            ("ssh", self._setup_ssh),
        ]
        for name in self.components:
            stages.append((f"fetch:{name}", lambda n=name: self._fetch(n)))
            stages.append((f"configure:{name}", lambda n=name: self._configure(n)))
        stages += [
            ("storage-format", self._initialize_storage),
            ("start-storage", self._start_storage),
            ("metastore-init", self._initialize_metastore),
            ("start-query", lambda: self.supervisor.start(QUERY_ROLES, stop_first=False)),
            ("verify", lambda: self.supervisor.verify_after_start()),
            ("verify:pig", self._verify_pig),
            ("profile", self._update_profile),
            ("supervisor", self._emit_supervisor),
        ]
        return stages

    def run(self) -> int:
        """
        Execute every stage in order.

        Returns:
            0 on success (warnings allowed), 1 on the first fatal stage
        """
        self.logger.info("=" * 60)
        self.logger.info(f"DATASTACK PROVISIONER {self.VERSION}")
        self.logger.info("=" * 60)

        stages = self.stages()
        for index, (name, stage) in enumerate(stages, start=1):
            self.logger.info(f"[{index}/{len(stages)}] {name}")
            try:
                outcome = stage()
            except InstallerError as e:
                return self._abort(name, str(e))
            except OSError as e:
                # filesystem or exec failures outside the typed errors
                return self._abort(name, f"{type(e).__name__}: {e}")
            self._record(name, outcome)

        self._summary()
        return 0

    def _abort(self, name: str, message: str) -> int:
        self.results.append(StageResult(name, StageOutcome.FATAL, message, self.log_path))
        self.logger.error(f"Stage '{name}' failed: {message}")
        self.logger.error(f"Installation aborted. Log file: {self.log_path}")
        return 1

    def _record(self, name: str, outcome: StageReturn) -> None:
        if outcome is None:
            outcome = StageResult(name, StageOutcome.SUCCESS)
        if isinstance(outcome, StageResult):
            outcome = [outcome]
        self.results.extend(outcome)

    def _check_prerequisites(self) -> List[StageResult]:
        results = []
        report = self.prober.probe()
        for message in report.warnings:
            results.append(StageResult("prerequisites", StageOutcome.WARNING, message))

        runtime = self.runtime_checker.check()
        for message in runtime.warnings:
            results.append(StageResult("prerequisites", StageOutcome.WARNING, message))
        if runtime.java_home_overridden:
            self.settings = replace(self.settings, java_home=runtime.java_home)
        return results

    def _setup_ssh(self) -> List[StageResult]:
        return [StageResult("ssh", StageOutcome.WARNING, w) for w in self.ssh_setup.setup()]

    def _fetch(self, name: str) -> StageResult:
        descriptor = self.components[name]
        target = install_target(self.settings, descriptor)

        disposition = None
        if self.fetcher.is_installed(target):
            self.logger.warning(f"{descriptor.display_name} {descriptor.version} is already installed at {target.path}")
            disposition = self.decisions.reinstall(name, target.path)

        path = self.fetcher.install(descriptor, target, disposition)
        return StageResult(f"fetch:{name}", StageOutcome.SUCCESS, str(path))

    def _configure(self, name: str) -> Optional[StageResult]:
        materializer = ConfigMaterializer(owner=self.settings.user, logger=self.logger)
        home = self.paths[name]

        if name == "hadoop":
            self.logger.info("Configuring Hadoop...")
            conf_dir = home / HADOOP_CONF_DIR
            materializer.edit_env_file(
                "hadoop", conf_dir / "hadoop-env.sh", self.settings.java_home, hadoop_env_exports(self.settings.user),
            )
            for filename, props in hadoop_property_sets(self.settings.user, data_area(self.settings)).items():
                materializer.render("hadoop", props, conf_dir / filename)
            self._storage_initializer().prepare()
            success(self.logger, "Hadoop configuration completed")
        elif name == "hive":
            self.logger.info("Configuring Hive...")
            for filename, props in hive_property_sets(home).items():
                materializer.render("hive", props, home / HIVE_CONF_DIR / filename)
            success(self.logger, "Hive configuration completed")
        else:
            return StageResult(f"configure:{name}", StageOutcome.SKIPPED, "No configuration required")
        return StageResult(f"configure:{name}", StageOutcome.SUCCESS, f"{len(materializer.backups)} backup(s) created")

    def _storage_initializer(self) -> StorageInitializer:
        return StorageInitializer(
            self.paths["hadoop"], data_area(self.settings), service_env(self.settings), self.settings.user,
            runner=self.runner, log_path=self.log_path, logger=self.logger,
        )

    def _initialize_storage(self) -> StageResult:
        initializer = self._storage_initializer()
        disposition = None
        if initializer.is_formatted():
            disposition = self.decisions.format_storage(initializer.area.metadata_dir)
        return initializer.format(disposition)

    def _start_storage(self) -> List[StageResult]:
        results = self.supervisor.start(STORAGE_ROLES)
        # the name node must be up before the warehouse directories are created
        self.supervisor.settle()
        return results

    def _initialize_metastore(self) -> StageResult:
        initializer = MetastoreInitializer(
            self.paths["hadoop"], self.paths["hive"], service_env(self.settings), self.settings.user,
            self.namenode, runner=self.runner, log_path=self.log_path, logger=self.logger,
        )
        disposition = None
        if initializer.metastore_dir.exists():
            disposition = self.decisions.reset_metastore(initializer.metastore_dir)
        return initializer.initialize(disposition)

    def _verify_pig(self) -> StageResult:
        self.logger.info("Verifying Pig installation...")
        pig = self.paths["pig"] / "bin" / "pig"
        if not pig.is_file():
            message = "Pig executable not found in expected location"
            self.logger.warning(message)
            return StageResult("verify:pig", StageOutcome.WARNING, message)

        result = self.runner.run([pig, "-version"], env=service_env(self.settings), as_user=self.settings.user)
        if result.returncode != 0:
            message = f"Unable to verify Pig installation (exit code {result.returncode})"
            self.logger.warning(message)
            return StageResult("verify:pig", StageOutcome.WARNING, message)

        version_line = (result.stdout or "").strip().splitlines()
        success(self.logger, f"Pig {self.settings.pig_version} installed successfully")
        return StageResult("verify:pig", StageOutcome.SUCCESS, version_line[0] if version_line else "")

    def _update_profile(self) -> StageResult:
        editor = ProfileEditor(self.settings.profile_file, owner=self.settings.user, logger=self.logger)
        changed = editor.add_block(build_block(self.paths, self.settings.java_home, self.settings.supervisor_script))
        outcome = StageOutcome.SUCCESS if changed else StageOutcome.SKIPPED
        return StageResult("profile", outcome, str(self.settings.profile_file))

    def _emit_supervisor(self) -> StageResult:
        self.logger.info("Creating management script...")
        try:
            path = write_launcher(self.settings)
        except RuntimeError as e:
            raise ConfigError(str(e))
        success(self.logger, f"Management script created: {path}")
        self.logger.info(f"You can manage services with: {path} [start|stop|restart|status]")
        return StageResult("supervisor", StageOutcome.SUCCESS, str(path))

    def _summary(self) -> None:
        s = self.settings
        self.logger.info("=" * 60)
        success(self.logger, "Installation Complete")
        self.logger.info("=" * 60)
        self.logger.info("Software Versions:")
        for descriptor in self.components.values():
            self.logger.info(f"  {descriptor.display_name:<20}: {descriptor.version}")
        self.logger.info("Installation Paths:")
        for name, path in self.paths.items():
            self.logger.info(f"  {self.components[name].display_name + ' Home':<20}: {path}")
        self.logger.info(f"  {'Data Directory':<20}: {s.data_root}")
        self.logger.info(f"  {'Log File':<20}: {self.log_path}")
        self.logger.info("Service Management:")
        for command in ("start", "stop", "status", "restart"):
            self.logger.info(f"  {s.supervisor_script} {command}")
        self.logger.info(f"Reload the environment with: source {s.profile_file}")

        warnings = warnings_in(self.results)
        if warnings:
            self.logger.warning(f"Completed with {len(warnings)} warning(s):")
            for result in warnings:
                self.logger.warning(f"  [{result.stage}] {result.message}")


def build_parser(prog: str, description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=prog, description=description)
    parser.add_argument('--config', type=Path, help='YAML settings file')
    answers = parser.add_mutually_exclusive_group()
    answers.add_argument('--yes', action='store_true', help='Answer yes to every confirmation')
    answers.add_argument('--no', action='store_true', help='Answer no to every confirmation')
    parser.add_argument('--install-root', help='Directory receiving the component installs')
    parser.add_argument('--data-root', help='Persistent data area root')
    parser.add_argument('--log-dir', help='Directory receiving the run log')
    return parser


def decisions_from_args(args: argparse.Namespace) -> DecisionProvider:
    if args.yes:
        return PresetDecisions(default=True)
    if args.no:
        return PresetDecisions(default=False)
    return InteractiveDecisions()


def settings_from_args(args: argparse.Namespace) -> InstallerSettings:
    return load_settings(args.config, overrides={
        "install_root": args.install_root,
        "data_root": args.data_root,
        "log_dir": args.log_dir,
    })


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point for provisioning."""
    args = build_parser('datastack-provision', 'Install Hadoop, Hive and Pig on this host').parse_args(argv)

    try:
        settings = settings_from_args(args)
        logger, log_path = setup_logging(settings.log_dir, "provision")
    except (ConfigError, OSError) as e:
        print(f"\n✗ Configuration error: {e}", file=sys.stderr)
        return 1

    try:
        return Provisioner(settings, decisions_from_args(args), log_path=log_path, logger=logger).run()
    except KeyboardInterrupt:
        logger.error("Installation cancelled by user.")
        logger.error(f"Log file: {log_path}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
