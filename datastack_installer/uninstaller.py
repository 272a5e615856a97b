# Path and File Name : /home/datastack/rebuild/datastack_installer/uninstaller.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Uninstall flow - confirmation, best-effort service stop, removal of install trees, data area, profile block and supervisor script

"""
Datastack Uninstaller.

Every step is independently best-effort: a missing target is reported as
"not found" and a failing removal is a warning, so running it twice is safe.
"""

import logging
import os
import shutil
import sys
from pathlib import Path
from typing import Callable, List, Mapping, Optional

from .components import build_components, data_area, install_paths
from .config.profile_editor import ProfileEditor
from .decisions import DecisionProvider
from .errors import ConfigError
from .installer import build_parser, decisions_from_args, settings_from_args
from .run_log import get_logger, setup_logging, success
from .services.supervisor import ServiceSupervisor, build_supervisor
from .settings import InstallerSettings
from .stages import Disposition, StageOutcome, StageResult, warnings_in


class Uninstaller:
    """Tears down what the provisioner created."""

    def __init__(
        self,
        settings: InstallerSettings,
        decisions: DecisionProvider,
        log_path: Optional[Path] = None,
        supervisor_factory: Optional[Callable[[InstallerSettings], ServiceSupervisor]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.settings = settings
        self.decisions = decisions
        self.log_path = log_path
        self.logger = logger or get_logger()
        self.supervisor_factory = supervisor_factory or (
            lambda s: build_supervisor(s, log_path=self.log_path, logger=self.logger)
        )
        self.results: List[StageResult] = []

    def run(self) -> int:
        """Returns 0 on completion or decline."""
        if self.decisions.confirm_uninstall() is not Disposition.PROCEED:
            self.logger.info("Uninstallation cancelled")
            self.results.append(StageResult("uninstall", StageOutcome.SKIPPED, "Declined by operator"))
            return 0

        self.stop_services()
        components = build_components(self.settings)
        for name, path in install_paths(self.settings).items():
            display = components[name].display_name
            self.logger.info(f"Removing {display} installation...")
            self._remove_dir(f"remove:{name}", path, display)

        self.logger.info("Removing Hadoop data directories...")
        self._remove_dir("remove:data", data_area(self.settings).root, "Hadoop data directories")
        self.remove_profile_block()
        self.remove_supervisor_script()

        success(self.logger, "Uninstallation completed successfully!")
        self._summary()
        return 0

    def stop_services(self) -> None:
        self.logger.info("Stopping Hadoop and Hive services...")
        hadoop_home = install_paths(self.settings)["hadoop"]
        if not hadoop_home.is_dir():
            self._warn("stop", f"Hadoop installation not found at {hadoop_home}, skipping service stop")
            return
        for result in self.supervisor_factory(self.settings).stop():
            self.results.append(result)
        success(self.logger, "Hadoop services stopped")

    def remove_profile_block(self) -> None:
        self.logger.info(f"Removing environment variables from {self.settings.profile_file}...")
        editor = ProfileEditor(self.settings.profile_file, logger=self.logger)
        try:
            removed = editor.remove_block()
        except OSError as e:
            self._warn("remove:profile", f"Failed to edit {self.settings.profile_file}: {e}")
            return
        outcome = StageOutcome.SUCCESS if removed else StageOutcome.SKIPPED
        self.results.append(StageResult("remove:profile", outcome, str(self.settings.profile_file)))

    def remove_supervisor_script(self) -> None:
        self.logger.info("Removing management script...")
        script = self.settings.supervisor_script
        if not script.is_file():
            self._warn("remove:supervisor", f"Management script not found at {script}")
            return
        try:
            script.unlink()
        except OSError as e:
            self._warn("remove:supervisor", f"Failed to remove {script}: {e}")
            return
        success(self.logger, f"Management script removed from {script}")
        self.results.append(StageResult("remove:supervisor", StageOutcome.SUCCESS, str(script)))

    def _remove_dir(self, stage: str, path: Path, name: str) -> None:
        if not path.is_dir():
            self._warn(stage, f"{name} installation not found at {path}")
            return
        try:
            shutil.rmtree(path)
        except OSError as e:
            self._warn(stage, f"Failed to remove {path}: {e}")
            return
        success(self.logger, f"{name} installation removed from {path}")
        self.results.append(StageResult(stage, StageOutcome.SUCCESS, str(path)))

    def _warn(self, stage: str, message: str) -> None:
        self.logger.warning(message)
        self.results.append(StageResult(stage, StageOutcome.WARNING, message, self.log_path))

    def _summary(self) -> None:
        self.logger.info("=== Uninstallation Summary ===")
        self.logger.info(f"Log file: {self.log_path}")
        removed = [r.message for r in self.results if r.stage.startswith("remove:") and r.outcome is StageOutcome.SUCCESS]
        if removed:
            success(self.logger, "Successfully removed:")
            for item in removed:
                self.logger.info(f"  - {item}")
        not_removed = warnings_in(self.results)
        if not_removed:
            self.logger.warning(f"{len(not_removed)} step(s) reported warnings")
        self.logger.info(f"To fully apply environment changes, run: source {self.settings.profile_file}")


def running_as_plain_root(environ: Mapping[str, str]) -> bool:
    """Root without sudo: the real user (and home) cannot be known."""
    return os.geteuid() == 0 and not environ.get("SUDO_USER")


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point for uninstall."""
    args = build_parser('datastack-uninstall', 'Remove Hadoop, Hive and Pig from this host').parse_args(argv)

    try:
        settings = settings_from_args(args)
        logger, log_path = setup_logging(settings.log_dir, "uninstall")
    except (ConfigError, OSError) as e:
        print(f"\n✗ Configuration error: {e}", file=sys.stderr)
        return 1

    if running_as_plain_root(os.environ) and args.config is None:
        logger.error("Please run with sudo, not as root directly")
        return 1

    try:
        return Uninstaller(settings, decisions_from_args(args), log_path=log_path, logger=logger).run()
    except KeyboardInterrupt:
        logger.error("Uninstallation cancelled by user.")
        return 1


if __name__ == '__main__':
    sys.exit(main())
