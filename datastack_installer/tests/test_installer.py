# Path and File Name : /home/datastack/rebuild/datastack_installer/tests/test_installer.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Pipeline tests for the provisioner - full run, idempotence under decline, fatal stage handling

"""
Provisioner pipeline tests.

Network, host checks, component binaries and service processes are all
replaced by fakes; configuration rendering, data area preparation, profile
editing and the supervisor launcher run for real inside a temp directory.
"""

import shutil
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from datastack_installer.components import data_area, install_paths
from datastack_installer.config.profile_editor import BEGIN_MARKER
from datastack_installer.decisions import PresetDecisions
from datastack_installer.errors import FetchError, PreconditionError
from datastack_installer.installer import Provisioner, main
from datastack_installer.services.roles import ExecutionContext
from datastack_installer.services.supervisor import ServiceSupervisor
from datastack_installer.shell import CommandRunner
from datastack_installer.stages import Disposition, StageOutcome
from datastack_installer.system.env_probe import EnvironmentReport
from datastack_installer.system.runtime_check import RuntimeReport
from datastack_installer.tests.helpers import FakeRunner, SwitchLiveness, make_roles, make_settings

HADOOP_ENV = "# Set Hadoop-specific environment variables here.\n# export JAVA_HOME=\n"


class FakeFetcher:
    """Creates the minimal tree each component needs instead of downloading."""

    def __init__(self, fail_on=None, tool_mode=None):
        self.fail_on = fail_on
        self.tool_mode = tool_mode
        self.installed = []

    @staticmethod
    def is_installed(target):
        return target.path.exists()

    def install(self, descriptor, target, disposition=None):
        if descriptor.name == self.fail_on:
            raise FetchError(descriptor.name, f"Failed to download {descriptor.display_name}", attempts=3)
        if target.path.exists():
            if disposition is Disposition.REUSE:
                return target.path
            shutil.rmtree(target.path)
        self.installed.append(descriptor.name)
        if descriptor.name == "hadoop":
            conf = target.path / "etc" / "hadoop"
            conf.mkdir(parents=True)
            (conf / "hadoop-env.sh").write_text(HADOOP_ENV)
            if self.tool_mode is not None:
                (target.path / "bin").mkdir()
                (target.path / "bin" / "hdfs").write_text("#!/bin/sh\nexit 0\n")
                (target.path / "bin" / "hdfs").chmod(self.tool_mode)
        elif descriptor.name == "pig":
            (target.path / "bin").mkdir(parents=True)
            (target.path / "bin" / "pig").write_text("#!/bin/sh\n")
        else:
            (target.path / "bin").mkdir(parents=True)
        return target.path


def snapshot(*roots):
    state = {}
    for root in roots:
        for path in sorted(root.rglob("*")):
            state[str(path)] = path.read_bytes() if path.is_file() else None
    return state


class TestProvisioner(unittest.TestCase):
    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp())
        self.settings = make_settings(self.test_dir)
        self.paths = install_paths(self.settings)
        self.area = data_area(self.settings)
        self.running = set()
        self.journal = []
        self.runner = FakeRunner(hooks={"hdfs": self.hdfs_tool, "schematool": self.schematool})
        self.fetcher = FakeFetcher()
        self.prober = MagicMock()
        self.prober.probe.return_value = EnvironmentReport(is_constrained_host=False, available_bytes=10 ** 12)
        self.runtime = MagicMock()
        self.runtime.check.return_value = RuntimeReport(
            java_binary=Path("/usr/bin/java"), version="1.8.0_392", java_home=self.settings.java_home,
        )
        self.ssh = MagicMock()
        self.ssh.setup.return_value = []

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def hdfs_tool(self, args):
        if "-format" in args:
            version = self.area.metadata_dir / "current" / "VERSION"
            version.parent.mkdir(parents=True, exist_ok=True)
            version.write_text("namespaceID=1\n")

    def schematool(self, args):
        (self.paths["hive"] / "metastore_db").mkdir(exist_ok=True)
        (self.paths["hive"] / "metastore_db" / "service.properties").write_text("derby\n")

    def provisioner(self, decisions, start_codes=None, sleep=None, runner=None):
        runner = runner or self.runner

        def supervisor_factory(settings):
            return ServiceSupervisor(
                make_roles(self.running, self.journal, start_codes=start_codes),
                ExecutionContext(runner=runner, env={}),
                sleep=sleep or (lambda seconds: None),
            )
        return Provisioner(
            self.settings, decisions,
            log_path=self.test_dir / "run.log",
            runner=runner, fetcher=self.fetcher, prober=self.prober,
            runtime_checker=self.runtime, ssh_setup=self.ssh,
            supervisor_factory=supervisor_factory,
            namenode=SwitchLiveness(self.running, "hdfs"),
        )

    def test_full_run(self):
        provisioner = self.provisioner(PresetDecisions(default=False))
        self.assertEqual(provisioner.run(), 0)

        self.assertEqual(self.fetcher.installed, ["hadoop", "hive", "pig"])
        hadoop_conf = self.paths["hadoop"] / "etc" / "hadoop"
        for name in ("core-site.xml", "hdfs-site.xml", "mapred-site.xml", "yarn-site.xml"):
            self.assertTrue((hadoop_conf / name).is_file(), name)
        self.assertIn(f"export JAVA_HOME={self.settings.java_home}", (hadoop_conf / "hadoop-env.sh").read_text())
        self.assertTrue((self.paths["hive"] / "conf" / "hive-site.xml").is_file())
        for directory in self.area.subareas():
            self.assertTrue(directory.is_dir())

        self.assertIn("hdfs namenode -format -force", self.runner.commands())
        self.assertIn("schematool -dbType derby -initSchema", self.runner.commands())
        self.assertEqual(self.running, {"hdfs", "yarn", "metastore", "hiveserver2"})
        self.assertTrue(self.settings.supervisor_script.is_file())
        self.assertIn(BEGIN_MARKER, self.settings.profile_file.read_text())

        stages = [r.stage for r in provisioner.results]
        self.assertLess(stages.index("storage-format"), stages.index("start:hdfs"))
        self.assertLess(stages.index("start:hdfs"), stages.index("metastore-init"))
        self.assertLess(stages.index("metastore-init"), stages.index("start:metastore"))
        self.assertFalse(any(r.is_fatal for r in provisioner.results))

    def test_rerun_with_every_confirmation_declined_changes_nothing(self):
        self.assertEqual(self.provisioner(PresetDecisions(default=False)).run(), 0)
        before = snapshot(self.area.root, *self.paths.values())

        decisions = PresetDecisions(default=False)
        formats_before = self.runner.commands().count("hdfs namenode -format -force")
        self.assertEqual(self.provisioner(decisions).run(), 0)

        self.assertEqual(snapshot(self.area.root, *self.paths.values()), before)
        self.assertEqual(self.runner.commands().count("hdfs namenode -format -force"), formats_before)
        self.assertEqual(self.fetcher.installed, ["hadoop", "hive", "pig"])
        self.assertEqual(
            [key for key, _ in decisions.asked],
            ["reinstall:hadoop", "reinstall:hive", "reinstall:pig", "format-storage", "reset-metastore"],
        )
        self.assertEqual(self.settings.profile_file.read_text().count(BEGIN_MARKER), 1)

    def test_confirmed_rerun_replaces_and_reformats(self):
        self.provisioner(PresetDecisions(default=False)).run()
        self.assertEqual(self.provisioner(PresetDecisions(default=True)).run(), 0)
        self.assertEqual(self.fetcher.installed, ["hadoop", "hive", "pig"] * 2)
        self.assertEqual(self.runner.commands().count("hdfs namenode -format -force"), 2)

    def test_fetch_failure_is_fatal(self):
        self.fetcher.fail_on = "hive"
        provisioner = self.provisioner(PresetDecisions())
        self.assertEqual(provisioner.run(), 1)

        last = provisioner.results[-1]
        self.assertEqual(last.stage, "fetch:hive")
        self.assertTrue(last.is_fatal)
        self.assertEqual(last.log_path, self.test_dir / "run.log")
        # work already done stays in place
        self.assertTrue(self.paths["hadoop"].is_dir())
        self.assertNotIn("hdfs namenode -format -force", self.runner.commands())
        self.assertFalse(self.settings.supervisor_script.exists())

    def test_precondition_failure_stops_before_fetch(self):
        self.prober.probe.side_effect = PreconditionError("Not enough disk space")
        provisioner = self.provisioner(PresetDecisions())
        self.assertEqual(provisioner.run(), 1)
        self.assertEqual(self.fetcher.installed, [])
        self.assertEqual(provisioner.results[-1].stage, "prerequisites")

    def test_essential_service_failure_is_fatal(self):
        provisioner = self.provisioner(PresetDecisions(), start_codes={"hdfs": 1})
        self.assertEqual(provisioner.run(), 1)
        self.assertEqual(provisioner.results[-1].stage, "start-storage")
        self.assertNotIn("schematool -dbType derby -initSchema", self.runner.commands())

    def test_non_executable_format_tool_is_fatal(self):
        self.fetcher.tool_mode = 0o644
        provisioner = self.provisioner(PresetDecisions(), runner=CommandRunner())
        self.assertEqual(provisioner.run(), 1)

        last = provisioner.results[-1]
        self.assertEqual(last.stage, "storage-format")
        self.assertTrue(last.is_fatal)
        self.assertIn("exit code 126", last.message)
        self.assertEqual(last.log_path, self.test_dir / "run.log")
        self.assertEqual(self.running, set())

    def test_os_error_inside_a_stage_is_fatal(self):
        def unreadable_metadata(args):
            if "-format" in args:
                raise PermissionError(13, "Permission denied", str(self.area.metadata_dir))
        self.runner.hooks["hdfs"] = unreadable_metadata

        provisioner = self.provisioner(PresetDecisions())
        with self.assertLogs("datastack", level="ERROR") as logs:
            self.assertEqual(provisioner.run(), 1)

        last = provisioner.results[-1]
        self.assertEqual(last.stage, "storage-format")
        self.assertTrue(last.is_fatal)
        self.assertIn("PermissionError", last.message)
        self.assertEqual(last.log_path, self.test_dir / "run.log")
        self.assertIn(f"Log file: {self.test_dir / 'run.log'}", "\n".join(logs.output))
        self.assertNotIn("schematool -dbType derby -initSchema", self.runner.commands())

    def test_storage_settles_before_warehouse_directories(self):
        events = []

        def hdfs_tool(args):
            self.hdfs_tool(args)
            if "dfs" in args:
                events.append(("hdfs dfs", args))
        self.runner.hooks["hdfs"] = hdfs_tool

        provisioner = self.provisioner(PresetDecisions(), sleep=lambda seconds: events.append(("sleep", seconds)))
        self.assertEqual(provisioner.run(), 0)

        kinds = [kind for kind, _ in events]
        self.assertIn("hdfs dfs", kinds)
        self.assertLess(kinds.index("sleep"), kinds.index("hdfs dfs"))
        self.assertEqual(events[0], ("sleep", 5.0))

    def test_resource_manager_failure_only_warns(self):
        provisioner = self.provisioner(PresetDecisions(), start_codes={"yarn": 1})
        self.assertEqual(provisioner.run(), 0)
        warnings = [r for r in provisioner.results if r.outcome is StageOutcome.WARNING]
        self.assertEqual([r.stage for r in warnings], ["start:yarn"])

    def test_pig_verification_failure_only_warns(self):
        self.runner.returncodes["pig"] = 1
        provisioner = self.provisioner(PresetDecisions())
        self.assertEqual(provisioner.run(), 0)
        outcomes = {r.stage: r.outcome for r in provisioner.results}
        self.assertEqual(outcomes["verify:pig"], StageOutcome.WARNING)

    def test_java_home_override_applies_to_configuration(self):
        derived = self.test_dir / "derived-jvm"
        self.runtime.check.return_value = RuntimeReport(
            java_binary=Path("/usr/bin/java"), version="1.8.0_392", java_home=derived,
            java_home_overridden=True, warnings=["JAVA_HOME directory not found"],
        )
        provisioner = self.provisioner(PresetDecisions())
        self.assertEqual(provisioner.run(), 0)
        env_text = (self.paths["hadoop"] / "etc" / "hadoop" / "hadoop-env.sh").read_text()
        self.assertIn(f"export JAVA_HOME={derived}", env_text)
        self.assertEqual(provisioner.results[0].outcome, StageOutcome.WARNING)


class TestProvisionMain(unittest.TestCase):
    def test_invalid_config_exits_one(self):
        with patch("sys.stderr"):
            self.assertEqual(main(["--config", "/nonexistent/settings.yaml"]), 1)

    def test_yes_and_no_are_exclusive(self):
        with patch("sys.stderr"), self.assertRaises(SystemExit):
            main(["--yes", "--no"])


if __name__ == '__main__':
    unittest.main()
