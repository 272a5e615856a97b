# Path and File Name : /home/datastack/rebuild/datastack_installer/tests/test_env_probe.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Tests for disk headroom precondition, WSL detection and advisory connectivity warnings

import shutil
import sys
import tempfile
import unittest
from collections import namedtuple
from pathlib import Path
from unittest.mock import patch

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from datastack_installer.errors import PreconditionError
from datastack_installer.system.env_probe import WSL_HINT, EnvironmentProber, existing_ancestor
from datastack_installer.tests.helpers import make_settings

Usage = namedtuple("Usage", "total used free percent")
GIB = 1024 ** 3


class TestEnvironmentProber(unittest.TestCase):
    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp())
        self.settings = make_settings(self.test_dir, min_free_bytes=5 * GIB)
        self.proc_version = self.test_dir / "proc_version"
        self.proc_version.write_text("Linux version 6.1.0-generic (builder@host) gcc\n")

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def prober(self, reachable=True):
        return EnvironmentProber(
            self.settings,
            proc_version_path=self.proc_version,
            connectivity_check=lambda host: reachable,
        )

    @patch("datastack_installer.system.env_probe.psutil.disk_usage")
    def test_insufficient_disk_is_fatal(self, disk_usage):
        disk_usage.return_value = Usage(100 * GIB, 99 * GIB, 1 * GIB, 99.0)
        with self.assertRaises(PreconditionError) as ctx:
            self.prober().probe()
        self.assertIn("Not enough disk space", str(ctx.exception))

    @patch("datastack_installer.system.env_probe.psutil.disk_usage")
    def test_plain_host(self, disk_usage):
        disk_usage.return_value = Usage(100 * GIB, 10 * GIB, 90 * GIB, 10.0)
        report = self.prober().probe()
        self.assertFalse(report.is_constrained_host)
        self.assertEqual(report.available_bytes, 90 * GIB)
        self.assertEqual(report.warnings, [])
        self.assertFalse((self.settings.home / ".wslconfig").exists())

    @patch("datastack_installer.system.env_probe.psutil.disk_usage")
    def test_wsl_writes_hint_once(self, disk_usage):
        disk_usage.return_value = Usage(100 * GIB, 10 * GIB, 90 * GIB, 10.0)
        self.proc_version.write_text("Linux version 5.15.90.1-microsoft-standard-WSL2\n")

        report = self.prober().probe()
        hint = self.settings.home / ".wslconfig"
        self.assertTrue(report.is_constrained_host)
        self.assertEqual(report.hint_file, hint)
        self.assertEqual(hint.read_text(), WSL_HINT)
        self.assertTrue(any("wsl --shutdown" in w for w in report.warnings))

        hint.write_text("[wsl2]\nmemory=8GB\n")
        second = self.prober().probe()
        self.assertIsNone(second.hint_file)
        self.assertEqual(hint.read_text(), "[wsl2]\nmemory=8GB\n")

    @patch("datastack_installer.system.env_probe.psutil.disk_usage")
    def test_connectivity_is_advisory(self, disk_usage):
        disk_usage.return_value = Usage(100 * GIB, 10 * GIB, 90 * GIB, 10.0)
        report = self.prober(reachable=False).probe()
        self.assertTrue(any("connectivity" in w for w in report.warnings))

    @patch("datastack_installer.system.env_probe.psutil.disk_usage")
    def test_disk_checked_on_nearest_existing_directory(self, disk_usage):
        disk_usage.return_value = Usage(100 * GIB, 10 * GIB, 90 * GIB, 10.0)
        self.settings = make_settings(self.test_dir, install_root=self.test_dir / "not" / "yet")
        self.prober().probe()
        disk_usage.assert_called_once_with(str(self.test_dir))

    def test_existing_ancestor(self):
        self.assertEqual(existing_ancestor(self.test_dir / "a" / "b"), self.test_dir)


if __name__ == '__main__':
    unittest.main()
