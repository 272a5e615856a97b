# Path and File Name : /home/datastack/rebuild/datastack_installer/tests/test_liveness.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Tests for process-table liveness matching and termination

import os
import sys
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from datastack_installer.services.liveness import ProcessTableLiveness
from datastack_installer.services.roles import DATANODE_MARKER, NAMENODE_MARKER


def fake_proc(pid, cmdline):
    proc = MagicMock()
    proc.info = {"pid": pid, "name": "java", "cmdline": cmdline}
    return proc


class TestProcessTableLiveness(unittest.TestCase):
    def setUp(self):
        self.table = [
            fake_proc(101, ["java", "-Dproc_namenode", NAMENODE_MARKER]),
            fake_proc(102, ["bash", "-c", "sleep 10"]),
            fake_proc(103, None),
        ]

    def checker(self, markers, **kwargs):
        return ProcessTableLiveness(markers, process_iter=lambda attrs: iter(self.table), **kwargs)

    def test_all_markers_required_by_default(self):
        checker = self.checker([NAMENODE_MARKER, DATANODE_MARKER])
        self.assertFalse(checker.is_live())
        self.table.append(fake_proc(104, ["java", DATANODE_MARKER]))
        self.assertTrue(checker.is_live())

    def test_any_marker_mode(self):
        self.assertTrue(self.checker([NAMENODE_MARKER, DATANODE_MARKER], require_all=False).is_live())

    def test_matching_processes(self):
        matches = self.checker([NAMENODE_MARKER]).matching_processes()
        self.assertEqual([m.pid for m in matches], [101])
        self.assertEqual(matches[0].label, "101 NameNode")

    def test_liveness_is_re_derived_each_call(self):
        checker = self.checker([NAMENODE_MARKER])
        self.assertTrue(checker.is_live())
        self.table.pop(0)
        self.assertFalse(checker.is_live())

    def test_own_process_ignored(self):
        self.table = [fake_proc(os.getpid(), ["python", NAMENODE_MARKER])]
        self.assertFalse(self.checker([NAMENODE_MARKER]).is_live())

    @patch("datastack_installer.services.liveness.psutil.wait_procs")
    def test_terminate_kills_survivors(self, wait_procs):
        survivor = self.table[0]
        wait_procs.return_value = ([], [survivor])
        count = self.checker([NAMENODE_MARKER]).terminate(timeout=1)
        self.assertEqual(count, 1)
        survivor.terminate.assert_called_once()
        survivor.kill.assert_called_once()

    def test_terminate_without_matches(self):
        self.assertEqual(self.checker(["org.example.Nothing"]).terminate(), 0)

    def test_markers_required(self):
        with self.assertRaises(ValueError):
            ProcessTableLiveness([])


if __name__ == '__main__':
    unittest.main()
