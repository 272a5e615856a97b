# Path and File Name : /home/datastack/rebuild/datastack_installer/services/liveness.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Liveness checks for detached service processes, backed by a scan of the host process table

"""
Liveness checking.

Services are launched detached and leave no handle behind, so liveness is
always re-derived from the host process table; nothing is cached between calls.
"""

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Iterable, List, Sequence

import psutil


@dataclass(frozen=True)
class ProcessInfo:
    """One process matching a liveness marker."""
    pid: int
    marker: str
    cmdline: str

    @property
    def label(self) -> str:
        """Short form like jps prints it."""
        return f"{self.pid} {self.marker.rsplit('.', 1)[-1]}"


class LivenessChecker(ABC):
    """Answers whether one role is currently serving."""

    @abstractmethod
    def is_live(self) -> bool:
        pass

    @abstractmethod
    def matching_processes(self) -> List[ProcessInfo]:
        pass

    def terminate(self, timeout: float = 10.0) -> int:
        """Stop the role's processes. Returns how many were signalled."""
        raise NotImplementedError(f"{type(self).__name__} cannot terminate processes")


class ProcessTableLiveness(LivenessChecker):
    """
    Scans the process table for command lines containing marker strings.

    With require_all (the default) a role counts as live only when every marker
    is matched by some process, e.g. both NameNode and DataNode.
    """

    def __init__(
        self,
        markers: Sequence[str],
        require_all: bool = True,
        process_iter: Callable[..., Iterable] = psutil.process_iter,
    ):
        if not markers:
            raise ValueError("At least one liveness marker is required")
        self.markers = tuple(markers)
        self.require_all = require_all
        self.process_iter = process_iter

    def _scan(self) -> List[tuple]:
        own_pid = os.getpid()
        found = []
        for proc in self.process_iter(['pid', 'name', 'cmdline']):
            info = proc.info
            if info.get('pid') == own_pid:
                continue
            cmdline = " ".join(info.get('cmdline') or [])
            if not cmdline:
                continue
            for marker in self.markers:
                if marker in cmdline:
                    found.append((proc, ProcessInfo(pid=info['pid'], marker=marker, cmdline=cmdline)))
                    break
        return found

    def matching_processes(self) -> List[ProcessInfo]:
        return [info for _, info in self._scan()]

    def is_live(self) -> bool:
        seen = {info.marker for info in self.matching_processes()}
        if self.require_all:
            return all(marker in seen for marker in self.markers)
        return bool(seen)

    def terminate(self, timeout: float = 10.0) -> int:
        procs = []
        for proc, _ in self._scan():
            try:
                proc.terminate()
                procs.append(proc)
            except (psutil.NoSuchProcess, psutil.AccessDenied):
                continue
        if not procs:
            return 0
        _, alive = psutil.wait_procs(procs, timeout=timeout)
        for proc in alive:
            try:
                proc.kill()
            except (psutil.NoSuchProcess, psutil.AccessDenied):
                continue
        return len(procs)
