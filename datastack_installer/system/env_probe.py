# Path and File Name : /home/datastack/rebuild/datastack_installer/system/env_probe.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Detects host facts (disk headroom, constrained/virtualized kernel, connectivity) before provisioning

"""
Environment Prober.

Only disk exhaustion is fatal. A constrained host (WSL kernel) and missing
connectivity produce warnings; on WSL a resource-limit hint file for the outer
host is written once.
"""

import logging
import socket
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

import psutil

from ..errors import PreconditionError
from ..run_log import get_logger, success
from ..settings import InstallerSettings
from ..shell import chown_tree

WSL_HINT = """[wsl2]
memory=4GB
processors=2
swap=2GB
"""


@dataclass
class EnvironmentReport:
    """Host facts relevant to configuration choices."""
    is_constrained_host: bool
    available_bytes: int
    warnings: List[str] = field(default_factory=list)
    hint_file: Optional[Path] = None


def tcp_reachable(host: str, port: int = 53, timeout: float = 3.0) -> bool:
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError:
        return False


def existing_ancestor(path: Path) -> Path:
    """Closest existing directory at or above path (disk_usage needs one)."""
    path = Path(path)
    while not path.exists() and path != path.parent:
        path = path.parent
    return path


class EnvironmentProber:
    """Probes the host before anything is fetched."""

    def __init__(
        self,
        settings: InstallerSettings,
        proc_version_path: Path = Path("/proc/version"),
        connectivity_check: Callable[[str], bool] = tcp_reachable,
        logger: Optional[logging.Logger] = None,
    ):
        self.settings = settings
        self.proc_version_path = proc_version_path
        self.connectivity_check = connectivity_check
        self.logger = logger or get_logger()

    def probe(self) -> EnvironmentReport:
        """
        Run all host checks.

        Raises:
            PreconditionError: If free space on the install volume is below the threshold
        """
        available = self.check_disk_space()
        report = EnvironmentReport(is_constrained_host=False, available_bytes=available)

        self.logger.info("Checking for WSL environment...")
        if self.is_constrained_host():
            report.is_constrained_host = True
            success(self.logger, "WSL detected, applying specific configurations...")
            report.hint_file = self._write_resource_hint(report)
        else:
            self.logger.info("Not running in WSL environment")

        if not self.connectivity_check(self.settings.connectivity_probe_host):
            self._warn(report, "Network connectivity issues detected")
            self._warn(report, "If download issues occur, check the network or restart the virtualized host")

        return report

    def check_disk_space(self) -> int:
        volume = existing_ancestor(self.settings.install_root)
        available = psutil.disk_usage(str(volume)).free
        required = self.settings.min_free_bytes
        if available < required:
            message = (
                f"Not enough disk space. Required: {required // (1024 ** 3)}GB, "
                f"Available: {available // (1024 * 1024)}MB"
            )
            self.logger.error(message)
            raise PreconditionError(message)
        success(self.logger, f"Sufficient disk space available: {available // (1024 * 1024)}MB")
        return available

    def is_constrained_host(self) -> bool:
        try:
            return "microsoft" in self.proc_version_path.read_text().lower()
        except OSError:
            return False

    def _write_resource_hint(self, report: EnvironmentReport) -> Optional[Path]:
        hint_file = self.settings.home / ".wslconfig"
        if hint_file.exists():
            return None
        self.logger.info("Creating WSL configuration file...")
        try:
            hint_file.write_text(WSL_HINT)
            chown_tree(hint_file, self.settings.user)
        except (OSError, RuntimeError) as e:
            self._warn(report, f"Could not write {hint_file}: {e}")
            return None
        success(self.logger, "Created .wslconfig with recommended settings")
        self._warn(report, "Consider restarting WSL for these settings to take effect: 'wsl --shutdown' from PowerShell")
        return hint_file

    def _warn(self, report: EnvironmentReport, message: str) -> None:
        report.warnings.append(message)
        self.logger.warning(message)
