# Path and File Name : /home/datastack/rebuild/datastack_installer/system/runtime_check.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Verifies the Java runtime, installs it through the host package manager when allowed, and resolves JAVA_HOME

"""
Runtime dependency check.

Java must be present. A missing runtime is installed through apt-get when the
settings allow it; a runtime that is still missing afterwards is fatal. A
version other than 1.8 only produces a warning.
"""

import logging
import re
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from ..errors import PreconditionError
from ..run_log import get_logger, success
from ..settings import InstallerSettings
from ..shell import CommandRunner

VERSION_PATTERN = re.compile(r'version "([^"]+)"')


@dataclass
class RuntimeReport:
    java_binary: Path
    version: str
    java_home: Path
    java_home_overridden: bool = False
    warnings: List[str] = field(default_factory=list)


def parse_java_version(output: str) -> str:
    """Extract the quoted version from `java -version` output."""
    match = VERSION_PATTERN.search(output or "")
    return match.group(1) if match else "unknown"


class RuntimeChecker:
    """Ensures the Java runtime the components need is available."""

    def __init__(
        self,
        settings: InstallerSettings,
        runner: Optional[CommandRunner] = None,
        which: Callable[[str], Optional[str]] = shutil.which,
        log_path: Optional[Path] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.settings = settings
        self.runner = runner or CommandRunner()
        self.which = which
        self.log_path = log_path
        self.logger = logger or get_logger()

    def check(self) -> RuntimeReport:
        """
        Locate (or install) Java and resolve JAVA_HOME.

        Raises:
            PreconditionError: If no Java runtime is available
        """
        self.logger.info("Checking Java installation...")
        java = self.which("java")
        if java is None:
            java = self._install_runtime()

        result = self.runner.run([java, "-version"])
        version = parse_java_version(f"{result.stdout or ''}{result.stderr or ''}")
        report = RuntimeReport(java_binary=Path(java), version=version, java_home=self.settings.java_home)

        if version.startswith("1.8"):
            success(self.logger, f"Java 8 is installed: {version}")
        else:
            self._warn(report, f"Java version is {version}. This installer is designed for Java 8.")
            self._warn(report, "You may encounter issues. Consider installing OpenJDK 8.")

        if not self.settings.java_home.is_dir():
            derived = self.derive_java_home(Path(java))
            self._warn(report, f"JAVA_HOME directory not found: {self.settings.java_home}")
            self._warn(report, f"Setting JAVA_HOME to {derived}")
            report.java_home = derived
            report.java_home_overridden = True

        return report

    @staticmethod
    def derive_java_home(java_binary: Path) -> Path:
        """JAVA_HOME from the resolved java binary (strip trailing bin/java)."""
        resolved = java_binary.resolve()
        if resolved.parent.name == "bin":
            return resolved.parent.parent
        return resolved.parent

    def _install_runtime(self) -> str:
        if not self.settings.install_runtime:
            raise PreconditionError("Java not found and runtime installation is disabled")

        package = self.settings.runtime_package
        self.logger.warning(f"Java not found. Installing {package}...")
        for args in (["apt-get", "update", "-y"], ["apt-get", "install", "-y", package]):
            result = self.runner.run(args, log_path=self.log_path)
            if result.returncode != 0:
                raise PreconditionError(
                    f"'{' '.join(args)}' failed with exit code {result.returncode}"
                )

        java = self.which("java")
        if java is None:
            raise PreconditionError(f"Java still not found after installing {package}")
        return java

    def _warn(self, report: RuntimeReport, message: str) -> None:
        report.warnings.append(message)
        self.logger.warning(message)
