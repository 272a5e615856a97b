# Path and File Name : /home/datastack/rebuild/datastack_installer/errors.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Exception taxonomy for provisioning and uninstall stages

"""
Installer error taxonomy.

Every stage raises one of these; the orchestrator turns them into FATAL stage
results. Operator declines and best-effort stop failures are NOT exceptions,
they are modelled as SKIPPED / WARNING stage results.
"""

from pathlib import Path
from typing import Optional


class InstallerError(Exception):
    """Base class for all fatal installer errors."""
    pass


class PreconditionError(InstallerError):
    """Raised when a pre-flight requirement (disk space, runtime) is not met."""
    pass


class ConfigError(InstallerError):
    """Raised when settings are invalid or a configuration file cannot be rendered."""
    pass


class FetchError(InstallerError):
    """
    Raised when a component archive cannot be installed.

    Attributes:
        component: Component name
        attempts: Number of download attempts made
        extraction: True if the archive downloaded but failed to extract
    """

    def __init__(self, component: str, message: str, attempts: int = 0, extraction: bool = False):
        super().__init__(message)
        self.component = component
        self.attempts = attempts
        self.extraction = extraction


class AlreadyInstalled(FetchError):
    """Raised when the install path exists and no disposition was supplied."""

    def __init__(self, component: str, path: Path):
        super().__init__(component, f"{component} is already installed at {path}")
        self.path = path


class StorageFormatError(InstallerError):
    """Raised when the storage metadata format tool exits non-zero."""
    pass


class MetastoreInitError(InstallerError):
    """Raised when warehouse directories or the metastore schema cannot be created."""
    pass


class ServiceStartFailure(InstallerError):
    """Raised when an essential role's start command fails."""

    def __init__(self, role: str, message: str, returncode: Optional[int] = None):
        super().__init__(message)
        self.role = role
        self.returncode = returncode
