# Path and File Name : /home/datastack/rebuild/datastack_installer/settings.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Builds the single immutable settings value threaded through every installer component

"""
Installer Settings: one explicit configuration value per run.

Resolution order:
1. Compiled-in defaults
2. Optional YAML settings file (validated against settings_schema.json)
3. Command-line overrides

The invoking user (the real user behind sudo) and that user's home directory are
resolved here, once. No other module reads the process environment.
"""

import json
import os
import pwd
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import jsonschema
import yaml

from .errors import ConfigError

SCHEMA_PATH = Path(__file__).resolve().parent / "settings_schema.json"

HADOOP_VERSION = "3.4.0"
HIVE_VERSION = "4.0.0"
PIG_VERSION = "0.10.0"

HADOOP_URL = "https://downloads.apache.org/hadoop/common/hadoop-{version}/hadoop-{version}.tar.gz"
HIVE_URL = "https://archive.apache.org/dist/hive/hive-{version}/apache-hive-{version}-bin.tar.gz"
PIG_URL = "https://archive.apache.org/dist/pig/pig-{version}/pig-{version}.tar.gz"

# ~5GB expressed the way df reports it (KiB)
MIN_FREE_KIB = 5000000

_PATH_FIELDS = (
    "home", "install_root", "data_root", "java_home", "log_dir",
    "supervisor_script", "profile_file",
)


@dataclass(frozen=True)
class InstallerSettings:
    """Resolved installer configuration. Never mutated after construction."""
    user: str
    home: Path
    install_root: Path
    data_root: Path
    java_home: Path
    log_dir: Path
    supervisor_script: Path
    profile_file: Path
    hadoop_version: str = HADOOP_VERSION
    hive_version: str = HIVE_VERSION
    pig_version: str = PIG_VERSION
    hadoop_url: str = HADOOP_URL
    hive_url: str = HIVE_URL
    pig_url: str = PIG_URL
    download_retries: int = 3
    retry_backoff_seconds: float = 2.0
    download_timeout_seconds: float = 60.0
    min_free_bytes: int = MIN_FREE_KIB * 1024
    settle_delay_seconds: float = 5.0
    restart_pause_seconds: float = 5.0
    install_runtime: bool = True
    runtime_package: str = "openjdk-8-jdk"
    connectivity_probe_host: str = "8.8.8.8"

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serializable form (paths as strings)."""
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            result[f.name] = str(value) if isinstance(value, Path) else value
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "InstallerSettings":
        """Rebuild settings from to_dict() output."""
        validate_settings_document(data)
        values = dict(data)
        for name in _PATH_FIELDS:
            if name in values:
                values[name] = Path(values[name])
        try:
            return cls(**values)
        except TypeError as e:
            raise ConfigError(f"Incomplete settings document: {e}")


def load_schema() -> Dict:
    """Load the settings JSON schema."""
    try:
        with open(SCHEMA_PATH, 'r') as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Failed to load settings schema {SCHEMA_PATH}: {e}")


def validate_settings_document(document: Mapping[str, Any]) -> None:
    """
    Validate a settings mapping against the schema.

    Raises:
        ConfigError: If the document does not match the schema
    """
    try:
        jsonschema.validate(instance=dict(document), schema=load_schema())
    except jsonschema.ValidationError as e:
        location = ".".join(str(p) for p in e.absolute_path) or "<root>"
        raise ConfigError(f"Invalid settings at {location}: {e.message}")


def resolve_actual_user(environ: Mapping[str, str]) -> str:
    """Real user even when running under sudo."""
    sudo_user = environ.get("SUDO_USER")
    if sudo_user:
        return sudo_user
    return pwd.getpwuid(os.getuid()).pw_name


def _expand(value: str, home: Path) -> Path:
    if value == "~":
        return home
    if value.startswith("~/"):
        return home / value[2:]
    return Path(value)


def default_settings(user: str, home: Path) -> InstallerSettings:
    """Compiled-in defaults for the given user."""
    return InstallerSettings(
        user=user,
        home=home,
        install_root=home,
        data_root=home / "hadoop_data",
        java_home=Path("/usr/lib/jvm/java-8-openjdk-amd64"),
        log_dir=Path.cwd(),
        supervisor_script=home / "manage-hadoop-hive",
        profile_file=home / ".bashrc",
    )


def read_settings_file(path: Path) -> Dict[str, Any]:
    """Read and validate a YAML settings file."""
    try:
        with open(path, 'r') as f:
            document = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read settings file {path}: {e}")
    except yaml.YAMLError as e:
        raise ConfigError(f"Settings file {path} is not valid YAML: {e}")

    if document is None:
        return {}
    if not isinstance(document, dict):
        raise ConfigError(f"Settings file {path} must contain a mapping")

    validate_settings_document(document)
    return document


def load_settings(
    config_path: Optional[Path] = None,
    overrides: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> InstallerSettings:
    """
    Construct the run's settings.

    Args:
        config_path: Optional YAML settings file
        overrides: Values that win over the file (e.g. from the command line)
        environ: Process environment, only used to find the real user

    Returns:
        InstallerSettings

    Raises:
        ConfigError: If the file or the overrides are invalid
    """
    if environ is None:
        environ = os.environ

    values: Dict[str, Any] = {}
    if config_path is not None:
        values.update(read_settings_file(Path(config_path)))
    if overrides:
        values.update({k: v for k, v in overrides.items() if v is not None})
    validate_settings_document({k: str(v) if isinstance(v, Path) else v for k, v in values.items()})

    user = values.pop("user", None) or resolve_actual_user(environ)
    if "home" in values:
        home = Path(values.pop("home"))
    else:
        try:
            home = Path(pwd.getpwnam(user).pw_dir)
        except KeyError:
            raise ConfigError(f"User '{user}' does not exist on this host")

    settings = default_settings(user, home)
    for name in _PATH_FIELDS:
        if name in values:
            values[name] = _expand(str(values[name]), home)

    # data_root follows install_root unless set explicitly
    if "install_root" in values and "data_root" not in values:
        values["data_root"] = values["install_root"] / "hadoop_data"

    return replace(settings, **values)
