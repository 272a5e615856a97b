# Path and File Name : /home/datastack/rebuild/datastack_installer/components.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Component descriptors, install targets and the persistent data area derived from settings

"""
Component model.

ComponentDescriptor  - what to fetch (name, version, URL, archive, subdirectory, roles)
InstallTarget        - where it lands (root/subdirectory) and who owns it
DataArea             - durable storage-service state (metadata, blocks, scratch)

All three are derived deterministically from InstallerSettings and never mutated.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Tuple

from .settings import InstallerSettings


@dataclass(frozen=True)
class ComponentDescriptor:
    """One installable subsystem."""
    name: str
    display_name: str
    version: str
    url_template: str
    archive_template: str
    subdir_template: str
    roles: Tuple[str, ...] = ()

    @property
    def url(self) -> str:
        return self.url_template.format(version=self.version)

    @property
    def archive_filename(self) -> str:
        return self.archive_template.format(version=self.version)

    @property
    def install_subdir(self) -> str:
        return self.subdir_template.format(version=self.version)


@dataclass(frozen=True)
class InstallTarget:
    """Install location of one component."""
    root: Path
    owner: str
    subdir: str

    @property
    def path(self) -> Path:
        return self.root / self.subdir


@dataclass(frozen=True)
class DataArea:
    """Persistent Data Area of the storage service."""
    root: Path

    @property
    def metadata_dir(self) -> Path:
        return self.root / "name"

    @property
    def block_dir(self) -> Path:
        return self.root / "data"

    @property
    def scratch_dir(self) -> Path:
        return self.root / "tmp"

    def subareas(self) -> Tuple[Path, ...]:
        return (self.metadata_dir, self.block_dir, self.scratch_dir)


def build_components(settings: InstallerSettings) -> Dict[str, ComponentDescriptor]:
    """Components in install order."""
    return {
        "hadoop": ComponentDescriptor(
            name="hadoop",
            display_name="Hadoop",
            version=settings.hadoop_version,
            url_template=settings.hadoop_url,
            archive_template="hadoop-{version}.tar.gz",
            subdir_template="hadoop-{version}",
            roles=("hdfs", "yarn"),
        ),
        "hive": ComponentDescriptor(
            name="hive",
            display_name="Hive",
            version=settings.hive_version,
            url_template=settings.hive_url,
            archive_template="apache-hive-{version}-bin.tar.gz",
            subdir_template="apache-hive-{version}-bin",
            roles=("metastore", "hiveserver2"),
        ),
        "pig": ComponentDescriptor(
            name="pig",
            display_name="Pig",
            version=settings.pig_version,
            url_template=settings.pig_url,
            archive_template="pig-{version}.tar.gz",
            subdir_template="pig-{version}",
        ),
    }


def install_target(settings: InstallerSettings, descriptor: ComponentDescriptor) -> InstallTarget:
    return InstallTarget(root=settings.install_root, owner=settings.user, subdir=descriptor.install_subdir)


def install_paths(settings: InstallerSettings) -> Dict[str, Path]:
    """Install path per component name."""
    return {
        name: install_target(settings, descriptor).path
        for name, descriptor in build_components(settings).items()
    }


def data_area(settings: InstallerSettings) -> DataArea:
    return DataArea(root=settings.data_root)
