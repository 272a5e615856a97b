# Path and File Name : /home/datastack/rebuild/datastack_installer/config/property_sets.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Compiled-in single-node property sets for the storage, resource-manager and metastore components

"""
Fixed property sets for a one-node topology.

Replication factor 1, metadata/block stores under the data area, embedded
Derby metastore, schema verification and permission checks disabled.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple

from ..components import DataArea


@dataclass(frozen=True)
class Property:
    name: str
    value: str
    description: Optional[str] = None


@dataclass(frozen=True)
class PropertySet:
    """Ordered properties rendered into one configuration file."""
    properties: Tuple[Property, ...]
    standalone: Optional[str] = None

    def as_dict(self) -> Dict[str, str]:
        return {p.name: p.value for p in self.properties}


# Relative to the hadoop install path
HADOOP_CONF_DIR = Path("etc") / "hadoop"
# Relative to the hive install path
HIVE_CONF_DIR = Path("conf")

METASTORE_DB_DIR = "metastore_db"
WAREHOUSE_DIR = "/user/hive/warehouse"
HDFS_TMP_DIR = "/tmp"


def hadoop_property_sets(user: str, area: DataArea) -> Dict[str, PropertySet]:
    """File name (inside etc/hadoop) -> property set."""
    return {
        "core-site.xml": PropertySet((
            Property("fs.defaultFS", "hdfs://localhost:9000"),
            Property("hadoop.tmp.dir", str(area.scratch_dir)),
            Property(f"hadoop.proxyuser.{user}.hosts", "localhost"),
            Property(f"hadoop.proxyuser.{user}.groups", user),
        )),
        "hdfs-site.xml": PropertySet((
            Property("dfs.replication", "1"),
            Property("dfs.namenode.name.dir", f"file://{area.metadata_dir}"),
            Property("dfs.datanode.data.dir", f"file://{area.block_dir}"),
            Property("dfs.permissions.enabled", "false", "Disable permissions checking (for testing only)"),
        )),
        "mapred-site.xml": PropertySet((
            Property("mapreduce.framework.name", "yarn"),
        )),
        "yarn-site.xml": PropertySet((
            Property("yarn.nodemanager.aux-services", "mapreduce_shuffle"),
        )),
    }


def hive_property_sets(hive_home: Path) -> Dict[str, PropertySet]:
    """File name (inside conf) -> property set."""
    return {
        "hive-site.xml": PropertySet((
            Property(
                "javax.jdo.option.ConnectionURL",
                f"jdbc:derby:;databaseName={hive_home / METASTORE_DB_DIR};create=true",
                "JDBC connect string for a JDBC metastore",
            ),
            Property(
                "javax.jdo.option.ConnectionDriverName",
                "org.apache.derby.jdbc.EmbeddedDriver",
                "Driver class name for a JDBC metastore",
            ),
            Property("hive.metastore.warehouse.dir", WAREHOUSE_DIR,
                     "location of default database for the warehouse"),
            Property("hive.exec.scratchdir", "/tmp/hive", "HDFS scratch directory for Hive jobs"),
            Property("hive.metastore.schema.verification", "false",
                     "Disable schema verification to prevent issues with schema versions"),
            Property("hive.server2.authentication", "NONE"),
            Property("hive.server2.enable.doAs", "true"),
        ), standalone="no"),
    }


def hadoop_env_exports(user: str) -> Dict[str, str]:
    """Daemon user exports required in hadoop-env.sh when starting as root."""
    return {
        name: user
        for name in (
            "HDFS_NAMENODE_USER",
            "HDFS_DATANODE_USER",
            "HDFS_SECONDARYNAMENODE_USER",
            "YARN_RESOURCEMANAGER_USER",
            "YARN_NODEMANAGER_USER",
        )
    }
