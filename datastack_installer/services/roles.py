# Path and File Name : /home/datastack/rebuild/datastack_installer/services/roles.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Process roles (start command, stop command, liveness predicate) in fixed dependency order

"""
Process roles.

Each long-running service process is a ProcessRole: how to start it, how to
stop it, and how to tell whether it is live. Roles are listed in start order:
storage, resource manager, metastore, query server.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

from ..components import build_components, install_paths
from ..settings import InstallerSettings
from ..shell import CommandRunner, java_env
from .liveness import LivenessChecker, ProcessTableLiveness

NAMENODE_MARKER = "org.apache.hadoop.hdfs.server.namenode.NameNode"
DATANODE_MARKER = "org.apache.hadoop.hdfs.server.datanode.DataNode"
RESOURCEMANAGER_MARKER = "org.apache.hadoop.yarn.server.resourcemanager.ResourceManager"
NODEMANAGER_MARKER = "org.apache.hadoop.yarn.server.nodemanager.NodeManager"
METASTORE_MARKER = "org.apache.hadoop.hive.metastore.HiveMetaStore"
HIVESERVER2_MARKER = "org.apache.hive.service.server.HiveServer2"

SYSTEM_PATH = "/usr/local/sbin:/usr/local/bin:/usr/sbin:/usr/bin:/sbin:/bin"


@dataclass
class ExecutionContext:
    """What every role command runs with."""
    runner: CommandRunner
    env: Mapping[str, str]
    user: Optional[str] = None
    log_path: Optional[Path] = None


class RoleCommand(ABC):
    @abstractmethod
    def execute(self, ctx: ExecutionContext) -> int:
        """Run the command; return its exit status."""

    @abstractmethod
    def describe(self) -> str:
        pass


class ScriptCommand(RoleCommand):
    """Foreground control script (start-dfs.sh and friends)."""

    def __init__(self, args: Sequence[str]):
        self.args = [str(a) for a in args]

    def execute(self, ctx: ExecutionContext) -> int:
        result = ctx.runner.run(self.args, env=ctx.env, as_user=ctx.user, log_path=ctx.log_path)
        return result.returncode

    def describe(self) -> str:
        return " ".join(self.args)


class DetachedCommand(RoleCommand):
    """Background launch with output redirected to a file (nohup ... &)."""

    def __init__(self, args: Sequence[str], output_path: Path):
        self.args = [str(a) for a in args]
        self.output_path = Path(output_path)

    def execute(self, ctx: ExecutionContext) -> int:
        try:
            ctx.runner.launch_detached(self.args, self.output_path, env=ctx.env, as_user=ctx.user)
        except OSError:
            return 126
        return 0

    def describe(self) -> str:
        return f"{' '.join(self.args)} > {self.output_path} &"


class TerminateCommand(RoleCommand):
    """Stops a role by signalling the processes its liveness checker matches."""

    def __init__(self, liveness: LivenessChecker):
        self.liveness = liveness

    def execute(self, ctx: ExecutionContext) -> int:
        self.liveness.terminate()
        return 0

    def describe(self) -> str:
        return "terminate matching processes"


@dataclass
class ProcessRole:
    name: str
    display_name: str
    essential: bool
    start: RoleCommand
    stop: RoleCommand
    liveness: LivenessChecker


def service_env(settings: InstallerSettings) -> Dict[str, str]:
    """Environment for every service command, built from settings only."""
    paths = install_paths(settings)
    hadoop, hive = paths["hadoop"], paths["hive"]
    return java_env(settings.java_home, {
        "HADOOP_HOME": str(hadoop),
        "HIVE_HOME": str(hive),
        "PATH": f"{SYSTEM_PATH}:{settings.java_home / 'bin'}:{hadoop / 'bin'}:{hadoop / 'sbin'}:{hive / 'bin'}",
    })


def namenode_liveness() -> LivenessChecker:
    return ProcessTableLiveness([NAMENODE_MARKER])


def build_roles(settings: InstallerSettings) -> List[ProcessRole]:
    """Roles in start order."""
    components = build_components(settings)
    paths = install_paths(settings)
    hadoop, hive = paths["hadoop"], paths["hive"]

    metastore_live = ProcessTableLiveness([METASTORE_MARKER])
    hiveserver2_live = ProcessTableLiveness([HIVESERVER2_MARKER])

    roles = [
        ProcessRole(
            name="hdfs",
            display_name="HDFS",
            essential=True,
            start=ScriptCommand([hadoop / "sbin" / "start-dfs.sh"]),
            stop=ScriptCommand([hadoop / "sbin" / "stop-dfs.sh"]),
            liveness=ProcessTableLiveness([NAMENODE_MARKER, DATANODE_MARKER]),
        ),
        ProcessRole(
            name="yarn",
            display_name="YARN",
            essential=False,
            start=ScriptCommand([hadoop / "sbin" / "start-yarn.sh"]),
            stop=ScriptCommand([hadoop / "sbin" / "stop-yarn.sh"]),
            liveness=ProcessTableLiveness([RESOURCEMANAGER_MARKER, NODEMANAGER_MARKER]),
        ),
        ProcessRole(
            name="metastore",
            display_name="Hive Metastore",
            essential=True,
            start=DetachedCommand([hive / "bin" / "hive", "--service", "metastore"],
                                  settings.home / "hive-metastore.log"),
            stop=TerminateCommand(metastore_live),
            liveness=metastore_live,
        ),
        ProcessRole(
            name="hiveserver2",
            display_name="HiveServer2",
            essential=True,
            start=DetachedCommand([hive / "bin" / "hiveserver2"], settings.home / "hiveserver2.log"),
            stop=TerminateCommand(hiveserver2_live),
            liveness=hiveserver2_live,
        ),
    ]
    owned = {role for c in components.values() for role in c.roles}
    return [r for r in roles if r.name in owned]
