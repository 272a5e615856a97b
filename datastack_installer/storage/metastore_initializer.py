# Path and File Name : /home/datastack/rebuild/datastack_installer/storage/metastore_initializer.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Creates the Hive warehouse directories in HDFS and initializes the embedded metastore schema

"""
Metastore initialization.

Needs a live name node. An existing embedded metastore database is only
deleted with an explicit PROCEED disposition; otherwise it is kept and the
schema step is skipped.
"""

import logging
import shutil
from pathlib import Path
from typing import Mapping, Optional

from ..config.property_sets import HDFS_TMP_DIR, METASTORE_DB_DIR, WAREHOUSE_DIR
from ..errors import MetastoreInitError
from ..run_log import get_logger, success
from ..services.liveness import LivenessChecker
from ..shell import CommandRunner
from ..stages import Disposition, StageOutcome, StageResult

STAGE = "metastore-init"


class MetastoreInitializer:
    def __init__(
        self,
        hadoop_home: Path,
        hive_home: Path,
        env: Mapping[str, str],
        user: str,
        namenode: LivenessChecker,
        runner: Optional[CommandRunner] = None,
        log_path: Optional[Path] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.hadoop_home = Path(hadoop_home)
        self.hive_home = Path(hive_home)
        self.env = dict(env)
        self.user = user
        self.namenode = namenode
        self.runner = runner or CommandRunner()
        self.log_path = log_path
        self.logger = logger or get_logger()

    @property
    def metastore_dir(self) -> Path:
        return self.hive_home / METASTORE_DB_DIR

    def _hdfs(self, *args: str) -> int:
        cmd = [self.hadoop_home / "bin" / "hdfs", "dfs", *args]
        return self.runner.run(cmd, env=self.env, as_user=self.user, log_path=self.log_path).returncode

    def _fail(self, message: str) -> None:
        if self.log_path:
            message += f" Check {self.log_path} for details."
        self.logger.error(message)
        raise MetastoreInitError(message)

    def create_warehouse_dirs(self) -> None:
        """
        Raises:
            MetastoreInitError: If HDFS is down or a directory cannot be created
        """
        self.logger.info("Checking if HDFS is running...")
        if not self.namenode.is_live():
            self._fail("HDFS is not running. Start Hadoop before setting up Hive.")
        if self._hdfs("-ls", "/") != 0:
            self._fail("HDFS is not accessible. Make sure Hadoop services are running.")

        for directory in (HDFS_TMP_DIR, WAREHOUSE_DIR):
            if self._hdfs("-mkdir", "-p", directory) != 0 or self._hdfs("-chmod", "g+w", directory) != 0:
                self._fail(f"Failed to create Hive directory {directory} in HDFS.")

    def initialize(self, disposition: Optional[Disposition] = None) -> StageResult:
        """
        Create warehouse directories and the metastore schema.

        Raises:
            MetastoreInitError: On any failing step
        """
        self.logger.info("Initializing Hive...")
        self.create_warehouse_dirs()

        if self.metastore_dir.exists():
            if disposition is not Disposition.PROCEED:
                self.logger.warning(f"Keeping existing Hive metastore at {self.metastore_dir}")
                return StageResult(STAGE, StageOutcome.SKIPPED, "Existing metastore kept", self.log_path)
            self.logger.warning("Existing Hive metastore found. Deleting it...")
            try:
                shutil.rmtree(self.metastore_dir)
            except OSError as e:
                self._fail(f"Failed to remove {self.metastore_dir}: {e}.")
            success(self.logger, "Old Hive metastore removed.")

        self.logger.info("Initializing Hive metastore...")
        schematool = self.hive_home / "bin" / "schematool"
        result = self.runner.run(
            [schematool, "-dbType", "derby", "-initSchema"],
            env=self.env, as_user=self.user, cwd=self.hive_home, log_path=self.log_path,
        )
        if result.returncode != 0:
            self._fail(f"Failed to initialize Hive metastore (exit code {result.returncode}).")

        success(self.logger, "Hive metastore initialized")
        return StageResult(STAGE, StageOutcome.SUCCESS, "Metastore schema created", self.log_path)
