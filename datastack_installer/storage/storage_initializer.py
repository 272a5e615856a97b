# Path and File Name : /home/datastack/rebuild/datastack_installer/storage/storage_initializer.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Prepares the persistent data area and formats the storage metadata store behind a confirmation guard

"""
Storage Initializer.

Unformatted -> Formatted, one way per data generation. A non-empty metadata
directory is only reformatted with an explicit PROCEED disposition; anything
else skips the format and leaves the area untouched. A failing format tool is
fatal and never retried.
"""

import logging
import os
from pathlib import Path
from typing import Mapping, Optional

from ..components import DataArea
from ..errors import StorageFormatError
from ..run_log import get_logger, success
from ..shell import CommandRunner, chown_tree
from ..stages import Disposition, StageOutcome, StageResult

STAGE = "storage-format"


class StorageInitializer:
    """Owns the Persistent Data Area of the storage service."""

    def __init__(
        self,
        hadoop_home: Path,
        area: DataArea,
        env: Mapping[str, str],
        user: str,
        runner: Optional[CommandRunner] = None,
        log_path: Optional[Path] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.hadoop_home = Path(hadoop_home)
        self.area = area
        self.env = dict(env)
        self.user = user
        self.runner = runner or CommandRunner()
        self.log_path = log_path
        self.logger = logger or get_logger()

    def prepare(self) -> None:
        """
        Create metadata, block and scratch directories plus the hadoop logs dir.

        Raises:
            StorageFormatError: If a directory cannot be created or handed to the user
        """
        try:
            for directory in self.area.subareas():
                if not directory.is_dir():
                    self.logger.info(f"Creating directory: {directory}")
                    directory.mkdir(parents=True, exist_ok=True)
            chown_tree(self.area.root, self.user)

            logs_dir = self.hadoop_home / "logs"
            logs_dir.mkdir(parents=True, exist_ok=True)
            chown_tree(logs_dir, self.user)
            os.chmod(logs_dir, 0o755)
        except (OSError, RuntimeError) as e:
            raise StorageFormatError(f"Failed to prepare data area {self.area.root}: {e}")
        self.logger.info(f"Directory permissions set for {self.area.root}")

    def is_formatted(self) -> bool:
        """True when the metadata store holds any entry."""
        metadata = self.area.metadata_dir
        return metadata.is_dir() and any(metadata.iterdir())

    def format(self, disposition: Optional[Disposition] = None) -> StageResult:
        """
        Format the metadata store.

        Args:
            disposition: Required (PROCEED) to reformat a non-empty store

        Raises:
            StorageFormatError: If the format tool exits non-zero
        """
        self.logger.info("Formatting HDFS NameNode...")
        if self.is_formatted():
            self.logger.warning("NameNode directory already contains data")
            if disposition is not Disposition.PROCEED:
                self.logger.info("Skipping HDFS format")
                return StageResult(STAGE, StageOutcome.SKIPPED, "Existing HDFS metadata kept", self.log_path)

        hdfs = self.hadoop_home / "bin" / "hdfs"
        result = self.runner.run(
            [hdfs, "namenode", "-format", "-force"],
            env=self.env, as_user=self.user, log_path=self.log_path,
        )
        if result.returncode != 0:
            message = f"HDFS format failed (exit code {result.returncode})."
            if self.log_path:
                message += f" Check {self.log_path} for details."
            self.logger.error(message)
            raise StorageFormatError(message)

        success(self.logger, "HDFS formatted successfully")
        return StageResult(STAGE, StageOutcome.SUCCESS, "HDFS formatted", self.log_path)
