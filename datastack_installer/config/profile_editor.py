# Path and File Name : /home/datastack/rebuild/datastack_installer/config/profile_editor.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Adds and removes the marked environment/alias block in the user's shell profile

"""
Shell profile block.

Provisioning appends exactly one marked block (exports and aliases); uninstall
removes exactly that block. Both back the profile up first.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional

from ..errors import ConfigError
from ..run_log import get_logger, success
from ..shell import chown_tree
from .materializer import backup_file

BEGIN_MARKER = "# >>> datastack: Hadoop, Hive and Pig environment >>>"
END_MARKER = "# <<< datastack: Hadoop, Hive and Pig environment <<<"


def build_block(paths: Dict[str, Path], java_home: Path, supervisor_script: Path) -> List[str]:
    """Block lines (markers included)."""
    return [
        BEGIN_MARKER,
        f"export HADOOP_HOME={paths['hadoop']}",
        f"export HIVE_HOME={paths['hive']}",
        f"export PIG_HOME={paths['pig']}",
        f"export JAVA_HOME={java_home}",
        "export PATH=$PATH:$HADOOP_HOME/bin:$HADOOP_HOME/sbin:$HIVE_HOME/bin:$PIG_HOME/bin",
        f"alias hstart='{supervisor_script} start'",
        f"alias hstop='{supervisor_script} stop'",
        f"alias hstatus='{supervisor_script} status'",
        END_MARKER,
    ]


def strip_block(content: str) -> str:
    """Content with every marked block (and the blank line before it) removed."""
    out: List[str] = []
    inside = False
    for line in content.splitlines(keepends=True):
        stripped = line.rstrip("\n")
        if stripped == BEGIN_MARKER:
            inside = True
            if out and out[-1].strip() == "":
                out.pop()
            continue
        if inside:
            if stripped == END_MARKER:
                inside = False
            continue
        out.append(line)
    return "".join(out)


class ProfileEditor:
    """Edits one shell profile file."""

    def __init__(
        self,
        profile_file: Path,
        owner: Optional[str] = None,
        clock: Callable[[], datetime] = datetime.now,
        logger: Optional[logging.Logger] = None,
    ):
        self.profile_file = Path(profile_file)
        self.owner = owner
        self.clock = clock
        self.logger = logger or get_logger()

    def has_block(self) -> bool:
        return self.profile_file.is_file() and BEGIN_MARKER in self.profile_file.read_text()

    def add_block(self, lines: List[str]) -> bool:
        """
        Install the block; an outdated block is replaced.

        Returns:
            False when the identical block was already present

        Raises:
            ConfigError: If the profile cannot be written
        """
        self.logger.info("Setting up environment variables...")
        block = "\n".join(lines) + "\n"
        try:
            current = self.profile_file.read_text() if self.profile_file.exists() else ""
            if block in current:
                self.logger.info(f"Environment variables already present in {self.profile_file}")
                return False

            base = strip_block(current)
            if base and not base.endswith("\n"):
                base += "\n"
            backup = backup_file(self.profile_file, self.clock())
            if backup is not None:
                self.logger.info(f"Backup created: {backup}")
            self.profile_file.write_text(base + "\n" + block)
            if self.owner:
                chown_tree(self.profile_file, self.owner)
        except (OSError, RuntimeError) as e:
            raise ConfigError(f"Failed to update {self.profile_file}: {e}")

        success(self.logger, f"Environment variables and aliases added to {self.profile_file}")
        return True

    def remove_block(self) -> bool:
        """
        Remove the block. Returns False when there was nothing to remove.

        Raises:
            OSError: If the profile cannot be rewritten
        """
        if not self.profile_file.is_file():
            self.logger.warning(f"Profile file not found at {self.profile_file}")
            return False
        if not self.has_block():
            self.logger.warning(f"No datastack environment block found in {self.profile_file}")
            return False
        current = self.profile_file.read_text()

        backup = backup_file(self.profile_file, self.clock())
        self.profile_file.write_text(strip_block(current))
        success(self.logger, f"Environment variables and aliases removed from {self.profile_file} (backup created at {backup})")
        return True
