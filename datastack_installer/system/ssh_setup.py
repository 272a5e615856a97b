# Path and File Name : /home/datastack/rebuild/datastack_installer/system/ssh_setup.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Sets up passwordless SSH to localhost for the storage start scripts

"""
Passwordless SSH to localhost.

The storage start scripts reach every node (here: localhost) over SSH. Nothing
in this module is fatal; problems are returned as warnings.
"""

import logging
import os
from pathlib import Path
from typing import List, Optional

from ..run_log import get_logger, success
from ..settings import InstallerSettings
from ..shell import CommandRunner, chown_tree


class SSHSetup:
    """Key generation and authorized_keys wiring for the target user."""

    def __init__(
        self,
        settings: InstallerSettings,
        runner: Optional[CommandRunner] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.settings = settings
        self.runner = runner or CommandRunner()
        self.logger = logger or get_logger()
        self.ssh_dir = settings.home / ".ssh"
        self.private_key = self.ssh_dir / "id_rsa"
        self.authorized_keys = self.ssh_dir / "authorized_keys"

    def setup(self) -> List[str]:
        """Returns warnings (empty list on full success)."""
        warnings: List[str] = []
        self.logger.info("Setting up SSH for Hadoop...")
        user = self.settings.user

        try:
            if not self.ssh_dir.is_dir():
                self.ssh_dir.mkdir(parents=True)
                os.chmod(self.ssh_dir, 0o700)
                chown_tree(self.ssh_dir, user)
        except (OSError, RuntimeError) as e:
            return self._warn(warnings, f"Cannot create {self.ssh_dir}: {e}")

        if self.private_key.exists():
            self.logger.info("SSH keys already exist.")
        else:
            result = self.runner.run(
                ["ssh-keygen", "-t", "rsa", "-N", "", "-f", str(self.private_key)],
                as_user=user,
            )
            if result.returncode != 0:
                return self._warn(warnings, f"ssh-keygen failed with exit code {result.returncode}")
            success(self.logger, "SSH keys generated.")

        try:
            self._authorize(self.private_key.with_suffix(".pub"))
        except (OSError, RuntimeError) as e:
            return self._warn(warnings, f"Cannot update {self.authorized_keys}: {e}")

        result = self.runner.run(
            ["ssh", "-o", "StrictHostKeyChecking=no", "-o", "ConnectTimeout=5",
             "localhost", "echo", "SSH test successful"],
            as_user=user,
        )
        if result.returncode == 0:
            success(self.logger, "SSH connection test successful.")
        else:
            self._warn(warnings, "SSH connection to localhost failed! Check 'sudo systemctl status ssh'")
        return warnings

    def _authorize(self, public_key: Path) -> None:
        key = public_key.read_text().strip()
        existing = self.authorized_keys.read_text() if self.authorized_keys.exists() else ""
        if key in existing:
            return
        with open(self.authorized_keys, 'a') as f:
            if existing and not existing.endswith("\n"):
                f.write("\n")
            f.write(key + "\n")
        os.chmod(self.authorized_keys, 0o600)
        chown_tree(self.authorized_keys, self.settings.user)

    def _warn(self, warnings: List[str], message: str) -> List[str]:
        warnings.append(message)
        self.logger.warning(message)
        return warnings
