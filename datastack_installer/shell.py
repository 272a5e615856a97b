# Path and File Name : /home/datastack/rebuild/datastack_installer/shell.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Runs the component binaries as opaque commands, foreground or detached, as the target user

"""
Command runner for black-box component tools.

The exit status is the only signal the installer observes. Output is appended
to the run log when one is given.
"""

import os
import pwd
import subprocess
from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence


class CommandRunner:
    """Runs external commands, switching to the target user when running as root."""

    def __init__(self, base_env: Optional[Mapping[str, str]] = None):
        self.base_env = dict(os.environ if base_env is None else base_env)

    def _needs_switch(self, user: Optional[str]) -> bool:
        if not user or os.geteuid() != 0:
            return False
        return pwd.getpwuid(os.geteuid()).pw_name != user

    def _build(self, args: Sequence[str], env: Optional[Mapping[str, str]], as_user: Optional[str]):
        extra = dict(env or {})
        if self._needs_switch(as_user):
            assignments = [f"{k}={v}" for k, v in sorted(extra.items())]
            return ['sudo', '-u', as_user, '-H', '--', 'env'] + assignments + [str(a) for a in args], dict(self.base_env)
        full_env = dict(self.base_env)
        full_env.update(extra)
        return [str(a) for a in args], full_env

    def run(
        self,
        args: Sequence[str],
        env: Optional[Mapping[str, str]] = None,
        as_user: Optional[str] = None,
        cwd: Optional[Path] = None,
        log_path: Optional[Path] = None,
        timeout: Optional[float] = None,
    ) -> subprocess.CompletedProcess:
        """
        Run a command to completion.

        Output goes to log_path (appended) if given, otherwise it is captured.
        A missing executable is reported as exit status 127, one that cannot be
        executed (permissions, bad interpreter) as 126.
        """
        cmd, full_env = self._build(args, env, as_user)
        try:
            if log_path is not None:
                with open(log_path, 'a') as log:
                    return subprocess.run(
                        cmd, env=full_env, cwd=cwd, stdout=log, stderr=subprocess.STDOUT,
                        stdin=subprocess.DEVNULL, timeout=timeout, check=False,
                    )
            return subprocess.run(
                cmd, env=full_env, cwd=cwd, capture_output=True, text=True,
                stdin=subprocess.DEVNULL, timeout=timeout, check=False,
            )
        except FileNotFoundError as e:
            return subprocess.CompletedProcess(cmd, 127, stdout="", stderr=str(e))
        except OSError as e:
            return subprocess.CompletedProcess(cmd, 126, stdout="", stderr=str(e))
        except subprocess.TimeoutExpired as e:
            return subprocess.CompletedProcess(cmd, 124, stdout="", stderr=f"timed out after {e.timeout}s")

    def launch_detached(
        self,
        args: Sequence[str],
        output_path: Path,
        env: Optional[Mapping[str, str]] = None,
        as_user: Optional[str] = None,
    ) -> subprocess.Popen:
        """
        Start a long-running process that outlives this run.

        Equivalent of `nohup cmd > output 2>&1 &`: new session, stdin closed.

        Raises:
            OSError: If the process cannot be spawned
        """
        cmd, full_env = self._build(args, env, as_user)
        with open(output_path, 'w') as out:
            return subprocess.Popen(
                cmd, env=full_env, stdout=out, stderr=subprocess.STDOUT,
                stdin=subprocess.DEVNULL, start_new_session=True,
            )


def java_env(java_home: Path, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    """Environment every component tool needs."""
    env = {"JAVA_HOME": str(java_home)}
    if extra:
        env.update(extra)
    return env


def chown_tree(path: Path, user: str) -> None:
    """
    Recursively set ownership to user:user-primary-group.

    Only runs as root; a regular user already owns what it creates.

    Raises:
        RuntimeError: If the user does not exist or chown fails
    """
    if os.geteuid() != 0:
        return
    try:
        entry = pwd.getpwnam(user)
    except KeyError as e:
        raise RuntimeError(f"User not found: {user}: {e}")
    uid, gid = entry.pw_uid, entry.pw_gid
    try:
        os.chown(path, uid, gid)
        for root, dirs, files in os.walk(path):
            for d in dirs:
                os.chown(Path(root) / d, uid, gid, follow_symlinks=False)
            for f in files:
                os.chown(Path(root) / f, uid, gid, follow_symlinks=False)
    except OSError as e:
        raise RuntimeError(f"Failed to set ownership on {path}: {e}")
