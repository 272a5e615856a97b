# Path and File Name : /home/datastack/rebuild/datastack_installer/tests/helpers.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Shared fakes for installer tests (settings in a temp home, command runner, network session, liveness)

import io
import os
import pwd
import subprocess
import tarfile
from dataclasses import replace
from pathlib import Path
from typing import Callable, Dict, List, Optional

from datastack_installer.services.liveness import LivenessChecker, ProcessInfo
from datastack_installer.services.roles import ProcessRole, RoleCommand
from datastack_installer.settings import InstallerSettings, default_settings


def current_user() -> str:
    return pwd.getpwuid(os.getuid()).pw_name


def make_settings(root: Path, **overrides) -> InstallerSettings:
    """Settings rooted entirely inside a temporary directory."""
    home = Path(root) / "home"
    home.mkdir(parents=True, exist_ok=True)
    settings = default_settings(current_user(), home)
    values = {
        "java_home": Path(root) / "jvm",
        "log_dir": Path(root) / "logs",
        "min_free_bytes": 0,
        "settle_delay_seconds": 0.0,
        "restart_pause_seconds": 0.0,
        "retry_backoff_seconds": 0.0,
    }
    values.update(overrides)
    return replace(settings, **values)


def make_tarball(top_dir: str, files: Optional[Dict[str, str]] = None) -> bytes:
    """gzip'd tar with top_dir/ and the given relative files."""
    files = files or {"README": "component\n"}
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode='w:gz') as archive:
        info = tarfile.TarInfo(top_dir)
        info.type = tarfile.DIRTYPE
        info.mode = 0o755
        archive.addfile(info)
        for name, content in files.items():
            data = content.encode()
            info = tarfile.TarInfo(f"{top_dir}/{name}")
            info.size = len(data)
            info.mode = 0o644
            archive.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


class FakeResponse:
    def __init__(self, body: bytes, status_error: Optional[Exception] = None):
        self.body = body
        self.status_error = status_error

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def raise_for_status(self):
        if self.status_error:
            raise self.status_error

    def iter_content(self, chunk_size=1):
        for i in range(0, len(self.body), chunk_size):
            yield self.body[i:i + chunk_size]


class FakeSession:
    """requests.Session stand-in; each get() pops the next body or exception."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls: List[str] = []

    def get(self, url, stream=False, timeout=None):
        self.calls.append(url)
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return FakeResponse(outcome)


class FakeRunner:
    """
    CommandRunner stand-in.

    Return codes are looked up by executable basename; hooks run side effects
    (e.g. the format tool writing metadata).
    """

    def __init__(self, returncodes: Optional[Dict[str, int]] = None,
                 hooks: Optional[Dict[str, Callable[[List[str]], None]]] = None,
                 stdout: str = ""):
        self.returncodes = dict(returncodes or {})
        self.hooks = dict(hooks or {})
        self.stdout = stdout
        self.calls: List[List[str]] = []
        self.detached: List[List[str]] = []

    def run(self, args, env=None, as_user=None, cwd=None, log_path=None, timeout=None):
        args = [str(a) for a in args]
        self.calls.append(args)
        name = Path(args[0]).name
        if name in self.hooks:
            self.hooks[name](args)
        return subprocess.CompletedProcess(args, self.returncodes.get(name, 0), stdout=self.stdout, stderr="")

    def launch_detached(self, args, output_path, env=None, as_user=None):
        self.detached.append([str(a) for a in args])
        return None

    def commands(self) -> List[str]:
        return [" ".join([Path(c[0]).name] + c[1:]) for c in self.calls]


class SwitchLiveness(LivenessChecker):
    """Liveness backed by a shared set of running role names."""

    def __init__(self, running: set, name: str, pid: int = 1000):
        self.running = running
        self.name = name
        self.pid = pid

    def is_live(self) -> bool:
        return self.name in self.running

    def matching_processes(self) -> List[ProcessInfo]:
        if not self.is_live():
            return []
        return [ProcessInfo(pid=self.pid, marker=f"fake.{self.name}", cmdline=f"java fake.{self.name}")]

    def terminate(self, timeout: float = 10.0) -> int:
        was_live = self.is_live()
        self.running.discard(self.name)
        return 1 if was_live else 0


class FlipCommand(RoleCommand):
    def __init__(self, name, running, journal, start, returncode=0):
        self.name = name
        self.running = running
        self.journal = journal
        self.is_start = start
        self.returncode = returncode

    def execute(self, ctx):
        self.journal.append(("start" if self.is_start else "stop", self.name))
        if self.returncode == 0:
            if self.is_start:
                self.running.add(self.name)
            else:
                self.running.discard(self.name)
        return self.returncode

    def describe(self):
        return self.name


ROLE_SPECS = [("hdfs", True), ("yarn", False), ("metastore", True), ("hiveserver2", True)]


def make_roles(running, journal, start_codes=None, stop_codes=None):
    start_codes = start_codes or {}
    stop_codes = stop_codes or {}
    return [
        ProcessRole(
            name=name,
            display_name=name.upper(),
            essential=essential,
            start=FlipCommand(name, running, journal, True, start_codes.get(name, 0)),
            stop=FlipCommand(name, running, journal, False, stop_codes.get(name, 0)),
            liveness=SwitchLiveness(running, name, pid=100 + i),
        )
        for i, (name, essential) in enumerate(ROLE_SPECS)
    ]
