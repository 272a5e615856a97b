# Path and File Name : /home/datastack/rebuild/datastack_installer/services/supervisor.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Service lifecycle supervisor - ordered start/stop, status, restart and post-start verification

"""
Service Lifecycle Supervisor.

start   - stop everything first (failures returned as warnings), then start roles in order
stop    - stop roles in reverse order, best-effort (failures become WARNING results)
status  - live/not-live per role plus every matching process
restart - stop, fixed pause, start

A failing start is fatal for an essential role (ServiceStartFailure) and a
warning for a non-essential one.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

from ..errors import ServiceStartFailure
from ..run_log import get_logger, success
from ..settings import InstallerSettings
from ..shell import CommandRunner
from ..stages import StageOutcome, StageResult, warnings_in
from .liveness import ProcessInfo
from .roles import ExecutionContext, ProcessRole, build_roles, service_env

MIN_LIVE_ESSENTIAL = 2


@dataclass
class StatusReport:
    roles: Dict[str, bool] = field(default_factory=dict)
    processes: List[ProcessInfo] = field(default_factory=list)

    def live_roles(self) -> List[str]:
        return [name for name, live in self.roles.items() if live]

    @property
    def all_stopped(self) -> bool:
        return not any(self.roles.values())


class ServiceSupervisor:
    """Drives a fixed, ordered set of process roles."""

    def __init__(
        self,
        roles: List[ProcessRole],
        context: ExecutionContext,
        restart_pause_seconds: float = 5.0,
        settle_delay_seconds: float = 5.0,
        sleep: Callable[[float], None] = time.sleep,
        logger: Optional[logging.Logger] = None,
    ):
        self.roles = list(roles)
        self.context = context
        self.restart_pause_seconds = restart_pause_seconds
        self.settle_delay_seconds = settle_delay_seconds
        self.sleep = sleep
        self.logger = logger or get_logger()

    def _select(self, names: Optional[Iterable[str]]) -> List[ProcessRole]:
        if names is None:
            return list(self.roles)
        wanted = set(names)
        unknown = wanted - {r.name for r in self.roles}
        if unknown:
            raise ValueError(f"Unknown roles: {', '.join(sorted(unknown))}")
        return [r for r in self.roles if r.name in wanted]

    def stop(self, names: Optional[Iterable[str]] = None) -> List[StageResult]:
        """Stop roles in reverse order. Never raises for a failing stop command."""
        results = []
        for role in reversed(self._select(names)):
            self.logger.info(f"Stopping {role.display_name}...")
            try:
                rc = role.stop.execute(self.context)
                detail = f"exit code {rc}"
            except (OSError, NotImplementedError) as e:
                rc, detail = -1, str(e)
            if rc == 0:
                results.append(StageResult(f"stop:{role.name}", StageOutcome.SUCCESS, f"{role.display_name} stopped"))
            else:
                message = f"Failed to stop {role.display_name} ({detail})"
                self.logger.warning(message)
                results.append(StageResult(f"stop:{role.name}", StageOutcome.WARNING, message, self.context.log_path))
        return results

    def start(self, names: Optional[Iterable[str]] = None, stop_first: bool = True) -> List[StageResult]:
        """
        Start roles in dependency order.

        Raises:
            ServiceStartFailure: If an essential role's start command fails
        """
        selected = self._select(names)
        results: List[StageResult] = []
        if stop_first:
            results = self.stop()
            for result in warnings_in(results):
                self.logger.info(f"Ignoring stop failure before start: {result.message}")

        for role in selected:
            self.logger.info(f"Starting {role.display_name}...")
            rc = role.start.execute(self.context)
            if rc == 0:
                success(self.logger, f"{role.display_name} started")
                results.append(StageResult(f"start:{role.name}", StageOutcome.SUCCESS, f"{role.display_name} started"))
                continue

            where = f" Check {self.context.log_path} for details." if self.context.log_path else ""
            if role.essential:
                message = f"Failed to start {role.display_name} (exit code {rc}).{where}"
                self.logger.error(message)
                raise ServiceStartFailure(role.name, message, returncode=rc)
            message = f"Failed to start {role.display_name} (exit code {rc}). It is not required for basic operation."
            self.logger.warning(message)
            results.append(StageResult(f"start:{role.name}", StageOutcome.WARNING, message, self.context.log_path))
        return results

    def restart(self) -> List[StageResult]:
        results = self.stop()
        self.sleep(self.restart_pause_seconds)
        return results + self.start(stop_first=False)

    def status(self) -> StatusReport:
        """Liveness is re-derived on every call."""
        report = StatusReport()
        seen = set()
        for role in self.roles:
            report.roles[role.name] = role.liveness.is_live()
            for proc in role.liveness.matching_processes():
                if proc.pid not in seen:
                    seen.add(proc.pid)
                    report.processes.append(proc)
        return report

    def settle(self) -> None:
        """Fixed wait for freshly started processes; nothing is polled."""
        self.logger.info(f"Waiting {self.settle_delay_seconds:g}s for services to settle...")
        self.sleep(self.settle_delay_seconds)

    def verify_after_start(self) -> StageResult:
        """
        One liveness sample after the settle delay.

        Healthy when at least two essential roles are live; otherwise a warning.
        """
        self.logger.info("Verifying service processes...")
        self.settle()
        report = self.status()
        essential_live = [r.name for r in self.roles if r.essential and report.roles.get(r.name)]
        listing = ", ".join(p.label for p in report.processes) or "none"

        if len(essential_live) >= MIN_LIVE_ESSENTIAL:
            message = f"Services are running: {', '.join(report.live_roles())} (processes: {listing})"
            success(self.logger, message)
            return StageResult("verify", StageOutcome.SUCCESS, message)

        message = (
            f"Some services may not be running (live: {', '.join(report.live_roles()) or 'none'}). "
            "Check with the supervisor 'status' command."
        )
        self.logger.warning(message)
        return StageResult("verify", StageOutcome.WARNING, message, self.context.log_path)


def build_supervisor(
    settings: InstallerSettings,
    log_path: Optional[Path] = None,
    runner: Optional[CommandRunner] = None,
    logger: Optional[logging.Logger] = None,
) -> ServiceSupervisor:
    """Supervisor over the standard roles for these settings."""
    context = ExecutionContext(
        runner=runner or CommandRunner(),
        env=service_env(settings),
        user=settings.user,
        log_path=log_path,
    )
    return ServiceSupervisor(
        build_roles(settings),
        context,
        restart_pause_seconds=settings.restart_pause_seconds,
        settle_delay_seconds=settings.settle_delay_seconds,
        logger=logger,
    )
