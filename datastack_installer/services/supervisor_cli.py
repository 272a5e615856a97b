# Path and File Name : /home/datastack/rebuild/datastack_installer/services/supervisor_cli.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Command-line entry of the generated supervisor launcher (start|stop|restart|status|help)

"""
Standalone supervisor command.

Invoked by the generated launcher with the settings the provisioning run
resolved. Unknown commands print usage and exit 0.
"""

import sys
from typing import Any, List, Mapping, Optional

from rich.console import Console

from ..errors import ConfigError, ServiceStartFailure
from ..run_log import setup_console_logging, success
from ..settings import InstallerSettings
from .supervisor import ServiceSupervisor, build_supervisor

COMMANDS = ("start", "stop", "restart", "status", "help")


def usage(prog: str = "manage-hadoop-hive") -> str:
    return "\n".join([
        "Hadoop & Hive Management Script",
        f"Usage: {prog} [command]",
        "",
        "Commands:",
        "  start    - Start Hadoop and Hive services",
        "  stop     - Stop Hadoop and Hive services",
        "  status   - Check the status of all services",
        "  restart  - Restart all services",
        "  help     - Show this help message",
    ])


def print_status(supervisor: ServiceSupervisor, logger) -> bool:
    """Log one line per role and the matching processes. True if all live."""
    logger.info("Checking Hadoop and Hive services...")
    report = supervisor.status()
    for role in supervisor.roles:
        if report.roles[role.name]:
            success(logger, f"{role.display_name} is running")
        else:
            logger.error(f"{role.display_name} is not running")
    logger.info("Matching processes:")
    for proc in report.processes:
        logger.info(f"  {proc.label}")
    if not report.processes:
        logger.info("  (none)")
    return all(report.roles.values())


def main(argv: Optional[List[str]] = None, settings_data: Optional[Mapping[str, Any]] = None,
         supervisor: Optional[ServiceSupervisor] = None, console: Optional[Console] = None) -> int:
    argv = sys.argv[1:] if argv is None else list(argv)
    command = argv[0] if argv else "help"
    logger = setup_console_logging(console)

    if command not in COMMANDS or command == "help":
        (console or Console()).print(usage(), markup=False, highlight=False)
        return 0

    if supervisor is None:
        try:
            settings = InstallerSettings.from_dict(settings_data or {})
        except ConfigError as e:
            logger.error(f"Invalid embedded settings: {e}")
            return 1
        supervisor = build_supervisor(settings, logger=logger)

    try:
        if command == "status":
            print_status(supervisor, logger)
        elif command == "stop":
            logger.info("Stopping Hadoop and Hive services...")
            supervisor.stop()
            success(logger, "All services stopped")
        elif command == "start":
            logger.info("Starting Hadoop and Hive services...")
            supervisor.start()
            success(logger, "All services started")
        elif command == "restart":
            logger.info("Restarting Hadoop and Hive services...")
            supervisor.restart()
            success(logger, "All services restarted")
    except ServiceStartFailure as e:
        logger.error(str(e))
        return 1
    except OSError as e:
        logger.error(f"{command} failed: {e}")
        return 1
    except KeyboardInterrupt:
        logger.error("Cancelled by user")
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
