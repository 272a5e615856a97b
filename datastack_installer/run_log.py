# Path and File Name : /home/datastack/rebuild/datastack_installer/run_log.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Run log setup - colored severity-tagged console lines mirrored without color into a timestamped log file

"""
Run logging.

Every line goes to two places:
- the console, colored by severity (rich)
- the run log file, same text, no color codes
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Tuple

from rich.console import Console

LOGGER_NAME = "datastack"

SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

LINE_FORMAT = "[%(levelname)s] %(asctime)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LEVEL_STYLES = {
    "DEBUG": "dim",
    "INFO": "blue",
    "SUCCESS": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold red",
}


class ConsoleHandler(logging.Handler):
    """Writes formatted records to a rich console, styled by level."""

    def __init__(self, console: Optional[Console] = None):
        super().__init__()
        self.console = console or Console(highlight=False)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
            style = LEVEL_STYLES.get(record.levelname, "")
            self.console.print(message, style=style, markup=False, highlight=False, soft_wrap=True)
        except Exception:
            self.handleError(record)


def timestamped_log_path(log_dir: Path, run_name: str, now: Optional[datetime] = None) -> Path:
    """{log_dir}/datastack_{run_name}_YYYYmmdd_HHMMSS.log"""
    now = now or datetime.now()
    return Path(log_dir) / f"datastack_{run_name}_{now.strftime('%Y%m%d_%H%M%S')}.log"


def setup_logging(
    log_dir: Path,
    run_name: str,
    console: Optional[Console] = None,
) -> Tuple[logging.Logger, Path]:
    """
    Configure logging to the console and a fresh run log.

    Args:
        log_dir: Directory receiving the run log
        run_name: 'provision' or 'uninstall'
        console: Console to write to (tests pass a recording console)

    Returns:
        (logger, log_path)
    """
    log_path = timestamped_log_path(log_dir, run_name)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    with open(log_path, 'w') as f:
        f.write(f"# Datastack {run_name} log - {datetime.now().strftime('%a %b %d %H:%M:%S %Y')}\n")

    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.INFO)
    logger.propagate = False

    formatter = logging.Formatter(LINE_FORMAT, datefmt=DATE_FORMAT)

    file_handler = logging.FileHandler(log_path)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    console_handler = ConsoleHandler(console)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger, log_path


def get_logger() -> logging.Logger:
    return logging.getLogger(LOGGER_NAME)


def success(logger: logging.Logger, message: str) -> None:
    """Log at SUCCESS level."""
    logger.log(SUCCESS, message)


def setup_console_logging(console: Optional[Console] = None) -> logging.Logger:
    """Console-only logging, for the standalone supervisor."""
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.INFO)
    logger.propagate = False
    handler = ConsoleHandler(console)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return logger
