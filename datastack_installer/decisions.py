# Path and File Name : /home/datastack/rebuild/datastack_installer/decisions.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Resolves operator decisions for guarded destructive or conflicting operations

"""
Operator decisions.

Stages never prompt. The orchestrator asks a DecisionProvider and passes the
resulting Disposition into the stage call.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from rich.console import Console
from rich.prompt import Confirm

from .stages import Disposition


class DecisionProvider(ABC):
    """Answers the installer's yes/no questions."""

    @abstractmethod
    def confirm(self, key: str, prompt: str) -> bool:
        """Return True for yes."""

    def reinstall(self, component: str, path: Path) -> Disposition:
        yes = self.confirm(f"reinstall:{component}", f"{component} is already installed at {path}. Reinstall?")
        return Disposition.REPLACE if yes else Disposition.REUSE

    def format_storage(self, metadata_dir: Path) -> Disposition:
        yes = self.confirm(
            "format-storage",
            f"NameNode directory {metadata_dir} already contains data. Format anyway? This will ERASE all HDFS data",
        )
        return Disposition.PROCEED if yes else Disposition.ABORT

    def reset_metastore(self, metastore_dir: Path) -> Disposition:
        yes = self.confirm(
            "reset-metastore",
            f"Existing Hive metastore found at {metastore_dir}. Delete it and initialize a new schema?",
        )
        return Disposition.PROCEED if yes else Disposition.ABORT

    def confirm_uninstall(self) -> Disposition:
        yes = self.confirm("uninstall", "Are you sure you want to uninstall Hadoop, Hive, and Pig?")
        return Disposition.PROCEED if yes else Disposition.ABORT


class InteractiveDecisions(DecisionProvider):
    """Asks on the terminal."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def confirm(self, key: str, prompt: str) -> bool:
        return Confirm.ask(prompt, console=self.console, default=False)


class PresetDecisions(DecisionProvider):
    """
    Answers fixed up front (--yes / --no, or tests).

    Every question asked is recorded in `asked` so callers can assert on it.
    """

    def __init__(self, default: bool = False, answers: Optional[Dict[str, bool]] = None):
        self.default = default
        self.answers = dict(answers or {})
        self.asked: List[Tuple[str, str]] = []

    def confirm(self, key: str, prompt: str) -> bool:
        self.asked.append((key, prompt))
        return self.answers.get(key, self.default)
