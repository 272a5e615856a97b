# Path and File Name : /home/datastack/rebuild/datastack_installer/stages.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Stage result and operator disposition types shared by every pipeline stage

"""
Pipeline stage results and operator dispositions.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional


class StageOutcome(Enum):
    """Outcome of one pipeline stage."""
    SUCCESS = "success"
    SKIPPED = "skipped"    # Operator declined a guarded action
    WARNING = "warning"    # Non-fatal problem, run continues
    FATAL = "fatal"        # Run halts, work done so far is left in place


class Disposition(Enum):
    """Resolved operator decision for a guarded or conflicting operation."""
    PROCEED = "proceed"
    ABORT = "abort"
    REPLACE = "replace"
    REUSE = "reuse"


@dataclass(frozen=True)
class StageResult:
    """Result of a single stage."""
    stage: str
    outcome: StageOutcome
    message: str = ""
    log_path: Optional[Path] = None

    @property
    def is_fatal(self) -> bool:
        return self.outcome is StageOutcome.FATAL


def warnings_in(results: List[StageResult]) -> List[StageResult]:
    """Return only the WARNING results."""
    return [r for r in results if r.outcome is StageOutcome.WARNING]
