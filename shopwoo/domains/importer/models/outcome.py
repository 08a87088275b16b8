"""
Tagged outcomes crossing the batch processor / scheduler boundary

The processor never raises to the scheduler. It returns `Success` wrapping a
BatchOutcome, or `Fatal`. Per-record problems ride inside the outcome as
`Recoverable` entries.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from shopwoo.core.exceptions import FailureKind


@dataclass(frozen=True)
class Success:
    value: Any = None


@dataclass(frozen=True)
class Fatal:
    kind: FailureKind
    detail: str


@dataclass(frozen=True)
class Recoverable:
    kind: FailureKind
    detail: str
    record_id: Optional[str] = None


class UpsertOutcome(str, Enum):
    IMPORTED = "imported"
    UPDATED = "updated"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class UpsertResult:
    """What the entity upserter did with one record"""

    outcome: UpsertOutcome
    reason: Optional[str] = None


@dataclass(frozen=True)
class BatchContext:
    """Explicit identity of the batch being run, attached to every log line"""

    session_id: str
    store_id: str
    resource_type: str
    batch_number: int

    def log_fields(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "store_id": self.store_id,
            "resource_type": self.resource_type,
            "batch_number": self.batch_number,
        }


@dataclass
class BatchCounts:
    imported: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0

    def record(self, outcome: UpsertOutcome) -> None:
        setattr(self, outcome.value, getattr(self, outcome.value) + 1)

    @property
    def succeeded(self) -> int:
        return self.imported + self.updated

    @property
    def processed(self) -> int:
        return self.imported + self.updated + self.skipped + self.failed


@dataclass(frozen=True)
class LogEntry:
    """One line of a session's import log"""

    level: str
    message: str
    record_id: Optional[str] = None
    context: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "message": self.message,
            "record_id": self.record_id,
            "context": self.context,
        }


@dataclass
class BatchOutcome:
    """Result of one page, folded into the session and its import log"""

    counts: BatchCounts = field(default_factory=BatchCounts)
    log_entries: List[LogEntry] = field(default_factory=list)
    recoverable: List[Recoverable] = field(default_factory=list)
    has_next_page: bool = False
    next_cursor: Optional[str] = None
    previous_cursor: Optional[str] = None


BatchResult = Union[Success, Fatal]
