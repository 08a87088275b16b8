"""
Import engine models
"""

from .outcome import (
    Success,
    Fatal,
    Recoverable,
    BatchResult,
    UpsertOutcome,
    UpsertResult,
    BatchContext,
    BatchCounts,
    BatchOutcome,
    LogEntry,
)
from .progress import ImportLogEntry, ImportLogPage, ProgressReport, StartResult

__all__ = [
    "Success",
    "Fatal",
    "Recoverable",
    "BatchResult",
    "UpsertOutcome",
    "UpsertResult",
    "BatchContext",
    "BatchCounts",
    "BatchOutcome",
    "LogEntry",
    "ImportLogEntry",
    "ImportLogPage",
    "ProgressReport",
    "StartResult",
]
