"""
Import engine services
"""

from .settings_service import SettingsService
from .cursor_store import CursorStore
from .execution_guard import ExecutionGuard
from .deferred import DeferredTask, DeferredTaskQueue, DeferredTaskDispatcher
from .post_filters import apply_post_filters
from .batch_processor import BatchProcessor
from .scheduler import ImportScheduler
from .progress import ProgressReporter, calculate_percentage
from .upserter_loader import load_upserter

__all__ = [
    "SettingsService",
    "CursorStore",
    "ExecutionGuard",
    "DeferredTask",
    "DeferredTaskQueue",
    "DeferredTaskDispatcher",
    "apply_post_filters",
    "BatchProcessor",
    "ImportScheduler",
    "ProgressReporter",
    "calculate_percentage",
    "load_upserter",
]
