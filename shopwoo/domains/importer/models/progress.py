"""
Read models returned to polling clients
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ProgressReport(BaseModel):
    """Progress of one import session"""

    session_id: str
    store_id: str
    resource_type: str
    status: str
    items_total: int
    items_processed: int
    items_succeeded: int
    items_failed: int
    items_skipped: int
    percentage: int = Field(..., ge=0, le=100)
    message: Optional[str] = None
    is_complete: bool
    is_estimate: bool = False
    batch_in_flight: bool = False
    updated_at: Optional[datetime] = None


class StartResult(BaseModel):
    """Outcome of a start-import request"""

    session_id: str
    created: bool
    status: str
    items_total: int = 0
    is_partial: bool = False
    message: Optional[str] = None


class ImportLogEntry(BaseModel):
    """One persisted import log line"""

    level: str
    message: str
    record_id: Optional[str] = None
    batch_number: Optional[int] = None
    context: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None


class ImportLogPage(BaseModel):
    """A page of one session's import log, oldest first"""

    session_id: str
    total: int
    limit: int
    offset: int
    logs: List[ImportLogEntry]
