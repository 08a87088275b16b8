"""
Read-only progress queries for polling clients
"""

import math
from typing import Optional

from shopwoo.core.database.models import ImportSession
from shopwoo.core.exceptions import SessionNotFoundError, ValidationError
from shopwoo.repository.ImportLogRepository import ImportLogRepository
from shopwoo.repository.ImportSessionRepository import ImportSessionRepository
from shopwoo.shared.constants.importer import (
    IMPORT_LOG_MAX_PAGE_LIMIT,
    IMPORT_LOG_PAGE_LIMIT,
    LOG_LEVELS,
)
from shopwoo.shared.helpers import ensure_utc
from ..models.progress import ImportLogEntry, ImportLogPage, ProgressReport
from .execution_guard import ExecutionGuard, batch_guard_key


def calculate_percentage(
    processed: int, total: int, is_estimate: bool = False, is_terminal: bool = False
) -> int:
    """
    round(processed / total * 100), halves rounding up, clamped to 0..100.

    An estimated total is never shown as 100% before the session finishes.
    """
    if not total or total <= 0:
        return 0
    percentage = int(math.floor(processed * 100 / total + 0.5))
    percentage = max(0, min(100, percentage))
    if is_estimate and not is_terminal:
        percentage = min(percentage, 99)
    return percentage


class ProgressReporter:
    def __init__(
        self,
        sessions: Optional[ImportSessionRepository] = None,
        guard: Optional[ExecutionGuard] = None,
        import_logs: Optional[ImportLogRepository] = None,
    ):
        self.sessions = sessions or ImportSessionRepository()
        self.guard = guard
        self.import_logs = import_logs or ImportLogRepository()

    async def get_progress(self, session_id: str) -> ProgressReport:
        session = await self.sessions.find(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return await self.build_report(session)

    async def get_active_progress(
        self, store_id: str, resource_type: str
    ) -> Optional[ProgressReport]:
        """Progress of the slot's active session, or None when idle"""
        session = await self.sessions.find_active(store_id, resource_type)
        if session is None:
            return None
        return await self.build_report(session)

    async def build_report(self, session: ImportSession) -> ProgressReport:
        is_terminal = session.is_terminal
        is_estimate = bool(session.items_total_is_estimate)

        in_flight = False
        if self.guard is not None and not is_terminal:
            in_flight = await self.guard.is_held(batch_guard_key(session.id))

        return ProgressReport(
            session_id=session.id,
            store_id=session.shop_id,
            resource_type=session.resource_type,
            status=session.status,
            items_total=session.items_total or 0,
            items_processed=session.items_processed or 0,
            items_succeeded=session.items_succeeded or 0,
            items_failed=session.items_failed or 0,
            items_skipped=session.items_skipped or 0,
            percentage=calculate_percentage(
                session.items_processed or 0,
                session.items_total or 0,
                is_estimate=is_estimate,
                is_terminal=is_terminal,
            ),
            message=session.message,
            is_complete=is_terminal,
            is_estimate=is_estimate,
            batch_in_flight=in_flight,
            updated_at=ensure_utc(session.updated_at),
        )

    async def get_logs(
        self,
        session_id: str,
        level: Optional[str] = None,
        limit: int = IMPORT_LOG_PAGE_LIMIT,
        offset: int = 0,
    ) -> ImportLogPage:
        """
        One page of a session's import log, oldest first.

        Raises:
            SessionNotFoundError: unknown session
            ValidationError: unknown level or out-of-range paging
        """
        if level is not None and level not in LOG_LEVELS:
            raise ValidationError(
                f"Unknown log level '{level}'", field="level", value=level
            )
        if not 1 <= limit <= IMPORT_LOG_MAX_PAGE_LIMIT or offset < 0:
            raise ValidationError(
                f"limit must be 1..{IMPORT_LOG_MAX_PAGE_LIMIT} and offset non-negative",
                field="limit",
                value={"limit": limit, "offset": offset},
            )

        session = await self.sessions.find(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)

        rows = await self.import_logs.get_by_session(
            session_id, level=level, limit=limit, offset=offset
        )
        total = await self.import_logs.count_by_session(session_id, level=level)
        return ImportLogPage(
            session_id=session_id,
            total=total,
            limit=limit,
            offset=offset,
            logs=[
                ImportLogEntry(
                    level=row.level,
                    message=row.message,
                    record_id=row.record_id,
                    batch_number=row.batch_number,
                    context=row.context,
                    created_at=ensure_utc(row.created_at),
                )
                for row in rows
            ],
        )
