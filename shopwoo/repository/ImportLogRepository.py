from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import and_, delete, func, select

from shopwoo.core.database.models import ImportLog
from shopwoo.core.database.session import get_session_context
from shopwoo.core.logging import get_logger
from shopwoo.shared.helpers.datetime_utils import now_utc

logger = get_logger(__name__)


class ImportLogRepository:
    def __init__(self, session_factory=None):
        """
        Initializes the repository with a session factory.
        Repository handles its own session management.
        """
        self.session_factory = session_factory or get_session_context

    async def add_many(
        self,
        session_id: str,
        shop_id: str,
        entries: List[Dict[str, Any]],
        batch_number: Optional[int] = None,
    ) -> int:
        """
        Append entries for one session in a single commit.

        Each entry carries `level` and `message`, optionally `record_id` and
        `context`. All rows share one timestamp and keep their list order.
        """
        if not entries:
            return 0

        written_at = now_utc()
        rows = [
            ImportLog(
                session_id=session_id,
                shop_id=shop_id,
                level=entry["level"],
                message=entry["message"],
                record_id=entry.get("record_id"),
                context=entry.get("context"),
                batch_number=batch_number,
                position=position,
                created_at=written_at,
                updated_at=written_at,
            )
            for position, entry in enumerate(entries)
        ]
        try:
            async with self.session_factory() as session:
                session.add_all(rows)
                await session.commit()
        except Exception as e:
            logger.error(
                "Failed to write import log entries",
                session_id=session_id,
                entries=len(rows),
                error=str(e),
            )
            raise
        return len(rows)

    async def get_by_session(
        self,
        session_id: str,
        level: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[ImportLog]:
        """Entries of one session, oldest first."""
        conditions = [ImportLog.session_id == session_id]
        if level is not None:
            conditions.append(ImportLog.level == level)

        async with self.session_factory() as session:
            result = await session.execute(
                select(ImportLog)
                .where(and_(*conditions))
                .order_by(ImportLog.created_at, ImportLog.position)
                .offset(offset)
                .limit(limit)
            )
            return list(result.scalars().all())

    async def count_by_session(
        self, session_id: str, level: Optional[str] = None
    ) -> int:
        conditions = [ImportLog.session_id == session_id]
        if level is not None:
            conditions.append(ImportLog.level == level)

        async with self.session_factory() as session:
            result = await session.execute(
                select(func.count(ImportLog.id)).where(and_(*conditions))
            )
            return int(result.scalar_one())

    async def get_by_shop(self, shop_id: str, limit: int = 100) -> List[ImportLog]:
        """Most recent entries across every session of a store."""
        async with self.session_factory() as session:
            result = await session.execute(
                select(ImportLog)
                .where(ImportLog.shop_id == shop_id)
                .order_by(ImportLog.created_at.desc(), ImportLog.position.desc())
                .limit(limit)
            )
            return list(result.scalars().all())

    async def delete_older_than(self, cutoff: datetime) -> int:
        """Drop entries written before `cutoff`. Returns the number removed."""
        async with self.session_factory() as session:
            result = await session.execute(
                delete(ImportLog).where(ImportLog.created_at < cutoff)
            )
            await session.commit()
            return result.rowcount or 0
