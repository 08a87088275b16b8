from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import and_, func, select, update

from shopwoo.core.database.models import ImportSession, ImportStatus
from shopwoo.core.database.session import get_session_context
from shopwoo.shared.helpers.datetime_utils import now_utc

# Columns that may only grow
COUNTER_COLUMNS = (
    "items_processed",
    "items_succeeded",
    "items_failed",
    "items_skipped",
    "batches_completed",
)


class ImportSessionRepository:
    def __init__(self, session_factory=None):
        """
        Initializes the repository with a session factory.
        Repository handles its own session management.
        """
        self.session_factory = session_factory or get_session_context

    async def create(
        self,
        shop_id: str,
        resource_type: str,
        options: Optional[Dict[str, Any]] = None,
        message: Optional[str] = None,
    ) -> ImportSession:
        """Create a session in `initializing` state."""
        async with self.session_factory() as session:
            import_session = ImportSession(
                shop_id=shop_id,
                resource_type=resource_type,
                status=ImportStatus.INITIALIZING.value,
                options=options or {},
                message=message,
                started_at=now_utc(),
            )
            session.add(import_session)
            await session.commit()
            return import_session

    async def find(self, session_id: str) -> Optional[ImportSession]:
        """Fetch a session by id."""
        async with self.session_factory() as session:
            result = await session.execute(
                select(ImportSession).where(ImportSession.id == session_id)
            )
            return result.scalar_one_or_none()

    async def update(
        self,
        session_id: str,
        fields: Optional[Dict[str, Any]] = None,
        increments: Optional[Dict[str, int]] = None,
    ) -> bool:
        """
        Partially update a session.

        `fields` are assigned, `increments` are added atomically in SQL so
        counters never go backwards. Rows already in a terminal status are
        never touched, which keeps `completed`/`failed` final.

        Returns:
            True when a non-terminal row was updated.
        """
        values: Dict[str, Any] = dict(fields or {})
        for column, amount in (increments or {}).items():
            if column not in COUNTER_COLUMNS:
                raise ValueError(f"{column} is not a counter column")
            if amount < 0:
                raise ValueError(f"{column} increment must be non-negative")
            values[column] = getattr(ImportSession, column) + amount

        status = values.get("status")
        if status in ImportStatus.terminal() and "completed_at" not in values:
            values["completed_at"] = now_utc()
        values["updated_at"] = now_utc()

        statement = (
            update(ImportSession)
            .where(
                and_(
                    ImportSession.id == session_id,
                    ImportSession.status.notin_(ImportStatus.terminal()),
                )
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )

        async with self.session_factory() as session:
            result = await session.execute(statement)
            await session.commit()
            return result.rowcount > 0

    async def apply_batch_counts(
        self,
        session_id: str,
        processed: int,
        succeeded: int,
        failed: int,
        skipped: int,
        has_next_page: bool,
    ) -> bool:
        """
        Fold one batch's outcome into the running totals.

        When the total was only an estimate and processing has overtaken it,
        the total is raised to match so percentages never exceed 100.
        """
        async with self.session_factory() as session:
            result = await session.execute(
                update(ImportSession)
                .where(
                    and_(
                        ImportSession.id == session_id,
                        ImportSession.status.notin_(ImportStatus.terminal()),
                    )
                )
                .values(
                    items_processed=ImportSession.items_processed + processed,
                    items_succeeded=ImportSession.items_succeeded + succeeded,
                    items_failed=ImportSession.items_failed + failed,
                    items_skipped=ImportSession.items_skipped + skipped,
                    batches_completed=ImportSession.batches_completed + 1,
                    has_next_page=has_next_page,
                    updated_at=now_utc(),
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                await session.rollback()
                return False

            await session.execute(
                update(ImportSession)
                .where(
                    and_(
                        ImportSession.id == session_id,
                        ImportSession.items_total_is_estimate == True,
                        ImportSession.items_processed > ImportSession.items_total,
                    )
                )
                .values(items_total=ImportSession.items_processed)
                .execution_options(synchronize_session=False)
            )
            await session.commit()
            return True

    async def find_active(
        self, shop_id: str, resource_type: str
    ) -> Optional[ImportSession]:
        """Most recent `initializing`/`in_progress` session for the slot."""
        async with self.session_factory() as session:
            statement = (
                select(ImportSession)
                .where(
                    and_(
                        ImportSession.shop_id == shop_id,
                        ImportSession.resource_type == resource_type,
                        ImportSession.status.in_(ImportStatus.active()),
                    )
                )
                .order_by(ImportSession.created_at.desc())
                .limit(1)
            )
            result = await session.execute(statement)
            return result.scalar_one_or_none()

    async def find_stuck(
        self,
        older_than: datetime,
        shop_id: Optional[str] = None,
        resource_type: Optional[str] = None,
    ) -> List[ImportSession]:
        """
        Active sessions whose last update is before `older_than`.

        Both filters are optional so the periodic sweep can scan every slot.
        """
        conditions = [
            ImportSession.status.in_(ImportStatus.active()),
            ImportSession.updated_at < older_than,
        ]
        if shop_id is not None:
            conditions.append(ImportSession.shop_id == shop_id)
        if resource_type is not None:
            conditions.append(ImportSession.resource_type == resource_type)

        async with self.session_factory() as session:
            result = await session.execute(
                select(ImportSession)
                .where(and_(*conditions))
                .order_by(ImportSession.updated_at)
            )
            return list(result.scalars().all())

    async def count_running(self, excluding_id: Optional[str] = None) -> int:
        """Number of active sessions, optionally excluding one."""
        conditions = [ImportSession.status.in_(ImportStatus.active())]
        if excluding_id is not None:
            conditions.append(ImportSession.id != excluding_id)

        async with self.session_factory() as session:
            result = await session.execute(
                select(func.count(ImportSession.id)).where(and_(*conditions))
            )
            return int(result.scalar_one())
