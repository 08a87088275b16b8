"""
Import job scheduler

Owns the session state machine per (store, resource type):

    start -> initializing -> in_progress -> completed | failed

Every transition is also written to the session's import log.

Batches run one at a time per session through the deferred task queue. Each
batch is single-flight under an execution guard, and each enqueue carries the
cursor the batch expects to resume from so a stale duplicate exits early.
"""

import asyncio
from datetime import timedelta
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from shopwoo.core.config.settings import settings
from shopwoo.core.database.models import ImportSession, ImportStatus
from shopwoo.core.exceptions import (
    ConcurrentStartError,
    FailureKind,
    ShopifyAPIError,
    StoreNotFoundError,
    SessionNotFoundError,
    UpserterNotConfiguredError,
    ValidationError,
)
from shopwoo.core.logging import get_logger
from shopwoo.domains.shopify.models import ImportFilters
from shopwoo.domains.shopify.services.queries import validate_resource_type
from shopwoo.repository.ImportLogRepository import ImportLogRepository
from shopwoo.repository.ImportSessionRepository import ImportSessionRepository
from shopwoo.repository.ShopRepository import ShopRepository
from shopwoo.shared.constants.importer import (
    HANDLER_REAP_STUCK,
    HANDLER_RUN_BATCH,
    LOG_LEVEL_ERROR,
    LOG_LEVEL_INFO,
    LOG_LEVEL_WARNING,
    MESSAGE_BATCH_LIMIT,
    MESSAGE_COMPLETED,
    MESSAGE_COMPLETED_DUPLICATE_CURSOR,
    MESSAGE_INITIALIZING,
    MESSAGE_STARTED,
    MESSAGE_TIMED_OUT,
)
from shopwoo.shared.helpers import format_duration, now_utc
from ..models.outcome import BatchContext, BatchOutcome, BatchResult, Fatal, Success
from ..models.progress import StartResult
from .batch_processor import BatchProcessor, ClientFactory, describe_validation_error
from .cursor_store import CursorStore
from .deferred import DeferredTaskDispatcher, DeferredTaskQueue
from .execution_guard import ExecutionGuard, batch_guard_key, start_guard_key
from .settings_service import SettingsService

logger = get_logger(__name__)


class ImportScheduler:
    def __init__(
        self,
        guard: ExecutionGuard,
        queue: DeferredTaskQueue,
        client_factory: ClientFactory,
        processor: Optional[BatchProcessor] = None,
        sessions: Optional[ImportSessionRepository] = None,
        shops: Optional[ShopRepository] = None,
        cursor_store: Optional[CursorStore] = None,
        settings_service: Optional[SettingsService] = None,
        import_logs: Optional[ImportLogRepository] = None,
        start_wait_attempts: int = 10,
        start_wait_interval: float = 0.2,
    ):
        self.guard = guard
        self.queue = queue
        self.client_factory = client_factory
        self.processor = processor
        self.sessions = sessions or ImportSessionRepository()
        self.shops = shops or ShopRepository()
        self.cursor_store = cursor_store or CursorStore()
        self.settings_service = settings_service or SettingsService()
        self.import_logs = import_logs or ImportLogRepository()
        self.start_wait_attempts = start_wait_attempts
        self.start_wait_interval = start_wait_interval

    # ------------------------------------------------------------------
    # Start
    # ------------------------------------------------------------------

    async def start_import(
        self,
        store_id: str,
        resource_type: str,
        options: Optional[Dict[str, Any]] = None,
    ) -> StartResult:
        """
        Start an import for one (store, resource type) slot.

        If the slot already has an active session its id is returned with
        `created=False` and nothing new is written.

        Raises:
            ValidationError: unknown resource type or invalid options
            StoreNotFoundError: store missing or inactive
            UpserterNotConfiguredError: batches could never run
            ConcurrentStartError: a parallel start holds the slot and its
                session did not appear in time
        """
        validate_resource_type(resource_type)
        try:
            filters = ImportFilters.model_validate(options or {})
        except PydanticValidationError as e:
            raise ValidationError(
                f"Invalid import options: {describe_validation_error(e)}",
                field="options",
                value=options,
            )

        store = await self.shops.get_active_by_id(store_id)
        if store is None:
            raise StoreNotFoundError(store_id, reason="not found or inactive")
        if self.processor is None:
            raise UpserterNotConfiguredError()

        await self.reap_stuck_sessions(store_id, resource_type)

        existing = await self.sessions.find_active(store_id, resource_type)
        if existing is not None:
            return self._existing_result(existing)

        start_key = start_guard_key(store_id, resource_type)
        token = await self.guard.acquire(
            start_key, settings.imports.START_GUARD_TTL_SECONDS
        )
        if token is None:
            existing = await self._wait_for_active(store_id, resource_type)
            if existing is not None:
                return self._existing_result(existing)
            raise ConcurrentStartError(store_id, resource_type)

        try:
            existing = await self.sessions.find_active(store_id, resource_type)
            if existing is not None:
                return self._existing_result(existing)
            return await self._create_session(store, resource_type, filters)
        finally:
            await self.guard.release(start_key, token)

    async def _create_session(
        self, store, resource_type: str, filters: ImportFilters
    ) -> StartResult:
        # A fresh run never resumes an earlier run's position
        await self.cursor_store.clear(store.id, resource_type)

        session = await self.sessions.create(
            shop_id=store.id,
            resource_type=resource_type,
            options=filters.model_dump(mode="json"),
            message=MESSAGE_INITIALIZING,
        )
        log = logger.bind(
            session_id=session.id, store_id=store.id, resource_type=resource_type
        )

        running = await self.sessions.count_running(excluding_id=session.id)
        log.info("Import session created", other_running=running)

        try:
            count = await self.client_factory(store).count(resource_type, filters)
        except ShopifyAPIError as e:
            message = f"Import failed: {e.message}"
            log.error("Initial count failed", failure_kind=e.kind.value, error=e.message)
            await self.sessions.update(
                session.id,
                {"status": ImportStatus.FAILED.value, "message": message},
            )
            await self._record(
                session.id,
                store.id,
                LOG_LEVEL_ERROR,
                message,
                context={"kind": e.kind.value},
            )
            return StartResult(
                session_id=session.id,
                created=True,
                status=ImportStatus.FAILED.value,
                message=message,
            )

        await self.sessions.update(
            session.id,
            {
                "items_total": count.count,
                "items_total_is_estimate": count.is_partial,
            },
        )
        approx = "~" if count.is_partial else ""
        await self._record(
            session.id,
            store.id,
            LOG_LEVEL_INFO,
            f"Import started: {approx}{count.count} {resource_type} to import",
            context={"options": session.options},
        )
        await self.queue.schedule_once(
            0, HANDLER_RUN_BATCH, {"session_id": session.id, "expected_cursor": None}
        )
        log.info(
            "First batch scheduled",
            items_total=count.count,
            is_partial=count.is_partial,
        )

        return StartResult(
            session_id=session.id,
            created=True,
            status=ImportStatus.INITIALIZING.value,
            items_total=count.count,
            is_partial=count.is_partial,
            message=MESSAGE_INITIALIZING,
        )

    async def _wait_for_active(
        self, store_id: str, resource_type: str
    ) -> Optional[ImportSession]:
        for _ in range(self.start_wait_attempts):
            await asyncio.sleep(self.start_wait_interval)
            existing = await self.sessions.find_active(store_id, resource_type)
            if existing is not None:
                return existing
        return None

    @staticmethod
    def _existing_result(session: ImportSession) -> StartResult:
        logger.info(
            "Import already active for slot, returning existing session",
            session_id=session.id,
            store_id=session.shop_id,
            resource_type=session.resource_type,
        )
        return StartResult(
            session_id=session.id,
            created=False,
            status=session.status,
            items_total=session.items_total or 0,
            is_partial=bool(session.items_total_is_estimate),
            message=session.message,
        )

    # ------------------------------------------------------------------
    # Batches
    # ------------------------------------------------------------------

    async def run_batch(
        self, session_id: str, expected_cursor: Optional[str] = None
    ) -> Optional[BatchResult]:
        """
        Run one scheduled batch under the session's execution guard.

        Returns None when the invocation was a duplicate, stale, or for a
        session that no longer needs work.
        """
        guard_key = batch_guard_key(session_id)
        token = await self.guard.acquire(
            guard_key, settings.imports.EXECUTION_GUARD_TTL_SECONDS
        )
        if token is None:
            logger.info("Batch already executing, skipping", session_id=session_id)
            return None

        try:
            return await self._run_guarded(session_id, expected_cursor)
        finally:
            await self.guard.release(guard_key, token)

    async def _run_guarded(
        self, session_id: str, expected_cursor: Optional[str]
    ) -> Optional[BatchResult]:
        session = await self.sessions.find(session_id)
        if session is None:
            logger.warning("Scheduled batch for unknown session", session_id=session_id)
            return None
        if session.is_terminal:
            logger.info(
                "Session already finished, dropping batch",
                session_id=session_id,
                status=session.status,
            )
            return None

        store = await self.shops.get_active_by_id(session.shop_id)
        if store is None:
            return await self._fail(
                session,
                FailureKind.CONFIGURATION,
                "Source store is missing or inactive",
            )
        if self.processor is None:
            return await self._fail(
                session, FailureKind.CONFIGURATION, "No entity upserter configured"
            )

        current_cursor = await self.cursor_store.get(
            session.shop_id, session.resource_type
        )
        if current_cursor != expected_cursor:
            logger.warning(
                "Stale batch invocation, skipping",
                session_id=session_id,
                expected_cursor=expected_cursor,
                current_cursor=current_cursor,
            )
            return None

        if session.status == ImportStatus.INITIALIZING.value:
            await self.sessions.update(
                session.id,
                {"status": ImportStatus.IN_PROGRESS.value, "message": MESSAGE_STARTED},
            )

        max_batches = settings.imports.MAX_BATCHES_PER_SESSION
        if (session.batches_completed or 0) >= max_batches:
            await self.cursor_store.clear(session.shop_id, session.resource_type)
            return await self._fail(
                session,
                FailureKind.BATCH_LIMIT,
                MESSAGE_BATCH_LIMIT.format(limit=max_batches),
                prefix=False,
            )

        context = BatchContext(
            session_id=session.id,
            store_id=session.shop_id,
            resource_type=session.resource_type,
            batch_number=(session.batches_completed or 0) + 1,
        )
        result = await self.processor.run_batch(session, store, context)
        await self._apply_result(context, result)
        return result

    async def _apply_result(self, context: BatchContext, result: BatchResult) -> None:
        """Map one batch result to exactly one session transition"""
        log = logger.bind(**context.log_fields())

        if isinstance(result, Fatal):
            message = f"Import failed: {result.detail}"
            await self.sessions.update(
                context.session_id,
                {"status": ImportStatus.FAILED.value, "message": message},
            )
            await self._record(
                context.session_id,
                context.store_id,
                LOG_LEVEL_ERROR,
                message,
                batch_number=context.batch_number,
                context={"kind": result.kind.value},
            )
            log.error(
                "Import failed", failure_kind=result.kind.value, detail=result.detail
            )
            return

        if not isinstance(result, Success) or not isinstance(result.value, BatchOutcome):
            raise TypeError(f"Unexpected batch result: {result!r}")

        outcome: BatchOutcome = result.value

        if not outcome.has_next_page:
            await self._complete(context, MESSAGE_COMPLETED, LOG_LEVEL_INFO)
            log.info("Import completed")
            return

        if not outcome.next_cursor or outcome.next_cursor == outcome.previous_cursor:
            await self._complete(
                context, MESSAGE_COMPLETED_DUPLICATE_CURSOR, LOG_LEVEL_WARNING
            )
            log.warning(
                "Source returned a repeated cursor, completing import",
                cursor=outcome.next_cursor,
            )
            return

        session = await self.sessions.find(context.session_id)
        if session is None or session.is_terminal:
            log.info("Session finished during batch, not rescheduling")
            return

        await self.sessions.update(
            context.session_id, {"message": self._progress_message(session)}
        )
        await self.queue.schedule_once(
            settings.imports.BATCH_RESCHEDULE_DELAY_SECONDS,
            HANDLER_RUN_BATCH,
            {"session_id": context.session_id, "expected_cursor": outcome.next_cursor},
        )
        log.debug("Next batch scheduled", cursor=outcome.next_cursor)

    async def _complete(self, context: BatchContext, message: str, level: str) -> None:
        await self.sessions.update(
            context.session_id,
            {"status": ImportStatus.COMPLETED.value, "message": message},
        )
        await self.cursor_store.clear(context.store_id, context.resource_type)
        await self._record(
            context.session_id,
            context.store_id,
            level,
            message,
            batch_number=context.batch_number,
        )

    async def _fail(
        self,
        session: ImportSession,
        kind: FailureKind,
        detail: str,
        prefix: bool = True,
    ) -> Fatal:
        message = f"Import failed: {detail}" if prefix else detail
        await self.sessions.update(
            session.id, {"status": ImportStatus.FAILED.value, "message": message}
        )
        await self._record(
            session.id,
            session.shop_id,
            LOG_LEVEL_ERROR,
            message,
            context={"kind": kind.value},
        )
        logger.error(
            "Import failed",
            session_id=session.id,
            store_id=session.shop_id,
            resource_type=session.resource_type,
            failure_kind=kind.value,
            detail=detail,
        )
        return Fatal(kind, detail)

    async def _record(
        self,
        session_id: str,
        shop_id: str,
        level: str,
        message: str,
        batch_number: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        await self.import_logs.add_many(
            session_id,
            shop_id,
            [{"level": level, "message": message, "context": context}],
            batch_number=batch_number,
        )

    @staticmethod
    def _progress_message(session: ImportSession) -> str:
        total = session.items_total or 0
        approx = "~" if session.items_total_is_estimate else ""
        return (
            f"Processed {session.items_processed} of {approx}{total} "
            f"{session.resource_type}"
        )

    # ------------------------------------------------------------------
    # Resume and reap
    # ------------------------------------------------------------------

    async def resume_import(self, session_id: str) -> bool:
        """Re-enqueue an active session from its stored cursor"""
        session = await self.sessions.find(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        if session.is_terminal:
            return False

        cursor = await self.cursor_store.get(session.shop_id, session.resource_type)
        await self.queue.schedule_once(
            0, HANDLER_RUN_BATCH, {"session_id": session_id, "expected_cursor": cursor}
        )
        logger.info("Import resumed", session_id=session_id, cursor=cursor)
        return True

    async def reap_stuck_sessions(
        self, store_id: Optional[str] = None, resource_type: Optional[str] = None
    ) -> List[str]:
        """Fail active sessions with no update for longer than the threshold"""
        threshold = await self.settings_service.get_stuck_threshold_seconds()
        cutoff = now_utc() - timedelta(seconds=threshold)
        message = MESSAGE_TIMED_OUT.format(duration=format_duration(threshold))

        reaped: List[str] = []
        for session in await self.sessions.find_stuck(cutoff, store_id, resource_type):
            updated = await self.sessions.update(
                session.id, {"status": ImportStatus.FAILED.value, "message": message}
            )
            if updated:
                reaped.append(session.id)
                await self._record(
                    session.id, session.shop_id, LOG_LEVEL_ERROR, message
                )
                logger.warning(
                    "Reaped stuck import session",
                    session_id=session.id,
                    store_id=session.shop_id,
                    resource_type=session.resource_type,
                    last_update=session.updated_at,
                )
        return reaped

    async def purge_old_logs(self, retention_days: Optional[int] = None) -> int:
        """Delete import log entries older than the retention window"""
        days = retention_days or settings.imports.IMPORT_LOG_RETENTION_DAYS
        removed = await self.import_logs.delete_older_than(
            now_utc() - timedelta(days=days)
        )
        if removed:
            logger.info("Purged old import log entries", removed=removed, days=days)
        return removed

    # ------------------------------------------------------------------
    # Deferred task handlers
    # ------------------------------------------------------------------

    def register_handlers(self, dispatcher: DeferredTaskDispatcher) -> None:
        dispatcher.register(HANDLER_RUN_BATCH, self.handle_run_batch_task)
        dispatcher.register(HANDLER_REAP_STUCK, self.handle_reap_task)

    async def handle_run_batch_task(self, args: Dict[str, Any]) -> None:
        await self.run_batch(args["session_id"], args.get("expected_cursor"))

    async def handle_reap_task(self, args: Dict[str, Any]) -> None:
        try:
            reaped = await self.reap_stuck_sessions(
                args.get("store_id"), args.get("resource_type")
            )
            if reaped:
                logger.info("Periodic reap finished", reaped=len(reaped))
            await self.purge_old_logs()
        finally:
            await self.queue.schedule_once(
                settings.imports.REAPER_INTERVAL_SECONDS, HANDLER_REAP_STUCK, {}
            )

    async def ensure_reaper_scheduled(self) -> bool:
        """Queue the periodic reap unless one is already pending"""
        if await self.queue.pending(HANDLER_REAP_STUCK):
            return False
        await self.queue.schedule_once(0, HANDLER_REAP_STUCK, {})
        return True
