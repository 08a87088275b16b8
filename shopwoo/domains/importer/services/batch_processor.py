"""
One page of one import session

The processor never raises to the scheduler: every path ends in `Success`
carrying a BatchOutcome, or `Fatal`.
"""

from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from shopwoo.core.database.models import ImportSession, Shop
from shopwoo.core.exceptions import FailureKind, ShopifyAPIError
from shopwoo.core.logging import get_logger
from shopwoo.domains.shopify.interfaces import IShopifyGraphQLClient
from shopwoo.domains.shopify.models import ImportFilters
from shopwoo.repository.ImportLogRepository import ImportLogRepository
from shopwoo.repository.ImportSessionRepository import ImportSessionRepository
from shopwoo.shared.constants.importer import LOG_LEVEL_ERROR, LOG_LEVEL_INFO
from ..interfaces.entity_upserter import IEntityUpserter
from ..models.outcome import (
    BatchContext,
    BatchOutcome,
    BatchResult,
    Fatal,
    LogEntry,
    Recoverable,
    Success,
    UpsertOutcome,
)
from .cursor_store import CursorStore
from .post_filters import apply_post_filters

logger = get_logger(__name__)

ClientFactory = Callable[[Shop], IShopifyGraphQLClient]


def describe_validation_error(error: PydanticValidationError) -> str:
    """First pydantic error as `field: message`"""
    errors = error.errors()
    if not errors:
        return str(error)
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg')}" if location else str(first.get("msg"))


class BatchProcessor:
    def __init__(
        self,
        upserter: IEntityUpserter,
        client_factory: ClientFactory,
        sessions: Optional[ImportSessionRepository] = None,
        cursor_store: Optional[CursorStore] = None,
        import_logs: Optional[ImportLogRepository] = None,
    ):
        self.upserter = upserter
        self.client_factory = client_factory
        self.sessions = sessions or ImportSessionRepository()
        self.cursor_store = cursor_store or CursorStore()
        self.import_logs = import_logs or ImportLogRepository()

    async def run_batch(
        self, session: ImportSession, store: Shop, context: BatchContext
    ) -> BatchResult:
        """Fetch, filter, upsert and record exactly one page"""
        log = logger.bind(**context.log_fields())
        try:
            return await self._run(session, store, context, log)
        except Exception as e:
            log.exception("Unexpected error while processing batch", error=str(e))
            return Fatal(FailureKind.INTERNAL, f"Unexpected error: {e}")

    async def _run(self, session, store, context: BatchContext, log) -> BatchResult:
        resource_type = context.resource_type
        cursor = await self.cursor_store.get(store.id, resource_type)

        try:
            filters = ImportFilters.model_validate(session.options or {})
        except PydanticValidationError as e:
            detail = f"Invalid import options: {describe_validation_error(e)}"
            log.error("Stored import options are invalid", error=detail)
            return Fatal(FailureKind.CONFIGURATION, detail)

        log.info("Processing batch", cursor=cursor)

        client = self.client_factory(store)
        try:
            page = await client.fetch_page(resource_type, filters, after_cursor=cursor)
        except ShopifyAPIError as e:
            log.error(
                "Page fetch failed",
                failure_kind=e.kind.value,
                error_code=e.error_code,
                error=e.message,
            )
            return Fatal(e.kind, e.message)

        outcome = BatchOutcome(
            has_next_page=page.has_next_page,
            next_cursor=page.end_cursor,
            previous_cursor=cursor,
        )

        records, skipped, skip_lines = await apply_post_filters(
            resource_type, page.records, filters, self.upserter
        )
        outcome.counts.skipped += skipped
        outcome.log_entries.extend(LogEntry(LOG_LEVEL_INFO, line) for line in skip_lines)

        options: Dict[str, Any] = dict(session.options or {})
        for record in records:
            await self._upsert_one(resource_type, record, options, outcome, log)

        counts = outcome.counts
        outcome.log_entries.append(
            LogEntry(
                LOG_LEVEL_INFO,
                f"Batch {context.batch_number}: imported {counts.imported}, "
                f"updated {counts.updated}, skipped {counts.skipped}, "
                f"failed {counts.failed}",
                context={"fetched": len(page.records), "cursor": cursor},
            )
        )
        await self.import_logs.add_many(
            session.id,
            store.id,
            [entry.to_dict() for entry in self._log_entries(outcome)],
            batch_number=context.batch_number,
        )

        applied = await self.sessions.apply_batch_counts(
            session.id,
            processed=counts.processed,
            succeeded=counts.succeeded,
            failed=counts.failed,
            skipped=counts.skipped,
            has_next_page=page.has_next_page,
        )
        if not applied:
            log.warning("Session reached a terminal state during the batch")

        # Cursor moves only after the page's counts are recorded
        if applied and page.has_next_page and page.end_cursor:
            await self.cursor_store.set(store.id, resource_type, page.end_cursor)

        log.info(
            "Batch processed",
            fetched=len(page.records),
            imported=counts.imported,
            updated=counts.updated,
            skipped=counts.skipped,
            failed=counts.failed,
            has_next_page=page.has_next_page,
        )
        return Success(outcome)

    @staticmethod
    def _log_entries(outcome: BatchOutcome) -> List[LogEntry]:
        failures = [
            LogEntry(
                LOG_LEVEL_ERROR,
                f"Failed {item.record_id}: {item.detail}",
                record_id=item.record_id,
                context={"kind": item.kind.value},
            )
            for item in outcome.recoverable
        ]
        return outcome.log_entries + failures

    async def _upsert_one(
        self,
        resource_type: str,
        record: Dict[str, Any],
        options: Dict[str, Any],
        outcome: BatchOutcome,
        log,
    ) -> None:
        record_id = record.get("id")
        try:
            result = await self.upserter.upsert(resource_type, record, options)
        except Exception as e:
            log.error("Record upsert raised", record_id=record_id, error=str(e))
            outcome.counts.record(UpsertOutcome.FAILED)
            outcome.recoverable.append(
                Recoverable(FailureKind.RECORD_UPSERT, str(e), record_id)
            )
            return

        outcome.counts.record(result.outcome)
        if result.outcome == UpsertOutcome.FAILED:
            reason = result.reason or "upsert failed"
            log.warning("Record upsert failed", record_id=record_id, reason=reason)
            outcome.recoverable.append(
                Recoverable(FailureKind.RECORD_UPSERT, reason, record_id)
            )
        else:
            outcome.log_entries.append(
                LogEntry(
                    LOG_LEVEL_INFO,
                    f"{result.outcome.value.capitalize()} {record_id}",
                    record_id=record_id,
                )
            )
