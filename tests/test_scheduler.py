"""
Tests for ImportScheduler: start, batch chaining, resume and reaping
"""

import json
import time
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import update

from shopwoo.core.config.settings import settings
from shopwoo.core.database.models import ImportLog, ImportSession, ImportStatus, Shop
from shopwoo.core.exceptions import (
    ConcurrentStartError,
    FailureKind,
    SessionNotFoundError,
    StoreNotFoundError,
    UpserterNotConfiguredError,
    ValidationError,
)
from shopwoo.domains.importer.models import Fatal, Success
from shopwoo.domains.importer.services import BatchProcessor, ImportScheduler
from shopwoo.domains.shopify.models import PageResult
from shopwoo.domains.shopify.services import ShopifyClientFactory
from shopwoo.shared.constants.importer import (
    HANDLER_REAP_STUCK,
    HANDLER_RUN_BATCH,
    LOG_LEVEL_ERROR,
    LOG_LEVEL_INFO,
    LOG_LEVEL_WARNING,
    MESSAGE_COMPLETED,
    MESSAGE_COMPLETED_DUPLICATE_CURSOR,
)
from shopwoo.shared.helpers import now_utc
from .conftest import FakeCatalogClient, FakeTransport, FakeUpserter, make_products

FAR_FUTURE = 10 ** 12


def queued(fake_redis, queue, handler_id=None):
    tasks = [json.loads(member) for member in fake_redis.zsets.get(queue.key, {})]
    if handler_id is not None:
        tasks = [t for t in tasks if t["handler_id"] == handler_id]
    return tasks


async def drain(dispatcher, max_rounds=50):
    for _ in range(max_rounds):
        if await dispatcher.run_due(now=FAR_FUTURE) == 0:
            return


async def backdate(session_factory, session_id, minutes):
    async with session_factory() as session:
        await session.execute(
            update(ImportSession)
            .where(ImportSession.id == session_id)
            .values(updated_at=now_utc() - timedelta(minutes=minutes))
        )
        await session.commit()


@pytest.fixture
def make_scheduler(
    guard,
    queue,
    dispatcher,
    sessions_repo,
    shops_repo,
    cursor_store,
    settings_service,
    import_logs_repo,
):
    def build(catalog=None, upserter=None, client_factory=None, with_processor=True):
        factory = client_factory or (lambda shop: catalog)
        processor = None
        if with_processor:
            processor = BatchProcessor(
                upserter=upserter or FakeUpserter(),
                client_factory=factory,
                sessions=sessions_repo,
                cursor_store=cursor_store,
                import_logs=import_logs_repo,
            )
        scheduler = ImportScheduler(
            guard=guard,
            queue=queue,
            client_factory=factory,
            processor=processor,
            sessions=sessions_repo,
            shops=shops_repo,
            cursor_store=cursor_store,
            settings_service=settings_service,
            import_logs=import_logs_repo,
            start_wait_attempts=2,
            start_wait_interval=0,
        )
        scheduler.register_handlers(dispatcher)
        return scheduler

    return build


class TestStartImport:
    async def test_creates_session_and_queues_first_batch(
        self, scheduler, sessions_repo, fake_redis, queue, store
    ):
        result = await scheduler.start_import(store.id, "products", {"status": "active"})

        assert result.created is True
        assert result.status == ImportStatus.INITIALIZING.value
        assert result.items_total == 250
        assert result.is_partial is True

        session = await sessions_repo.find(result.session_id)
        assert session.items_total == 250
        assert session.items_total_is_estimate is True
        assert session.options["status"] == "active"

        tasks = queued(fake_redis, queue, HANDLER_RUN_BATCH)
        assert [t["args"] for t in tasks] == [
            {"session_id": result.session_id, "expected_cursor": None}
        ]

    async def test_fresh_start_clears_cursor(self, scheduler, cursor_store, store):
        await cursor_store.set(store.id, "products", "left-over")

        await scheduler.start_import(store.id, "products")

        assert await cursor_store.get(store.id, "products") is None

    async def test_second_start_returns_existing_session(
        self, scheduler, sessions_repo, dispatcher, fake_redis, queue, store
    ):
        first = await scheduler.start_import(store.id, "products")
        again = await scheduler.start_import(store.id, "products")

        await dispatcher.run_due(now=FAR_FUTURE)
        while_running = await scheduler.start_import(store.id, "products", {"status": "draft"})

        assert again.created is False
        assert again.session_id == first.session_id
        assert while_running.created is False
        assert while_running.session_id == first.session_id
        assert while_running.status == ImportStatus.IN_PROGRESS.value
        assert await sessions_repo.count_running() == 1

    async def test_other_resource_types_are_independent(self, scheduler, store):
        products = await scheduler.start_import(store.id, "products")
        orders = await scheduler.start_import(store.id, "orders")

        assert orders.created is True
        assert orders.session_id != products.session_id

    async def test_unknown_resource_type(self, scheduler, store):
        with pytest.raises(ValidationError):
            await scheduler.start_import(store.id, "coupons")

    async def test_invalid_options(self, scheduler, store):
        with pytest.raises(ValidationError) as exc_info:
            await scheduler.start_import(store.id, "products", {"status": "deleted"})
        assert exc_info.value.field == "options"

    async def test_unknown_store(self, scheduler):
        with pytest.raises(StoreNotFoundError):
            await scheduler.start_import("missing", "products")

    async def test_inactive_store(self, scheduler, shops_repo):
        shop = await shops_repo.create("off.myshopify.com", "t", is_active=False)
        with pytest.raises(StoreNotFoundError):
            await scheduler.start_import(shop.id, "products")

    async def test_refuses_without_upserter(self, make_scheduler, store, sessions_repo):
        scheduler = make_scheduler(FakeCatalogClient([]), with_processor=False)

        with pytest.raises(UpserterNotConfiguredError):
            await scheduler.start_import(store.id, "products")
        assert await sessions_repo.count_running() == 0

    async def test_count_failure_fails_session(
        self, make_scheduler, store, sessions_repo, fake_redis, queue
    ):
        transport = FakeTransport()
        transport.queue(500, "Internal Server Error")
        scheduler = make_scheduler(client_factory=ShopifyClientFactory(transport))

        result = await scheduler.start_import(store.id, "customers")

        assert result.created is True
        assert result.status == ImportStatus.FAILED.value
        session = await sessions_repo.find(result.session_id)
        assert session.status == ImportStatus.FAILED.value
        assert "status 500" in session.message
        assert queued(fake_redis, queue) == []

    async def test_concurrent_start_without_session_conflicts(
        self, scheduler, guard, store, sessions_repo
    ):
        await guard.acquire(f"start:{store.id}:products", 30)

        with pytest.raises(ConcurrentStartError):
            await scheduler.start_import(store.id, "products")
        assert await sessions_repo.count_running() == 0

    async def test_concurrent_start_waits_for_winner(
        self, scheduler, guard, store, sessions_repo
    ):
        winner = await sessions_repo.create(store.id, "products")
        await guard.acquire(f"start:{store.id}:products", 30)
        scheduler.sessions.find_active = AsyncMock(side_effect=[None, winner])

        result = await scheduler.start_import(store.id, "products")

        assert result.created is False
        assert result.session_id == winner.id

    async def test_start_guard_released(self, scheduler, guard, store):
        await scheduler.start_import(store.id, "products")
        assert not await guard.is_held(f"start:{store.id}:products")


class TestBatchChaining:
    async def test_full_import_in_three_batches(
        self, scheduler, sessions_repo, dispatcher, catalog, cursor_store, store
    ):
        result = await scheduler.start_import(store.id, "products", {"status": "active"})

        processed = []
        for _ in range(3):
            assert await dispatcher.run_due(now=FAR_FUTURE) == 1
            processed.append((await sessions_repo.find(result.session_id)).items_processed)

        session = await sessions_repo.find(result.session_id)
        assert processed == [250, 500, 520]
        assert catalog.pages_requested == [None, "250", "500"]
        assert session.status == ImportStatus.COMPLETED.value
        assert session.message == MESSAGE_COMPLETED
        assert session.items_total == 520
        assert session.batches_completed == 3
        assert session.completed_at is not None
        assert await cursor_store.get(store.id, "products") is None
        assert await dispatcher.run_due(now=FAR_FUTURE) == 0

    async def test_first_batch_moves_to_in_progress(
        self, scheduler, sessions_repo, dispatcher, store
    ):
        result = await scheduler.start_import(store.id, "products")

        await dispatcher.run_due(now=FAR_FUTURE)

        session = await sessions_repo.find(result.session_id)
        assert session.status == ImportStatus.IN_PROGRESS.value
        assert session.message == "Processed 250 of ~250 products"

    async def test_follow_up_carries_new_cursor(
        self, scheduler, dispatcher, fake_redis, queue, store
    ):
        result = await scheduler.start_import(store.id, "products")

        await dispatcher.run_due(now=FAR_FUTURE)

        tasks = queued(fake_redis, queue, HANDLER_RUN_BATCH)
        assert len(tasks) == 1
        assert tasks[0]["args"] == {"session_id": result.session_id, "expected_cursor": "250"}
        assert tasks[0]["run_at"] >= time.time() + settings.imports.BATCH_RESCHEDULE_DELAY_SECONDS - 1

    async def test_partial_failures_still_reschedule(
        self, make_scheduler, sessions_repo, dispatcher, fake_redis, queue, store
    ):
        records = make_products(120)
        upserter = FakeUpserter(fail_ids=[r["id"] for r in records[:3]])
        scheduler = make_scheduler(FakeCatalogClient(records, page_size=50), upserter)
        result = await scheduler.start_import(store.id, "products")

        await dispatcher.run_due(now=FAR_FUTURE)

        session = await sessions_repo.find(result.session_id)
        assert session.items_failed == 3
        assert session.items_succeeded == 47
        assert session.has_next_page is True
        assert session.status == ImportStatus.IN_PROGRESS.value
        assert len(queued(fake_redis, queue, HANDLER_RUN_BATCH)) == 1

    async def test_auth_failure_fails_session_without_cursor(
        self, make_scheduler, sessions_repo, cursor_store, dispatcher, fake_redis, queue, store
    ):
        transport = FakeTransport()
        transport.queue(
            200,
            {"data": {"products": {"nodes": [{"id": "1"}], "pageInfo": {"hasNextPage": False}}}},
        )
        transport.queue(401, '{"errors":"[API] Invalid API key or access token"}')
        scheduler = make_scheduler(client_factory=ShopifyClientFactory(transport))
        result = await scheduler.start_import(store.id, "products")

        await dispatcher.run_due(now=FAR_FUTURE)

        session = await sessions_repo.find(result.session_id)
        assert session.status == ImportStatus.FAILED.value
        assert "Authorization failed" in session.message
        assert await cursor_store.get(store.id, "products") is None
        assert queued(fake_redis, queue) == []

    async def test_repeated_cursor_completes(
        self, make_scheduler, sessions_repo, cursor_store, dispatcher, fake_redis, queue, store
    ):
        class RepeatingCatalog(FakeCatalogClient):
            async def fetch_page(self, resource_type, filters=None, page_size=None, after_cursor=None):
                self.pages_requested.append(after_cursor)
                return PageResult(self.records[:2], True, "stuck")

        catalog = RepeatingCatalog(make_products(2))
        scheduler = make_scheduler(catalog)
        result = await scheduler.start_import(store.id, "products")

        await drain(dispatcher)

        session = await sessions_repo.find(result.session_id)
        assert catalog.pages_requested == [None, "stuck"]
        assert session.status == ImportStatus.COMPLETED.value
        assert session.message == MESSAGE_COMPLETED_DUPLICATE_CURSOR
        assert await cursor_store.get(store.id, "products") is None
        assert queued(fake_redis, queue) == []

    async def test_missing_end_cursor_completes(
        self, make_scheduler, sessions_repo, dispatcher, store
    ):
        class CursorlessCatalog(FakeCatalogClient):
            async def fetch_page(self, resource_type, filters=None, page_size=None, after_cursor=None):
                return PageResult(self.records, True, None)

        scheduler = make_scheduler(CursorlessCatalog(make_products(3)))
        result = await scheduler.start_import(store.id, "products")

        await drain(dispatcher)

        session = await sessions_repo.find(result.session_id)
        assert session.status == ImportStatus.COMPLETED.value
        assert session.message == MESSAGE_COMPLETED_DUPLICATE_CURSOR

    async def test_batch_limit(
        self, scheduler, sessions_repo, dispatcher, cursor_store, store, monkeypatch
    ):
        monkeypatch.setattr(settings.imports, "MAX_BATCHES_PER_SESSION", 1)
        result = await scheduler.start_import(store.id, "products")

        await dispatcher.run_due(now=FAR_FUTURE)
        outcome = await scheduler.run_batch(result.session_id, "250")

        session = await sessions_repo.find(result.session_id)
        assert isinstance(outcome, Fatal)
        assert outcome.kind == FailureKind.BATCH_LIMIT
        assert session.status == ImportStatus.FAILED.value
        assert "maximum batch limit of 1" in session.message
        assert await cursor_store.get(store.id, "products") is None

    async def test_store_deactivated_mid_import(
        self, scheduler, sessions_repo, session_factory, store
    ):
        result = await scheduler.start_import(store.id, "products")
        async with session_factory() as session:
            await session.execute(update(Shop).where(Shop.id == store.id).values(is_active=False))
            await session.commit()

        outcome = await scheduler.run_batch(result.session_id, None)

        assert isinstance(outcome, Fatal)
        assert (await sessions_repo.find(result.session_id)).status == ImportStatus.FAILED.value


class TestSingleFlight:
    async def test_replayed_batch_is_stale(
        self, scheduler, sessions_repo, dispatcher, catalog, store
    ):
        result = await scheduler.start_import(store.id, "products")
        await dispatcher.run_due(now=FAR_FUTURE)

        replay = await scheduler.run_batch(result.session_id, None)

        session = await sessions_repo.find(result.session_id)
        assert replay is None
        assert session.items_processed == 250
        assert session.batches_completed == 1
        assert catalog.pages_requested == [None]

    async def test_guarded_batch_is_skipped(
        self, scheduler, guard, sessions_repo, catalog, store
    ):
        result = await scheduler.start_import(store.id, "products")
        token = await guard.acquire(f"batch:{result.session_id}", 300)

        skipped = await scheduler.run_batch(result.session_id, None)

        assert skipped is None
        assert catalog.pages_requested == []
        await guard.release(f"batch:{result.session_id}", token)
        assert isinstance(await scheduler.run_batch(result.session_id, None), Success)

    async def test_guard_released_after_failure(
        self, make_scheduler, guard, store
    ):
        scheduler = make_scheduler(FakeCatalogClient([], failure=RuntimeError("down")))
        result = await scheduler.start_import(store.id, "products")

        outcome = await scheduler.run_batch(result.session_id, None)

        assert isinstance(outcome, Fatal)
        assert not await guard.is_held(f"batch:{result.session_id}")

    async def test_terminal_session_never_runs_again(
        self, scheduler, sessions_repo, dispatcher, catalog, store
    ):
        result = await scheduler.start_import(store.id, "products")
        await drain(dispatcher)
        requested = list(catalog.pages_requested)

        assert await scheduler.run_batch(result.session_id, None) is None
        assert await scheduler.reap_stuck_sessions() == []
        assert catalog.pages_requested == requested
        assert (await sessions_repo.find(result.session_id)).status == ImportStatus.COMPLETED.value

    async def test_unknown_session_batch(self, scheduler):
        assert await scheduler.run_batch("missing", None) is None


class TestResume:
    async def test_resume_requeues_from_stored_cursor(
        self, scheduler, dispatcher, fake_redis, queue, store
    ):
        result = await scheduler.start_import(store.id, "products")
        await dispatcher.run_due(now=FAR_FUTURE)
        fake_redis.zsets[queue.key].clear()

        assert await scheduler.resume_import(result.session_id) is True

        tasks = queued(fake_redis, queue, HANDLER_RUN_BATCH)
        assert tasks[0]["args"] == {"session_id": result.session_id, "expected_cursor": "250"}

        await drain(dispatcher)

    async def test_resume_terminal_is_noop(
        self, scheduler, dispatcher, fake_redis, queue, store
    ):
        result = await scheduler.start_import(store.id, "products")
        await drain(dispatcher)

        assert await scheduler.resume_import(result.session_id) is False
        assert queued(fake_redis, queue) == []

    async def test_resume_unknown(self, scheduler):
        with pytest.raises(SessionNotFoundError):
            await scheduler.resume_import("missing")


class TestReaping:
    async def test_stuck_session_reaped_and_slot_freed(
        self, scheduler, sessions_repo, session_factory, store
    ):
        stuck = await sessions_repo.create(store.id, "products")
        await sessions_repo.update(stuck.id, {"status": ImportStatus.IN_PROGRESS.value})
        await backdate(session_factory, stuck.id, 61)

        result = await scheduler.start_import(store.id, "products")

        old = await sessions_repo.find(stuck.id)
        assert result.created is True
        assert result.session_id != stuck.id
        assert old.status == ImportStatus.FAILED.value
        assert old.message == "Import timed out after 1 hour without progress"

    async def test_recent_session_not_reaped(
        self, scheduler, sessions_repo, session_factory, store
    ):
        running = await sessions_repo.create(store.id, "products")
        await backdate(session_factory, running.id, 59)

        assert await scheduler.reap_stuck_sessions() == []

    async def test_threshold_from_settings(
        self, scheduler, sessions_repo, session_factory, settings_service, store
    ):
        running = await sessions_repo.create(store.id, "orders")
        await backdate(session_factory, running.id, 11)
        await settings_service.set_setting("stuck_session_threshold_seconds", 600)

        assert await scheduler.reap_stuck_sessions() == [running.id]
        assert "10 minutes" in (await sessions_repo.find(running.id)).message

    async def test_reap_scoped_to_slot(
        self, scheduler, sessions_repo, session_factory, store
    ):
        products = await sessions_repo.create(store.id, "products")
        orders = await sessions_repo.create(store.id, "orders")
        for session_id in (products.id, orders.id):
            await backdate(session_factory, session_id, 120)

        assert await scheduler.reap_stuck_sessions(store.id, "orders") == [orders.id]
        assert (await sessions_repo.find(products.id)).status == ImportStatus.INITIALIZING.value

    async def test_reap_task_reschedules_itself(
        self, scheduler, sessions_repo, session_factory, dispatcher, fake_redis, queue, store
    ):
        stuck = await sessions_repo.create(store.id, "customers")
        await backdate(session_factory, stuck.id, 90)

        assert await scheduler.ensure_reaper_scheduled() is True
        assert await scheduler.ensure_reaper_scheduled() is False

        await dispatcher.run_due(now=FAR_FUTURE)

        assert (await sessions_repo.find(stuck.id)).status == ImportStatus.FAILED.value
        tasks = queued(fake_redis, queue, HANDLER_REAP_STUCK)
        assert len(tasks) == 1
        assert tasks[0]["run_at"] >= time.time() + settings.imports.REAPER_INTERVAL_SECONDS - 1


class TestStoreIsolation:
    @pytest.fixture
    async def other_store(self, shops_repo):
        return await shops_repo.create(
            shop_domain="eight.myshopify.com",
            access_token="shpat_eight",
            store_name="Store Eight",
        )

    async def test_two_stores_import_same_resource_type(
        self, scheduler, sessions_repo, cursor_store, dispatcher, store, other_store
    ):
        first = await scheduler.start_import(store.id, "products")
        await dispatcher.run_due(now=FAR_FUTURE)
        assert await cursor_store.get(store.id, "products") == "250"

        second = await scheduler.start_import(other_store.id, "products")
        assert await cursor_store.get(store.id, "products") == "250"

        await drain(dispatcher)

        for result in (first, second):
            session = await sessions_repo.find(result.session_id)
            assert session.status == ImportStatus.COMPLETED.value
            assert session.items_processed == 520
            assert session.batches_completed == 3
        assert await cursor_store.get(store.id, "products") is None
        assert await cursor_store.get(other_store.id, "products") is None

    async def test_fresh_start_leaves_other_store_cursor(
        self, scheduler, cursor_store, store, other_store
    ):
        await cursor_store.set(store.id, "products", "250")

        await scheduler.start_import(other_store.id, "products")

        assert await cursor_store.get(store.id, "products") == "250"


class TestStartOptions:
    async def test_mixed_date_bounds_are_accepted(self, scheduler, sessions_repo, store):
        result = await scheduler.start_import(
            store.id,
            "products",
            {
                "created_at_min": "2024-01-01T00:00:00Z",
                "created_at_max": "2024-02-01T00:00:00",
            },
        )

        assert result.created is True
        assert result.status == ImportStatus.INITIALIZING.value

    async def test_inverted_mixed_date_bounds_are_rejected(self, scheduler, store):
        with pytest.raises(ValidationError) as exc_info:
            await scheduler.start_import(
                store.id,
                "products",
                {
                    "created_at_min": "2024-03-01T00:00:00",
                    "created_at_max": "2024-02-01T00:00:00+00:00",
                },
            )
        assert exc_info.value.field == "options"


class TestImportLog:
    async def test_completed_import_is_logged(
        self, scheduler, dispatcher, import_logs_repo, store
    ):
        result = await scheduler.start_import(store.id, "products")
        await drain(dispatcher)

        entries = await import_logs_repo.get_by_session(result.session_id, limit=1000)
        assert entries[0].message == "Import started: ~250 products to import"
        assert entries[0].level == LOG_LEVEL_INFO
        assert entries[-1].message == MESSAGE_COMPLETED
        assert entries[-1].batch_number == 3
        summaries = [e.message for e in entries if e.message.startswith("Batch ")]
        assert summaries == [
            "Batch 1: imported 250, updated 0, skipped 0, failed 0",
            "Batch 2: imported 250, updated 0, skipped 0, failed 0",
            "Batch 3: imported 20, updated 0, skipped 0, failed 0",
        ]

    async def test_count_failure_is_logged(
        self, make_scheduler, import_logs_repo, store
    ):
        transport = FakeTransport()
        transport.queue(500, "Internal Server Error")
        scheduler = make_scheduler(client_factory=ShopifyClientFactory(transport))

        result = await scheduler.start_import(store.id, "customers")

        errors = await import_logs_repo.get_by_session(
            result.session_id, level=LOG_LEVEL_ERROR
        )
        assert len(errors) == 1
        assert "status 500" in errors[0].message
        assert errors[0].context["kind"] == FailureKind.HTTP_STATUS.value

    async def test_fatal_batch_is_logged(
        self, make_scheduler, import_logs_repo, store
    ):
        scheduler = make_scheduler(FakeCatalogClient([], failure=RuntimeError("down")))
        result = await scheduler.start_import(store.id, "products")

        await scheduler.run_batch(result.session_id, None)

        errors = await import_logs_repo.get_by_session(
            result.session_id, level=LOG_LEVEL_ERROR
        )
        assert [e.batch_number for e in errors] == [1]
        assert errors[0].message == "Import failed: Unexpected error: down"
        assert errors[0].context == {"kind": FailureKind.INTERNAL.value}

    async def test_repeated_cursor_logged_as_warning(
        self, make_scheduler, dispatcher, import_logs_repo, store
    ):
        class RepeatingCatalog(FakeCatalogClient):
            async def fetch_page(self, resource_type, filters=None, page_size=None, after_cursor=None):
                return PageResult(self.records[:2], True, "stuck")

        scheduler = make_scheduler(RepeatingCatalog(make_products(2)))
        result = await scheduler.start_import(store.id, "products")

        await drain(dispatcher)

        warnings = await import_logs_repo.get_by_session(
            result.session_id, level=LOG_LEVEL_WARNING
        )
        assert [w.message for w in warnings] == [MESSAGE_COMPLETED_DUPLICATE_CURSOR]

    async def test_reaped_session_is_logged(
        self, scheduler, sessions_repo, session_factory, import_logs_repo, store
    ):
        stuck = await sessions_repo.create(store.id, "orders")
        await backdate(session_factory, stuck.id, 61)

        assert await scheduler.reap_stuck_sessions() == [stuck.id]

        entries = await import_logs_repo.get_by_session(stuck.id)
        assert [(e.level, e.message) for e in entries] == [
            (LOG_LEVEL_ERROR, "Import timed out after 1 hour without progress")
        ]

    async def test_purge_drops_entries_past_retention(
        self, scheduler, sessions_repo, session_factory, import_logs_repo, store
    ):
        session = await sessions_repo.create(store.id, "products")
        await import_logs_repo.add_many(
            session.id, store.id, [{"level": LOG_LEVEL_INFO, "message": "old"}]
        )
        async with session_factory() as db:
            await db.execute(
                update(ImportLog).values(created_at=now_utc() - timedelta(days=31))
            )
            await db.commit()
        await import_logs_repo.add_many(
            session.id, store.id, [{"level": LOG_LEVEL_INFO, "message": "new"}]
        )

        assert await scheduler.purge_old_logs(30) == 1

        remaining = await import_logs_repo.get_by_session(session.id)
        assert [e.message for e in remaining] == ["new"]

    async def test_reap_task_purges_old_entries(
        self, scheduler, sessions_repo, session_factory, dispatcher, import_logs_repo, store
    ):
        session = await sessions_repo.create(store.id, "products")
        await import_logs_repo.add_many(
            session.id, store.id, [{"level": LOG_LEVEL_INFO, "message": "old"}]
        )
        days = settings.imports.IMPORT_LOG_RETENTION_DAYS + 1
        async with session_factory() as db:
            await db.execute(
                update(ImportLog).values(created_at=now_utc() - timedelta(days=days))
            )
            await db.commit()

        await scheduler.ensure_reaper_scheduled()
        await dispatcher.run_due(now=FAR_FUTURE)

        assert await import_logs_repo.count_by_session(session.id) == 0
