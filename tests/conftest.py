"""
Shared fixtures: in-memory database, fake Redis, fake Shopify and upserter
"""

import json
from contextlib import asynccontextmanager
from typing import Any, Dict, Iterable, List, Optional, Set

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from shopwoo.core.database.models import Base
from shopwoo.domains.importer.interfaces import IEntityUpserter
from shopwoo.domains.importer.models import UpsertOutcome, UpsertResult
from shopwoo.domains.importer.services import (
    BatchProcessor,
    CursorStore,
    DeferredTaskDispatcher,
    DeferredTaskQueue,
    ExecutionGuard,
    ImportScheduler,
    ProgressReporter,
    SettingsService,
)
from shopwoo.domains.shopify.interfaces import (
    IHttpTransport,
    IShopifyGraphQLClient,
    TransportResponse,
)
from shopwoo.domains.shopify.models import CountResult, PageResult
from shopwoo.repository.AppSettingRepository import AppSettingRepository
from shopwoo.repository.ImportLogRepository import ImportLogRepository
from shopwoo.repository.ImportSessionRepository import ImportSessionRepository
from shopwoo.repository.ShopRepository import ShopRepository


class FakeRedis:
    """The subset of redis.asyncio.Redis the import engine uses"""

    def __init__(self):
        self.values: Dict[str, Any] = {}
        self.ttls: Dict[str, int] = {}
        self.zsets: Dict[str, Dict[str, float]] = {}

    async def set(self, key, value, nx=False, ex=None):
        if nx and key in self.values:
            return None
        self.values[key] = value
        if ex is not None:
            self.ttls[key] = ex
        return True

    async def get(self, key):
        return self.values.get(key)

    async def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.values.pop(key, None) is not None:
                removed += 1
            self.ttls.pop(key, None)
        return removed

    async def exists(self, *keys):
        return sum(1 for key in keys if key in self.values)

    def expire_now(self, key):
        self.values.pop(key, None)
        self.ttls.pop(key, None)

    async def zadd(self, key, mapping):
        zset = self.zsets.setdefault(key, {})
        added = sum(1 for member in mapping if member not in zset)
        zset.update(mapping)
        return added

    def _sorted(self, key):
        zset = self.zsets.get(key, {})
        return [member for member, _ in sorted(zset.items(), key=lambda kv: (kv[1], kv[0]))]

    async def zrangebyscore(self, key, min, max, start=None, num=None):
        low, high = float(min), float(max)
        zset = self.zsets.get(key, {})
        members = [m for m in self._sorted(key) if low <= zset[m] <= high]
        if start is not None and num is not None:
            members = members[start : start + num]
        return members

    async def zrange(self, key, start, end):
        members = self._sorted(key)
        if end == -1:
            return members[start:]
        return members[start : end + 1]

    async def zrem(self, key, *members):
        zset = self.zsets.get(key, {})
        removed = 0
        for member in members:
            if zset.pop(member, None) is not None:
                removed += 1
        return removed

    async def ping(self):
        return True

    async def aclose(self):
        return None


class FakeTransport(IHttpTransport):
    """Replays canned responses in order and records every request"""

    def __init__(self, responses: Optional[List[Any]] = None):
        self.responses = list(responses or [])
        self.requests: List[Dict[str, Any]] = []

    def queue(self, status: int, body: Any) -> None:
        if not isinstance(body, str):
            body = json.dumps(body)
        self.responses.append(TransportResponse(status=status, body=body))

    async def send(self, url, method, headers, body=None):
        self.requests.append(
            {"url": url, "method": method, "headers": headers, "body": body}
        )
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def sent_variables(self, index: int = -1) -> Dict[str, Any]:
        return json.loads(self.requests[index]["body"])["variables"]


class FakeCatalogClient(IShopifyGraphQLClient):
    """Pages through an in-memory list using offsets as cursors"""

    def __init__(self, records, page_size=250, count_size=250, failure=None):
        self.records = list(records)
        self.page_size = page_size
        self.count_size = count_size
        self.failure = failure
        self.pages_requested: List[Optional[str]] = []

    async def fetch_page(self, resource_type, filters=None, page_size=None, after_cursor=None):
        self.pages_requested.append(after_cursor)
        if self.failure is not None:
            raise self.failure
        start = int(after_cursor) if after_cursor else 0
        size = page_size or self.page_size
        chunk = self.records[start : start + size]
        end = start + len(chunk)
        return PageResult(
            records=chunk,
            has_next_page=end < len(self.records),
            end_cursor=str(end),
        )

    async def fetch_all(self, resource_type, filters=None, page_size=None):
        return list(self.records)

    async def count(self, resource_type, filters=None):
        return CountResult(
            count=min(len(self.records), self.count_size),
            is_partial=len(self.records) > self.count_size,
        )


class FakeUpserter(IEntityUpserter):
    def __init__(
        self,
        fail_ids: Iterable[str] = (),
        raise_ids: Iterable[str] = (),
        existing: Iterable[str] = (),
    ):
        self.fail_ids: Set[str] = set(fail_ids)
        self.raise_ids: Set[str] = set(raise_ids)
        self.existing: Set[str] = set(existing)
        self.seen: List[str] = []

    async def upsert(self, resource_type, record, options):
        record_id = record["id"]
        self.seen.append(record_id)
        if record_id in self.raise_ids:
            raise RuntimeError(f"mapping exploded for {record_id}")
        if record_id in self.fail_ids:
            return UpsertResult(UpsertOutcome.FAILED, reason="missing sku")
        if record_id in self.existing:
            return UpsertResult(UpsertOutcome.UPDATED)
        self.existing.add(record_id)
        return UpsertResult(UpsertOutcome.IMPORTED)

    async def find_existing(self, resource_type, external_ids):
        return {i for i in external_ids if i in self.existing}


def make_products(count: int, start: int = 1) -> List[Dict[str, Any]]:
    return [
        {
            "id": f"gid://shopify/Product/{n}",
            "title": f"Product {n}",
            "tags": ["sale"] if n % 2 else ["new"],
            "variants": [{"id": f"v{n}", "price": f"{n}.00", "inventoryQuantity": n % 3}],
            "images": [],
            "collections": [],
        }
        for n in range(start, start + count)
    ]


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    maker = async_sessionmaker(bind=engine, expire_on_commit=False)

    @asynccontextmanager
    async def factory():
        async with maker() as session:
            yield session

    return factory


@pytest.fixture
def sessions_repo(session_factory):
    return ImportSessionRepository(session_factory)


@pytest.fixture
def shops_repo(session_factory):
    return ShopRepository(session_factory)


@pytest.fixture
def app_settings_repo(session_factory):
    return AppSettingRepository(session_factory)


@pytest.fixture
def import_logs_repo(session_factory):
    return ImportLogRepository(session_factory)


@pytest.fixture
def cursor_store(app_settings_repo):
    return CursorStore(app_settings_repo)


@pytest.fixture
def settings_service(app_settings_repo):
    return SettingsService(app_settings_repo)


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def guard(fake_redis):
    return ExecutionGuard(fake_redis)


@pytest.fixture
def queue(fake_redis):
    return DeferredTaskQueue(fake_redis, key="test:deferred")


@pytest.fixture
def dispatcher(queue):
    return DeferredTaskDispatcher(queue)


@pytest.fixture
async def store(shops_repo):
    return await shops_repo.create(
        shop_domain="seven.myshopify.com",
        access_token="shpat_test",
        store_name="Store Seven",
    )


@pytest.fixture
def upserter():
    return FakeUpserter()


@pytest.fixture
def catalog():
    return FakeCatalogClient(make_products(520), page_size=250, count_size=250)


@pytest.fixture
def processor(upserter, catalog, sessions_repo, cursor_store, import_logs_repo):
    return BatchProcessor(
        upserter=upserter,
        client_factory=lambda shop: catalog,
        sessions=sessions_repo,
        cursor_store=cursor_store,
        import_logs=import_logs_repo,
    )


@pytest.fixture
def scheduler(
    guard,
    queue,
    dispatcher,
    catalog,
    processor,
    sessions_repo,
    shops_repo,
    cursor_store,
    settings_service,
    import_logs_repo,
):
    scheduler = ImportScheduler(
        guard=guard,
        queue=queue,
        client_factory=lambda shop: catalog,
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


@pytest.fixture
def reporter(sessions_repo, guard, import_logs_repo):
    return ProgressReporter(
        sessions=sessions_repo, guard=guard, import_logs=import_logs_repo
    )
