"""
Main application for the ShopWoo import service
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shopwoo import __version__
from shopwoo.api.dependencies import services
from shopwoo.api.v1.health import router as health_router
from shopwoo.api.v1.imports import router as imports_router
from shopwoo.core.config.settings import settings
from shopwoo.core.logging import get_logger
from shopwoo.core.redis import close_redis_client, get_redis_client
from shopwoo.domains.importer.services import (
    BatchProcessor,
    CursorStore,
    DeferredTaskDispatcher,
    DeferredTaskQueue,
    ExecutionGuard,
    ImportScheduler,
    ProgressReporter,
    SettingsService,
    load_upserter,
)
from shopwoo.domains.shopify.services import HttpxTransport, ShopifyClientFactory
from shopwoo.repository.ImportLogRepository import ImportLogRepository
from shopwoo.shared.constants.app import PROJECT_NAME

logger = get_logger(__name__)

_dispatcher_task: Optional[asyncio.Task] = None
_dispatcher_stop: Optional[asyncio.Event] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    await initialize_services()
    yield
    await cleanup_services()


app = FastAPI(
    title=PROJECT_NAME,
    description="Resumable Shopify to WooCommerce import orchestration",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(health_router)
app.include_router(imports_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


async def initialize_services():
    """Wire the import engine and start the deferred task dispatcher"""
    global _dispatcher_task, _dispatcher_stop

    try:
        logger.info("Starting service initialization")

        from shopwoo.core.database.create_tables import create_all_tables

        await create_all_tables()
        logger.info("Database tables verified/created")

        redis = await get_redis_client()
        logger.info("Redis connection verified")

        settings_service = SettingsService()
        cursor_store = CursorStore()
        import_logs = ImportLogRepository()
        transport = HttpxTransport()
        await transport.connect()
        client_factory = ShopifyClientFactory(transport, settings_service)

        upserter = load_upserter(settings.imports.ENTITY_UPSERTER)
        processor = None
        if upserter is not None:
            processor = BatchProcessor(
                upserter=upserter,
                client_factory=client_factory,
                cursor_store=cursor_store,
                import_logs=import_logs,
            )

        guard = ExecutionGuard(redis)
        queue = DeferredTaskQueue(redis)
        scheduler = ImportScheduler(
            guard=guard,
            queue=queue,
            client_factory=client_factory,
            processor=processor,
            cursor_store=cursor_store,
            settings_service=settings_service,
            import_logs=import_logs,
        )
        dispatcher = DeferredTaskDispatcher(queue)
        scheduler.register_handlers(dispatcher)

        services["transport"] = transport
        services["scheduler"] = scheduler
        services["progress"] = ProgressReporter(guard=guard, import_logs=import_logs)
        services["dispatcher"] = dispatcher

        await scheduler.ensure_reaper_scheduled()

        if settings.imports.ENABLE_DISPATCHER:
            _dispatcher_stop = asyncio.Event()
            _dispatcher_task = asyncio.create_task(
                dispatcher.run_forever(
                    settings.imports.DISPATCHER_POLL_INTERVAL_SECONDS,
                    _dispatcher_stop,
                )
            )

        logger.info("All services initialized", services=sorted(services.keys()))

    except Exception as e:
        logger.error("Failed to initialize services", error=str(e))
        raise


async def cleanup_services():
    """Stop the dispatcher and close connections"""
    global _dispatcher_task, _dispatcher_stop

    try:
        if _dispatcher_task is not None:
            _dispatcher_stop.set()
            await _dispatcher_task
            _dispatcher_task = None

        transport = services.get("transport")
        if transport is not None:
            await transport.close()

        await close_redis_client()

        from shopwoo.core.database.engine import close_engine

        await close_engine()

        services.clear()

    except Exception as e:
        logger.error("Failed to cleanup services", error=str(e))


if __name__ == "__main__":
    uvicorn.run(
        "shopwoo.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.DEBUG,
    )
