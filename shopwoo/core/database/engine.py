"""
SQLAlchemy async engine configuration for the ShopWoo import service
"""

import asyncio
from typing import Optional

from sqlalchemy import event, text
from sqlalchemy.engine.url import make_url
from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine
from sqlalchemy.pool import NullPool

from shopwoo.core.config.settings import settings
from shopwoo.core.exceptions import DatabaseConnectionError
from shopwoo.core.logging import get_logger

logger = get_logger(__name__)

# Global engine instance
_engine: Optional[AsyncEngine] = None
_engine_lock = asyncio.Lock()


def get_database_url() -> str:
    """Get the database URL with proper async driver"""
    database_url = settings.database.DATABASE_URL

    if database_url.startswith("postgresql://"):
        database_url = database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    elif database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql+asyncpg://", 1)
    elif database_url.startswith("sqlite://"):
        database_url = database_url.replace("sqlite://", "sqlite+aiosqlite://", 1)

    return database_url


def create_engine(database_url: Optional[str] = None) -> AsyncEngine:
    """Create SQLAlchemy async engine"""
    database_url = database_url or get_database_url()
    is_sqlite = database_url.startswith("sqlite")

    engine_kwargs = {
        "url": database_url,
        "echo": settings.database.SQLALCHEMY_ECHO,
        "poolclass": NullPool,
        "connect_args": (
            {
                "server_settings": {
                    "application_name": "shopwoo-import-service",
                },
            }
            if database_url.startswith("postgresql")
            else {}
        ),
    }

    engine = create_async_engine(**engine_kwargs)

    if is_sqlite:

        @event.listens_for(engine.sync_engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    logger.info(
        "Database engine created",
        url=make_url(database_url).render_as_string(hide_password=True),
    )
    return engine


async def get_engine() -> AsyncEngine:
    """Get or create the process-wide async engine"""
    global _engine

    if _engine is None:
        async with _engine_lock:
            if _engine is None:
                await _create_engine()

    return _engine


async def _create_engine(max_attempts: int = 3, base_delay: float = 1.0) -> None:
    """Create the engine and prove it can connect, with exponential backoff"""
    global _engine

    last_error: Optional[Exception] = None
    for attempt in range(max_attempts):
        engine = create_engine()
        try:
            await _health_check_engine(engine)
            _engine = engine
            return
        except Exception as e:
            last_error = e
            logger.error(
                "Database engine creation failed",
                attempt=attempt + 1,
                max_attempts=max_attempts,
                error=str(e),
            )
            await engine.dispose()

        if attempt < max_attempts - 1:
            await asyncio.sleep(base_delay * (2**attempt))

    raise DatabaseConnectionError(
        "Failed to create database engine",
        attempts=max_attempts,
        cause=last_error,
    )


async def _health_check_engine(engine: AsyncEngine) -> None:
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def check_engine_health() -> bool:
    """Check if the database engine is healthy"""
    try:
        engine = await get_engine()
        await asyncio.wait_for(_health_check_engine(engine), timeout=5)
        return True
    except Exception as e:
        logger.warning("Database engine health check failed", error=str(e))
        return False


async def close_engine() -> None:
    """Dispose of the global engine"""
    global _engine

    if _engine is not None:
        try:
            await _engine.dispose()
        finally:
            _engine = None
