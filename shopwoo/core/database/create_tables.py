"""
Create all database tables from SQLAlchemy models
"""

import asyncio
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine

from shopwoo.core.database.engine import get_engine
from shopwoo.core.database.models import Base
from shopwoo.core.logging import get_logger

logger = get_logger(__name__)


async def create_all_tables(engine: Optional[AsyncEngine] = None) -> None:
    """Create all tables defined in SQLAlchemy models (idempotent)"""
    engine = engine or await get_engine()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Database tables ensured", tables=len(Base.metadata.tables))


async def drop_all_tables(engine: Optional[AsyncEngine] = None) -> None:
    """Drop all tables (use with caution!)"""
    engine = engine or await get_engine()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    logger.warning("Database tables dropped")


if __name__ == "__main__":
    import sys

    if len(sys.argv) > 1 and sys.argv[1] == "drop":
        asyncio.run(drop_all_tables())
    else:
        asyncio.run(create_all_tables())
