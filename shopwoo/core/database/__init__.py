"""
Database module for the ShopWoo import service

Uses SQLAlchemy async for all database operations.
"""

from .engine import (
    get_engine,
    close_engine,
    check_engine_health,
    get_database_url,
)

from .session import (
    get_session_factory,
    reset_session_factory,
    get_session_context,
    get_transaction_context,
)

__all__ = [
    "get_engine",
    "close_engine",
    "check_engine_health",
    "get_database_url",
    "get_session_factory",
    "reset_session_factory",
    "get_session_context",
    "get_transaction_context",
]
