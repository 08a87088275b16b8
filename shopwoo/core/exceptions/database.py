"""
Database-related exceptions
"""

from .base import ShopWooException
from typing import Optional, Dict, Any


class DatabaseError(ShopWooException):
    """Base exception for database errors"""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(
            message=message,
            error_code="DATABASE_ERROR",
            details=details,
            cause=cause,
        )


class DatabaseConnectionError(DatabaseError):
    """Raised when the database engine cannot be created or reached"""

    def __init__(
        self,
        message: str,
        attempts: Optional[int] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message=message, details={"attempts": attempts}, cause=cause)
        self.error_code = "DATABASE_CONNECTION_ERROR"
