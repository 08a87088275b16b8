"""
Import engine exceptions
"""

from typing import Optional

from .base import ShopWooException


class ImportEngineError(ShopWooException):
    """Base exception for import orchestration errors"""

    def __init__(self, message: str, error_code: str = "IMPORT_ERROR", **kwargs):
        super().__init__(message=message, error_code=error_code, **kwargs)


class SessionNotFoundError(ImportEngineError):
    """Raised when an import session id is unknown"""

    def __init__(self, session_id: str):
        super().__init__(
            message=f"Import session not found: {session_id}",
            error_code="SESSION_NOT_FOUND",
            details={"session_id": session_id},
        )
        self.session_id = session_id


class StoreNotFoundError(ImportEngineError):
    """Raised when the source store is missing or inactive"""

    def __init__(self, store_id: str, reason: str = "not found"):
        super().__init__(
            message=f"Source store {store_id} {reason}",
            error_code="STORE_NOT_FOUND",
            details={"store_id": store_id, "reason": reason},
        )
        self.store_id = store_id


class ConcurrentStartError(ImportEngineError):
    """Raised when a parallel start holds the slot but its session never appeared"""

    def __init__(self, store_id: str, resource_type: str):
        super().__init__(
            message=(
                f"Another import for store {store_id} / {resource_type} "
                "is being started; retry shortly"
            ),
            error_code="CONCURRENT_START",
            details={"store_id": store_id, "resource_type": resource_type},
        )


class UpserterNotConfiguredError(ImportEngineError):
    """Raised when no entity upserter is available to run batches"""

    def __init__(self, dotted_path: Optional[str] = None, cause: Optional[Exception] = None):
        message = "No entity upserter configured"
        if dotted_path:
            message = f"Entity upserter could not be loaded from '{dotted_path}'"
        super().__init__(
            message=message,
            error_code="UPSERTER_NOT_CONFIGURED",
            details={"dotted_path": dotted_path},
            cause=cause,
        )
