"""
Enum models for SQLAlchemy

Defines the enums persisted by the import engine.
"""

from enum import Enum


class ImportStatus(str, Enum):
    """Import session lifecycle status"""

    INITIALIZING = "initializing"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"

    @classmethod
    def active(cls) -> tuple:
        return (cls.INITIALIZING.value, cls.IN_PROGRESS.value)

    @classmethod
    def terminal(cls) -> tuple:
        return (cls.COMPLETED.value, cls.FAILED.value)


class ResourceType(str, Enum):
    """Importable Shopify resource families"""

    PRODUCTS = "products"
    CUSTOMERS = "customers"
    ORDERS = "orders"
