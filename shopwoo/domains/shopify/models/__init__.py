"""
Shopify domain models
"""

from .filters import (
    ImportFilters,
    ProductStatus,
    OrderStatus,
    CustomerState,
    InventoryStatus,
    ImportType,
)
from .pages import PageResult, CountResult

__all__ = [
    "ImportFilters",
    "ProductStatus",
    "OrderStatus",
    "CustomerState",
    "InventoryStatus",
    "ImportType",
    "PageResult",
    "CountResult",
]
