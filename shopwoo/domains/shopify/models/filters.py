"""
Import filter model

A start request carries one ImportFilters payload. Part of it is compiled
into Shopify's search syntax (see services/filters.py), the rest is applied
to fetched records by the batch processor.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from shopwoo.shared.helpers import ensure_utc


class ProductStatus(str, Enum):
    ACTIVE = "active"
    DRAFT = "draft"
    ARCHIVED = "archived"
    ANY = "any"


class OrderStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"
    CANCELLED = "cancelled"


class CustomerState(str, Enum):
    ENABLED = "enabled"
    DISABLED = "disabled"
    INVITED = "invited"
    DECLINED = "declined"


class InventoryStatus(str, Enum):
    ALL = "all"
    IN_STOCK = "in_stock"
    OUT_OF_STOCK = "out_of_stock"


class ImportType(str, Enum):
    ALL = "all"
    NEW = "new"
    EXISTING = "existing"


class ImportFilters(BaseModel):
    """Filter/options payload stored on the import session"""

    # Compiled into the source query
    status: Optional[ProductStatus] = Field(None, description="Product status")
    product_type: Optional[str] = Field(None, max_length=255)
    vendor: Optional[str] = Field(None, max_length=255)
    tags: List[str] = Field(default_factory=list, description="Match any tag")
    search: Optional[str] = Field(None, max_length=255, description="Free-text term")
    created_at_min: Optional[datetime] = None
    created_at_max: Optional[datetime] = None
    updated_at_min: Optional[datetime] = None
    updated_at_max: Optional[datetime] = None
    order_status: List[OrderStatus] = Field(default_factory=list)
    customer_state: Optional[CustomerState] = None

    # Applied after fetch
    min_price: Optional[float] = Field(None, ge=0)
    max_price: Optional[float] = Field(None, ge=0)
    inventory_status: InventoryStatus = InventoryStatus.ALL
    import_type: ImportType = ImportType.ALL

    model_config = {"extra": "forbid"}

    @field_validator("product_type", "vendor", "search", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            v = v.split(",")
        return [t.strip() for t in v if isinstance(t, str) and t.strip()]

    @field_validator("order_status", mode="before")
    @classmethod
    def listify_order_status(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return v

    @field_validator(
        "created_at_min",
        "created_at_max",
        "updated_at_min",
        "updated_at_max",
        mode="after",
    )
    @classmethod
    def naive_dates_are_utc(cls, v):
        # Naive bounds are read as UTC so mixed bounds stay comparable
        return ensure_utc(v)

    @model_validator(mode="after")
    def check_ranges(self):
        if (
            self.min_price is not None
            and self.max_price is not None
            and self.min_price > self.max_price
        ):
            raise ValueError("min_price must not exceed max_price")
        for low, high, name in (
            (self.created_at_min, self.created_at_max, "created_at"),
            (self.updated_at_min, self.updated_at_max, "updated_at"),
        ):
            if low is not None and high is not None and low > high:
                raise ValueError(f"{name} range is inverted")
        return self

    @property
    def has_price_filter(self) -> bool:
        return self.min_price is not None or self.max_price is not None

    @property
    def needs_post_filter(self) -> bool:
        return (
            self.has_price_filter
            or self.inventory_status != InventoryStatus.ALL
            or bool(self.tags)
            or self.import_type != ImportType.ALL
        )
