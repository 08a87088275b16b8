"""
SQLAlchemy models for the ShopWoo import service
"""

from .base import Base, BaseModel, TimestampMixin, IDMixin, ShopMixin
from .enums import ImportStatus, ResourceType
from .shop import Shop
from .import_session import ImportSession
from .app_setting import AppSetting
from .import_log import ImportLog

__all__ = [
    "Base",
    "BaseModel",
    "TimestampMixin",
    "IDMixin",
    "ShopMixin",
    "ImportStatus",
    "ResourceType",
    "Shop",
    "ImportSession",
    "AppSetting",
    "ImportLog",
]
