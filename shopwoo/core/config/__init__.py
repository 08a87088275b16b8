"""
Configuration module for the ShopWoo import service
"""

from .settings import settings, Settings
from .settings import (
    DatabaseSettings,
    RedisSettings,
    ShopifySettings,
    ImportSettings,
    LoggingSettings,
)

__all__ = [
    "settings",
    "Settings",
    "DatabaseSettings",
    "RedisSettings",
    "ShopifySettings",
    "ImportSettings",
    "LoggingSettings",
]
