"""
Custom exceptions for the ShopWoo import service
"""

from .base import ShopWooException
from .kinds import FailureKind
from .config import ConfigurationError
from .database import DatabaseError, DatabaseConnectionError
from .redis import RedisError, RedisConnectionError, RedisTimeoutError
from .validation import ValidationError
from .shopify import (
    ShopifyAPIError,
    ShopifyTransportError,
    ShopifyHTTPError,
    ShopifyAuthenticationError,
    ShopifyMalformedResponseError,
    ShopifyGraphQLError,
)
from .importer import (
    ImportEngineError,
    SessionNotFoundError,
    StoreNotFoundError,
    ConcurrentStartError,
    UpserterNotConfiguredError,
)

__all__ = [
    "ShopWooException",
    "FailureKind",
    "ConfigurationError",
    "DatabaseError",
    "DatabaseConnectionError",
    "RedisError",
    "RedisConnectionError",
    "RedisTimeoutError",
    "ValidationError",
    "ShopifyAPIError",
    "ShopifyTransportError",
    "ShopifyHTTPError",
    "ShopifyAuthenticationError",
    "ShopifyMalformedResponseError",
    "ShopifyGraphQLError",
    "ImportEngineError",
    "SessionNotFoundError",
    "StoreNotFoundError",
    "ConcurrentStartError",
    "UpserterNotConfiguredError",
]
