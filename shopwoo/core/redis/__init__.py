"""
Redis module for the ShopWoo import service
"""

from .client import (
    RedisClient,
    get_redis_client,
    get_redis_client_instance,
    close_redis_client,
    prefixed_key,
)
from .models import RedisConnectionConfig

__all__ = [
    "RedisClient",
    "get_redis_client",
    "get_redis_client_instance",
    "close_redis_client",
    "prefixed_key",
    "RedisConnectionConfig",
]
