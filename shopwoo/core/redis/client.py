"""
Redis client for the ShopWoo import service
"""

import asyncio
from typing import Optional

from redis.asyncio import Redis

from shopwoo.core.config.settings import settings
from shopwoo.core.exceptions import RedisConnectionError, RedisTimeoutError
from shopwoo.core.logging import get_logger
from .models import RedisConnectionConfig

logger = get_logger(__name__)


class RedisClient:
    """Lazily connected Redis client shared by the guards and the deferred queue"""

    def __init__(self, config: Optional[RedisConnectionConfig] = None):
        self.config = config or RedisConnectionConfig(
            host=settings.redis.REDIS_HOST,
            port=settings.redis.REDIS_PORT,
            password=settings.redis.REDIS_PASSWORD,
            db=settings.redis.REDIS_DB,
            tls=settings.redis.REDIS_TLS,
        )
        self._client: Optional[Redis] = None
        self._lock = asyncio.Lock()

    async def connect(self) -> None:
        """Establish the Redis connection and verify it with PING"""
        async with self._lock:
            if self._client is not None:
                return

            logger.info(
                "Establishing Redis connection",
                host=self.config.host,
                port=self.config.port,
            )
            client = Redis(**self.config.to_redis_kwargs())

            try:
                await asyncio.wait_for(client.ping(), timeout=5.0)
            except asyncio.TimeoutError as e:
                await client.aclose()
                logger.error(
                    "Redis connection timeout",
                    host=self.config.host,
                    port=self.config.port,
                )
                raise RedisTimeoutError(
                    message="Redis connection timeout after 5 seconds",
                    operation="connect",
                    timeout=5.0,
                    cause=e,
                )
            except Exception as e:
                await client.aclose()
                logger.error(
                    "Failed to connect to Redis",
                    host=self.config.host,
                    port=self.config.port,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise RedisConnectionError(
                    message=f"Failed to connect to Redis: {str(e)}",
                    connection_details=self.config.to_dict(),
                    cause=e,
                )

            self._client = client
            logger.info("Redis connection established successfully")

    async def disconnect(self) -> None:
        """Close Redis connection"""
        async with self._lock:
            if self._client is None:
                return

            try:
                await self._client.aclose()
                logger.info("Redis connection closed")
            finally:
                self._client = None

    async def get_client(self) -> Redis:
        """Get Redis client, creating connection if needed"""
        if self._client is None:
            await self.connect()
        return self._client

    async def ping(self) -> bool:
        """Health check"""
        try:
            client = await self.get_client()
            return bool(await client.ping())
        except Exception as e:
            logger.warning("Redis health check failed", error=str(e))
            return False


def prefixed_key(*parts: str) -> str:
    """Build a namespaced key under REDIS_KEY_PREFIX"""
    return ":".join((settings.redis.REDIS_KEY_PREFIX,) + tuple(str(p) for p in parts))


# Global Redis client instance
_redis_client: Optional[RedisClient] = None


def get_redis_client_instance() -> RedisClient:
    """Get the global Redis client wrapper"""
    global _redis_client

    if _redis_client is None:
        _redis_client = RedisClient()

    return _redis_client


async def get_redis_client() -> Redis:
    """Get the connected global Redis client"""
    return await get_redis_client_instance().get_client()


async def close_redis_client() -> None:
    """Close the global Redis connection"""
    global _redis_client

    if _redis_client:
        await _redis_client.disconnect()
        _redis_client = None
