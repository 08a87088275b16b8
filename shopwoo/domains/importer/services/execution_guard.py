"""
Time-boxed single-flight guard on Redis

`acquire` is SET NX EX, so a guard left behind by a dead process expires on
its own. `release` only deletes a guard that still carries the caller's
token.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from shopwoo.core.logging import get_logger
from shopwoo.core.redis import prefixed_key
from shopwoo.shared.constants.redis import EXECUTION_GUARD_NAMESPACE
from shopwoo.shared.helpers import generate_token

logger = get_logger(__name__)


def batch_guard_key(session_id: str) -> str:
    return f"batch:{session_id}"


def start_guard_key(store_id: str, resource_type: str) -> str:
    return f"start:{store_id}:{resource_type}"


class ExecutionGuard:
    def __init__(self, redis, namespace: str = EXECUTION_GUARD_NAMESPACE):
        self.redis = redis
        self.namespace = namespace

    def _key(self, key: str) -> str:
        return prefixed_key(self.namespace, key)

    async def acquire(self, key: str, ttl_seconds: int) -> Optional[str]:
        """Take the guard. Returns the owner token, or None if already held."""
        token = generate_token("guard")
        acquired = await self.redis.set(
            self._key(key), token, nx=True, ex=max(1, int(ttl_seconds))
        )
        if not acquired:
            logger.debug("Guard already held", key=key)
            return None
        return token

    async def release(self, key: str, token: str) -> bool:
        """Drop the guard if `token` still owns it"""
        full_key = self._key(key)
        current = await self.redis.get(full_key)
        if current != token:
            logger.warning(
                "Guard expired or taken over before release",
                key=key,
            )
            return False
        await self.redis.delete(full_key)
        return True

    async def is_held(self, key: str) -> bool:
        return bool(await self.redis.exists(self._key(key)))

    @asynccontextmanager
    async def hold(self, key: str, ttl_seconds: int) -> AsyncIterator[bool]:
        """Context manager yielding whether the guard was obtained"""
        token = await self.acquire(key, ttl_seconds)
        try:
            yield token is not None
        finally:
            if token is not None:
                await self.release(key, token)
