"""
Deferred single-shot task queue on a Redis sorted set

Tasks are JSON members scored by their due time. Whoever removes a member
from the set owns it, so a task runs at most once even with several
dispatchers polling the same queue.
"""

import asyncio
import json
import time
import uuid
from dataclasses import asdict, dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from shopwoo.core.logging import get_logger
from shopwoo.core.redis import prefixed_key
from shopwoo.shared.constants.redis import DEFERRED_TASKS_KEY

logger = get_logger(__name__)

TaskHandler = Callable[[Dict[str, Any]], Awaitable[Any]]


@dataclass
class DeferredTask:
    handler_id: str
    args: Dict[str, Any] = field(default_factory=dict)
    run_at: float = 0.0
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def to_json(self) -> str:
        return json.dumps(asdict(self), sort_keys=True, default=str)

    @classmethod
    def from_json(cls, raw: str) -> "DeferredTask":
        data = json.loads(raw)
        return cls(
            handler_id=data["handler_id"],
            args=data.get("args") or {},
            run_at=float(data.get("run_at", 0.0)),
            id=data.get("id") or uuid.uuid4().hex,
        )


class DeferredTaskQueue:
    def __init__(self, redis, key: Optional[str] = None):
        self.redis = redis
        self.key = key or prefixed_key(DEFERRED_TASKS_KEY)

    async def schedule_once(
        self,
        delay_seconds: float,
        handler_id: str,
        args: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Enqueue `handler_id(args)` to run once after `delay_seconds`"""
        task = DeferredTask(
            handler_id=handler_id,
            args=args or {},
            run_at=time.time() + max(0.0, float(delay_seconds)),
        )
        await self.redis.zadd(self.key, {task.to_json(): task.run_at})
        logger.debug(
            "Deferred task scheduled",
            task_id=task.id,
            handler_id=handler_id,
            delay_seconds=delay_seconds,
        )
        return task.id

    async def claim_due(
        self, now: Optional[float] = None, limit: int = 50
    ) -> List[DeferredTask]:
        """Remove and return tasks whose due time has passed"""
        now = time.time() if now is None else now
        members = await self.redis.zrangebyscore(self.key, "-inf", now, start=0, num=limit)

        claimed: List[DeferredTask] = []
        for member in members:
            if not await self.redis.zrem(self.key, member):
                # Another dispatcher got it first
                continue
            try:
                claimed.append(DeferredTask.from_json(member))
            except (ValueError, KeyError, TypeError) as e:
                logger.error(
                    "Dropping unreadable deferred task",
                    member=str(member)[:200],
                    error=str(e),
                )
        return claimed

    async def pending(self, handler_id: Optional[str] = None) -> int:
        """Number of queued tasks, optionally for one handler"""
        members = await self.redis.zrange(self.key, 0, -1)
        if handler_id is None:
            return len(members)
        count = 0
        for member in members:
            try:
                if json.loads(member).get("handler_id") == handler_id:
                    count += 1
            except ValueError:
                continue
        return count


class DeferredTaskDispatcher:
    """Runs due tasks against a registry of handlers"""

    def __init__(self, queue: DeferredTaskQueue):
        self.queue = queue
        self._handlers: Dict[str, TaskHandler] = {}

    def register(self, handler_id: str, handler: TaskHandler) -> None:
        self._handlers[handler_id] = handler

    @property
    def handler_ids(self) -> List[str]:
        return sorted(self._handlers)

    async def run_due(self, now: Optional[float] = None, limit: int = 50) -> int:
        """Run every due task once. Returns how many were claimed."""
        tasks = await self.queue.claim_due(now=now, limit=limit)

        for task in tasks:
            handler = self._handlers.get(task.handler_id)
            if handler is None:
                logger.error(
                    "No handler registered for deferred task",
                    task_id=task.id,
                    handler_id=task.handler_id,
                )
                continue

            try:
                await handler(task.args)
            except Exception as e:
                logger.exception(
                    "Deferred task failed",
                    task_id=task.id,
                    handler_id=task.handler_id,
                    error=str(e),
                )

        return len(tasks)

    async def run_forever(self, poll_interval: float, stop_event: asyncio.Event) -> None:
        """Poll until `stop_event` is set"""
        logger.info("Deferred task dispatcher started", handlers=self.handler_ids)

        while not stop_event.is_set():
            try:
                ran = await self.run_due()
            except Exception as e:
                logger.error("Deferred task sweep failed", error=str(e))
                ran = 0

            if ran == 0:
                try:
                    await asyncio.wait_for(stop_event.wait(), timeout=poll_interval)
                except asyncio.TimeoutError:
                    pass

        logger.info("Deferred task dispatcher stopped")
