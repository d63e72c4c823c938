"""Tracked asyncio task sets with an optional concurrency ceiling."""
import asyncio
import logging
from typing import Any, Awaitable, Optional, Set

logger = logging.getLogger(__name__)


class TaskPool:
    """Fire-and-forget task submission that can still be drained on shutdown.

    Tasks beyond ``limit`` wait on a semaphore instead of opening more
    outbound connections. ``limit=None`` leaves the pool unbounded.
    """

    def __init__(self, name: str, limit: Optional[int] = None):
        self.name = name
        self.limit = limit
        self._semaphore = asyncio.Semaphore(limit) if limit else None
        self._tasks: Set[asyncio.Task] = set()

    def spawn(self, coro: Awaitable[Any]) -> asyncio.Task:
        """Schedule a coroutine and track it until it finishes."""
        task = asyncio.create_task(self._run(coro))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, coro: Awaitable[Any]) -> Any:
        try:
            if self._semaphore is None:
                return await coro
            async with self._semaphore:
                return await coro
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.exception(f"Unhandled error in {self.name} task: {e}")
            return None

    @property
    def in_flight(self) -> int:
        """Number of tasks submitted and not yet finished."""
        return len(self._tasks)

    async def drain(self):
        """Wait until every tracked task, including ones spawned meanwhile, is done."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
