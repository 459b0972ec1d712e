"""
Detached background work for side effects the caller should not wait on.

Submitted coroutines run on the event loop under a concurrency cap. Their
outcome is logged; nothing is ever awaited by the request that submitted them.
"""

import asyncio
from collections.abc import Coroutine
from typing import Any

from app.config import settings
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class BackgroundTaskRunner:
    def __init__(self, max_concurrency: int = 20):
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def submit(self, coro: Coroutine[Any, Any, Any], name: str) -> asyncio.Task:
        """Schedule `coro` and return immediately."""
        task = asyncio.create_task(self._run(coro, name), name=name)
        # Hold a strong reference until done or the task may be collected mid-flight
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, coro: Coroutine[Any, Any, Any], name: str) -> None:
        async with self._semaphore:
            try:
                result = await coro
                logger.debug("Background task finished", task=name, result=result)
            except asyncio.CancelledError:
                logger.warning("Background task cancelled", task=name)
                raise
            except Exception as e:
                logger.error(
                    "Background task failed",
                    task=name,
                    error=str(e),
                    error_type=type(e).__name__,
                )

    async def drain(self, timeout: float = 10.0) -> None:
        """Wait for in-flight tasks on shutdown, cancelling stragglers."""
        if not self._tasks:
            return

        tasks = list(self._tasks)
        logger.info("Draining background tasks", count=len(tasks))
        _, still_running = await asyncio.wait(tasks, timeout=timeout)

        for task in still_running:
            task.cancel()
        if still_running:
            logger.warning("Cancelled unfinished background tasks", count=len(still_running))


background_tasks = BackgroundTaskRunner(settings.BACKGROUND_TASK_LIMIT)
