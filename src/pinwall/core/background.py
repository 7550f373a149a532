"""
Pinwall Core - Detached background tasks.

Request handlers hand off side effects they do not wait for (tag catalog
writes) to this registry. The registry keeps a strong reference to every
task until it finishes, logs failures, and lets the application lifespan
drain whatever is still running before shutdown.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from functools import lru_cache
from typing import Any

logger = logging.getLogger(__name__)


class BackgroundTaskRegistry:
    """Holds fire-and-forget tasks spawned on the running event loop."""

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def spawn(self, coro: Coroutine[Any, Any, Any], name: str | None = None) -> asyncio.Task:
        """Schedule ``coro`` without joining it from the caller."""
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.info(f"Background task {task.get_name()} cancelled")
            return
        exc = task.exception()
        if exc is not None:
            logger.warning(
                f"Background task {task.get_name()} failed: {type(exc).__name__}: {exc}"
            )

    async def drain(self, timeout: float) -> int:
        """
        Wait up to ``timeout`` seconds for outstanding tasks.

        Tasks still running afterwards are cancelled. Returns how many were
        cancelled.
        """
        if not self._tasks:
            return 0

        pending_tasks = set(self._tasks)
        logger.info(f"Draining {len(pending_tasks)} background task(s)")
        _, still_running = await asyncio.wait(pending_tasks, timeout=timeout)

        for task in still_running:
            task.cancel()
        if still_running:
            await asyncio.gather(*still_running, return_exceptions=True)
            logger.warning(f"Cancelled {len(still_running)} background task(s) on shutdown")

        return len(still_running)


@lru_cache(maxsize=1)
def get_background_tasks() -> BackgroundTaskRegistry:
    """Get the global BackgroundTaskRegistry singleton."""
    return BackgroundTaskRegistry()
