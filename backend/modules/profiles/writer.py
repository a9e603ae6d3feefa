"""
Fire-and-forget cache writes.

The resolver returns a freshly fetched profile before the cache write
lands. Writes run as background tasks, bounded by a semaphore, and their
failures are logged here instead of reaching the request.
"""

import asyncio
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


class BackgroundWriter:
    """
    Spawns and tracks background write tasks.

    At most ``max_concurrency`` writes run at once; the rest wait on the
    semaphore inside their own task, so spawning never blocks the caller.
    """

    def __init__(self, max_concurrency: int = 8):
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._tasks: set[asyncio.Task] = set()
        self.failures = 0

    @property
    def pending(self) -> int:
        """Number of writes not yet finished."""
        return len(self._tasks)

    def spawn(self, write: Callable[[], Awaitable[None]], description: str) -> asyncio.Task:
        """
        Schedule ``write`` on the running loop and return its task.

        The caller is not expected to await the task.
        """
        task = asyncio.create_task(self._guarded(write, description))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _guarded(self, write: Callable[[], Awaitable[None]], description: str) -> None:
        async with self._semaphore:
            try:
                await write()
            except asyncio.CancelledError:
                logger.warning(f"Background write cancelled: {description}")
                raise
            except Exception:
                self.failures += 1
                logger.exception(f"Background write failed: {description}")
            else:
                logger.debug(f"Background write done: {description}")

    async def drain(self) -> None:
        """Wait for every pending write to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
