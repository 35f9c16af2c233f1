"""Cancellable scheduled-task handles for debounced and periodic work.

Scheduling always cancels the pending handle for the same logical task
before creating a new one, so at most one is pending at a time.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.3
DEFAULT_REFRESH_SECONDS = 10 * 60


class Debouncer:
    """Runs the most recently scheduled coroutine after a quiet period."""

    def __init__(self, delay: float = DEFAULT_DEBOUNCE_SECONDS):
        self.delay = delay
        self._task: asyncio.Task | None = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def schedule(self, func: Callable[[], Awaitable[None]]) -> asyncio.Task:
        self.cancel()
        self._task = asyncio.create_task(self._run_later(func))
        return self._task

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def _run_later(self, func: Callable[[], Awaitable[None]]) -> None:
        await asyncio.sleep(self.delay)
        try:
            await func()
        except Exception:
            logger.exception("Debounced task failed")


class AutoRefresher:
    """Re-invokes a coroutine on a fixed interval until stopped.

    Failures are logged and never stop the timer.
    """

    def __init__(
        self,
        callback: Callable[[], Awaitable[None]],
        interval: float = DEFAULT_REFRESH_SECONDS,
    ):
        self.callback = callback
        self.interval = interval
        self._task: asyncio.Task | None = None
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        self.stop()
        self._task = asyncio.create_task(self._loop())
        logger.info("Auto-refresh started (every %ds)", int(self.interval))

    def stop(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
            logger.info("Auto-refresh stopped")
        self._task = None

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self.ticks += 1
            try:
                await self.callback()
            except Exception:
                logger.exception("Auto-refresh #%d failed", self.ticks)
