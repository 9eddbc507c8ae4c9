"""Cancellable, self-rescheduling delayed task."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class ScheduledTask:
    """Runs a coroutine once after a delay; the coroutine may schedule the next run.

    At most one run is pending and at most one is executing. A run that is
    already executing is never cancelled: ``cancel_and_join`` waits for it
    and drops whatever it had queued.
    """

    def __init__(self, name: str, callback: Callable[[], Awaitable[None]]):
        self.name = name
        self._callback = callback
        self._pending: Optional[asyncio.Task] = None
        self._executing: Optional[asyncio.Task] = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def is_pending(self) -> bool:
        """Check if a run is waiting for its delay to elapse."""
        return self._pending is not None and not self._pending.done()

    def schedule_after(self, delay_seconds: float) -> bool:
        """Queue the next run.

        Returns False once the task has been closed. A run that is already
        pending is replaced.
        """
        if self._closed:
            return False

        if self._pending is not None and self._pending is not self._executing:
            self._pending.cancel()

        self._pending = asyncio.create_task(
            self._run(max(0.0, delay_seconds)),
            name=f"{self.name}-run"
        )
        return True

    async def _run(self, delay_seconds: float):
        await asyncio.sleep(delay_seconds)

        me = asyncio.current_task()
        if self._pending is me:
            self._pending = None
        if self._closed:
            return

        self._executing = me
        try:
            await self._callback()
        finally:
            self._executing = None

    async def cancel_and_join(self):
        """Stop future runs and wait for any executing run to finish."""
        self._closed = True

        pending, executing = self._pending, self._executing
        self._pending = None

        if pending is not None and pending is not executing:
            pending.cancel()

        for task in (pending, executing):
            if task is None or task is asyncio.current_task():
                continue
            try:
                await task
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.error(f"{self.name} run failed during drain: {e}", exc_info=True)

        logger.debug(f"Scheduled task {self.name} drained")
