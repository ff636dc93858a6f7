"""Debouncer — trailing-edge debounce of an async action with the latest argument.

Invariants:
    - schedule(value) replaces the pending value and restarts the quiet window
    - The action runs once per quiet window, with the most recent value
    - flush() runs a pending value immediately; cancel() drops it
    - join() waits for an action the timer already started

Design Decisions:
    - Scheduler injected (loop.call_later by default): tests drive a virtual
      clock instead of sleeping
    - Timer callbacks are sync, so the action is started as a task on the
      running loop; its failures are logged, callers never see them
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

from chartdb_sync.core.repository_protocols import Scheduler, TimerHandle

logger = logging.getLogger(__name__)

T = TypeVar("T")

_NOTHING = object()


class Debouncer(Generic[T]):
    """Owns one cancellable timer and the "most recent argument" slot."""

    def __init__(
        self,
        action: Callable[[T], Awaitable[None]],
        wait_ms: int = 2000,
        scheduler: Scheduler | None = None,
    ):
        self._action = action
        self.wait_seconds = wait_ms / 1000
        self._scheduler = scheduler
        self._timer: TimerHandle | None = None
        self._pending: object = _NOTHING
        self._running: asyncio.Task | None = None

    @property
    def pending(self) -> bool:
        return self._pending is not _NOTHING

    def schedule(self, value: T) -> None:
        self._pending = value
        if self._timer is not None:
            self._timer.cancel()
        scheduler = self._scheduler or asyncio.get_running_loop()
        self._timer = scheduler.call_later(self.wait_seconds, self._on_timer)

    def cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._pending = _NOTHING

    async def flush(self) -> None:
        """Run the pending value now instead of waiting out the window."""
        value = self._take()
        if value is _NOTHING:
            await self.join()
            return
        await self._action(value)  # type: ignore[arg-type]

    async def join(self) -> None:
        if self._running is not None and not self._running.done():
            await asyncio.shield(self._running)

    def _take(self) -> object:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        value, self._pending = self._pending, _NOTHING
        return value

    def _on_timer(self) -> None:
        self._timer = None
        value, self._pending = self._pending, _NOTHING
        if value is _NOTHING:
            return
        task = asyncio.get_running_loop().create_task(self._action(value))  # type: ignore[arg-type]
        task.add_done_callback(self._log_failure)
        self._running = task

    @staticmethod
    def _log_failure(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                f"Debounced action failed: {exc}",
                exc_info=(type(exc), exc, exc.__traceback__),
            )
