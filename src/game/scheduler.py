"""
Delayed continuations with explicit cancellation handles.

Every delayed callback the controller schedules goes through a Scheduler so
that a puzzle replacement or view teardown can drop all of them at once.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

from loguru import logger


class ScheduledTask:
    """Cancellation handle for one delayed callback."""

    def __init__(self, name: str, handle: asyncio.TimerHandle):
        self.name = name
        self._handle = handle
        self.fired = False

    @property
    def cancelled(self) -> bool:
        return self._handle.cancelled()

    @property
    def pending(self) -> bool:
        return not self.fired and not self.cancelled

    def cancel(self) -> None:
        if self.pending:
            self._handle.cancel()
            logger.debug(f"Cancelled scheduled task '{self.name}'")


class Scheduler:
    """Owns the delayed callbacks of one game controller."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop
        self._tasks: list[ScheduledTask] = []

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(
        self,
        delay: float,
        callback: Callable[..., Any],
        *args: Any,
        name: str | None = None,
    ) -> ScheduledTask:
        """Run callback(*args) after delay seconds; returns its handle."""
        task: ScheduledTask

        def _run() -> None:
            task.fired = True
            self._tasks.remove(task)
            callback(*args)

        handle = self.loop.call_later(delay, _run)
        task = ScheduledTask(name or getattr(callback, "__name__", "callback"), handle)
        self._tasks.append(task)
        return task

    @property
    def pending(self) -> list[ScheduledTask]:
        return [t for t in self._tasks if t.pending]

    def cancel_all(self) -> None:
        """Cancel every callback that has not fired yet."""
        for task in self._tasks:
            task.cancel()
        self._tasks.clear()
