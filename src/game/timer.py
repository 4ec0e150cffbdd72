"""
Memorization countdown.

Two states, RUNNING and STOPPED. Runs as a single asyncio task ticking once
per `tick_seconds`; fires `on_end` exactly once when the countdown reaches
zero. A cancelled timer never fires `on_end`.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from enum import Enum

from loguru import logger

from .rules import memorization_seconds, progress_fraction


class TimerState(str, Enum):
    RUNNING = "running"
    STOPPED = "stopped"


class MemorizationTimer:
    """Countdown for the memorization phase of one puzzle."""

    def __init__(
        self,
        sequence_length: int,
        on_end: Callable[[], None] | None = None,
        on_tick: Callable[[int], None] | None = None,
        tick_seconds: float = 1.0,
        per_item: float = 0.8,
        minimum: int = 3,
    ):
        self.sequence_length = sequence_length
        self.per_item = per_item
        self.duration = memorization_seconds(sequence_length, per_item, minimum)
        self.time_left = self.duration
        self.tick_seconds = tick_seconds
        self.state = TimerState.STOPPED
        self._on_end = on_end
        self._on_tick = on_tick
        self._task: asyncio.Task | None = None
        self._used = False
        self.expired = False

    @property
    def running(self) -> bool:
        return self.state is TimerState.RUNNING

    @property
    def progress(self) -> float:
        return progress_fraction(self.time_left, self.sequence_length, self.per_item)

    def start(self) -> None:
        """Begin the countdown. A timer runs at most once."""
        if self._used:
            raise RuntimeError("MemorizationTimer cannot be restarted; create a new one")
        self._used = True
        self.state = TimerState.RUNNING
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.debug(f"Memorization timer started ({self.duration}s)")

    async def _run(self) -> None:
        while self.time_left > 0:
            await asyncio.sleep(self.tick_seconds)
            self.time_left -= 1
            if self.time_left > 0 and self._on_tick:
                self._on_tick(self.time_left)

        self.state = TimerState.STOPPED
        self.expired = True
        self._task = None
        if self._on_end:
            self._on_end()

    def cancel(self) -> None:
        """Stop without firing on_end. Safe to call repeatedly."""
        if self._task is not None:
            self._task.cancel()
            self._task = None
        self.state = TimerState.STOPPED

    async def wait(self) -> None:
        """Wait for the countdown to finish or be cancelled."""
        task = self._task
        if task is None:
            return
        try:
            await asyncio.shield(task)
        except asyncio.CancelledError:
            if not task.cancelled():
                raise
