"""
Game Controller: orchestration layer for a play session.

Owns the SessionState, the current Puzzle, the memorization timer and every
delayed continuation. State changes go through the pure functions in
src.game.rules; the controller only decides when they happen.

Phases:
    IDLE -> LOADING -> MEMORIZING -> RECALL -> FEEDBACK -> LOADING ...
                                          \\-> EXPLANATION -> (retry) LOADING
    LOADING -> OFFLINE (retry cap exhausted) -> (retry) LOADING
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from loguru import logger

from config import Settings, get_settings
from src.generation.errors import PuzzleUnavailableError
from src.generation.puzzle_requester import PuzzleRequester

from . import rules
from .models import GameMode, Puzzle, SessionState
from .scheduler import Scheduler
from .timer import MemorizationTimer

LOADING_MESSAGE = "Synthesizing Neural Patterns..."
SUCCESS_MESSAGE = "Correct! Neural Pathway Reinforced."
FAILURE_MESSAGE = "Incorrect. Cognitive Dissonance Detected."
OFFLINE_MESSAGE = "Neural Network unreachable."


class Phase(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    MEMORIZING = "memorizing"
    RECALL = "recall"
    FEEDBACK = "feedback"
    EXPLANATION = "explanation"
    OFFLINE = "offline"
    CLOSED = "closed"


class FeedbackKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


@dataclass(frozen=True)
class Feedback:
    """Transient message shown under the puzzle."""

    message: str
    kind: FeedbackKind


class GameController:
    """
    Drives one session of the memory game.

    Must be used from inside a running asyncio event loop. Call close() when
    the view goes away; it cancels the timer, pending continuations and any
    in-flight puzzle request.
    """

    def __init__(
        self,
        requester: PuzzleRequester,
        state: SessionState | None = None,
        on_change: Callable[["GameController"], None] | None = None,
        settings: Settings | None = None,
        tick_seconds: float = 1.0,
    ):
        settings = settings or get_settings()
        self.requester = requester
        self.state = state or SessionState()
        self.on_change = on_change
        self.tick_seconds = tick_seconds
        self.success_delay = settings.success_delay_seconds
        self.vibration_delay = settings.vibration_seconds
        self.memorize_per_item = settings.memorize_seconds_per_item
        self.memorize_minimum = settings.memorize_min_seconds

        self.phase = Phase.IDLE
        self.puzzle: Puzzle | None = None
        self.feedback: Feedback | None = None
        self.user_input = ""
        self.timer: MemorizationTimer | None = None

        self._scheduler = Scheduler()
        self._fetch_task: asyncio.Task | None = None
        self._changed = asyncio.Event()

    # =========================================================================
    # Notifications
    # =========================================================================

    def _notify(self) -> None:
        changed, self._changed = self._changed, asyncio.Event()
        changed.set()
        if self.on_change:
            self.on_change(self)

    def _set_phase(self, phase: Phase) -> None:
        if phase is not self.phase:
            logger.debug(f"Phase {self.phase.value} -> {phase.value}")
        self.phase = phase

    async def wait_for(self, *phases: Phase) -> Phase:
        """Wait until the controller reaches one of the given phases."""
        while self.phase not in phases:
            if self.phase is Phase.CLOSED:
                raise RuntimeError("GameController is closed")
            await self._changed.wait()
        return self.phase

    # =========================================================================
    # Puzzle lifecycle
    # =========================================================================

    def start(self) -> asyncio.Task:
        """Request the first puzzle at the current level and mode."""
        return self.request_puzzle(self.state.level, self.state.mode)

    def request_puzzle(self, level: int, mode: GameMode) -> asyncio.Task:
        """Drop the current puzzle and fetch a new one in the background."""
        if self.phase is Phase.CLOSED:
            raise RuntimeError("GameController is closed")

        self._release_puzzle()
        self.feedback = Feedback(LOADING_MESSAGE, FeedbackKind.INFO)
        self._set_phase(Phase.LOADING)
        self._fetch_task = asyncio.get_running_loop().create_task(self._fetch(level, mode))
        self._notify()
        return self._fetch_task

    async def _fetch(self, level: int, mode: GameMode) -> Puzzle | None:
        try:
            puzzle = await self.requester.fetch_puzzle(level, mode, on_status=self._on_fetch_status)
        except PuzzleUnavailableError as e:
            logger.error(f"No puzzle available: {e}")
            self._go_offline()
            return None
        except Exception:
            logger.exception("Puzzle request failed unexpectedly")
            self._go_offline()
            return None

        self._fetch_task = None
        self._begin_memorization(puzzle)
        return puzzle

    def _go_offline(self) -> None:
        self._fetch_task = None
        self.feedback = Feedback(OFFLINE_MESSAGE, FeedbackKind.ERROR)
        self._set_phase(Phase.OFFLINE)
        self._notify()

    def _on_fetch_status(self, message: str) -> None:
        self.feedback = Feedback(message, FeedbackKind.ERROR)
        self._notify()

    def _begin_memorization(self, puzzle: Puzzle) -> None:
        self.puzzle = puzzle
        self.feedback = None
        self.user_input = ""
        self.timer = MemorizationTimer(
            len(puzzle.sequence),
            on_end=self.begin_recall,
            on_tick=lambda _: self._notify(),
            tick_seconds=self.tick_seconds,
            per_item=self.memorize_per_item,
            minimum=self.memorize_minimum,
        )
        self._set_phase(Phase.MEMORIZING)
        self.timer.start()
        self._notify()

    def begin_recall(self) -> None:
        """End memorization (timer expiry or user skip) and accept input."""
        if self.phase is not Phase.MEMORIZING:
            return
        if self.timer is not None:
            self.timer.cancel()
        self.user_input = ""
        self._set_phase(Phase.RECALL)
        self._notify()

    def _release_puzzle(self) -> None:
        """Cancel everything bound to the current puzzle."""
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None
        self._scheduler.cancel_all()
        if self.state.is_vibrating:
            self.state = rules.clear_vibration(self.state)
        if self._fetch_task is not None:
            self._fetch_task.cancel()
            self._fetch_task = None

    # =========================================================================
    # User actions
    # =========================================================================

    def submit_answer(self, raw_input: str) -> bool | None:
        """
        Grade the recalled answer.

        Returns:
            True/False for a graded answer, None if no answer is expected now
        """
        if self.puzzle is None or self.phase is not Phase.RECALL:
            logger.debug(f"Ignoring answer submitted during {self.phase.value}")
            return None

        self.user_input = raw_input
        previous = self.state

        if rules.is_correct(self.puzzle, raw_input):
            self.state = rules.apply_correct(previous)
            logger.info(
                f"Correct answer: +{self.state.score - previous.score} points, "
                f"streak {self.state.streak}, level {self.state.level}"
            )
            self.feedback = Feedback(SUCCESS_MESSAGE, FeedbackKind.SUCCESS)
            self._set_phase(Phase.FEEDBACK)
            self._scheduler.call_later(self.vibration_delay, self._stop_vibration)
            self._scheduler.call_later(
                self.success_delay,
                self._advance,
                rules.next_level(previous),
                rules.rotate_mode(previous.level),
            )
            self._notify()
            return True

        self.state = rules.apply_wrong(previous)
        logger.info(f"Wrong answer at level {self.state.level}; streak reset")
        self.feedback = Feedback(FAILURE_MESSAGE, FeedbackKind.ERROR)
        self._set_phase(Phase.EXPLANATION)
        self._notify()
        return False

    def _stop_vibration(self) -> None:
        self.state = rules.clear_vibration(self.state)
        self._notify()

    def _advance(self, level: int, mode: GameMode) -> None:
        self.feedback = None
        self.state = rules.with_mode(self.state, mode)
        self.request_puzzle(level, mode)

    def retry(self) -> asyncio.Task | None:
        """Leave the explanation (or offline) view and fetch a fresh puzzle."""
        if self.phase not in (Phase.EXPLANATION, Phase.OFFLINE):
            return None
        self.feedback = None
        self.user_input = ""
        return self.request_puzzle(self.state.level, self.state.mode)

    def close(self) -> None:
        """Tear down: no timer, continuation or request survives this."""
        self._release_puzzle()
        self._set_phase(Phase.CLOSED)
        self._notify()
