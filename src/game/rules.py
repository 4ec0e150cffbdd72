"""
Pure game-state transitions.

Every function takes the current SessionState (plus the event data) and
returns a new SessionState; nothing here touches timers, I/O or the view.
"""

from __future__ import annotations

import math
import re
from dataclasses import replace

from .models import GameMode, Puzzle, SessionState

_STRIP_PATTERN = re.compile(r"[\s,]")

# A new level is reached on every third consecutive correct answer
LEVEL_UP_STREAK = 2

MODE_ROTATION = {
    0: GameMode.LOGIC,
    1: GameMode.SEQUENCE,
    2: GameMode.REVERSE,
}


def normalize_answer(text: str) -> str:
    """Remove every whitespace character and comma."""
    return _STRIP_PATTERN.sub("", text)


def is_correct(puzzle: Puzzle, raw_input: str) -> bool:
    """Case-sensitive equality of the normalized input and answer."""
    return normalize_answer(raw_input) == normalize_answer(puzzle.answer)


def points_for(state: SessionState) -> int:
    return 100 * state.level * (state.streak + 1)


def next_level(state: SessionState) -> int:
    """Level the next puzzle is requested at, given the pre-answer state."""
    return state.level + (1 if state.streak >= LEVEL_UP_STREAK else 0)


def rotate_mode(level: int) -> GameMode:
    return MODE_ROTATION[level % 3]


def apply_correct(state: SessionState) -> SessionState:
    """Award points, extend the streak and possibly level up."""
    return replace(
        state,
        score=state.score + points_for(state),
        streak=state.streak + 1,
        level=next_level(state),
        is_vibrating=True,
    )


def apply_wrong(state: SessionState) -> SessionState:
    """A miss breaks the streak; level is never demoted."""
    return replace(state, streak=0, is_vibrating=False)


def clear_vibration(state: SessionState) -> SessionState:
    return replace(state, is_vibrating=False)


def with_mode(state: SessionState, mode: GameMode) -> SessionState:
    return replace(state, mode=mode)


# =============================================================================
# Memorization timing
# =============================================================================


def memorization_seconds(
    sequence_length: int,
    per_item: float = 0.8,
    minimum: int = 3,
) -> int:
    """Countdown length for a sequence: ceil(max(minimum, length * per_item))."""
    # round() keeps float noise (e.g. 7 * 0.8) from bumping the ceiling
    return math.ceil(round(max(minimum, sequence_length * per_item), 9))


def progress_fraction(time_left: float, sequence_length: int, per_item: float = 0.8) -> float:
    """Remaining-time bar fraction, clamped to [0, 1]."""
    budget = sequence_length * per_item
    if budget <= 0:
        return 0.0
    return min(1.0, max(0.0, time_left / budget))
