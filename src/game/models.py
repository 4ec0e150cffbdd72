"""
Domain models for the NeurOn memory game.

- GameMode: which generation policy the puzzle follows
- Puzzle: one memorize-and-recall challenge returned by the generator
- SessionState: score/level/streak bookkeeping for a single session
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class GameMode(str, Enum):
    """Puzzle generation policy."""

    SEQUENCE = "SEQUENCE"  # memorize forward
    LOGIC = "LOGIC"  # derive the pattern
    REVERSE = "REVERSE"  # memorize, recall reversed

    def heading(self, memorizing: bool) -> str:
        """Heading shown above the puzzle."""
        if not memorizing:
            return "Enter Recall Sequence"
        if self is GameMode.REVERSE:
            return "Memorize (Recall Reverse!)"
        return "Memorize Sequence"

    @property
    def instruction(self) -> str:
        if self is GameMode.LOGIC:
            return "Analyze the sequence carefully to find the logic."
        return "Store these numbers in your phonological loop."


class Puzzle(BaseModel):
    """A puzzle as produced by the generation service. Immutable."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    question: str = Field(description="Instruction shown during recall")
    answer: str = Field(description="Canonical answer, compared after normalization")
    sequence: tuple[int | float, ...] = Field(description="Numbers to memorize")
    explanation: str = Field(description="Shown only after a wrong answer")
    hints: tuple[str, ...] = Field(max_length=2, description="Up to 2 hints")


FALLBACK_PUZZLE = Puzzle(
    question="Enter the next number: 1, 2, 3...",
    answer="4",
    sequence=(1, 2, 3),
    explanation="Simple increment.",
    hints=("Count up",),
)


@dataclass(frozen=True)
class SessionState:
    """Per-session game state. Replaced, never mutated."""

    score: int = 0
    level: int = 1
    streak: int = 0
    mode: GameMode = GameMode.SEQUENCE
    is_vibrating: bool = False
