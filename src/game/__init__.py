"""
Game Module - session state, rules and the controller.

Components:
- models: GameMode, Puzzle, SessionState
- rules: pure state transitions (scoring, streaks, mode rotation, timing)
- timer: memorization countdown
- scheduler: cancellable delayed continuations
- controller: GameController orchestrating a play session
"""

from src.game.models import FALLBACK_PUZZLE, GameMode, Puzzle, SessionState

__all__ = [
    "FALLBACK_PUZZLE",
    "GameMode",
    "Puzzle",
    "SessionState",
]
