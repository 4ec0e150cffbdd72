"""
LLM prompts for puzzle generation.

The system instruction carries the persona, the three mode policies and the
difficulty level; the user prompt only names the level and mode.
"""
from __future__ import annotations

from src.game.models import GameMode

# =============================================================================
# Mode Policies
# =============================================================================

MODE_POLICIES = {
    GameMode.SEQUENCE: (
        "Create a memorization challenge. High levels mean longer and more "
        "complex groupings."
    ),
    GameMode.LOGIC: (
        "Create a number series with a complex pattern (e.g., Fibonacci-based, "
        "prime offsets, multi-step arithmetic)."
    ),
    GameMode.REVERSE: "A sequence that must be recalled in reverse order.",
}

# =============================================================================
# System Prompt
# =============================================================================

SYSTEM_PROMPT_TEMPLATE = """You are a cognitive neuroscientist and numerical puzzle expert.
Your goal is to create "brain-vibrating" numerical challenges that push the boundaries of short-term memory and IQ.

Modes:
{modes}

Difficulty: Level {level}. Scale complexity exponentially.

Output JSON format only."""


def get_system_prompt(level: int) -> str:
    """System instruction for a puzzle at the given level."""
    modes = "\n".join(
        f"{i}. {mode.value}: {MODE_POLICIES[mode]}" for i, mode in enumerate(GameMode, start=1)
    )
    return SYSTEM_PROMPT_TEMPLATE.format(modes=modes, level=level)


def get_prompt(level: int, mode: GameMode) -> str:
    return f"Generate a level {level} {mode.value} puzzle."
