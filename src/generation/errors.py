"""
Errors raised while talking to the puzzle generation service.
"""

from __future__ import annotations


class GenerationError(Exception):
    """Base class for puzzle generation failures."""


class TransportError(GenerationError):
    """The generation service could not be reached or returned an error."""


class PuzzleUnavailableError(GenerationError):
    """Every fetch attempt failed at the transport level."""

    def __init__(self, attempts: int, last_error: Exception | None = None):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Puzzle generation failed after {attempts} attempts: {last_error}")
