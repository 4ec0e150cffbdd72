"""LLM-based puzzle generation.

Pipeline:
1. Build the system instruction and prompt for a level/mode
2. Gemini generates a puzzle constrained by PUZZLE_SCHEMA
3. The response is parsed into a Puzzle (fallback puzzle if unparseable)

Usage:
    from src.generation import PuzzleRequester, create_transport

    requester = PuzzleRequester(create_transport())
    puzzle = await requester.fetch_puzzle(level=1, mode=GameMode.SEQUENCE)
"""
from src.generation.errors import GenerationError, PuzzleUnavailableError, TransportError
from src.generation.puzzle_requester import PuzzleRequester, parse_puzzle
from src.generation.transports import (
    GeminiRestTransport,
    GeminiSdkTransport,
    PuzzleTransport,
    create_transport,
)

__all__ = [
    "GenerationError",
    "TransportError",
    "PuzzleUnavailableError",
    "PuzzleRequester",
    "parse_puzzle",
    "PuzzleTransport",
    "GeminiSdkTransport",
    "GeminiRestTransport",
    "create_transport",
]
