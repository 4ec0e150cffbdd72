"""
Puzzle Requester.

Asks the generation service for a puzzle at a given level and mode.

Failure handling is deliberately asymmetric:
- transport failures are retried after a fixed delay, up to a cap
- a response that arrives but cannot be parsed is replaced by a fixed
  fallback puzzle, without retrying

Usage:
    requester = PuzzleRequester(create_transport())
    puzzle = await requester.fetch_puzzle(level=3, mode=GameMode.LOGIC)
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable

from loguru import logger
from pydantic import ValidationError

from config import Settings, get_settings
from src.game.models import FALLBACK_PUZZLE, GameMode, Puzzle

from .errors import PuzzleUnavailableError, TransportError
from .prompts import get_prompt, get_system_prompt
from .schemas import get_generation_config
from .transports import PuzzleTransport

RETRY_STATUS = "Connection to Neural Network failed. Retrying..."


def parse_puzzle(text: str | None) -> Puzzle | None:
    """Parse a JSON response body into a Puzzle; None if it is not one."""
    if not text or not text.strip():
        return None
    try:
        return Puzzle.model_validate_json(text)
    except ValidationError as e:
        # covers invalid JSON as well as missing/mistyped fields
        logger.debug(f"Puzzle payload rejected: {e.error_count()} validation error(s)")
        return None


class PuzzleRequester:
    """
    Fetches puzzles from the generation service.

    Retries transport failures with a fixed delay. Cancel the awaiting task
    to abort a retry loop.
    """

    def __init__(
        self,
        transport: PuzzleTransport,
        retry_delay: float | None = None,
        max_attempts: int | None = None,
        temperature: float | None = None,
        settings: Settings | None = None,
    ):
        settings = settings or get_settings()
        self.transport = transport
        self.retry_delay = settings.retry_delay_seconds if retry_delay is None else retry_delay
        self.max_attempts = settings.max_fetch_attempts if max_attempts is None else max_attempts
        self.temperature = settings.ai_temperature if temperature is None else temperature

        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    async def close(self) -> None:
        await self.transport.close()

    async def fetch_puzzle(
        self,
        level: int,
        mode: GameMode,
        on_status: Callable[[str], None] | None = None,
    ) -> Puzzle:
        """
        Request a puzzle for level/mode.

        Args:
            level: Difficulty level (>= 1)
            mode: Generation policy
            on_status: Called with a transient status message before each retry

        Returns:
            The parsed Puzzle, or FALLBACK_PUZZLE if the response was unparseable

        Raises:
            PuzzleUnavailableError: All attempts failed at the transport level
        """
        if level < 1:
            raise ValueError(f"level must be >= 1, got {level}")

        system_instruction = get_system_prompt(level)
        prompt = get_prompt(level, mode)
        generation_config = get_generation_config(self.temperature)
        last_error: Exception | None = None

        for attempt in range(1, self.max_attempts + 1):
            logger.debug(f"Requesting level {level} {mode.value} puzzle (attempt {attempt})")
            try:
                text = await self.transport.generate(system_instruction, prompt, generation_config)
            except TransportError as e:
                last_error = e
                logger.warning(
                    f"Puzzle request failed on attempt {attempt}/{self.max_attempts}: {e}"
                )
                if attempt < self.max_attempts:
                    if on_status:
                        on_status(RETRY_STATUS)
                    await asyncio.sleep(self.retry_delay)
                continue

            puzzle = parse_puzzle(text)
            if puzzle is None:
                logger.warning("Failed to parse puzzle, using fallback puzzle")
                return FALLBACK_PUZZLE

            logger.info(f"Received level {level} {mode.value} puzzle ({len(puzzle.sequence)} numbers)")
            return puzzle

        logger.error(f"Giving up after {self.max_attempts} attempts: {last_error}")
        raise PuzzleUnavailableError(self.max_attempts, last_error)


def puzzle_to_json(puzzle: Puzzle) -> str:
    """Pretty JSON for display/export."""
    return json.dumps(puzzle.model_dump(mode="json"), indent=2)
