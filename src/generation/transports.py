"""
Gemini transports for puzzle generation.

Two interchangeable clients behind the PuzzleTransport protocol:
- GeminiSdkTransport: google-generativeai, run in a worker thread
- GeminiRestTransport: generateContent over httpx.AsyncClient

Both return the raw response text. Anything that goes wrong before a
response body exists is raised as TransportError; interpreting the body is
the requester's job.
"""

from __future__ import annotations

import asyncio
from typing import Any, Protocol

import httpx
from loguru import logger

from config import Settings, get_settings

from .errors import TransportError
from .schemas import to_rest_generation_config


class PuzzleTransport(Protocol):
    """Protocol for generation service clients."""

    async def generate(
        self,
        system_instruction: str,
        prompt: str,
        generation_config: dict[str, Any],
    ) -> str:
        """Send one generation request and return the response text."""
        ...

    async def close(self) -> None:
        """Release network resources."""
        ...


class GeminiSdkTransport:
    """google-generativeai client. The SDK is synchronous, so calls go to a thread."""

    def __init__(self, api_key: str | None, model_name: str):
        if not api_key:
            raise ValueError("Gemini API key required")
        self.api_key = api_key
        self.model_name = model_name
        self._genai = None

    @property
    def genai(self):
        """Lazy-load and configure the SDK."""
        if self._genai is None:
            import google.generativeai as genai

            genai.configure(api_key=self.api_key)
            self._genai = genai
        return self._genai

    def _generate_sync(self, system_instruction: str, prompt: str, generation_config: dict) -> str:
        model = self.genai.GenerativeModel(
            model_name=self.model_name,
            system_instruction=system_instruction,
        )
        response = model.generate_content(prompt, generation_config=generation_config)
        try:
            return response.text or ""
        except ValueError:
            # .text raises when the candidate has no parts (e.g. blocked output)
            logger.warning("Gemini response carried no text parts")
            return ""

    async def generate(
        self,
        system_instruction: str,
        prompt: str,
        generation_config: dict[str, Any],
    ) -> str:
        try:
            return await asyncio.to_thread(
                self._generate_sync, system_instruction, prompt, generation_config
            )
        except Exception as e:
            raise TransportError(f"Gemini SDK call failed: {e}") from e

    async def close(self) -> None:
        return None


class GeminiRestTransport:
    """Gemini generateContent endpoint over httpx."""

    def __init__(
        self,
        api_key: str | None,
        model_name: str,
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout_seconds: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ):
        if not api_key:
            raise ValueError("Gemini API key required")
        self.model_name = model_name
        self.client = client or httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={
                "Content-Type": "application/json",
                "x-goog-api-key": api_key,
            },
            timeout=httpx.Timeout(timeout_seconds),
        )

    async def __aenter__(self) -> "GeminiRestTransport":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self.client.aclose()

    def build_payload(
        self,
        system_instruction: str,
        prompt: str,
        generation_config: dict[str, Any],
    ) -> dict[str, Any]:
        return {
            "systemInstruction": {"parts": [{"text": system_instruction}]},
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": to_rest_generation_config(generation_config),
        }

    async def generate(
        self,
        system_instruction: str,
        prompt: str,
        generation_config: dict[str, Any],
    ) -> str:
        payload = self.build_payload(system_instruction, prompt, generation_config)
        try:
            response = await self.client.post(
                f"/models/{self.model_name}:generateContent",
                json=payload,
            )
            response.raise_for_status()
            data = response.json()

        except httpx.HTTPStatusError as e:
            raise TransportError(f"Gemini returned HTTP {e.response.status_code}") from e
        except httpx.RequestError as e:
            raise TransportError(f"Connection error talking to Gemini: {e}") from e
        except ValueError as e:
            raise TransportError(f"Gemini returned a non-JSON envelope: {e}") from e

        return extract_text(data)


def extract_text(data: Any) -> str:
    """Concatenate the text parts of the first candidate ('' when absent or malformed)."""
    try:
        candidates = data.get("candidates") or []
        if not candidates:
            return ""
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(part.get("text") or "" for part in parts)
    except (AttributeError, TypeError, IndexError, KeyError):
        logger.warning(f"Unexpected Gemini response shape: {str(data)[:200]}")
        return ""


def create_transport(settings: Settings | None = None) -> PuzzleTransport:
    """Build the transport selected by `ai_transport`."""
    settings = settings or get_settings()
    if settings.ai_transport == "rest":
        return GeminiRestTransport(
            api_key=settings.gemini_api_key,
            model_name=settings.ai_model,
            base_url=settings.gemini_api_base_url,
            timeout_seconds=settings.request_timeout_seconds,
        )
    return GeminiSdkTransport(api_key=settings.gemini_api_key, model_name=settings.ai_model)
