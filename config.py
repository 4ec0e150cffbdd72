"""
Configuration settings for the NeurOn memory trainer.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # AI Integration (puzzle generation)
    # ========================================
    gemini_api_key: str | None = Field(
        default=None,
        description="Google Generative AI (Gemini) API key",
    )
    ai_model: str = Field(
        default="gemini-3-flash-preview",
        description="Gemini model used to generate puzzles",
    )
    ai_transport: Literal["sdk", "rest"] = Field(
        default="sdk",
        description="Gemini client: google-generativeai SDK or raw REST over httpx",
    )
    gemini_api_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Base URL for the Gemini REST API",
    )
    ai_temperature: float = Field(
        default=1.0,
        ge=0.0,
        le=2.0,
        description="Generation temperature",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for a single REST generation call",
    )

    # ========================================
    # Retry Behavior
    # ========================================
    retry_delay_seconds: float = Field(
        default=3.0,
        ge=0,
        description="Fixed delay between puzzle fetch attempts",
    )
    max_fetch_attempts: int = Field(
        default=100,
        ge=1,
        description="Attempts before giving up on the generation service",
    )

    # ========================================
    # Game Timing
    # ========================================
    memorize_seconds_per_item: float = Field(
        default=0.8,
        gt=0,
        description="Memorization time granted per displayed number",
    )
    memorize_min_seconds: int = Field(
        default=3,
        ge=1,
        description="Minimum memorization time",
    )
    success_delay_seconds: float = Field(
        default=1.5,
        ge=0,
        description="Pause after a correct answer before the next puzzle",
    )
    vibration_seconds: float = Field(
        default=0.5,
        ge=0,
        description="How long the success vibration flag stays set",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )

    # ========================================
    # Helper Methods
    # ========================================
    def has_ai_configured(self) -> bool:
        """Check if the Gemini API key is available."""
        return bool(self.gemini_api_key)

    def masked_api_key(self) -> str:
        """API key with all but the last four characters hidden (fully hidden when that short)."""
        if not self.gemini_api_key:
            return "(not set)"
        if len(self.gemini_api_key) <= 4:
            return "*" * len(self.gemini_api_key)
        return "*" * max(0, len(self.gemini_api_key) - 4) + self.gemini_api_key[-4:]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
