# src/config/settings.py — v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for credentials, cascade order, cache tiers and
logging. Credentials are read, not validated: an empty key only makes the
matching provider adapter skip itself.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from agenticad.cache.fingerprint import IMAGE_PREFIX_CHARS, TEXT_PREFIX_CHARS
from agenticad.cache.policy import DAY_MS, HOUR_MS

KNOWN_PROVIDERS = ("openai", "google")


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === ANALYSIS PROVIDERS ===
    provider_order: str = "openai,google"
    provider_timeout_s: float = 30.0

    # Primary: OpenAI (direct, or through a passthrough gateway)
    openai_api_key: str = ""
    openai_model: str = "gpt-4o"
    openai_base_url: str = ""
    openai_temperature: float = 0.3
    openai_max_tokens: int = 2000
    pica_secret_key: str = ""
    pica_openai_connection_key: str = ""
    pica_openai_action_id: str = ""

    # Secondary: Google Gemini
    google_api_key: str = ""
    gemini_model: str = "gemini-1.5-flash"

    # Speech: ElevenLabs
    elevenlabs_api_key: str = ""
    elevenlabs_base_url: str = "https://api.elevenlabs.io"
    elevenlabs_default_voice_id: str = "EXAVITQu4vr4xnSDxMaL"
    elevenlabs_model_id: str = "eleven_multilingual_v2"
    speech_max_chars: int = 1000

    # === Cache ===
    cache_enabled: bool = True
    cache_backend: Literal["memory", "json", "sqlite", "redis"] = "sqlite"
    cache_root: Path = Path("~/.agenticad/cache")
    cache_redis_url: str = ""
    cache_remote_url: str = ""
    cache_remote_key: str = ""
    cache_remote_table: str = "cache_entries"
    cache_remote_timeout_s: float = 10.0
    cache_user_id: str = ""
    text_prefix_chars: int = TEXT_PREFIX_CHARS
    image_prefix_chars: int = IMAGE_PREFIX_CHARS

    # TTLs (milliseconds)
    cache_ttl_text_primary_ms: int = DAY_MS
    cache_ttl_text_secondary_ms: int = DAY_MS
    cache_ttl_image_primary_ms: int = 7 * DAY_MS
    cache_ttl_image_secondary_ms: int = 3 * DAY_MS
    cache_ttl_heuristic_ms: int = HOUR_MS
    cache_ttl_voice_ms: int = 30 * DAY_MS
    cache_ttl_model_ms: int = 7 * DAY_MS

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator(
        "cache_ttl_text_primary_ms",
        "cache_ttl_text_secondary_ms",
        "cache_ttl_image_primary_ms",
        "cache_ttl_image_secondary_ms",
        "cache_ttl_heuristic_ms",
        "cache_ttl_voice_ms",
        "cache_ttl_model_ms",
        "text_prefix_chars",
        "image_prefix_chars",
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be > 0")
        return v

    @field_validator("provider_timeout_s")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("provider_timeout_s must be > 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        unknown = [p for p in self.provider_order_list if p not in KNOWN_PROVIDERS]
        if unknown:
            errors.append(
                f"PROVIDER_ORDER has unknown providers: {', '.join(unknown)}"
            )
        if len(set(self.provider_order_list)) != len(self.provider_order_list):
            errors.append("PROVIDER_ORDER lists a provider twice")

        if self.cache_backend == "redis" and not self.cache_redis_url:
            errors.append("CACHE_BACKEND=redis requires CACHE_REDIS_URL")

        if self.cache_remote_url and not self.cache_remote_key:
            errors.append("CACHE_REMOTE_URL requires CACHE_REMOTE_KEY")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def provider_order_list(self) -> list[str]:
        """Parse comma-separated provider cascade order."""
        return [p.strip() for p in self.provider_order.split(",") if p.strip()]

    @property
    def uses_openai_gateway(self) -> bool:
        return bool(self.pica_secret_key and self.pica_openai_connection_key)


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or tooling).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
