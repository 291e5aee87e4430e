# src/config/settings.py — v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for all deployment-specific settings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === DESIGN DOCUMENT SERVICE (Figma REST API) ===
    figma_api_token: str = ""
    figma_api_base_url: str = "https://api.figma.com/v1"
    figma_request_timeout_s: float = 60.0

    # === Cache ===
    cache_backend: Literal["json", "memory"] = "json"
    cache_root: Path = Path("~/.designscan/cache")

    # === Annotation association ===
    note_max_distance: float = 500.0

    # === Artifact ordering ===
    row_tolerance: float = 50.0

    # === Digest ===
    digest_max_bytes: int = 200_000

    # === Image rendering ===
    image_format: Literal["png", "jpg"] = "png"
    image_scale: float = 1.0

    # === Text generation ===
    llm_provider: str = "anthropic"
    llm_model: str = "claude-sonnet-4-20250514"
    analysis_max_tokens: int = 2000
    anthropic_api_key: str = ""
    openai_api_key: str = ""

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("digest_max_bytes")
    @classmethod
    def validate_digest_max_bytes(cls, v: int) -> int:  # noqa: N805
        if v <= 0:
            raise ValueError("digest_max_bytes must be > 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.note_max_distance < 0:
            errors.append("NOTE_MAX_DISTANCE must be >= 0")

        if self.row_tolerance < 0:
            errors.append("ROW_TOLERANCE must be >= 0")

        if not 0 < self.image_scale <= 4:
            errors.append("IMAGE_SCALE must be in (0, 4]")

        if self.cache_backend == "json" and not str(self.cache_root).strip():
            errors.append("CACHE_ROOT must be set when CACHE_BACKEND=json")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self


def load_settings(**overrides: object) -> Settings:
    """Load settings from environment / .env with optional overrides.

    Args:
        **overrides: Field values taking precedence over the environment.

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
