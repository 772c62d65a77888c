# src/config/settings.py — v3
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for deployment-specific settings: LLM provider,
digest budget defaults, report refresh policy, cache backend and logging.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from notedigest.core.models import DigestBudget


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


_NON_NEGATIVE_FIELDS = (
    "digest_limit",
    "digest_max_notes",
    "digest_max_total_chars",
    "digest_max_snippet_chars",
    "digest_max_heading_count",
    "digest_max_bullet_count",
    "digest_max_heading_chars",
    "digest_max_bullet_chars",
    "digest_max_paragraph_count",
    "digest_max_paragraph_chars",
    "min_new_notes",
)


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === LLM PROVIDERS ===
    llm_default_provider: Literal["deepseek", "gemini", "openai"] = "deepseek"
    llm_default_model: str = ""
    llm_temperature: float = 0.2
    llm_max_tokens: int = 4096

    # Provider API keys
    deepseek_api_key: str = ""
    deepseek_base_url: str = "https://api.deepseek.com/v1"
    gemini_api_key: str = ""
    openai_api_key: str = ""

    # === Digest budget (app defaults) ===
    digest_limit: int = 20
    digest_max_notes: int = 20
    digest_max_total_chars: int = 6000
    digest_max_snippet_chars: int = 260
    digest_max_heading_count: int = 6
    digest_max_bullet_count: int = 8
    digest_max_heading_chars: int = 60
    digest_max_bullet_chars: int = 80
    digest_max_paragraph_count: int = 3
    digest_max_paragraph_chars: int = 120

    # === Recent focus report ===
    refresh_interval_s: int = 24 * 60 * 60
    min_new_notes: int = 3

    # === Cache ===
    cache_backend: Literal["json", "sqlite", "redis"] = "json"
    cache_root: Path = Path("~/.notedigest/cache")
    cache_redis_url: str = ""

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 5

    # --- Validators ---

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        # V-01
        if self.cache_backend == "redis" and not self.cache_redis_url:
            errors.append("CACHE_BACKEND=redis requires CACHE_REDIS_URL")

        # V-02
        if self.refresh_interval_s <= 0:
            errors.append("REFRESH_INTERVAL_S must be > 0")

        # V-03
        if self.llm_default_provider == "deepseek" and not self.deepseek_base_url:
            errors.append("DEEPSEEK_BASE_URL must be set for the deepseek provider")

        # V-04
        for name in _NON_NEGATIVE_FIELDS:
            if getattr(self, name) < 0:
                errors.append(f"{name.upper()} must be >= 0")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    def digest_budget(self) -> DigestBudget:
        """Build the app-level digest budget from the digest_* settings."""
        return DigestBudget(
            max_notes=self.digest_max_notes,
            max_total_chars=self.digest_max_total_chars,
            max_snippet_chars=self.digest_max_snippet_chars,
            max_heading_count=self.digest_max_heading_count,
            max_bullet_count=self.digest_max_bullet_count,
            max_heading_chars=self.digest_max_heading_chars,
            max_bullet_chars=self.digest_max_bullet_chars,
            max_paragraph_count=self.digest_max_paragraph_count,
            max_paragraph_chars=self.digest_max_paragraph_chars,
        )


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or CLI flags).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent or a
            value does not parse as its declared type.
    """
    try:
        return Settings(**overrides)  # type: ignore[arg-type]
    except ValidationError as e:
        raise ConfigurationError(str(e)) from e
