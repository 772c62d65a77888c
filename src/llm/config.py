# src/llm/config.py — v2
"""Provider and model resolution for the report generator.

Resolution order:
  1. Explicit provider:model override (CLI flag)
  2. LLM_DEFAULT_PROVIDER + LLM_DEFAULT_MODEL
  3. Provider's built-in default model
"""

from __future__ import annotations

from dataclasses import dataclass

from notedigest.config.settings import Settings

DEFAULT_MODELS: dict[str, str] = {
    "deepseek": "deepseek-chat",
    "gemini": "gemini-2.0-flash",
    "openai": "gpt-4o-mini",
}


@dataclass(frozen=True)
class LLMAssignment:
    """Resolved LLM provider:model."""

    provider: str
    model: str
    source: str  # "override", "default", or "builtin"

    @property
    def key(self) -> str:
        """Return 'provider:model' string."""
        return f"{self.provider}:{self.model}"


def parse_assignment(value: str) -> tuple[str, str] | None:
    """Parse 'provider:model' (or a bare 'provider'). Returns None if empty."""
    value = value.strip()
    if not value:
        return None
    if ":" not in value:
        return (value, "")
    provider, model = value.split(":", 1)
    return (provider.strip(), model.strip())


def resolve_llm(settings: Settings, override: str = "") -> LLMAssignment:
    """Resolve the provider and model used for report generation.

    Args:
        settings: Application settings.
        override: Optional 'provider:model' or 'provider' string.

    Returns:
        Resolved LLMAssignment.
    """
    parsed = parse_assignment(override)
    if parsed:
        provider, model = parsed
        return LLMAssignment(
            provider=provider,
            model=model or DEFAULT_MODELS.get(provider, ""),
            source="override",
        )

    provider = settings.llm_default_provider
    if settings.llm_default_model:
        return LLMAssignment(provider=provider, model=settings.llm_default_model, source="default")

    return LLMAssignment(provider=provider, model=DEFAULT_MODELS[provider], source="builtin")
