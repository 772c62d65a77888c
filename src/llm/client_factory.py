# src/llm/client_factory.py — v3
"""Factory: instantiate LLM client from provider name.

Adapters are imported lazily so that a missing SDK only matters for the
provider that needs it.
"""

from __future__ import annotations

import importlib
import logging

from notedigest.config.settings import Settings
from notedigest.llm.base_client import BaseLLMClient

logger = logging.getLogger(__name__)

# Registry of provider name → adapter class path (lazy import).
_PROVIDER_REGISTRY: dict[str, str] = {
    "deepseek": "notedigest.llm.adapters.openai_adapter.OpenAIAdapter",
    "openai": "notedigest.llm.adapters.openai_adapter.OpenAIAdapter",
    "gemini": "notedigest.llm.adapters.google_adapter.GoogleAdapter",
}


class UnsupportedProviderError(ValueError):
    """Raised when a provider is not registered."""


def create_llm_client(
    provider: str,
    model: str,
    settings: Settings | None = None,
    **kwargs: object,
) -> BaseLLMClient:
    """Instantiate the correct adapter from provider name.

    Args:
        provider: Provider identifier (deepseek, openai, gemini).
        model: Model name (e.g. deepseek-chat).
        settings: Application settings (for API keys and base URLs).
        **kwargs: Additional provider-specific arguments.

    Returns:
        Configured BaseLLMClient instance.

    Raises:
        UnsupportedProviderError: If provider is not registered.
    """
    if provider not in _PROVIDER_REGISTRY:
        raise UnsupportedProviderError(
            f"Unsupported LLM provider: {provider!r}. "
            f"Available: {', '.join(sorted(_PROVIDER_REGISTRY))}"
        )

    adapter_cls = _import_class(_PROVIDER_REGISTRY[provider])

    init_kwargs = dict(kwargs)
    init_kwargs["model"] = model
    if provider in ("deepseek", "openai"):
        init_kwargs.setdefault("provider", provider)

    if settings is not None:
        if provider == "deepseek":
            init_kwargs.setdefault("api_key", settings.deepseek_api_key)
            init_kwargs.setdefault("base_url", settings.deepseek_base_url)
        elif provider == "openai":
            init_kwargs.setdefault("api_key", settings.openai_api_key)
        elif provider == "gemini":
            init_kwargs.setdefault("api_key", settings.gemini_api_key)

    logger.debug("Creating LLM client: provider=%s, model=%s", provider, model)
    return adapter_cls(**init_kwargs)


def register_provider(name: str, class_path: str) -> None:
    """Register a custom provider adapter.

    Args:
        name: Provider identifier.
        class_path: Fully qualified class path implementing BaseLLMClient.
    """
    _PROVIDER_REGISTRY[name] = class_path
    logger.info("Registered LLM provider: %s -> %s", name, class_path)


def _import_class(class_path: str) -> type:
    """Dynamically import a class from its fully qualified path."""
    module_path, class_name = class_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)
