# src/logging/context.py — v2
"""Contextual logging support: attach cache_key, provider, operation to records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging, set per generation request.
_cache_key: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "cache_key", default=None
)
_provider: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "provider", default=None
)
_operation: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "operation", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    cache_key: str | None = None
    provider: str | None = None
    operation: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        cache_key=_cache_key.get(),
        provider=_provider.get(),
        operation=_operation.get(),
    )


def set_operation_context(cache_key: str, operation: str) -> None:
    """Set the cache key and operation being worked on."""
    _cache_key.set(cache_key)
    _operation.set(operation)


def set_provider_context(provider: str) -> None:
    """Set the LLM provider serving the current request."""
    _provider.set(provider)


def clear_context() -> None:
    """Reset all context variables."""
    _cache_key.set(None)
    _provider.set(None)
    _operation.set(None)
