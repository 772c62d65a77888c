# src/cache/base_cache_store.py — v2
"""Abstract durable key-value store interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from notedigest.cache.models import CacheEntry


class BaseCacheStore(ABC):
    """Unified interface for cache storage backends.

    Stores are plain key-value mechanisms: no eviction, no freshness policy.
    """

    @abstractmethod
    async def get(self, key: str) -> CacheEntry | None:
        """Retrieve the entry stored under key."""

    @abstractmethod
    async def put(self, entry: CacheEntry) -> None:
        """Store an entry, replacing any previous one under the same key."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove the entry stored under key (missing keys are ignored)."""

    async def put_many(self, entries: list[CacheEntry]) -> None:
        """Store several entries together.

        Backends with transactions override this to make the write atomic.
        """
        for entry in entries:
            await self.put(entry)

    async def delete_many(self, keys: list[str]) -> None:
        """Remove several entries."""
        for key in keys:
            await self.delete(key)

    def close(self) -> None:
        """Release backend resources."""
