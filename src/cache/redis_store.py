# src/cache/redis_store.py — v2
"""Redis-based cache store (CACHE_BACKEND=redis).

Requires 'redis' package: pip install redis.
Entries are stored as JSON strings under a namespaced key; put_many() and
delete_many() go through a MULTI/EXEC pipeline.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from notedigest.cache.base_cache_store import BaseCacheStore
from notedigest.cache.models import CacheEntry

logger = logging.getLogger(__name__)

_KEY_PREFIX = "notedigest:cache:"


class RedisCacheStore(BaseCacheStore):
    """Redis-backed cache store."""

    def __init__(self, redis_url: str) -> None:
        try:
            import redis
        except ImportError as e:
            raise ImportError(
                "redis package required: pip install redis"
            ) from e

        self._client = redis.Redis.from_url(redis_url, decode_responses=True)

    async def get(self, key: str) -> CacheEntry | None:
        """Retrieve cache entry by key."""
        data = self._client.get(f"{_KEY_PREFIX}{key}")
        if data is None:
            return None
        try:
            return CacheEntry.model_validate_json(data)
        except ValidationError as e:
            logger.warning("Failed to deserialize cache entry %s: %s", key, e)
            return None

    async def put(self, entry: CacheEntry) -> None:
        """Store a cache entry."""
        self._client.set(f"{_KEY_PREFIX}{entry.key}", entry.model_dump_json())

    async def put_many(self, entries: list[CacheEntry]) -> None:
        """Store several entries in one transaction."""
        pipe = self._client.pipeline(transaction=True)
        for entry in entries:
            pipe.set(f"{_KEY_PREFIX}{entry.key}", entry.model_dump_json())
        pipe.execute()

    async def delete(self, key: str) -> None:
        """Remove a cache entry."""
        self._client.delete(f"{_KEY_PREFIX}{key}")

    async def delete_many(self, keys: list[str]) -> None:
        """Remove several entries in one call."""
        if keys:
            self._client.delete(*(f"{_KEY_PREFIX}{k}" for k in keys))

    def close(self) -> None:
        """Close the Redis connection."""
        self._client.close()
