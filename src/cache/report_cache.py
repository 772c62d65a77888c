# src/cache/report_cache.py — v1
"""Freshness-aware cache service over a durable key-value store.

Values are pydantic models (or plain strings) persisted with their write
time. Staleness is decided at read time from a caller-supplied max age; a
stale entry is reported as absent but is not deleted.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from notedigest.cache.base_cache_store import BaseCacheStore
from notedigest.cache.models import CacheEntry

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)
Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ReportCache:
    """Timestamped load/save/clear on top of a BaseCacheStore.

    Args:
        store: Durable backend, owned by the caller.
        clock: Source of "now"; injectable for tests.
    """

    def __init__(self, store: BaseCacheStore, clock: Clock = utc_now) -> None:
        self._store = store
        self._clock = clock

    @property
    def store(self) -> BaseCacheStore:
        return self._store

    async def save(self, key: str, value: BaseModel) -> None:
        """Serialize value and persist it with the current timestamp."""
        await self._store.put(self._entry(key, value.model_dump_json(by_alias=True)))

    async def save_text(self, key: str, value: str) -> None:
        """Persist a plain string value with the current timestamp."""
        await self._store.put(self._entry(key, value))

    async def save_many(self, values: dict[str, BaseModel | str]) -> None:
        """Persist several values under one timestamp in one store call."""
        now = self._clock()
        entries = [
            CacheEntry(
                key=key,
                payload=value if isinstance(value, str) else value.model_dump_json(by_alias=True),
                written_at=now,
            )
            for key, value in values.items()
        ]
        await self._store.put_many(entries)

    async def load(self, key: str, max_age: float, model: type[ModelT]) -> ModelT | None:
        """Return the stored value if it is not older than max_age seconds.

        Missing, stale and undecodable entries all yield None.
        """
        entry = await self._fresh_entry(key, max_age)
        if entry is None:
            return None
        try:
            return model.model_validate_json(entry.payload)
        except ValidationError as e:
            logger.warning("Discarding undecodable cache payload %s: %s", key, e)
            return None

    async def load_text(self, key: str, max_age: float | None = None) -> str | None:
        """Return a stored string value; max_age=None skips the freshness check."""
        if max_age is None:
            entry = await self._store.get(key)
        else:
            entry = await self._fresh_entry(key, max_age)
        return None if entry is None else entry.payload

    async def is_valid(self, key: str, max_age: float) -> bool:
        """Freshness check without decoding the payload.

        An entry whose age equals max_age exactly is still valid.
        """
        return await self._fresh_entry(key, max_age) is not None

    async def updated_at(self, key: str) -> datetime | None:
        """Write time of the entry stored under key."""
        entry = await self._store.get(key)
        return None if entry is None else entry.written_at

    async def clear(self, key: str) -> None:
        """Remove the value and its timestamp."""
        await self._store.delete(key)

    async def clear_many(self, keys: list[str]) -> None:
        await self._store.delete_many(keys)

    async def _fresh_entry(self, key: str, max_age: float) -> CacheEntry | None:
        entry = await self._store.get(key)
        if entry is None:
            return None
        age = (self._clock() - _aware(entry.written_at)).total_seconds()
        if age > max_age:
            logger.debug("Cache entry %s is stale (age %.0fs > %.0fs)", key, age, max_age)
            return None
        return entry

    def _entry(self, key: str, payload: str) -> CacheEntry:
        return CacheEntry(key=key, payload=payload, written_at=self._clock())


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
