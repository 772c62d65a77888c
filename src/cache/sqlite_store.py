# src/cache/sqlite_store.py — v2
"""SQLite-based cache store (CACHE_BACKEND=sqlite).

Uses stdlib sqlite3, no external dependency. put_many() runs in a single
transaction so related keys are never written halfway.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from pathlib import Path

from notedigest.cache.base_cache_store import BaseCacheStore
from notedigest.cache.models import CacheEntry

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS cache_entries (
    key TEXT PRIMARY KEY,
    payload TEXT NOT NULL,
    written_at TEXT NOT NULL
);
"""


class SqliteCacheStore(BaseCacheStore):
    """SQLite-backed cache store."""

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = Path(db_path).expanduser()
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self._db_path))
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)

    async def get(self, key: str) -> CacheEntry | None:
        """Retrieve cache entry by key."""
        cursor = self._conn.execute(
            "SELECT payload, written_at FROM cache_entries WHERE key = ?", (key,)
        )
        row = cursor.fetchone()
        if row is None:
            return None
        try:
            return CacheEntry(
                key=key, payload=row[0], written_at=datetime.fromisoformat(row[1])
            )
        except ValueError as e:
            logger.warning("Failed to deserialize cache entry %s: %s", key, e)
            return None

    async def put(self, entry: CacheEntry) -> None:
        """Store a cache entry (upsert)."""
        with self._conn:
            self._upsert(entry)

    async def put_many(self, entries: list[CacheEntry]) -> None:
        """Store several entries in one transaction."""
        with self._conn:
            for entry in entries:
                self._upsert(entry)

    async def delete(self, key: str) -> None:
        """Remove a cache entry."""
        with self._conn:
            self._conn.execute("DELETE FROM cache_entries WHERE key = ?", (key,))

    async def delete_many(self, keys: list[str]) -> None:
        """Remove several entries in one transaction."""
        with self._conn:
            self._conn.executemany(
                "DELETE FROM cache_entries WHERE key = ?", [(k,) for k in keys]
            )

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    def _upsert(self, entry: CacheEntry) -> None:
        self._conn.execute(
            """INSERT OR REPLACE INTO cache_entries (key, payload, written_at)
               VALUES (?, ?, ?)""",
            (entry.key, entry.payload, entry.written_at.isoformat()),
        )
