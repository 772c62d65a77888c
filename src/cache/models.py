# src/cache/models.py — v2
"""Cache domain model: one opaque payload per key plus its write time."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class CacheEntry(BaseModel):
    """Single stored value.

    The payload is opaque to stores; ReportCache owns its encoding.
    """

    key: str
    payload: str
    written_at: datetime
