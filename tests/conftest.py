# tests/conftest.py — v2
"""Shared test fixtures for all unit and integration tests.

Provides sample notes, budgets, a controllable clock, in-memory cache
stores and mock LLM clients. No external services; all I/O is local or
mocked.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from notedigest.cache.base_cache_store import BaseCacheStore
from notedigest.cache.json_store import JsonCacheStore
from notedigest.cache.models import CacheEntry
from notedigest.cache.report_cache import ReportCache
from notedigest.core.models import (
    DigestBudget,
    GenerationResult,
    Note,
    NoteSource,
    RecentFocusReport,
    ReportSection,
)
from notedigest.llm.models import LLMResponse

BASE_TIME = datetime(2026, 3, 1, 9, 0, 0, tzinfo=timezone.utc)


# === HELPERS ===


class FakeClock:
    """Manually advanced clock for freshness tests."""

    def __init__(self, start: datetime = BASE_TIME) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class MemoryCacheStore(BaseCacheStore):
    """Dict-backed store recording every call."""

    def __init__(self) -> None:
        self.entries: dict[str, CacheEntry] = {}
        self.put_calls = 0
        self.fail_on_put = False

    async def get(self, key: str) -> CacheEntry | None:
        return self.entries.get(key)

    async def put(self, entry: CacheEntry) -> None:
        self.put_calls += 1
        if self.fail_on_put:
            raise OSError("disk full")
        self.entries[entry.key] = entry

    async def delete(self, key: str) -> None:
        self.entries.pop(key, None)


def make_note(
    note_id: str,
    created_at: datetime,
    content: str = "",
    title: str | None = None,
    notebook: str = "Inbox",
) -> NoteSource:
    return NoteSource(
        note=Note(id=note_id, title=title or f"Note {note_id}", content=content, created_at=created_at),
        notebook_title=notebook,
    )


def make_report(title: str = "Recent focus") -> RecentFocusReport:
    return RecentFocusReport(
        title=title,
        summary="Shipping the release and planning the offsite.",
        time_range_label="Recent notes",
        sections=[ReportSection(heading="Release", paragraphs=["Freeze on Friday."], bullets=["QA"])],
    )


# === FIXTURES: Budgets ===


@pytest.fixture
def budget() -> DigestBudget:
    """The app's default budget."""
    return DigestBudget(
        max_notes=20,
        max_total_chars=6000,
        max_snippet_chars=260,
        max_heading_count=6,
        max_bullet_count=8,
        max_heading_chars=60,
        max_bullet_chars=80,
        max_paragraph_count=3,
        max_paragraph_chars=120,
    )


@pytest.fixture
def zero_budget() -> DigestBudget:
    return DigestBudget(
        max_notes=0, max_total_chars=0, max_snippet_chars=0,
        max_heading_count=0, max_bullet_count=0, max_heading_chars=0,
        max_bullet_chars=0, max_paragraph_count=0, max_paragraph_chars=0,
    )


# === FIXTURES: Notes ===


@pytest.fixture
def sample_note() -> Note:
    return Note(
        id="note-a",
        title="Release plan",
        content=(
            "# Release plan\n"
            "- [x] draft changelog\n"
            "- [ ] tag the build\n"
            "- notify support\n"
            "Freeze starts Friday.\n"
            "```\n"
            "make release\n"
            "```\n"
            "QA signs off Monday."
        ),
        created_at=BASE_TIME,
    )


@pytest.fixture
def sample_sources() -> list[NoteSource]:
    """Three notes across two notebooks, given oldest first."""
    return [
        make_note("n1", BASE_TIME - timedelta(days=2), "Old thoughts.", notebook="Journal"),
        make_note("n2", BASE_TIME - timedelta(days=1), "# Offsite\n- book venue", notebook="Work"),
        make_note("n3", BASE_TIME, "Release freeze on Friday.", notebook="Work"),
    ]


# === FIXTURES: Cache ===


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_store() -> MemoryCacheStore:
    return MemoryCacheStore()


@pytest.fixture
def report_cache(memory_store: MemoryCacheStore, clock: FakeClock) -> ReportCache:
    return ReportCache(memory_store, clock=clock)


@pytest.fixture
def tmp_cache_dir(tmp_path: Path) -> Path:
    """Temporary cache directory."""
    cache = tmp_path / "cache"
    cache.mkdir()
    return cache


@pytest.fixture
def json_store(tmp_cache_dir: Path) -> JsonCacheStore:
    return JsonCacheStore(tmp_cache_dir)


# === FIXTURES: Generators / LLM ===


@pytest.fixture
def sample_report() -> RecentFocusReport:
    return make_report()


@pytest.fixture
def generator(sample_report: RecentFocusReport) -> AsyncMock:
    """External generator returning a structured report."""
    return AsyncMock(return_value=GenerationResult(report=sample_report))


@pytest.fixture
def mock_llm_response(sample_report: RecentFocusReport) -> LLMResponse:
    return LLMResponse(
        content=sample_report.model_dump_json(by_alias=True),
        input_tokens=300,
        output_tokens=120,
        model="deepseek-chat",
        provider="deepseek",
        latency_ms=800,
    )


@pytest.fixture
def mock_llm_client(mock_llm_response: LLMResponse) -> AsyncMock:
    """Mock BaseLLMClient with default response."""
    client = AsyncMock()
    client.complete = AsyncMock(return_value=mock_llm_response)
    client.provider_name = "deepseek"
    client.model_name = "deepseek-chat"
    return client
