# src/core/models.py — v2
"""Shared Pydantic domain models used across modules.

No module redefines these types; all imports come from core.models.
Wire-facing models (Digest, RecentFocusReport) serialize with camelCase
aliases so that prompts, cache payloads and fingerprints share one shape.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _WireModel(BaseModel):
    """Base for models exchanged with the generator and the cache."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# === SOURCE NOTES ===


class Note(BaseModel):
    """Read-only snapshot of a note taken from the note store."""

    id: str
    title: str = ""
    content: str = ""
    created_at: datetime

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v: object) -> object:  # noqa: N805
        if isinstance(v, UUID):
            return str(v).upper()
        return v


class NoteSource(BaseModel):
    """A note paired with the title of the notebook that holds it."""

    note: Note
    notebook_title: str = ""


# === DIGESTS ===


class DigestBudget(BaseModel):
    """Per-field and aggregate caps applied while building digests.

    Immutable per call. The core defines no defaults; callers (see
    Settings.digest_budget) own them.
    """

    model_config = ConfigDict(frozen=True)

    max_notes: int = Field(ge=0)
    max_total_chars: int = Field(ge=0)
    max_snippet_chars: int = Field(ge=0)
    max_heading_count: int = Field(ge=0)
    max_bullet_count: int = Field(ge=0)
    max_heading_chars: int = Field(ge=0)
    max_bullet_chars: int = Field(ge=0)
    max_paragraph_count: int = Field(ge=0)
    max_paragraph_chars: int = Field(ge=0)


class Digest(_WireModel):
    """Size-bounded structured extract of one note."""

    note_id: str
    note_title: str
    notebook_title: str
    created_at: str
    headings: tuple[str, ...] = ()
    bullets: tuple[str, ...] = ()
    snippet: str = ""


# === RECENT FOCUS REPORT ===


class ReportSection(_WireModel):
    heading: str
    paragraphs: list[str] = Field(default_factory=list)
    bullets: list[str] = Field(default_factory=list)


class ReportTable(_WireModel):
    title: str
    columns: list[str] = Field(default_factory=list)
    rows: list[list[str]] = Field(default_factory=list)
    notes: str | None = None


class ReportSourceNote(_WireModel):
    note_id: str
    note_title: str
    notebook_title: str
    created_at: str


class RecentFocusReport(_WireModel):
    """Structured report returned by the generator."""

    title: str
    summary: str
    time_range_label: str
    sections: list[ReportSection] = Field(default_factory=list)
    tables: list[ReportTable] = Field(default_factory=list)
    sources: list[ReportSourceNote] = Field(default_factory=list)


class GenerationResult(BaseModel):
    """What the external generator hands back: structured, raw, or both."""

    report: RecentFocusReport | None = None
    markdown: str | None = None


class CachedReport(_WireModel):
    """Body of the persisted report cache entry."""

    report: RecentFocusReport | None = None
    markdown: str | None = None


# === PUBLISHED STATE ===


FocusStatus = Literal["idle", "loading", "ready", "error"]


class FocusState(BaseModel):
    """Immutable snapshot of the controller's published state."""

    model_config = ConfigDict(frozen=True)

    status: FocusStatus = "idle"
    report: RecentFocusReport | None = None
    raw_markdown: str | None = None
    is_loading: bool = False
    error_message: str | None = None
