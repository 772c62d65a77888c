# src/digest/budgeter.py — v1
"""Digest budgeting: turn notes into capped, structured summaries.

Single-note pass classifies sanitized lines into headings, bullets and
paragraphs and caps each. The batch pass keeps the newest notes and trims
whole digests from the oldest end until the aggregate size fits, shrinking
the last survivor's snippet only as a final resort.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone

from notedigest.core.models import Digest, DigestBudget, Note, NoteSource
from notedigest.digest.sanitizer import sanitize_for_digest

logger = logging.getLogger(__name__)

_CHECKLIST_PREFIX = "- [ ] "
_BULLET_PREFIX = "- "

# Floor for the forced snippet shrink of a lone oversized digest.
MIN_FORCED_SNIPPET_CHARS = 40


def format_created_at(value: datetime) -> str:
    """ISO-8601 UTC at second precision ("2026-01-31T08:00:00Z").

    Naive datetimes are taken as UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def build_digest(note: Note, notebook_title: str, budget: DigestBudget) -> Digest:
    """Build the digest of a single note under the given budget."""
    headings: list[str] = []
    bullets: list[str] = []
    paragraphs: list[str] = []

    for line in sanitize_for_digest(note.content).splitlines():
        trimmed = line.strip()
        if not trimmed:
            continue
        if trimmed.startswith("#"):
            title = trimmed.strip("# ")
            if title:
                headings.append(title[: budget.max_heading_chars])
            continue
        if trimmed.startswith(_CHECKLIST_PREFIX):
            bullets.append(trimmed[len(_CHECKLIST_PREFIX):][: budget.max_bullet_chars])
            continue
        if trimmed.startswith(_BULLET_PREFIX):
            bullets.append(trimmed[len(_BULLET_PREFIX):][: budget.max_bullet_chars])
            continue
        paragraphs.append(trimmed)

    capped_paragraphs = [
        p[: budget.max_paragraph_chars]
        for p in paragraphs[: budget.max_paragraph_count]
    ]
    snippet = " ".join(capped_paragraphs)[: budget.max_snippet_chars]

    return Digest(
        note_id=note.id,
        note_title=note.title,
        notebook_title=notebook_title,
        created_at=format_created_at(note.created_at),
        headings=tuple(headings[: budget.max_heading_count]),
        bullets=tuple(bullets[: budget.max_bullet_count]),
        snippet=snippet,
    )


def total_chars(digests: Sequence[Digest]) -> int:
    """Aggregate size of a batch as counted against max_total_chars."""
    return sum(
        len(d.note_title)
        + len(d.notebook_title)
        + len(" ".join(d.headings))
        + len(" ".join(d.bullets))
        + len(d.snippet)
        for d in digests
    )


def build_recent_digests(
    notes: Iterable[NoteSource],
    budget: DigestBudget,
) -> list[Digest]:
    """Build the newest-first digest batch that fits the aggregate budget.

    Args:
        notes: Note snapshots with their notebook titles.
        budget: Caps for each digest and for the batch as a whole.

    Returns:
        At most budget.max_notes digests, newest first. Either the batch
        fits max_total_chars, or it holds a single digest whose snippet was
        shrunk to max(40, max_snippet_chars // 2).
    """
    # sorted() is stable: equal timestamps keep their input order.
    ordered = sorted(notes, key=lambda s: _sort_key(s.note), reverse=True)

    digests = [
        build_digest(source.note, source.notebook_title, budget)
        for source in ordered[: budget.max_notes]
    ]

    total = total_chars(digests)
    if total <= budget.max_total_chars:
        return digests

    built = len(digests)
    while total > budget.max_total_chars and len(digests) > 1:
        digests.pop()
        total = total_chars(digests)

    if total > budget.max_total_chars and digests:
        limit = max(MIN_FORCED_SNIPPET_CHARS, budget.max_snippet_chars // 2)
        first = digests[0]
        digests[0] = first.model_copy(update={"snippet": first.snippet[:limit]})

    logger.debug(
        "Trimmed digest batch from %d to %d notes (%d chars, cap %d)",
        built, len(digests), total_chars(digests), budget.max_total_chars,
    )
    return digests


def _sort_key(note: Note) -> datetime:
    created = note.created_at
    if created.tzinfo is None:
        return created.replace(tzinfo=timezone.utc)
    return created
