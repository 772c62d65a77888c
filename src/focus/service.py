# src/focus/service.py — v1
"""Wiring of note source, digest refresh, controller and generator.

Adds the app-level auto-refresh gate on top of the controller: a non-forced
request is skipped while a cached report exists and fewer than
min_new_notes notes were written since that report was cached.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime, timezone

from notedigest.core.models import Digest, DigestBudget, NoteSource
from notedigest.digest.refresher import DigestRefresher
from notedigest.focus.controller import RecentFocusController
from notedigest.focus.generator import RecentFocusGenerator

logger = logging.getLogger(__name__)

NoteProvider = Callable[[], Iterable[NoteSource]]


def count_notes_created_after(notes: Iterable[NoteSource], after: datetime | None) -> int:
    """Number of notes created strictly after the given time (all if None)."""
    if after is None:
        return sum(1 for _ in notes)
    after = _aware(after)
    return sum(1 for s in notes if _aware(s.note.created_at) > after)


class RecentFocusService:
    """Entry point used by the CLI and by embedding applications.

    Args:
        controller: Staleness controller for the report key.
        generator: External report generator.
        notes: Callable returning a fresh snapshot of (note, notebook) pairs.
        budget: Digest budget.
        digest_limit: Number of newest notes considered; part of the fingerprint.
        min_new_notes: Auto-refresh threshold for non-forced requests.
    """

    def __init__(
        self,
        controller: RecentFocusController,
        generator: RecentFocusGenerator,
        notes: NoteProvider,
        budget: DigestBudget,
        digest_limit: int = 20,
        min_new_notes: int = 3,
        refresher: DigestRefresher | None = None,
    ) -> None:
        self._controller = controller
        self._generator = generator
        self._notes = notes
        self._budget = budget
        self._digest_limit = digest_limit
        self._min_new_notes = min_new_notes
        self._refresher = refresher or DigestRefresher()

    @property
    def controller(self) -> RecentFocusController:
        return self._controller

    async def recent_digests(self) -> list[Digest] | None:
        """Digests of the newest digest_limit notes; None if superseded."""
        ordered = sorted(
            self._notes(), key=lambda s: _aware(s.note.created_at), reverse=True
        )
        return await self._refresher.refresh(ordered[: self._digest_limit], self._budget)

    async def request_recent_focus(self, force: bool = False) -> bool:
        """Refresh the report if warranted.

        Returns:
            True if a generation ran.
        """
        digests = await self.recent_digests()
        if not digests:
            return False

        if not force and self._controller.has_cached_recent_focus:
            updated_at = await self._controller.last_recent_focus_updated_at()
            new_notes = count_notes_created_after(self._notes(), updated_at)
            if new_notes < self._min_new_notes:
                logger.debug(
                    "Skipping refresh: %d new notes since last report (< %d)",
                    new_notes, self._min_new_notes,
                )
                return False

        args = (
            digests,
            self._generator,
            self._generator.provider_id,
            self._generator.model_name,
            self._digest_limit,
        )
        if force:
            return await self._controller.regenerate_recent_focus(*args)
        return await self._controller.generate_recent_focus_if_needed(*args)


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
