# src/focus/controller.py — v2
"""Staleness controller for the cached "recent focus" report.

Decides when the external generator must run, keeps at most one generation
in flight, and publishes state snapshots. State machine:

    idle/ready/error --(generate requested, not loading)--> loading
    loading --(generator succeeded)--> ready   (cache + fingerprint written)
    loading --(generator failed)-----> error   (cache untouched)
    loading --(caller cancelled)-----> previous resting state

"error" is a resting state: a new request may leave it like "idle".
All mutations happen on the event loop that first used the controller;
other threads read through snapshot() or subscribe().
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Awaitable, Callable, Sequence
from datetime import datetime
from typing import Any

from notedigest.cache.fingerprint import compute_input_fingerprint
from notedigest.cache.report_cache import ReportCache
from notedigest.core.models import (
    CachedReport,
    Digest,
    FocusState,
    GenerationResult,
    RecentFocusReport,
)
from notedigest.focus.decoding import decode_report
from notedigest.logging.context import set_operation_context

logger = logging.getLogger(__name__)

REPORT_CACHE_KEY = "plan.recentFocus.cache"
INPUT_HASH_KEY = "plan.recentFocus.inputHash"
DEFAULT_REFRESH_INTERVAL_S = 24 * 60 * 60

ReportGenerator = Callable[[Sequence[Digest]], Awaitable[GenerationResult]]
StateListener = Callable[[FocusState], None]


class RecentFocusController:
    """Single owner of one report cache key.

    Args:
        cache: Cache service shared with nothing else for these keys.
        refresh_interval: Freshness window in seconds.
        cache_key: Key of the cached report body.
        fingerprint_key: Key of the companion input fingerprint.
    """

    def __init__(
        self,
        cache: ReportCache,
        refresh_interval: float = DEFAULT_REFRESH_INTERVAL_S,
        cache_key: str = REPORT_CACHE_KEY,
        fingerprint_key: str = INPUT_HASH_KEY,
    ) -> None:
        self._cache = cache
        self._refresh_interval = refresh_interval
        self._cache_key = cache_key
        self._fingerprint_key = fingerprint_key
        self._state = FocusState()
        self._state_lock = threading.Lock()
        self._listeners: list[StateListener] = []
        self._owner_loop: asyncio.AbstractEventLoop | None = None

    # --- Read path (any thread) ---

    def snapshot(self) -> FocusState:
        """Current published state."""
        with self._state_lock:
            return self._state

    @property
    def report(self) -> RecentFocusReport | None:
        return self.snapshot().report

    @property
    def raw_markdown(self) -> str | None:
        return self.snapshot().raw_markdown

    @property
    def is_loading(self) -> bool:
        return self.snapshot().is_loading

    @property
    def error_message(self) -> str | None:
        return self.snapshot().error_message

    @property
    def has_cached_recent_focus(self) -> bool:
        state = self.snapshot()
        return state.report is not None or state.raw_markdown is not None

    @property
    def refresh_interval(self) -> float:
        return self._refresh_interval

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener called with every new snapshot.

        Returns:
            A callable that removes the listener.
        """
        with self._state_lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._state_lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    # --- Lifecycle ---

    async def load(self) -> None:
        """Seed state from a cache entry younger than the refresh interval."""
        self._claim_owner()
        cached = await self._cache.load(self._cache_key, self._refresh_interval, CachedReport)
        if cached is None:
            return
        self._publish(
            status="ready",
            report=cached.report,
            raw_markdown=cached.markdown,
        )
        logger.info("Loaded cached recent focus report from %s", self._cache_key)

    async def last_recent_focus_updated_at(self) -> datetime | None:
        return await self._cache.updated_at(self._cache_key)

    async def reset_for_sign_out(self) -> None:
        """Drop in-memory state, the cached report and the stored fingerprint."""
        self._claim_owner()
        self._publish(
            status="idle",
            report=None,
            raw_markdown=None,
            is_loading=False,
            error_message=None,
        )
        await self._cache.clear_many([self._cache_key, self._fingerprint_key])
        logger.info("Recent focus state reset")

    # --- Staleness ---

    def input_fingerprint(
        self,
        digests: Sequence[Digest],
        provider_id: str,
        model_name: str,
        limit: int,
    ) -> str:
        return compute_input_fingerprint(digests, provider_id, model_name, limit)

    async def needs_recent_focus(self, fingerprint: str) -> bool:
        """Whether a generation is required for the given input fingerprint."""
        if not fingerprint:
            return True
        if not self.has_cached_recent_focus:
            return True
        stored = await self._cache.load_text(self._fingerprint_key)
        if stored != fingerprint:
            return True
        return not await self._cache.is_valid(self._cache_key, self._refresh_interval)

    async def should_generate_recent_focus(
        self,
        digests: Sequence[Digest],
        provider_id: str,
        model_name: str,
        limit: int,
    ) -> bool:
        if not digests:
            return False
        fingerprint = self.input_fingerprint(digests, provider_id, model_name, limit)
        return await self.needs_recent_focus(fingerprint)

    # --- Generation ---

    async def generate_recent_focus_if_needed(
        self,
        digests: Sequence[Digest],
        generator: ReportGenerator,
        provider_id: str,
        model_name: str,
        limit: int,
    ) -> bool:
        """Generate only when stale; no-op while a generation is in flight.

        Returns:
            True if a generation ran (successfully or not).
        """
        if not digests or self.is_loading:
            return False
        fingerprint = self.input_fingerprint(digests, provider_id, model_name, limit)
        if not await self.needs_recent_focus(fingerprint):
            logger.debug("Recent focus report is fresh, skipping generation")
            return False
        return await self._generate(digests, fingerprint, generator)

    async def regenerate_recent_focus(
        self,
        digests: Sequence[Digest],
        generator: ReportGenerator,
        provider_id: str,
        model_name: str,
        limit: int,
    ) -> bool:
        """Forced generation. Callers must not double-invoke it."""
        if not digests:
            return False
        fingerprint = self.input_fingerprint(digests, provider_id, model_name, limit)
        return await self._generate(digests, fingerprint, generator)

    async def _generate(
        self,
        digests: Sequence[Digest],
        fingerprint: str,
        generator: ReportGenerator,
    ) -> bool:
        self._claim_owner()
        # Check-and-set without an await in between: this is the single-flight gate.
        if self.is_loading:
            return False
        resting = self.snapshot()
        self._publish(status="loading", is_loading=True, error_message=None)
        set_operation_context(cache_key=self._cache_key, operation="generate")

        try:
            try:
                result = await generator(digests)
            except Exception as e:
                logger.warning("Recent focus generation failed: %s", e)
                self._publish(status="error", is_loading=False, error_message=str(e) or type(e).__name__)
                return True

            report = result.report
            if report is None and result.markdown:
                report = decode_report(result.markdown)

            # The gate stays closed until report and fingerprint are written.
            await self._persist(CachedReport(report=report, markdown=result.markdown), fingerprint)
            self._publish(
                status="ready",
                report=report,
                raw_markdown=result.markdown,
                is_loading=False,
            )
        finally:
            if self.is_loading:
                # Cancelled mid-flight: reopen the gate, keep the previous report.
                logger.info("Recent focus generation cancelled")
                self._publish(status=resting.status, is_loading=False, error_message=resting.error_message)

        logger.info(
            "Generated recent focus report from %d digests (structured=%s)",
            len(digests), report is not None,
        )
        return True

    async def _persist(self, body: CachedReport, fingerprint: str) -> None:
        """Write report and fingerprint together, or neither."""
        try:
            await self._cache.save_many({
                self._cache_key: body,
                self._fingerprint_key: fingerprint,
            })
        except Exception as e:
            logger.warning("Failed to persist recent focus cache: %s", e)
            try:
                await self._cache.clear_many([self._cache_key, self._fingerprint_key])
            except Exception as clear_error:
                logger.warning("Failed to roll back recent focus cache: %s", clear_error)

    # --- Single writer ---

    def _claim_owner(self) -> None:
        loop = asyncio.get_running_loop()
        if self._owner_loop is None or self._owner_loop.is_closed():
            self._owner_loop = loop
        elif self._owner_loop is not loop:
            raise RuntimeError("RecentFocusController used from a foreign event loop")

    def _publish(self, **changes: Any) -> None:
        with self._state_lock:
            self._state = self._state.model_copy(update=changes)
            state = self._state
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(state)
            except Exception:
                logger.exception("Focus state listener failed")
