# src/digest/refresher.py — v1
"""Off-loop digest computation where each new request supersedes the last.

build_recent_digests() is pure, so it runs in a worker thread and its result
is handed back to the event loop that owns the controller. A new request
cancels the previous task; a cancelled computation's result is discarded.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from notedigest.core.models import Digest, DigestBudget, NoteSource
from notedigest.digest.budgeter import build_recent_digests

logger = logging.getLogger(__name__)


class DigestRefresher:
    """Single-slot producer of digest batches."""

    def __init__(self) -> None:
        self._task: asyncio.Task[list[Digest]] | None = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        """Whether a computation is still running."""
        return self._task is not None and not self._task.done()

    def request(
        self,
        notes: Sequence[NoteSource],
        budget: DigestBudget,
    ) -> asyncio.Task[list[Digest]]:
        """Start a new computation, cancelling any in-flight one.

        Must be called from within a running event loop.
        """
        if self.pending:
            assert self._task is not None
            self._task.cancel()
            logger.debug("Superseded in-flight digest computation")

        self._generation += 1
        snapshot = list(notes)
        self._task = asyncio.get_running_loop().create_task(
            self._compute(snapshot, budget, self._generation)
        )
        return self._task

    async def refresh(
        self,
        notes: Sequence[NoteSource],
        budget: DigestBudget,
    ) -> list[Digest] | None:
        """Request a computation and wait for it.

        Returns:
            The digest batch, or None if a newer request superseded this one.
        """
        task = self.request(notes, budget)
        # wait() does not propagate the inner task's cancellation.
        await asyncio.wait({task})
        if task.cancelled():
            return None
        return task.result()

    def cancel(self) -> None:
        """Cancel the in-flight computation, if any."""
        if self.pending:
            assert self._task is not None
            self._task.cancel()

    async def _compute(
        self,
        notes: list[NoteSource],
        budget: DigestBudget,
        generation: int,
    ) -> list[Digest]:
        digests = await asyncio.to_thread(build_recent_digests, notes, budget)
        if generation != self._generation:
            # A newer request arrived while the worker thread was running.
            raise asyncio.CancelledError
        return digests
