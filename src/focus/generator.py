# src/focus/generator.py — v1
"""LLM-backed generator for the recent focus report.

Renders digests into a prompt, sends it through a BaseLLMClient and returns
either the structured report (strict JSON reply) or the raw text. No retry:
a failed call propagates to the controller as a single error.
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Sequence

from pydantic import ValidationError

from notedigest.core.models import Digest, GenerationResult, RecentFocusReport
from notedigest.focus.decoding import clean_json_response
from notedigest.llm.base_client import BaseLLMClient
from notedigest.llm.models import Message
from notedigest.logging.context import set_provider_context

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are a note-taking assistant. Respond only with valid JSON."

_REPORT_SCHEMA = """\
{
  "title": string,
  "summary": string,
  "timeRangeLabel": string,
  "sections": [ { "heading": string, "paragraphs": [string], "bullets": [string] } ],
  "tables": [ { "title": string, "columns": [string], "rows": [[string]], "notes": string? } ],
  "sources": [ { "noteId": string, "noteTitle": string, "notebookTitle": string, "createdAt": string } ]
}"""


class GenerationError(Exception):
    """Raised when the LLM returns nothing usable."""


def build_recent_focus_prompt(digests: Sequence[Digest], time_range_label: str = "Recent notes") -> str:
    """Render the digest batch into the report prompt."""
    lines = [
        "Write a 'recent focus' report based on the note digests below.",
        "Output JSON only, with no extra text, comments or markdown.",
        "Follow this JSON structure exactly (every field must be present; "
        "empty arrays and empty strings are allowed):",
        _REPORT_SCHEMA,
        "If the notes contain plans, schedules, timelines or task splits, put "
        "them in tables at day granularity. columns <= 6, rows <= 12.",
        f'Set timeRangeLabel to "{time_range_label}".',
        "",
        "Note digests:",
    ]
    for index, digest in enumerate(digests, start=1):
        lines.append(f"Note {index}:")
        lines.append(f"- noteId: {digest.note_id}")
        lines.append(f"- noteTitle: {digest.note_title}")
        lines.append(f"- notebookTitle: {digest.notebook_title}")
        lines.append(f"- createdAt: {digest.created_at}")
        if digest.headings:
            lines.append(f"- headings: {'; '.join(digest.headings)}")
        if digest.bullets:
            lines.append(f"- bullets: {'; '.join(digest.bullets)}")
        if digest.snippet:
            lines.append(f"- snippet: {digest.snippet}")
        lines.append("")
    return "\n".join(lines)


class RecentFocusGenerator:
    """Callable generator: ``await generator(digests) -> GenerationResult``."""

    def __init__(
        self,
        llm: BaseLLMClient,
        max_tokens: int = 4096,
        temperature: float = 0.2,
    ) -> None:
        self._llm = llm
        self._max_tokens = max_tokens
        self._temperature = temperature

    @property
    def provider_id(self) -> str:
        return self._llm.provider_name

    @property
    def model_name(self) -> str:
        return self._llm.model_name

    async def __call__(self, digests: Sequence[Digest]) -> GenerationResult:
        set_provider_context(self._llm.provider_name)
        prompt = build_recent_focus_prompt(digests)
        prompt_hash = hashlib.sha256(prompt.encode()).hexdigest()[:16]

        response = await self._llm.complete(
            messages=[Message(role="user", content=prompt)],
            system=SYSTEM_PROMPT,
            max_tokens=self._max_tokens,
            temperature=self._temperature,
            json_mode=True,
        )
        if not response.content.strip():
            raise GenerationError(f"Empty response from {response.provider}:{response.model}")

        logger.info(
            "Recent focus response received (prompt=%s, tokens=%d, latency=%dms)",
            prompt_hash, response.input_tokens + response.output_tokens, response.latency_ms,
        )

        try:
            report = RecentFocusReport.model_validate_json(clean_json_response(response.content))
        except ValidationError:
            logger.debug("Response is not a strict report, keeping raw text")
            return GenerationResult(report=None, markdown=response.content)
        return GenerationResult(report=report, markdown=None)
