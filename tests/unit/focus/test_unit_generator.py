# tests/unit/focus/test_unit_generator.py — v1
"""Tests for focus/generator.py — prompt rendering and LLM reply handling."""

from __future__ import annotations

import pytest

from notedigest.core.models import Digest
from notedigest.focus.generator import (
    SYSTEM_PROMPT,
    GenerationError,
    RecentFocusGenerator,
    build_recent_focus_prompt,
)
from notedigest.llm.models import LLMResponse


@pytest.fixture
def digests():
    return [
        Digest(
            note_id="n1", note_title="Release plan", notebook_title="Work",
            created_at="2026-03-01T09:00:00Z", headings=("Plan", "Risks"),
            bullets=("tag the build",), snippet="Freeze starts Friday.",
        ),
        Digest(
            note_id="n2", note_title="Empty", notebook_title="Inbox",
            created_at="2026-02-28T09:00:00Z",
        ),
    ]


def _response(content: str) -> LLMResponse:
    return LLMResponse(content=content, model="deepseek-chat", provider="deepseek")


class TestBuildPrompt:
    def test_lists_every_digest(self, digests):
        prompt = build_recent_focus_prompt(digests)
        assert "Note 1:" in prompt and "Note 2:" in prompt
        assert "- noteId: n1" in prompt
        assert "- headings: Plan; Risks" in prompt
        assert "- bullets: tag the build" in prompt
        assert "- snippet: Freeze starts Friday." in prompt

    def test_omits_empty_fields(self, digests):
        prompt = build_recent_focus_prompt(digests[1:])
        assert "- headings:" not in prompt
        assert "- snippet:" not in prompt

    def test_schema_and_label(self, digests):
        prompt = build_recent_focus_prompt(digests, time_range_label="Last 7 days")
        assert '"timeRangeLabel"' in prompt
        assert 'Set timeRangeLabel to "Last 7 days".' in prompt

    def test_deterministic(self, digests):
        assert build_recent_focus_prompt(digests) == build_recent_focus_prompt(digests)


class TestRecentFocusGenerator:
    @pytest.mark.asyncio
    async def test_structured_reply(self, mock_llm_client, digests, sample_report):
        result = await RecentFocusGenerator(mock_llm_client)(digests)
        assert result.report == sample_report
        assert result.markdown is None

    @pytest.mark.asyncio
    async def test_fenced_reply(self, mock_llm_client, digests, sample_report):
        fenced = "```json\n" + sample_report.model_dump_json(by_alias=True) + "\n```"
        mock_llm_client.complete.return_value = _response(fenced)
        result = await RecentFocusGenerator(mock_llm_client)(digests)
        assert result.report == sample_report

    @pytest.mark.asyncio
    async def test_free_text_reply_kept_raw(self, mock_llm_client, digests):
        mock_llm_client.complete.return_value = _response("# Focus\n- shipping")
        result = await RecentFocusGenerator(mock_llm_client)(digests)
        assert result.report is None
        assert result.markdown == "# Focus\n- shipping"

    @pytest.mark.asyncio
    async def test_empty_reply_raises(self, mock_llm_client, digests):
        mock_llm_client.complete.return_value = _response("   ")
        with pytest.raises(GenerationError, match="Empty response"):
            await RecentFocusGenerator(mock_llm_client)(digests)

    @pytest.mark.asyncio
    async def test_llm_error_propagates(self, mock_llm_client, digests):
        mock_llm_client.complete.side_effect = ConnectionError("offline")
        with pytest.raises(ConnectionError):
            await RecentFocusGenerator(mock_llm_client)(digests)
        assert mock_llm_client.complete.await_count == 1

    @pytest.mark.asyncio
    async def test_call_arguments(self, mock_llm_client, digests):
        await RecentFocusGenerator(mock_llm_client, max_tokens=1000, temperature=0.5)(digests)
        kwargs = mock_llm_client.complete.call_args.kwargs
        assert kwargs["system"] == SYSTEM_PROMPT
        assert kwargs["max_tokens"] == 1000
        assert kwargs["temperature"] == 0.5
        assert kwargs["json_mode"] is True
        assert kwargs["messages"][0].role == "user"
        assert "- noteId: n1" in kwargs["messages"][0].content

    def test_identity(self, mock_llm_client):
        generator = RecentFocusGenerator(mock_llm_client)
        assert generator.provider_id == "deepseek"
        assert generator.model_name == "deepseek-chat"
