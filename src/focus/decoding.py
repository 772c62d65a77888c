# src/focus/decoding.py — v1
"""Recover a structured report from raw generator text.

The bracket scan is loose: the candidate runs from the first "{" to the
last "}", so prose between two JSON objects ends up inside it, the parse
fails and only the raw text remains.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from notedigest.core.models import RecentFocusReport

logger = logging.getLogger(__name__)


def extract_json(text: str) -> str | None:
    """Locate the JSON object candidate embedded in text."""
    trimmed = text.strip()
    if trimmed.startswith("{"):
        return trimmed
    start = trimmed.find("{")
    end = trimmed.rfind("}")
    if start != -1 and end != -1 and start < end:
        return trimmed[start : end + 1]
    return None


def decode_report(markdown: str) -> RecentFocusReport | None:
    """Parse a RecentFocusReport out of raw text; None when that fails."""
    candidate = extract_json(markdown)
    if candidate is None:
        return None
    try:
        return RecentFocusReport.model_validate_json(candidate)
    except ValidationError as e:
        logger.debug("No structured report in raw text: %s", e.error_count())
        return None


def clean_json_response(response: str) -> str:
    """Strip surrounding whitespace and markdown code fences from a reply."""
    cleaned = response.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()
