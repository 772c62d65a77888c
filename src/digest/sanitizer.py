# src/digest/sanitizer.py — v2
"""Raw note text normalization ahead of digesting or previewing.

Two consumers with different policies for fenced code:
  - digest building replaces each closed fenced block with a marker line
  - row previews drop fenced blocks without a trace

Both go through strip_fenced_code_blocks() and pick their policy explicitly.
"""

from __future__ import annotations

import re

CODE_BLOCK_MARKER = "[code block omitted]"

_FENCE = "```"
_COMPLETED_ITEM = re.compile(r"^- \[[xX]\](?:\s|$)")
_WHITESPACE_RUN = re.compile(r"\s+")


def strip_fenced_code_blocks(content: str, marker: str | None = None) -> str:
    """Drop fenced code regions, optionally leaving a marker line per block.

    Every line whose trimmed text starts with a fence toggles the state.
    The marker is emitted when a block closes; an unterminated fence drops
    everything after it and emits nothing.

    Args:
        content: Raw note text.
        marker: Line written in place of each closed block. None = no trace.

    Returns:
        Text without fenced regions, original line breaks preserved.
    """
    output: list[str] = []
    inside_code = False
    for line in content.splitlines():
        if line.strip().startswith(_FENCE):
            inside_code = not inside_code
            if not inside_code and marker is not None:
                output.append(marker)
            continue
        if not inside_code:
            output.append(line)
    return "\n".join(output)


def is_completed_item(line: str) -> bool:
    """True for a checked checklist line ("- [x] ..." or "- [X] ...")."""
    return bool(_COMPLETED_ITEM.match(line.strip()))


def sanitize_for_digest(content: str) -> str:
    """Normalize note text for digest building.

    Fenced code becomes a single marker line, completed checklist lines are
    dropped, surviving lines are trimmed and kept in order. Blank lines are
    removed.
    """
    stripped = strip_fenced_code_blocks(content, marker=CODE_BLOCK_MARKER)
    results: list[str] = []
    for line in stripped.splitlines():
        trimmed = line.strip()
        if not trimmed or is_completed_item(trimmed):
            continue
        results.append(trimmed)
    return "\n".join(results)


def sanitize_for_preview(content: str) -> str:
    """Normalize note text for a one-line row preview.

    Fenced code disappears entirely, headings and completed checklist lines
    are dropped, and the surviving trimmed lines are joined by spaces.
    """
    stripped = strip_fenced_code_blocks(content)
    results: list[str] = []
    for line in stripped.splitlines():
        trimmed = line.strip()
        if is_completed_item(trimmed) or trimmed.startswith("#"):
            continue
        results.append(trimmed)
    return " ".join(results)


def preview_text(content: str, max_chars: int = 120, empty_placeholder: str = "") -> str:
    """Collapsed, truncated preview string for a note row.

    Returns empty_placeholder when nothing survives sanitizing, e.g. a note
    holding only headings, fenced code or completed items.
    """
    text = _WHITESPACE_RUN.sub(" ", sanitize_for_preview(content)).strip()
    if not text:
        return empty_placeholder
    if len(text) <= max_chars:
        return text
    return text[:max_chars].rstrip() + "…"
