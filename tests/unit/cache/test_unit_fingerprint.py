# tests/unit/cache/test_unit_fingerprint.py — v3
"""Tests for cache/fingerprint.py — canonical encoding and SHA-256 hashing."""

from __future__ import annotations

import hashlib
from unittest.mock import MagicMock

import pytest

from notedigest.cache.fingerprint import canonical_json, compute_input_fingerprint
from notedigest.core.models import Digest


def _digest(note_id: str, **overrides) -> Digest:
    values = dict(
        note_id=note_id,
        note_title=f"Note {note_id}",
        notebook_title="Work",
        created_at="2026-03-01T09:00:00Z",
        headings=("Plan",),
        bullets=("ship",),
        snippet="Body text.",
    )
    values.update(overrides)
    return Digest(**values)


class TestCanonicalJson:
    def test_sorted_compact(self):
        assert canonical_json({"b": 1, "a": [2, {"d": 3, "c": 4}]}) == '{"a":[2,{"c":4,"d":3}],"b":1}'

    def test_key_order_irrelevant(self):
        assert canonical_json({"x": 1, "y": 2}) == canonical_json({"y": 2, "x": 1})

    def test_non_ascii_kept(self):
        assert canonical_json({"t": "周报"}) == '{"t":"周报"}'


class TestComputeInputFingerprint:
    def test_sha256_hex(self):
        fp = compute_input_fingerprint([_digest("a")], "deepseek", "deepseek-chat", 20)
        assert len(fp) == 64
        assert fp == fp.lower()
        int(fp, 16)

    def test_matches_canonical_payload(self):
        digest = _digest("a")
        expected_payload = canonical_json({
            "providerId": "p",
            "modelName": "m",
            "limit": 5,
            "digests": [digest.model_dump(mode="json", by_alias=True)],
        })
        expected = hashlib.sha256(expected_payload.encode("utf-8")).hexdigest()
        assert compute_input_fingerprint([digest], "p", "m", 5) == expected

    def test_stable_across_construction_order(self):
        first = Digest(
            note_id="a", note_title="T", notebook_title="W",
            created_at="2026-03-01T09:00:00Z", snippet="s",
        )
        second = Digest(
            snippet="s", created_at="2026-03-01T09:00:00Z",
            notebook_title="W", note_title="T", note_id="a",
        )
        assert compute_input_fingerprint([first], "p", "m", 1) == compute_input_fingerprint([second], "p", "m", 1)

    def test_digest_order_matters(self):
        a, b = _digest("a"), _digest("b")
        assert compute_input_fingerprint([a, b], "p", "m", 2) != compute_input_fingerprint([b, a], "p", "m", 2)

    @pytest.mark.parametrize("provider,model,limit", [
        ("gemini", "deepseek-chat", 20),
        ("deepseek", "deepseek-reasoner", 20),
        ("deepseek", "deepseek-chat", 10),
    ])
    def test_parameters_change_fingerprint(self, provider, model, limit):
        digests = [_digest("a")]
        base = compute_input_fingerprint(digests, "deepseek", "deepseek-chat", 20)
        assert compute_input_fingerprint(digests, provider, model, limit) != base

    def test_content_change(self):
        base = compute_input_fingerprint([_digest("a")], "p", "m", 1)
        changed = compute_input_fingerprint([_digest("a", snippet="Other.")], "p", "m", 1)
        assert base != changed

    def test_empty_batch_still_hashes(self):
        assert len(compute_input_fingerprint([], "p", "m", 20)) == 64

    def test_serialization_failure_returns_empty(self):
        broken = MagicMock()
        broken.model_dump.side_effect = TypeError("not serializable")
        assert compute_input_fingerprint([broken], "p", "m", 1) == ""

    def test_unencodable_value_returns_empty(self):
        odd = MagicMock()
        odd.model_dump.return_value = {"value": object()}
        assert compute_input_fingerprint([odd], "p", "m", 1) == ""
