# src/cache/fingerprint.py — v3
"""Input fingerprinting for generation calls.

The fingerprint covers exactly what changes a generation request: the
ordered digest batch plus provider, model and limit. Encoding is canonical
(sorted keys at every level, compact separators, list order preserved) so
logically identical input always hashes the same.
"""

from __future__ import annotations

import hashlib
import json
import logging
from collections.abc import Sequence

from pydantic import BaseModel

logger = logging.getLogger(__name__)


def canonical_json(payload: object) -> str:
    """Serialize with sorted keys and no insignificant whitespace."""
    return json.dumps(
        payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False
    )


def compute_input_fingerprint(
    digests: Sequence[BaseModel],
    provider_id: str,
    model_name: str,
    limit: int,
) -> str:
    """Compute the SHA-256 fingerprint of a generation request.

    Args:
        digests: Ordered digest batch; reordering changes the result.
        provider_id: LLM provider identifier.
        model_name: Model name used for generation.
        limit: Requested digest limit.

    Returns:
        64-char lowercase hex digest, or "" if the input cannot be
        serialized (callers treat that as a cache miss).
    """
    try:
        payload = {
            "providerId": provider_id,
            "modelName": model_name,
            "limit": limit,
            "digests": [d.model_dump(mode="json", by_alias=True) for d in digests],
        }
        data = canonical_json(payload).encode("utf-8")
    except (TypeError, ValueError, AttributeError) as e:
        logger.warning("Failed to serialize fingerprint input: %s", e)
        return ""
    return hashlib.sha256(data).hexdigest()
