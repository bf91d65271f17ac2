"""
Canonical hashing of requested changes.

The intent hash identifies *what* was asked for (kind, namespace, slug, spec),
never who asked or when. Two requests that differ only in key order hash the
same.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any

# Hex characters kept from the sha256 digest. Short on purpose; existing logs
# were written with this width.
INTENT_HASH_WIDTH = 16


def _normalize_numbers(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, dict):
        return {key: _normalize_numbers(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_normalize_numbers(item) for item in value]
    return value


def canonicalize(value: Any) -> str:
    """
    Render a JSON-like value as a canonical string.

    Object keys are sorted at every depth, arrays keep their order, separators
    are compact and non-ASCII characters are kept verbatim. Whole-number floats
    render as integers (1.0 and 1 are the same JSON number).
    """
    return json.dumps(_normalize_numbers(value), sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def compute_intent_hash(payload: dict[str, Any]) -> str:
    """sha256 of the canonical payload, truncated to INTENT_HASH_WIDTH."""
    digest = hashlib.sha256(canonicalize(payload).encode("utf-8")).hexdigest()
    return digest[:INTENT_HASH_WIDTH]


def compute_dedupe_key(kind: str, namespace: str, slug: str, action: str) -> str:
    return f"{kind}|{namespace}|{slug}|{action}"


def artifact_key(kind: str, namespace: str, slug: str) -> tuple[str, str, str]:
    """Identity triple used to bind an artifact id."""
    return (kind, namespace, slug)
