"""Cache TTLs and key builders.

Every cache key and lifetime used by the services is defined here so
invalidation patterns and writers cannot drift apart.  Keys are plain
strings; :meth:`ICacheProvider.invalidate_pattern` matches substrings, so
prefixes are chosen not to be substrings of one another's ids.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any

DEFAULT_TTL = 60 * 60
PARSED_DOCUMENT_TTL = 24 * 60 * 60
FESTIVAL_REVIEW_TTL = 24 * 60 * 60
AI_RESPONSE_TTL = 3 * 24 * 60 * 60
RECOMMENDATIONS_TTL = 60 * 60

FESTIVALS_TAG = "festivals"


def parsed_document_key(source: str) -> str:
    return f"parsed-festival:{source}"


def festival_review_key(review_id: str) -> str:
    return f"festival-review:{review_id}"


def festival_key(festival_id: str) -> str:
    return f"{FESTIVALS_TAG}:{festival_id}"


def recommendations_key(festival_id: str, preferences_hash: str) -> str:
    return f"recommendations:{festival_id}:{preferences_hash}"


def recommendations_pattern(festival_id: str) -> str:
    return f"recommendations:{festival_id}:"


def artist_key(artist_id: str) -> str:
    return f"artist:{artist_id}"


def ai_response_key(operation: str, payload: Any) -> str:
    return f"aiservice:{operation}:{stable_hash(payload)}"


def stable_hash(payload: Any) -> str:
    """SHA-256 over the canonical JSON form of *payload* (first 16 hex chars)."""
    encoded = json.dumps(payload, sort_keys=True, default=str).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()[:16]
