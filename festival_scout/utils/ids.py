"""Identifier generation for festivals, acts and artists.

Festival ids are deterministic so re-saving the same festival upserts
instead of duplicating; act and artist ids are random.
"""

from __future__ import annotations

import hashlib
import uuid

from festival_scout.utils.text_normalizer import slugify_name


def generate_festival_id(name: str, location: str = "", start_date: str | None = None) -> str:
    """Derive a stable festival id from name, location and start date.

    The readable prefix is truncated; an 8-character SHA-1 suffix over the
    full normalized triple keeps ids distinct.
    """
    name_slug = slugify_name(name)
    location_slug = slugify_name(location)
    date_part = start_date or "undated"
    digest = hashlib.sha1(
        f"{name_slug}|{location_slug}|{date_part}".encode("utf-8")
    ).hexdigest()[:8]
    parts = [p for p in (name_slug[:60], location_slug[:40], date_part) if p]
    return "festival-" + "-".join(parts + [digest])


def generate_act_id(festival_name: str) -> str:
    slug = slugify_name(festival_name)[:60] or "festival"
    return f"act-{slug}-{uuid.uuid4().hex[:10]}"


def generate_artist_id() -> str:
    return f"artist-{uuid.uuid4().hex}"


def generate_review_id() -> str:
    return uuid.uuid4().hex
