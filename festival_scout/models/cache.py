"""Cache entry model shared by the cache backends."""

from __future__ import annotations

import time
from typing import Any

from pydantic import BaseModel, ConfigDict


class CacheEntry(BaseModel):
    """A stored value with its absolute expiry.

    ``expires_at`` is ``created_at + ttl`` (``None`` when the entry never
    expires).  Any read at or after ``expires_at`` treats the entry as
    absent.
    """

    model_config = ConfigDict(frozen=True)

    key: str
    value: Any
    created_at: float
    expires_at: float | None = None

    @classmethod
    def create(cls, key: str, value: Any, ttl: float | None, now: float | None = None) -> CacheEntry:
        created = time.monotonic() if now is None else now
        expires = created + ttl if ttl is not None else None
        return cls(key=key, value=value, created_at=created, expires_at=expires)

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at
