"""No-op cache used when caching is disabled (``CACHE_BACKEND=none``)."""

from __future__ import annotations

from typing import Any

from festival_scout.interfaces.cache_provider import ICacheProvider


class NullCacheProvider(ICacheProvider):
    """Stores nothing; every read reports absence."""

    async def has(self, key: str) -> bool:
        return False

    async def get(self, key: str) -> Any | None:
        return None

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        return None

    async def delete(self, key: str) -> None:
        return None

    async def invalidate_pattern(self, pattern: str) -> int:
        return 0

    async def clear(self) -> None:
        return None

    def get_provider_name(self) -> str:
        return "none"
