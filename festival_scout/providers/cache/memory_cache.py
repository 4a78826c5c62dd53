"""In-memory cache provider using cachetools.TLRUCache.

Each entry carries its own expiry (``TLRUCache``'s time-to-use function
reads it from the stored :class:`CacheEntry`), so per-call TTLs are honoured.
Expired entries are invisible to reads immediately; they are physically
evicted on the next write or by the periodic sweep started with
:meth:`MemoryCacheProvider.start`.
"""

from __future__ import annotations

import asyncio
import math
import time
from typing import Any, Callable

import structlog
from cachetools import TLRUCache

from festival_scout.config.cache_policy import DEFAULT_TTL
from festival_scout.interfaces.cache_provider import ICacheProvider
from festival_scout.models.cache import CacheEntry

logger = structlog.get_logger(logger_name=__name__)


def _entry_expiry(_key: str, entry: CacheEntry, _now: float) -> float:
    return entry.expires_at if entry.expires_at is not None else math.inf


class MemoryCacheProvider(ICacheProvider):
    """Process-local TTL cache backed by ``cachetools.TLRUCache``.

    Parameters
    ----------
    max_size:
        Maximum number of entries before the least-recently-used entry
        is evicted.
    ttl:
        Default time-to-live in seconds when ``set`` is called without one.
    sweep_interval:
        Seconds between background sweeps of expired entries.
    timer:
        Monotonic clock; injectable for tests.
    """

    def __init__(
        self,
        max_size: int = 5000,
        ttl: int = DEFAULT_TTL,
        sweep_interval: float = 3600.0,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._default_ttl = ttl
        self._sweep_interval = sweep_interval
        self._timer = timer
        self._cache: TLRUCache[str, CacheEntry] = TLRUCache(
            maxsize=max_size, ttu=_entry_expiry, timer=timer
        )
        self._sweeper: asyncio.Task | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start the periodic sweep on the running event loop (idempotent)."""
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.create_task(self._sweep_forever())

    async def close(self) -> None:
        if self._sweeper is not None:
            self._sweeper.cancel()
            try:
                await self._sweeper
            except asyncio.CancelledError:
                pass
            self._sweeper = None

    async def _sweep_forever(self) -> None:
        while True:
            await asyncio.sleep(self._sweep_interval)
            self.sweep()

    def sweep(self) -> int:
        """Evict every expired entry now; returns how many were removed."""
        removed = len(self._cache.expire())
        if removed:
            logger.debug("cache_sweep", removed=removed)
        return removed

    # ------------------------------------------------------------------
    # ICacheProvider implementation
    # ------------------------------------------------------------------

    async def has(self, key: str) -> bool:
        return key in self._cache

    async def get(self, key: str) -> Any | None:
        """Retrieve the cached value for *key*, or ``None`` if missing/expired."""
        entry = self._cache.get(key)
        if entry is None:
            logger.debug("cache_miss", key=key)
            return None
        logger.debug("cache_hit", key=key)
        return entry.value

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        effective_ttl = self._default_ttl if ttl is None else ttl
        self._cache[key] = CacheEntry.create(key, value, effective_ttl, now=self._timer())
        logger.debug("cache_set", key=key, ttl=effective_ttl)

    async def delete(self, key: str) -> None:
        self._cache.pop(key, None)
        logger.debug("cache_delete", key=key)

    async def invalidate_pattern(self, pattern: str) -> int:
        """Remove every live key containing *pattern* as a substring."""
        matching = [key for key in list(self._cache.keys()) if pattern in key and key in self._cache]
        for key in matching:
            self._cache.pop(key, None)
        logger.info("cache_invalidate_pattern", pattern=pattern, removed=len(matching))
        return len(matching)

    async def clear(self) -> None:
        self._cache.clear()

    def get_provider_name(self) -> str:
        return "memory"
