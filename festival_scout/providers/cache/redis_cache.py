"""Redis-backed cache provider for multi-process deployments.

Values are stored JSON-encoded with ``SETEX`` so Redis enforces expiry.
Every key is namespaced under a prefix; :meth:`clear` and pattern
invalidation only ever touch keys under that prefix.  Pattern invalidation
walks the keyspace with ``SCAN MATCH`` (never ``KEYS``) after escaping glob
metacharacters, so the pattern is matched as a literal substring.

Redis being unreachable degrades the cache to a miss rather than failing
the caller: reads log a warning and report absence, writes log and return.
"""

from __future__ import annotations

import json
import re
from typing import Any

import redis.asyncio as aioredis
import structlog
from redis.exceptions import RedisError

from festival_scout.config.cache_policy import DEFAULT_TTL
from festival_scout.interfaces.cache_provider import ICacheProvider

logger = structlog.get_logger(logger_name=__name__)

_GLOB_SPECIALS = re.compile(r"([*?\[\]\\])")
_DELETE_BATCH = 500


def escape_glob(pattern: str) -> str:
    """Escape Redis glob metacharacters so *pattern* matches literally."""
    return _GLOB_SPECIALS.sub(r"\\\1", pattern)


class RedisCacheProvider(ICacheProvider):
    """Shared TTL cache stored in Redis.

    Parameters
    ----------
    client:
        A ``redis.asyncio.Redis`` created with ``decode_responses=True``.
    ttl:
        Default time-to-live in seconds.
    namespace:
        Prefix applied to every key.
    """

    def __init__(
        self,
        client: aioredis.Redis,
        ttl: int = DEFAULT_TTL,
        namespace: str = "festival_scout:",
    ) -> None:
        self._client = client
        self._default_ttl = ttl
        self._namespace = namespace

    @classmethod
    def from_url(cls, url: str, ttl: int = DEFAULT_TTL) -> RedisCacheProvider:
        return cls(aioredis.from_url(url, decode_responses=True), ttl=ttl)

    def _key(self, key: str) -> str:
        return f"{self._namespace}{key}"

    async def close(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # ICacheProvider implementation
    # ------------------------------------------------------------------

    async def has(self, key: str) -> bool:
        try:
            return bool(await self._client.exists(self._key(key)))
        except RedisError as exc:
            logger.warning("redis_cache_unavailable", operation="has", key=key, error=str(exc))
            return False

    async def get(self, key: str) -> Any | None:
        try:
            raw = await self._client.get(self._key(key))
        except RedisError as exc:
            logger.warning("redis_cache_unavailable", operation="get", key=key, error=str(exc))
            return None
        if raw is None:
            logger.debug("cache_miss", key=key)
            return None
        logger.debug("cache_hit", key=key)
        return json.loads(raw)

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        effective_ttl = self._default_ttl if ttl is None else ttl
        if effective_ttl <= 0:
            # Already expired, same as the in-memory backend.
            await self.delete(key)
            return
        payload = json.dumps(value, default=str)
        try:
            await self._client.setex(self._key(key), int(effective_ttl), payload)
        except RedisError as exc:
            logger.warning("redis_cache_unavailable", operation="set", key=key, error=str(exc))
            return
        logger.debug("cache_set", key=key, ttl=effective_ttl)

    async def delete(self, key: str) -> None:
        try:
            await self._client.delete(self._key(key))
        except RedisError as exc:
            logger.warning("redis_cache_unavailable", operation="delete", key=key, error=str(exc))

    async def invalidate_pattern(self, pattern: str) -> int:
        match = f"{escape_glob(self._namespace)}*{escape_glob(pattern)}*"
        removed = await self._delete_matching(match)
        logger.info("cache_invalidate_pattern", pattern=pattern, removed=removed)
        return removed

    async def clear(self) -> None:
        await self._delete_matching(f"{escape_glob(self._namespace)}*")

    def get_provider_name(self) -> str:
        return "redis"

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _delete_matching(self, match: str) -> int:
        removed = 0
        batch: list[str] = []
        try:
            async for key in self._client.scan_iter(match=match, count=_DELETE_BATCH):
                batch.append(key)
                if len(batch) >= _DELETE_BATCH:
                    removed += await self._client.delete(*batch)
                    batch.clear()
            if batch:
                removed += await self._client.delete(*batch)
        except RedisError as exc:
            logger.warning("redis_cache_unavailable", operation="scan_delete", match=match, error=str(exc))
        return removed
