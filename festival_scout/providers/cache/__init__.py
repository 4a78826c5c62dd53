"""Cache backends and the settings-driven factory."""

from __future__ import annotations

import structlog
from redis.exceptions import RedisError

from festival_scout.config.settings import Settings
from festival_scout.interfaces.cache_provider import ICacheProvider
from festival_scout.providers.cache.memory_cache import MemoryCacheProvider
from festival_scout.providers.cache.null_cache import NullCacheProvider
from festival_scout.providers.cache.redis_cache import RedisCacheProvider

logger = structlog.get_logger(logger_name=__name__)


def build_cache_provider(settings: Settings) -> ICacheProvider:
    """Select the cache backend named by ``settings.cache_backend``.

    A Redis client that cannot be constructed (bad URL) falls back to the
    in-memory backend so the application still starts.
    """
    backend = settings.cache_backend
    if backend == "none":
        return NullCacheProvider()
    if backend == "redis":
        try:
            provider = RedisCacheProvider.from_url(settings.redis_url)
        except (RedisError, ValueError) as exc:
            logger.warning("redis_cache_init_failed", url=settings.redis_url, error=str(exc))
        else:
            logger.info("cache_backend_selected", backend="redis")
            return provider
    logger.info("cache_backend_selected", backend="memory")
    return MemoryCacheProvider(
        max_size=settings.cache_max_entries,
        sweep_interval=settings.cache_sweep_interval,
    )


__all__ = [
    "MemoryCacheProvider",
    "NullCacheProvider",
    "RedisCacheProvider",
    "build_cache_provider",
]
