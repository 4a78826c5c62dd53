"""Abstract base class for cache service providers.

Defines the contract for the key-value TTL cache used across festival_scout
(parsed documents, festivals awaiting review, AI responses, recommendation
results).  Implementations may keep entries in process memory, in Redis, or
nowhere at all.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class ICacheProvider(ABC):
    """Contract for key-value cache services.

    TTL is evaluated at read time: an entry read at or after its expiry is
    reported as absent even if a backend has not evicted it yet.  All
    operations are async and safe for concurrent callers.
    """

    @abstractmethod
    async def has(self, key: str) -> bool:
        """Return ``True`` if *key* is present and not expired.

        Implementations may evict the entry as a side effect when it has
        expired.
        """

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Retrieve the value stored under *key*.

        Parameters
        ----------
        key:
            The cache key to look up.

        Returns
        -------
        Any or None
            The cached value if present and not expired; ``None`` otherwise.
        """

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store *value* under *key* with an optional time-to-live.

        Parameters
        ----------
        key:
            The cache key.
        value:
            The value to store.  Shared backends require JSON-serialisable
            values (str, int, float, bool, dict, list, None).
        ttl:
            Time-to-live in seconds.  ``None`` applies the backend's
            default TTL.
        """

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove the entry stored under *key* (no-op if absent)."""

    @abstractmethod
    async def invalidate_pattern(self, pattern: str) -> int:
        """Remove every entry whose key contains *pattern*.

        *pattern* is a literal substring, not a regex or glob.

        Returns
        -------
        int
            The number of keys removed.
        """

    @abstractmethod
    async def clear(self) -> None:
        """Remove every entry owned by this cache."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier for this backend, e.g. ``"memory"``."""
