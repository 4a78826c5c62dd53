"""Abstract base classes for the durable festival and artist stores.

The store is opaque: callers see whole records keyed by id and never rely on
how they are indexed on disk.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from festival_scout.models.artist import Artist
from festival_scout.models.festival import Festival


class IFestivalRepository(ABC):
    """Contract for durable festival storage."""

    @abstractmethod
    async def get_festival_by_id(self, festival_id: str) -> Festival | None:
        """Return the stored festival or ``None``."""

    @abstractmethod
    async def get_all_festivals(self) -> list[Festival]:
        """Return every stored festival."""

    @abstractmethod
    async def save_festival(self, festival: Festival) -> Festival:
        """Insert or replace *festival* (keyed by its id) and return it."""

    @abstractmethod
    async def delete_festival(self, festival_id: str) -> bool:
        """Delete the festival; ``False`` when it did not exist."""


class IArtistRepository(ABC):
    """Contract for durable artist storage."""

    @abstractmethod
    async def get_artist_by_id(self, artist_id: str) -> Artist | None:
        """Return the stored artist or ``None``."""

    @abstractmethod
    async def search_artist_by_name(self, name: str) -> Artist | None:
        """Return the stored artist best matching *name*, or ``None``."""

    @abstractmethod
    async def get_artist_by_mapping_id(self, source: str, external_id: str) -> Artist | None:
        """Return the stored artist carrying ``mapping_ids[source] == external_id``."""

    @abstractmethod
    async def get_all_artists(self) -> list[Artist]:
        """Return every stored artist."""

    @abstractmethod
    async def save_artist(self, artist: Artist) -> Artist:
        """Insert or replace *artist* (keyed by its id) and return it."""

    @abstractmethod
    async def delete_artist(self, artist_id: str) -> bool:
        """Delete the artist; ``False`` when it did not exist."""
