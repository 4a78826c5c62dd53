"""Durable repository adapters (IFestivalRepository, IArtistRepository)."""

from festival_scout.providers.repository.sqlite_artist_repository import SQLiteArtistRepository
from festival_scout.providers.repository.sqlite_festival_repository import SQLiteFestivalRepository

__all__ = ["SQLiteArtistRepository", "SQLiteFestivalRepository"]
