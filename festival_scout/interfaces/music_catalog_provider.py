"""Abstract base class for external music-catalog providers.

The identity resolver queries a catalog (Spotify) by artist name and ranks
what comes back; artist enrichment looks candidates up by catalog id.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class ArtistCandidate:
    """A single artist returned by a catalog search or lookup.

    Attributes
    ----------
    id:
        Catalog-specific artist identifier.
    name:
        The artist's name as listed by the catalog.
    genres:
        Catalog genre tags (may be empty).
    popularity:
        Catalog popularity on its own scale (Spotify: 0-100).
    followers:
        Follower count, used to break ranking ties.
    image_url:
        Largest available artist image, if any.
    profile_url:
        Public catalog page for the artist, if any.
    """

    id: str
    name: str
    genres: tuple[str, ...] = field(default_factory=tuple)
    popularity: int = 0
    followers: int = 0
    image_url: str | None = None
    profile_url: str | None = None


class IMusicCatalogProvider(ABC):
    """Contract for external artist catalogs."""

    @abstractmethod
    async def search_artists(self, name: str) -> list[ArtistCandidate]:
        """Search the catalog for artists matching *name*.

        Parameters
        ----------
        name:
            The (already normalized) artist name to search for.

        Returns
        -------
        list[ArtistCandidate]
            Raw catalog results in catalog order; ranking is the caller's job.

        Raises
        ------
        festival_scout.utils.errors.CatalogError
            If the catalog cannot be reached or rejects the request.
        """

    @abstractmethod
    async def get_artist_by_id(self, artist_id: str) -> ArtistCandidate | None:
        """Fetch one artist by catalog id; ``None`` when the id is unknown.

        Raises
        ------
        festival_scout.utils.errors.CatalogError
            If the catalog cannot be reached or rejects the request.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return the catalog's name, used as the source tag (``"spotify"``)."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if credentials are configured."""
