"""Artist identity resolution against an external catalog.

Catalog search results are noisy: a query for "Arctic Monkeys" returns
tribute bands and side projects.  Every candidate is scored with the shared
word-overlap :func:`match_score` against the normalized query, weak matches
are dropped, and the rest are ranked by score, then exact normalized match,
then follower count.

An artist is considered to *exist* only when a ranked search returns at
least one candidate; the durable record is then looked up by catalog id or
name.  ``None`` from :meth:`resolve_artist_identity` tells the caller to
create and enrich a new Artist.
"""

from __future__ import annotations

from dataclasses import dataclass

from festival_scout.interfaces.music_catalog_provider import ArtistCandidate, IMusicCatalogProvider
from festival_scout.interfaces.repository import IArtistRepository
from festival_scout.models.artist import Artist
from festival_scout.utils.errors import CatalogError
from festival_scout.utils.logging import get_logger
from festival_scout.utils.text_normalizer import MATCH_ACCEPT_THRESHOLD, match_score, normalize_name

MAX_CANDIDATES = 10


@dataclass(frozen=True)
class RankedCandidate:
    """A catalog candidate with its match score against the query."""

    candidate: ArtistCandidate
    score: float
    exact: bool


def rank_candidates(query: str, candidates: list[ArtistCandidate]) -> list[RankedCandidate]:
    """Score, filter and order *candidates* for *query*."""
    norm_query = normalize_name(query)
    ranked = []
    for candidate in candidates:
        score = match_score(norm_query, candidate.name)
        if score < MATCH_ACCEPT_THRESHOLD:
            continue
        ranked.append(
            RankedCandidate(
                candidate=candidate,
                score=score,
                exact=normalize_name(candidate.name) == norm_query,
            )
        )
    ranked.sort(key=lambda r: (-r.score, not r.exact, -r.candidate.followers))
    return ranked[:MAX_CANDIDATES]


class ArtistIdentityResolver:
    """Resolve lineup names to catalog candidates and stored artists.

    Parameters
    ----------
    catalog:
        External catalog used for candidate search.
    repository:
        Durable artist store; without one, resolution only ever answers
        "create a new artist".
    """

    def __init__(
        self,
        catalog: IMusicCatalogProvider,
        repository: IArtistRepository | None = None,
    ) -> None:
        self._catalog = catalog
        self._repository = repository
        self._logger = get_logger(__name__)

    async def search_ranked(self, name: str) -> list[RankedCandidate]:
        query = normalize_name(name)
        if not query:
            return []
        try:
            candidates = await self._catalog.search_artists(query)
        except CatalogError as exc:
            self._logger.warning(
                "identity_search_failed",
                query=query,
                catalog=self._catalog.get_provider_name(),
                error=str(exc),
            )
            return []
        ranked = rank_candidates(query, candidates)
        self._logger.debug(
            "identity_search",
            query=query,
            returned=len(candidates),
            accepted=len(ranked),
            best=ranked[0].candidate.name if ranked else None,
        )
        return ranked

    async def search_artists_by_name(self, name: str) -> list[ArtistCandidate]:
        """Ranked catalog candidates for *name* (at most ten, each scoring >= 0.3)."""
        return [r.candidate for r in await self.search_ranked(name)]

    async def search_artist_by_name(self, name: str) -> ArtistCandidate | None:
        """The best-ranked candidate for *name*, or ``None``."""
        ranked = await self.search_ranked(name)
        return ranked[0].candidate if ranked else None

    async def resolve_artist_identity(self, name: str, context: dict | None = None) -> Artist | None:
        """Return the stored Artist for *name*, or ``None`` if one must be created.

        *context* (festival name, location) is logged for traceability; it
        does not change the decision.
        """
        best = await self.search_artist_by_name(name)
        if best is None:
            self._logger.info("identity_unresolved", name=name, reason="no_candidate", **(context or {}))
            return None
        if self._repository is None:
            return None

        source = self._catalog.get_provider_name()
        artist = await self._repository.get_artist_by_mapping_id(source, best.id)
        if artist is None:
            artist = await self._repository.search_artist_by_name(name)
        if artist is None and normalize_name(best.name) != normalize_name(name):
            artist = await self._repository.search_artist_by_name(best.name)

        self._logger.info(
            "identity_resolved" if artist else "identity_unresolved",
            name=name,
            candidate=best.name,
            candidate_id=best.id,
            artist_id=artist.id if artist else None,
            **(context or {}),
        )
        return artist
