"""Festival review, persistence and artist linking.

A freshly crawled festival is held in the cache under a review id for
24 hours so it can be inspected and corrected before an explicit save
promotes it to durable storage.
"""

from __future__ import annotations

from festival_scout.config import cache_policy
from festival_scout.interfaces.cache_provider import ICacheProvider
from festival_scout.interfaces.repository import IFestivalRepository
from festival_scout.models.artist import Artist
from festival_scout.models.festival import Festival
from festival_scout.services.festival_crawler import FestivalCrawler, finalize_festival
from festival_scout.services.identity_resolver import ArtistIdentityResolver
from festival_scout.utils.concurrency import fire_and_forget
from festival_scout.utils.ids import generate_review_id
from festival_scout.utils.logging import get_logger
from festival_scout.utils.text_normalizer import MATCH_ACCEPT_THRESHOLD, match_score


def link_artists_to_acts(festival: Festival, artists: list[Artist]) -> Festival:
    """Attach the best-matching artist to every unlinked act.

    An act is linked when some artist's name scores at least
    :data:`MATCH_ACCEPT_THRESHOLD` against the act's artist name; on ties the
    earlier artist wins.  Already-linked acts are left alone.
    """
    lineup = []
    for act in festival.lineup:
        if act.is_linked:
            lineup.append(act)
            continue
        best: Artist | None = None
        best_score = 0.0
        for artist in artists:
            if not artist.id:
                continue
            score = match_score(act.artist_name, artist.name)
            if score >= MATCH_ACCEPT_THRESHOLD and score > best_score:
                best, best_score = artist, score
        lineup.append(act.model_copy(update={"artist_id": best.id}) if best else act)
    return festival.model_copy(update={"lineup": lineup})


class FestivalService:
    """Crawl, review, save and link festivals."""

    def __init__(
        self,
        repository: IFestivalRepository,
        crawler: FestivalCrawler,
        cache: ICacheProvider,
        resolver: ArtistIdentityResolver | None = None,
    ) -> None:
        self._repository = repository
        self._crawler = crawler
        self._cache = cache
        self._resolver = resolver
        self._logger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Review cache
    # ------------------------------------------------------------------

    async def grab_festival_data(
        self,
        sources: list[str],
        name: str | None = None,
        files: list[str] | None = None,
    ) -> tuple[str, Festival]:
        """Crawl *sources* and hold the result for review.

        *files* are extra inputs (``data:`` URIs) appended to the sources.
        *name* overrides whatever name the crawl produced.  Returns the
        review id and the festival.
        """
        inputs = list(sources) + list(files or [])
        festival = await self._crawler.crawl_festival(inputs)
        if name and name.strip():
            self._logger.info("festival_name_overridden", crawled=festival.name, name=name)
            festival = festival.model_copy(
                update={
                    "name": name.strip(),
                    "lineup": [
                        act.model_copy(update={"festival_name": name.strip()})
                        for act in festival.lineup
                    ],
                }
            )

        review_id = generate_review_id()
        await self._cache.set(
            cache_policy.festival_review_key(review_id),
            festival.model_dump(mode="json", by_alias=True),
            ttl=cache_policy.FESTIVAL_REVIEW_TTL,
        )
        self._logger.info(
            "festival_cached_for_review",
            review_id=review_id,
            name=festival.name,
            ttl=cache_policy.FESTIVAL_REVIEW_TTL,
        )
        return review_id, festival

    async def get_cached_festival(self, review_id: str) -> Festival | None:
        cached = await self._cache.get(cache_policy.festival_review_key(review_id))
        if cached is None:
            self._logger.warning("festival_review_missing", review_id=review_id)
            return None
        return Festival.model_validate(cached)

    # ------------------------------------------------------------------
    # Durable storage
    # ------------------------------------------------------------------

    async def save_festival(self, festival: Festival) -> str:
        """Persist *festival* and return its id.

        Ids are assigned where missing and acts are stamped with the
        festival's name and id.  Cached festival lists and recommendations
        are invalidated in the background.
        """
        festival = finalize_festival(festival)
        saved = await self._repository.save_festival(festival)
        self._schedule_invalidation(saved.id)
        self._logger.info("festival_saved", festival_id=saved.id, acts=len(saved.lineup))
        return saved.id

    async def delete_festival(self, festival_id: str) -> bool:
        deleted = await self._repository.delete_festival(festival_id)
        if deleted:
            self._schedule_invalidation(festival_id)
        return deleted

    async def get_festival_by_id(self, festival_id: str) -> Festival | None:
        key = cache_policy.festival_key(festival_id)
        cached = await self._cache.get(key)
        if cached is not None:
            return Festival.model_validate(cached)
        festival = await self._repository.get_festival_by_id(festival_id)
        if festival is not None:
            await self._cache.set(
                key, festival.model_dump(mode="json", by_alias=True), ttl=cache_policy.DEFAULT_TTL
            )
        return festival

    async def get_all_festivals(self) -> list[Festival]:
        return await self._repository.get_all_festivals()

    # ------------------------------------------------------------------
    # Artist linking
    # ------------------------------------------------------------------

    def link_artists_to_acts(self, festival: Festival, artists: list[Artist]) -> Festival:
        linked = link_artists_to_acts(festival, artists)
        self._logger.info(
            "festival_artists_linked",
            festival_id=festival.id,
            linked=sum(1 for act in linked.lineup if act.is_linked),
            acts=len(linked.lineup),
        )
        return linked

    async def resolve_lineup(self, festival: Festival) -> Festival:
        """Link unlinked acts to stored artists found by identity resolution."""
        if self._resolver is None:
            return festival
        context = {"festival": festival.name, "location": festival.location}
        artists: list[Artist] = []
        names = {act.artist_name for act in festival.lineup if not act.is_linked}
        for name in festival.artist_names():
            if name not in names:
                continue
            artist = await self._resolver.resolve_artist_identity(name, context)
            if artist is not None and all(a.id != artist.id for a in artists):
                artists.append(artist)
        return self.link_artists_to_acts(festival, artists)

    def _schedule_invalidation(self, festival_id: str) -> None:
        fire_and_forget(
            self._cache.invalidate_pattern(cache_policy.FESTIVALS_TAG),
            "invalidate festival lists",
        )
        fire_and_forget(
            self._cache.invalidate_pattern(festival_id),
            f"invalidate festival {festival_id}",
        )
