"""Artist lifecycle: lookup, creation, enrichment and bulk crawling.

New artists are created lazily from lineup names.  Catalog data (name,
catalog id, streaming link, popularity, image) wins over AI-generated data;
the AI contributes description, social links and additional genres.  An AI
failure never blocks creation -- the catalog-only record is kept.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal
from urllib.parse import quote_plus, urlparse

import structlog

from festival_scout.config import cache_policy
from festival_scout.interfaces.cache_provider import ICacheProvider
from festival_scout.interfaces.festival_ai import IFestivalAI
from festival_scout.interfaces.music_catalog_provider import ArtistCandidate, IMusicCatalogProvider
from festival_scout.interfaces.repository import IArtistRepository
from festival_scout.models.artist import Artist, merge_genres
from festival_scout.models.festival import Festival
from festival_scout.services.identity_resolver import ArtistIdentityResolver
from festival_scout.utils.concurrency import fire_and_forget
from festival_scout.utils.errors import CatalogError, FestivalScoutError, LLMError
from festival_scout.utils.ids import generate_artist_id
from festival_scout.utils.logging import get_logger

_AI_SOURCE = "ai"


@dataclass(frozen=True)
class ArtistCrawlResult:
    """Outcome of crawling one lineup name."""

    name: str
    status: Literal["exists", "crawled", "error"]
    artist_id: str | None = None
    error: str | None = None


def build_artist_context(artist_name: str, festival: Festival | None) -> str | None:
    """Festival context handed to the AI when enriching *artist_name*."""
    if festival is None:
        return None
    if festival.website:
        host = urlparse(festival.website).netloc or festival.website
        query = f"{artist_name} site:{host}"
    else:
        query = f"{artist_name} {festival.name}"
    return (
        f"Festival: {festival.name}\n"
        f"Additional info:\nhttps://www.google.com/search?q={quote_plus(query)}"
    )


class ArtistService:
    """Create, enrich and persist artists.

    Parameters
    ----------
    repository:
        Durable artist store.
    resolver:
        Identity resolver; when ``None`` existence checks fall back to a
        repository name lookup.
    catalog:
        External catalog for authoritative artist data (optional).
    ai:
        AI capability used for enrichment (optional).
    cache:
        Cache for ``artist:<id>`` records.
    """

    def __init__(
        self,
        repository: IArtistRepository,
        resolver: ArtistIdentityResolver | None,
        catalog: IMusicCatalogProvider | None,
        ai: IFestivalAI | None,
        cache: ICacheProvider,
    ) -> None:
        self._repository = repository
        self._resolver = resolver
        self._catalog = catalog
        self._ai = ai
        self._cache = cache
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Lookup and persistence
    # ------------------------------------------------------------------

    async def get_artist_by_id(self, artist_id: str) -> Artist | None:
        key = cache_policy.artist_key(artist_id)
        cached = await self._cache.get(key)
        if cached is not None:
            return Artist.model_validate(cached)

        artist = await self._repository.get_artist_by_id(artist_id)
        if artist is not None:
            await self._cache.set(
                key, artist.model_dump(mode="json", by_alias=True), ttl=cache_policy.DEFAULT_TTL
            )
        return artist

    async def get_all_artists(self) -> list[Artist]:
        return await self._repository.get_all_artists()

    async def save_artist(self, artist: Artist) -> Artist:
        """Persist *artist*, assigning an id when it has none."""
        if not artist.id:
            self._logger.warning("artist_id_missing", name=artist.name)
            artist = artist.model_copy(update={"id": generate_artist_id()})
        saved = await self._repository.save_artist(artist)
        await self._cache.invalidate_pattern(cache_policy.artist_key(saved.id))
        self._logger.info("artist_saved", artist_id=saved.id, name=saved.name)
        return saved

    async def delete_artist(self, artist_id: str) -> bool:
        deleted = await self._repository.delete_artist(artist_id)
        await self._cache.invalidate_pattern(cache_policy.artist_key(artist_id))
        self._logger.info("artist_deleted", artist_id=artist_id, deleted=deleted)
        return deleted

    # ------------------------------------------------------------------
    # Crawling
    # ------------------------------------------------------------------

    async def crawl_artist_by_name(
        self,
        name: str,
        catalog_id: str | None = None,
        context: str | None = None,
    ) -> Artist:
        """Build an enriched (unsaved) Artist for *name*.

        The catalog is consulted by *catalog_id* when given, otherwise by
        ranked name search.  A fresh id is always assigned.
        """
        candidate = await self._find_candidate(name, catalog_id)
        if candidate is None:
            self._logger.warning("artist_not_in_catalog", name=name)

        enriched = await self._enrich(candidate.name if candidate else name, candidate, context)
        artist = self._merge(name, candidate, enriched)
        self._logger.info(
            "artist_crawled",
            name=artist.name,
            catalog_match=candidate is not None,
            ai_enriched=enriched is not None,
        )
        return artist

    async def create_artist(
        self,
        name: str,
        festival: Festival | None = None,
        catalog_id: str | None = None,
    ) -> Artist:
        """Crawl a new artist and save it."""
        self._logger.info("artist_creating", name=name)
        artist = await self.crawl_artist_by_name(
            name, catalog_id=catalog_id, context=build_artist_context(name, festival)
        )
        return await self.save_artist(artist)

    async def crawl_artist_details(self, artist_id: str, context: str | None = None) -> Artist | None:
        """Re-enrich a stored artist, keeping its id and name.

        Returns ``None`` when no artist with *artist_id* exists.  The result
        is not saved.
        """
        existing = await self._repository.get_artist_by_id(artist_id)
        if existing is None:
            self._logger.warning("artist_not_found", artist_id=artist_id)
            return None
        catalog_id = existing.mapping_ids.get(self._catalog_source())
        enriched = await self.crawl_artist_by_name(existing.name, catalog_id=catalog_id, context=context)
        return enriched.model_copy(
            update={
                "id": existing.id,
                "name": existing.name,
                "mapping_ids": {**existing.mapping_ids, **enriched.mapping_ids},
            }
        )

    async def crawl_artists(
        self,
        names: list[str],
        festival: Festival | None = None,
        force: bool = False,
    ) -> list[ArtistCrawlResult]:
        """Ensure every name in *names* has an Artist record.

        Existing artists are reported as ``exists``; with *force* they are
        re-crawled in the background.  New names are created synchronously.
        Per-name failures are reported as ``error`` and do not stop the run.
        """
        seen: set[str] = set()
        unique: list[str] = []
        for name in names:
            key = name.strip().casefold()
            if key and key not in seen:
                seen.add(key)
                unique.append(name.strip())

        results: list[ArtistCrawlResult] = []
        for name in unique:
            try:
                existing = await self._find_existing(name, festival)
                if existing is not None:
                    results.append(ArtistCrawlResult(name=name, status="exists", artist_id=existing.id))
                    if force:
                        fire_and_forget(
                            self._refresh_artist(existing.id, build_artist_context(name, festival)),
                            f"refresh artist {existing.id}",
                        )
                        fire_and_forget(
                            self._cache.invalidate_pattern(cache_policy.artist_key(existing.id)),
                            f"invalidate artist {existing.id}",
                        )
                    continue
                created = await self.create_artist(name, festival=festival)
                results.append(ArtistCrawlResult(name=name, status="crawled", artist_id=created.id))
            except FestivalScoutError as exc:
                self._logger.error("artist_crawl_failed", name=name, error=str(exc))
                results.append(ArtistCrawlResult(name=name, status="error", error=exc.message))

        self._logger.info(
            "artists_crawled",
            total=len(results),
            crawled=sum(1 for r in results if r.status == "crawled"),
            existing=sum(1 for r in results if r.status == "exists"),
            errors=sum(1 for r in results if r.status == "error"),
        )
        return results

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _catalog_source(self) -> str:
        return self._catalog.get_provider_name() if self._catalog else "spotify"

    async def _find_existing(self, name: str, festival: Festival | None) -> Artist | None:
        if self._resolver is not None:
            context = {"festival": festival.name} if festival else None
            return await self._resolver.resolve_artist_identity(name, context)
        return await self._repository.search_artist_by_name(name)

    async def _find_candidate(self, name: str, catalog_id: str | None) -> ArtistCandidate | None:
        if catalog_id and self._catalog is not None:
            try:
                candidate = await self._catalog.get_artist_by_id(catalog_id)
            except CatalogError as exc:
                self._logger.warning("catalog_lookup_failed", catalog_id=catalog_id, error=str(exc))
                candidate = None
            if candidate is not None:
                return candidate
        if self._resolver is not None:
            return await self._resolver.search_artist_by_name(name)
        return None

    async def _enrich(
        self, name: str, candidate: ArtistCandidate | None, context: str | None
    ) -> Artist | None:
        if self._ai is None:
            return None
        inputs = [f"Provide a concise, informative description for the music artist named {name}"]
        if candidate is not None:
            inputs.append(f"{self._catalog_source()} ID: {candidate.id}")
            if candidate.profile_url:
                inputs.append(candidate.profile_url)
        if context:
            inputs.append(context)
        try:
            return await self._ai.generate_artist(inputs)
        except LLMError as exc:
            self._logger.warning("artist_enrichment_failed", name=name, error=str(exc))
            return None

    def _merge(
        self, name: str, candidate: ArtistCandidate | None, enriched: Artist | None
    ) -> Artist:
        source = self._catalog_source()
        images = dict(enriched.images) if enriched else {}
        streaming_links = dict(enriched.streaming_links) if enriched else {}
        mapping_ids = dict(enriched.mapping_ids) if enriched else {}
        popularity = dict(enriched.popularity) if enriched else {}
        sources: list[str] = []

        if candidate is not None:
            sources.append(source)
            mapping_ids[source] = candidate.id
            popularity[source] = float(candidate.popularity)
            if candidate.profile_url:
                streaming_links[source] = candidate.profile_url
            if candidate.image_url:
                images[source] = candidate.image_url
        if enriched is not None:
            sources.append(_AI_SOURCE)

        return Artist(
            id=generate_artist_id(),
            name=candidate.name if candidate else name,
            genres=merge_genres(
                list(candidate.genres) if candidate else [],
                enriched.genres if enriched else [],
            ),
            description=enriched.description if enriched else None,
            image_url=(candidate.image_url if candidate else None)
            or (enriched.image_url if enriched else None),
            images=images,
            streaming_links=streaming_links,
            social_links=dict(enriched.social_links) if enriched else {},
            mapping_ids=mapping_ids,
            popularity=popularity,
            sources=sources,
        )

    async def _refresh_artist(self, artist_id: str, context: str | None) -> None:
        enriched = await self.crawl_artist_details(artist_id, context=context)
        if enriched is not None:
            await self.save_artist(enriched)
