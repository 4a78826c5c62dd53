"""AI-backed recommendations for one festival and one listener.

Distinct lineup artists are looked up in the artist store, described to the
AI capability, and the scored names it returns are reconciled to concrete
acts by :class:`RecommendationPostprocessor`.  Results for saved
festivals are cached per festival id and preference set.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from festival_scout.config import cache_policy
from festival_scout.interfaces.cache_provider import ICacheProvider
from festival_scout.interfaces.festival_ai import IFestivalAI
from festival_scout.interfaces.repository import IArtistRepository
from festival_scout.models.artist import Artist
from festival_scout.models.festival import Festival
from festival_scout.models.recommendation import Recommendation, UserPreferences
from festival_scout.services.recommendation_postprocessor import (
    RecommendationPostprocessor,
    index_artists,
)
from festival_scout.utils.concurrency import throttled_gather
from festival_scout.utils.logging import get_logger


class RecommendationService:
    def __init__(
        self,
        ai: IFestivalAI,
        artist_repository: IArtistRepository,
        postprocessor: RecommendationPostprocessor,
        cache: ICacheProvider,
    ) -> None:
        self._ai = ai
        self._artists = artist_repository
        self._postprocessor = postprocessor
        self._cache = cache
        self._logger = get_logger(__name__)

    async def generate_recommendations(
        self,
        festival: Festival,
        preferences: UserPreferences,
        today: date | None = None,
    ) -> list[Recommendation]:
        """Recommend acts at *festival* for *preferences*.

        Raises
        ------
        LLMError
            If the AI capability fails.
        """
        # Unsaved festivals have no id to key on and are never cached.
        cache_key = None
        if festival.id:
            cache_key = cache_policy.recommendations_key(
                festival.id, cache_policy.stable_hash(preferences.model_dump(mode="json"))
            )
            cached = await self._cache.get(cache_key)
            if cached is not None:
                self._logger.info("recommendations_cache_hit", festival_id=festival.id)
                return [Recommendation.model_validate(item) for item in cached]

        self._logger.info(
            "recommendations_requested",
            festival_id=festival.id,
            genres=preferences.genres,
            style=preferences.recommendation_style.value,
        )
        artists = await self._lookup_artists(festival)
        available = [
            self._describe_artist(festival, name, artists.get(name.casefold()))
            for name in festival.artist_names()
        ]

        scored = await self._ai.generate_recommendations(preferences, available)
        recommendations = self._postprocessor.resolve(
            scored,
            festival,
            preferences,
            artists=index_artists(artists.values()),
            today=today,
        )

        if cache_key is not None:
            await self._cache.set(
                cache_key,
                [r.model_dump(mode="json", by_alias=True) for r in recommendations],
                ttl=cache_policy.RECOMMENDATIONS_TTL,
            )
        self._logger.info(
            "recommendations_generated",
            festival_id=festival.id,
            scored=len(scored),
            recommendations=len(recommendations),
        )
        return recommendations

    async def _lookup_artists(self, festival: Festival) -> dict[str, Artist]:
        """Stored artists keyed by the case-folded lineup name."""
        names = festival.artist_names()
        lookups = []
        for name in names:
            linked = next((a.artist_id for a in festival.acts_named(name) if a.artist_id), None)
            if linked:
                lookups.append(self._artists.get_artist_by_id(linked))
            else:
                lookups.append(self._artists.search_artist_by_name(name))

        results = await throttled_gather(lookups)
        found: dict[str, Artist] = {}
        for name, result in zip(names, results):
            if isinstance(result, BaseException):
                self._logger.warning("artist_lookup_failed", name=name, error=str(result))
                continue
            if result is not None:
                found[name.casefold()] = result
        return found

    @staticmethod
    def _describe_artist(festival: Festival, name: str, artist: Artist | None) -> dict[str, Any]:
        return {
            "festivalName": festival.name,
            "name": artist.name if artist else name,
            "genre": artist.genres if artist else None,
            "description": artist.description if artist else None,
            "artistId": artist.id if artist else None,
        }
