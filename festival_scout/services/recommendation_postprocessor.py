"""Reconcile AI-scored artist names to concrete scheduled performances.

The AI capability only ever sees artist names; it knows nothing of dates,
stages or which of an artist's several sets fits the listener.  This module
turns each ``ScoredArtist`` tuple into a :class:`Recommendation` pointing at
exactly one :class:`Act`, or drops the tuple when no act qualifies.

Order is the AI's order.  Scores are carried through untouched.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date

from festival_scout.models.artist import Artist
from festival_scout.models.festival import Act, Festival
from festival_scout.models.recommendation import (
    Recommendation,
    ScoredArtist,
    TimePreferences,
    UserPreferences,
)
from festival_scout.utils.logging import get_logger
from festival_scout.utils.schedule import festival_day_number, parse_iso_date, time_slot_for


def index_artists(artists: Iterable[Artist]) -> dict[str, Artist]:
    """Key resolved artists by id and by case-folded name."""
    index: dict[str, Artist] = {}
    for artist in artists:
        if artist.id:
            index[artist.id] = artist
        index.setdefault(artist.name.casefold(), artist)
    return index


class RecommendationPostprocessor:
    """Pick one act per scored artist under date and time-of-day constraints."""

    def __init__(self) -> None:
        self._logger = get_logger(__name__)

    def resolve(
        self,
        ai_scored: list[ScoredArtist],
        festival: Festival,
        preferences: UserPreferences,
        artists: Mapping[str, Artist] | None = None,
        today: date | None = None,
    ) -> list[Recommendation]:
        """Return recommendations for *ai_scored* in the order received.

        Parameters
        ----------
        ai_scored:
            Tuples from the AI capability.
        festival:
            The festival whose lineup supplies the acts.
        preferences:
            ``date`` pins every pick to that day; ``time_preferences``
            filters by festival day number and time slot.
        artists:
            Previously resolved artists keyed by id or case-folded name
            (see :func:`index_artists`).  Unmatched names become stubs.
        today:
            Reference date for "next upcoming act"; defaults to the local date.
        """
        artists = artists or {}
        today = today or date.today()
        start_date = festival.start_date or festival.with_schedule_defaults().start_date

        results: list[Recommendation] = []
        dropped: list[str] = []
        for scored in ai_scored:
            artist = self._resolve_artist(scored, artists)
            candidates = self._candidate_acts(artist, festival)
            act = self._choose_act(candidates, preferences, today)
            if act is None or not self._passes_time_filters(
                act, preferences.time_preferences, start_date
            ):
                dropped.append(scored.name)
                continue
            results.append(
                Recommendation(
                    artist=artist,
                    act=act,
                    score=scored.score,
                    reasons=list(scored.reasons),
                    ai_enhanced=True,
                )
            )

        self._logger.info(
            "recommendations_resolved",
            festival_id=festival.id,
            received=len(ai_scored),
            kept=len(results),
            dropped=len(dropped),
            date=preferences.date,
        )
        if dropped:
            self._logger.debug("recommendations_dropped", names=dropped)
        return results

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    @staticmethod
    def _resolve_artist(scored: ScoredArtist, artists: Mapping[str, Artist]) -> Artist:
        if scored.artist_id and scored.artist_id in artists:
            return artists[scored.artist_id]
        found = artists.get(scored.name.strip().casefold())
        if found is not None:
            return found
        return Artist(id="", name=scored.name)

    @staticmethod
    def _candidate_acts(artist: Artist, festival: Festival) -> list[Act]:
        if artist.id:
            linked = festival.acts_for_artist(artist.id)
            if linked:
                return linked
        return festival.acts_named(artist.name)

    @staticmethod
    def _choose_act(candidates: list[Act], preferences: UserPreferences, today: date) -> Act | None:
        if not candidates:
            return None
        if preferences.date:
            # No act on the requested day drops the artist entirely.
            return next((act for act in candidates if act.date == preferences.date), None)

        upcoming: list[tuple[date, int, Act]] = []
        for index, act in enumerate(candidates):
            act_day = parse_iso_date(act.date)
            if act_day is not None and act_day >= today:
                upcoming.append((act_day, index, act))
        if upcoming:
            return min(upcoming, key=lambda item: (item[0], item[1]))[2]
        return candidates[0]

    @staticmethod
    def _passes_time_filters(
        act: Act, time_preferences: TimePreferences | None, start_date: str | None
    ) -> bool:
        if time_preferences is None:
            return True
        if time_preferences.preferred_days:
            day = festival_day_number(act.date, start_date)
            if day is None or day not in time_preferences.preferred_days:
                return False
        if time_preferences.preferred_time_slots:
            slot = time_slot_for(act.time)
            if slot is None or slot not in time_preferences.preferred_time_slots:
                return False
        return True
