"""Recommendation models.

The AI capability scores artist *names* (:class:`ScoredArtist`); the
recommendation postprocessor reconciles each tuple to a concrete
:class:`Act` and produces a :class:`Recommendation`.  What the listener
asked for travels in :class:`UserPreferences`.
"""

from __future__ import annotations

from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from festival_scout.models.artist import Artist
from festival_scout.models.festival import Act
from festival_scout.utils.schedule import TimeSlot, parse_iso_date


class RecommendationStyle(str, Enum):  # noqa: UP042 -- StrEnum requires Python 3.11+
    CONSERVATIVE = "conservative"
    BALANCED = "balanced"
    ADVENTUROUS = "adventurous"

    def describe(self) -> str:
        return _STYLE_DESCRIPTIONS[self]


_STYLE_DESCRIPTIONS = {
    RecommendationStyle.CONSERVATIVE: "conservative: focus on well-known artists",
    RecommendationStyle.BALANCED: "balanced: mix of popular and emerging artists",
    RecommendationStyle.ADVENTUROUS: "adventurous: focus on emerging and less known artists",
}


class TimePreferences(BaseModel):
    """Secondary schedule filters.

    ``preferred_days`` are 1-based festival day numbers (day 1 is the
    festival's start date).  Empty lists mean "no constraint".
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    preferred_days: list[int] = Field(default_factory=list)
    preferred_time_slots: list[TimeSlot] = Field(default_factory=list)

    @field_validator("preferred_days")
    @classmethod
    def _positive_days(cls, value: list[int]) -> list[int]:
        if any(day < 1 for day in value):
            raise ValueError("festival day numbers start at 1")
        return value


class UserPreferences(BaseModel):
    """What a festival attendee wants recommendations for."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    date: str | None = None
    genres: list[str] = Field(default_factory=list)
    comment: str | None = None
    preferred_artists: list[str] = Field(default_factory=list)
    disliked_artists: list[str] = Field(default_factory=list)
    recommendation_style: RecommendationStyle = RecommendationStyle.BALANCED
    recommendations_count: int = Field(default=5, ge=1, le=10)
    time_preferences: TimePreferences | None = None

    @field_validator("date", mode="before")
    @classmethod
    def _check_date(cls, value: str | None) -> str | None:
        if value is None or not str(value).strip():
            return None
        if parse_iso_date(str(value)) is None:
            raise ValueError(f"expected YYYY-MM-DD date, got {value!r}")
        return str(value)[:10]


class ScoredArtist(BaseModel):
    """One AI-scored artist name, before schedule reconciliation.

    ``score`` is on whatever scale the AI used; it is carried through
    unchanged and never re-normalized.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(
        min_length=1, validation_alias=AliasChoices("name", "artistName", "artist_name")
    )
    score: float
    reasons: list[str] = Field(default_factory=list)
    artist_id: str | None = Field(
        default=None, validation_alias=AliasChoices("artist_id", "artistId")
    )


class Recommendation(BaseModel):
    """A scored artist reconciled to a concrete scheduled performance."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    artist: Artist
    act: Act
    score: float
    reasons: list[str] = Field(default_factory=list)
    ai_enhanced: bool = True
