"""festival_scout domain models -- re-exports all public model classes.

    - festival.py       -- Festival and Act
    - artist.py         -- Artist
    - recommendation.py -- preferences, AI-scored tuples, Recommendation
    - extraction.py     -- ExtractionPlan and the loose ParsedFestival schema
    - cache.py          -- CacheEntry
"""

from __future__ import annotations

from festival_scout.models.artist import Artist, merge_genres
from festival_scout.models.cache import CacheEntry
from festival_scout.models.extraction import (
    ActFieldRules,
    ExtractionPlan,
    FestivalFieldRules,
    FieldRule,
    LineupDay,
    LineupEntry,
    ParsedFestival,
)
from festival_scout.models.festival import Act, Festival
from festival_scout.models.recommendation import (
    Recommendation,
    RecommendationStyle,
    ScoredArtist,
    TimePreferences,
    UserPreferences,
)

__all__ = [
    "Act",
    "ActFieldRules",
    "Artist",
    "CacheEntry",
    "ExtractionPlan",
    "Festival",
    "FestivalFieldRules",
    "FieldRule",
    "LineupDay",
    "LineupEntry",
    "ParsedFestival",
    "Recommendation",
    "RecommendationStyle",
    "ScoredArtist",
    "TimePreferences",
    "UserPreferences",
    "merge_genres",
]
