"""Unit tests for the festival_scout Pydantic models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from festival_scout.models.artist import Artist, merge_genres
from festival_scout.models.cache import CacheEntry
from festival_scout.models.extraction import (
    UNKNOWN_FESTIVAL_LOCATION,
    UNKNOWN_FESTIVAL_NAME,
    LineupDay,
    ParsedFestival,
)
from festival_scout.models.festival import Act, Festival
from festival_scout.models.recommendation import (
    RecommendationStyle,
    ScoredArtist,
    TimePreferences,
    UserPreferences,
)
from festival_scout.utils.schedule import TimeSlot


# ======================================================================
# Festival / Act
# ======================================================================


class TestAct:
    def test_blank_optional_fields_become_none(self) -> None:
        act = Act(artist_name=" Little Simz ", time=" ", stage="", date="")
        assert act.artist_name == "Little Simz"
        assert act.time is None
        assert act.stage is None
        assert act.date is None

    def test_rejects_blank_artist(self) -> None:
        with pytest.raises(ValidationError):
            Act(artist_name="   ")

    def test_rejects_non_iso_date(self) -> None:
        with pytest.raises(ValidationError):
            Act(artist_name="X", date="21/07/2024")

    def test_is_linked(self) -> None:
        assert Act(artist_name="X", artist_id="artist-1").is_linked is True
        assert Act(artist_name="X").is_linked is False

    def test_camel_case_aliases(self) -> None:
        act = Act.model_validate({"artistName": "X", "festivalName": "F", "artistId": "a"})
        assert act.artist_id == "a"
        dumped = act.model_dump(by_alias=True)
        assert dumped["artistName"] == "X"
        assert "festivalId" in dumped


class TestFestival:
    def test_schedule_defaults_derived_from_lineup(self) -> None:
        festival = Festival(
            name="F",
            lineup=[
                Act(artist_name="A", date="2024-07-21", stage="Tent"),
                Act(artist_name="B", date="2024-07-20", stage="Main"),
                Act(artist_name="C", stage="Tent"),
            ],
        ).with_schedule_defaults()
        assert festival.stages == ["Tent", "Main"]
        assert festival.start_date == "2024-07-20"
        assert festival.end_date == "2024-07-21"

    def test_schedule_defaults_keep_explicit_values(self) -> None:
        festival = Festival(
            name="F",
            start_date="2024-07-19",
            stages=["Arena"],
            lineup=[Act(artist_name="A", date="2024-07-21", stage="Tent")],
        ).with_schedule_defaults()
        assert festival.start_date == "2024-07-19"
        assert festival.end_date == "2024-07-21"
        assert festival.stages == ["Arena"]

    def test_website_must_be_http(self) -> None:
        with pytest.raises(ValidationError):
            Festival(name="F", website="ftp://fest.example")
        assert Festival(name="F", website=" ").website is None

    def test_acts_named_is_case_insensitive(self, sample_festival: Festival) -> None:
        acts = sample_festival.acts_named("arctic MONKEYS")
        assert [a.id for a in acts] == ["act-1", "act-3"]

    def test_artist_names_distinct_in_order(self, sample_festival: Festival) -> None:
        assert sample_festival.artist_names() == ["Arctic Monkeys", "Fontaines D.C.", "Little Simz"]

    def test_name_length_limit(self) -> None:
        with pytest.raises(ValidationError):
            Festival(name="x" * 201)


# ======================================================================
# Artist
# ======================================================================


class TestArtist:
    def test_genres_lowercased_and_deduplicated(self) -> None:
        artist = Artist(name="X", genres=["Indie Rock", "indie rock", " Post-Punk "])
        assert artist.genres == ["indie rock", "post-punk"]

    def test_merge_genres_preserves_first_seen_order(self) -> None:
        assert merge_genres(["Techno", "House"], ["house", "Ambient"]) == ["techno", "house", "ambient"]

    def test_empty_links_dropped(self) -> None:
        artist = Artist(name="X", social_links={"instagram": "", "website": "https://x.example"})
        assert artist.social_links == {"website": "https://x.example"}

    def test_is_stub(self) -> None:
        assert Artist(name="X").is_stub is True
        assert Artist(id="artist-1", name="X").is_stub is False


# ======================================================================
# Recommendation models
# ======================================================================


class TestRecommendationModels:
    def test_scored_artist_accepts_ai_field_names(self) -> None:
        scored = ScoredArtist.model_validate(
            {"artistName": "Little Simz", "artistId": "artist-ls", "score": 8.5, "reasons": ["live"]}
        )
        assert scored.name == "Little Simz"
        assert scored.artist_id == "artist-ls"

    def test_preferences_defaults(self) -> None:
        prefs = UserPreferences()
        assert prefs.recommendation_style is RecommendationStyle.BALANCED
        assert prefs.recommendations_count == 5
        assert prefs.time_preferences is None

    def test_preferences_count_bounds(self) -> None:
        with pytest.raises(ValidationError):
            UserPreferences(recommendations_count=11)
        with pytest.raises(ValidationError):
            UserPreferences(recommendations_count=0)

    def test_preferences_date_must_be_iso(self) -> None:
        with pytest.raises(ValidationError):
            UserPreferences(date="July 21")

    def test_time_preferences_days_are_one_based(self) -> None:
        with pytest.raises(ValidationError):
            TimePreferences(preferred_days=[0])
        prefs = TimePreferences.model_validate(
            {"preferredDays": [1, 2], "preferredTimeSlots": ["evening"]}
        )
        assert prefs.preferred_time_slots == [TimeSlot.EVENING]

    def test_style_descriptions(self) -> None:
        assert RecommendationStyle.ADVENTUROUS.describe().startswith("adventurous")


# ======================================================================
# Cache entry
# ======================================================================


class TestCacheEntry:
    def test_expires_at_is_created_plus_ttl(self) -> None:
        entry = CacheEntry.create("k", "v", ttl=10, now=100.0)
        assert entry.expires_at == 110.0
        assert entry.is_expired(109.9) is False
        assert entry.is_expired(110.0) is True

    def test_no_ttl_never_expires(self) -> None:
        entry = CacheEntry.create("k", "v", ttl=None, now=100.0)
        assert entry.is_expired(1e12) is False


# ======================================================================
# ParsedFestival
# ======================================================================


class TestParsedFestival:
    def test_day_labels_without_dates_are_undated(self) -> None:
        day = LineupDay.model_validate({"date": "Day 1", "list": [{"artist": "X"}]})
        assert day.date is None
        assert day.acts[0].artist == "X"

    def test_free_text_day_date_normalized(self) -> None:
        day = LineupDay.model_validate({"date": "21.07.2024", "list": []})
        assert day.date == "2024-07-21"

    def test_rejects_empty_artist(self) -> None:
        with pytest.raises(ValidationError):
            ParsedFestival.model_validate({"lineup": [{"date": None, "list": [{"artist": ""}]}]})

    def test_description_limit(self) -> None:
        with pytest.raises(ValidationError):
            ParsedFestival(festival_description="x" * 2001)

    def test_to_festival_flattens_lineup(self) -> None:
        parsed = ParsedFestival.model_validate(
            {
                "festivalName": "Summer Sound",
                "festivalLocation": "Lisbon",
                "lineup": [
                    {"date": "2024-07-20", "list": [{"artist": "A", "time": "20:00", "stage": "Main"}]},
                    {"date": "2024-07-21", "list": [{"artist": "B"}, {"artist": "C"}]},
                ],
            }
        )
        festival = parsed.to_festival()
        assert parsed.act_count() == 3
        assert [a.artist_name for a in festival.lineup] == ["A", "B", "C"]
        assert festival.lineup[1].date == "2024-07-21"
        assert all(a.festival_name == "Summer Sound" for a in festival.lineup)
        assert all(a.id == "" for a in festival.lineup)

    def test_to_festival_unknown_defaults(self) -> None:
        festival = ParsedFestival.model_validate({"festivalName": " ", "lineup": []}).to_festival()
        assert festival.name == UNKNOWN_FESTIVAL_NAME
        assert festival.location == UNKNOWN_FESTIVAL_LOCATION
