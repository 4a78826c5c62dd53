"""Unit tests for candidate ranking and ArtistIdentityResolver."""

from __future__ import annotations

import pytest

from festival_scout.models.artist import Artist
from festival_scout.services.identity_resolver import (
    MAX_CANDIDATES,
    ArtistIdentityResolver,
    rank_candidates,
)
from festival_scout.utils.errors import CatalogError
from tests.conftest import make_candidate


class TestRankCandidates:
    def test_orders_by_score_then_exactness(self) -> None:
        candidates = [
            make_candidate("The Arctic", "c1"),
            make_candidate("Arctic Monkeys Tribute", "c2"),
            make_candidate("Monkeys Arctic", "c3"),
            make_candidate("Coldplay", "c4"),
            make_candidate("Arctic Monkeys", "c5"),
        ]
        ranked = rank_candidates("Arctic Monkeys", candidates)

        assert [r.candidate.id for r in ranked] == ["c5", "c3", "c2", "c1"]
        assert ranked[0].exact is True
        assert ranked[1].exact is False
        assert ranked[1].score == 1.0
        assert ranked[2].score == pytest.approx(2 / 3)

    def test_followers_break_ties(self) -> None:
        ranked = rank_candidates(
            "arctic monkeys",
            [
                make_candidate("Arctic Monkeys", "small", followers=10),
                make_candidate("Arctic Monkeys", "big", followers=1_000_000),
            ],
        )
        assert [r.candidate.id for r in ranked] == ["big", "small"]

    def test_weak_matches_dropped(self) -> None:
        # One shared word out of four scores 0.25.
        ranked = rank_candidates("Arctic", [make_candidate("Arctic Sound System Band")])
        assert ranked == []

    def test_capped(self) -> None:
        candidates = [make_candidate("Arctic Monkeys", f"c{i}") for i in range(15)]
        assert len(rank_candidates("Arctic Monkeys", candidates)) == MAX_CANDIDATES


class TestSearch:
    @pytest.mark.asyncio
    async def test_catalog_queried_with_normalized_name(self, mock_catalog) -> None:
        mock_catalog.search_artists.return_value = [make_candidate("Fontaines D.C.", "sp-fdc")]
        best = await ArtistIdentityResolver(mock_catalog).search_artist_by_name("  Fontaines  D.C. ")
        mock_catalog.search_artists.assert_awaited_once_with("fontaines dc")
        assert best is not None
        assert best.id == "sp-fdc"

    @pytest.mark.asyncio
    async def test_blank_name_skips_catalog(self, mock_catalog) -> None:
        assert await ArtistIdentityResolver(mock_catalog).search_artists_by_name("!!") == []
        mock_catalog.search_artists.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_catalog_failure_treated_as_no_candidates(self, mock_catalog) -> None:
        mock_catalog.search_artists.side_effect = CatalogError("down", "spotify")
        assert await ArtistIdentityResolver(mock_catalog).search_artist_by_name("Little Simz") is None

    @pytest.mark.asyncio
    async def test_search_artists_returns_ranked_candidates(self, mock_catalog) -> None:
        mock_catalog.search_artists.return_value = [
            make_candidate("Little Simz Fan Club", "fan"),
            make_candidate("Little Simz", "real"),
        ]
        found = await ArtistIdentityResolver(mock_catalog).search_artists_by_name("Little Simz")
        assert [c.id for c in found] == ["real", "fan"]


class TestResolveArtistIdentity:
    @pytest.mark.asyncio
    async def test_no_candidate_means_create(self, mock_catalog, mock_artist_repository) -> None:
        resolver = ArtistIdentityResolver(mock_catalog, mock_artist_repository)
        assert await resolver.resolve_artist_identity("Unknown Band") is None
        mock_artist_repository.get_artist_by_mapping_id.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_found_by_catalog_mapping(
        self, mock_catalog, mock_artist_repository, sample_artist
    ) -> None:
        mock_catalog.search_artists.return_value = [make_candidate("Fontaines D.C.", "sp-fdc")]
        mock_artist_repository.get_artist_by_mapping_id.return_value = sample_artist

        resolver = ArtistIdentityResolver(mock_catalog, mock_artist_repository)
        artist = await resolver.resolve_artist_identity(
            "Fontaines D.C.", {"festival": "Summer Sound", "location": "Lisbon"}
        )

        assert artist == sample_artist
        mock_artist_repository.get_artist_by_mapping_id.assert_awaited_once_with("spotify", "sp-fdc")
        mock_artist_repository.search_artist_by_name.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_falls_back_to_stored_name(
        self, mock_catalog, mock_artist_repository, sample_artist
    ) -> None:
        mock_catalog.search_artists.return_value = [make_candidate("Fontaines D.C.", "sp-new")]
        mock_artist_repository.search_artist_by_name.return_value = sample_artist

        resolver = ArtistIdentityResolver(mock_catalog, mock_artist_repository)
        assert await resolver.resolve_artist_identity("Fontaines D.C.") == sample_artist
        mock_artist_repository.search_artist_by_name.assert_awaited_once_with("Fontaines D.C.")

    @pytest.mark.asyncio
    async def test_tries_catalog_spelling_last(self, mock_catalog, mock_artist_repository) -> None:
        stored = Artist(id="artist-am", name="Arctic Monkeys")
        mock_catalog.search_artists.return_value = [make_candidate("Arctic Monkeys", "sp-am")]
        mock_artist_repository.search_artist_by_name.side_effect = [None, stored]

        resolver = ArtistIdentityResolver(mock_catalog, mock_artist_repository)
        assert await resolver.resolve_artist_identity("The Arctic Monkeys") == stored
        names = [c.args[0] for c in mock_artist_repository.search_artist_by_name.await_args_list]
        assert names == ["The Arctic Monkeys", "Arctic Monkeys"]

    @pytest.mark.asyncio
    async def test_candidate_but_no_record(self, mock_catalog, mock_artist_repository) -> None:
        mock_catalog.search_artists.return_value = [make_candidate("Little Simz", "sp-ls")]
        resolver = ArtistIdentityResolver(mock_catalog, mock_artist_repository)
        assert await resolver.resolve_artist_identity("Little Simz") is None

    @pytest.mark.asyncio
    async def test_without_repository(self, mock_catalog) -> None:
        mock_catalog.search_artists.return_value = [make_candidate("Little Simz", "sp-ls")]
        assert await ArtistIdentityResolver(mock_catalog).resolve_artist_identity("Little Simz") is None
