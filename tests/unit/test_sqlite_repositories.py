"""Unit tests for the SQLite festival and artist repositories (real files under tmp_path)."""

from __future__ import annotations

from pathlib import Path

import pytest
import pytest_asyncio

from festival_scout.models.artist import Artist
from festival_scout.models.festival import Festival
from festival_scout.providers.repository.sqlite_artist_repository import SQLiteArtistRepository
from festival_scout.providers.repository.sqlite_festival_repository import SQLiteFestivalRepository
from festival_scout.utils.errors import RepositoryError


@pytest_asyncio.fixture
async def festival_repo(tmp_path: Path) -> SQLiteFestivalRepository:
    repo = SQLiteFestivalRepository(tmp_path / "data" / "scout.db")
    await repo.initialize()
    return repo


@pytest_asyncio.fixture
async def artist_repo(tmp_path: Path) -> SQLiteArtistRepository:
    repo = SQLiteArtistRepository(tmp_path / "data" / "scout.db")
    await repo.initialize()
    return repo


class TestSQLiteFestivalRepository:
    @pytest.mark.asyncio
    async def test_save_and_get_round_trip(self, festival_repo, sample_festival) -> None:
        await festival_repo.save_festival(sample_festival)
        loaded = await festival_repo.get_festival_by_id(sample_festival.id)
        assert loaded == sample_festival

    @pytest.mark.asyncio
    async def test_missing_returns_none(self, festival_repo) -> None:
        assert await festival_repo.get_festival_by_id("nope") is None

    @pytest.mark.asyncio
    async def test_save_replaces_existing(self, festival_repo, sample_festival) -> None:
        await festival_repo.save_festival(sample_festival)
        await festival_repo.save_festival(sample_festival.model_copy(update={"location": "Porto"}))
        festivals = await festival_repo.get_all_festivals()
        assert len(festivals) == 1
        assert festivals[0].location == "Porto"

    @pytest.mark.asyncio
    async def test_listing_orders_undated_last(self, festival_repo) -> None:
        await festival_repo.save_festival(Festival(id="f-undated", name="Afterglow"))
        await festival_repo.save_festival(Festival(id="f-late", name="Late", start_date="2024-09-01"))
        await festival_repo.save_festival(Festival(id="f-early", name="Early", start_date="2024-05-01"))
        ids = [f.id for f in await festival_repo.get_all_festivals()]
        assert ids == ["f-early", "f-late", "f-undated"]

    @pytest.mark.asyncio
    async def test_delete(self, festival_repo, sample_festival) -> None:
        await festival_repo.save_festival(sample_festival)
        assert await festival_repo.delete_festival(sample_festival.id) is True
        assert await festival_repo.delete_festival(sample_festival.id) is False

    @pytest.mark.asyncio
    async def test_save_without_id_rejected(self, festival_repo) -> None:
        with pytest.raises(RepositoryError):
            await festival_repo.save_festival(Festival(name="No Id"))


class TestSQLiteArtistRepository:
    @pytest.mark.asyncio
    async def test_save_and_get(self, artist_repo, sample_artist) -> None:
        await artist_repo.save_artist(sample_artist)
        assert await artist_repo.get_artist_by_id("artist-fdc") == sample_artist

    @pytest.mark.asyncio
    async def test_search_by_normalized_name(self, artist_repo, sample_artist) -> None:
        await artist_repo.save_artist(sample_artist)
        found = await artist_repo.search_artist_by_name("fontaines dc")
        assert found is not None
        assert found.id == "artist-fdc"

    @pytest.mark.asyncio
    async def test_search_falls_back_to_word_order_match(self, artist_repo) -> None:
        await artist_repo.save_artist(Artist(id="artist-cc", name="Carl Cox"))
        found = await artist_repo.search_artist_by_name("Cox Carl")
        assert found is not None
        assert found.id == "artist-cc"

    @pytest.mark.asyncio
    async def test_search_no_match(self, artist_repo, sample_artist) -> None:
        await artist_repo.save_artist(sample_artist)
        assert await artist_repo.search_artist_by_name("Little Simz") is None
        assert await artist_repo.search_artist_by_name("!!!") is None

    @pytest.mark.asyncio
    async def test_get_by_mapping_id(self, artist_repo, sample_artist) -> None:
        await artist_repo.save_artist(sample_artist)
        found = await artist_repo.get_artist_by_mapping_id("spotify", "sp-fdc")
        assert found is not None
        assert found.id == "artist-fdc"
        assert await artist_repo.get_artist_by_mapping_id("spotify", "sp-other") is None

    @pytest.mark.asyncio
    async def test_mapping_source_must_be_identifier(self, artist_repo, sample_artist) -> None:
        await artist_repo.save_artist(sample_artist)
        assert await artist_repo.get_artist_by_mapping_id("spotify') OR 1=1 --", "sp-fdc") is None

    @pytest.mark.asyncio
    async def test_get_all_sorted_by_name(self, artist_repo) -> None:
        await artist_repo.save_artist(Artist(id="a-2", name="Little Simz"))
        await artist_repo.save_artist(Artist(id="a-1", name="Arctic Monkeys"))
        names = [a.name for a in await artist_repo.get_all_artists()]
        assert names == ["Arctic Monkeys", "Little Simz"]

    @pytest.mark.asyncio
    async def test_delete(self, artist_repo, sample_artist) -> None:
        await artist_repo.save_artist(sample_artist)
        assert await artist_repo.delete_artist("artist-fdc") is True
        assert await artist_repo.get_artist_by_id("artist-fdc") is None
