"""Shared pytest fixtures for the festival_scout test suite."""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from festival_scout.interfaces.festival_ai import IFestivalAI
from festival_scout.interfaces.llm_provider import ILLMProvider
from festival_scout.interfaces.music_catalog_provider import ArtistCandidate, IMusicCatalogProvider
from festival_scout.interfaces.repository import IArtistRepository, IFestivalRepository
from festival_scout.models.artist import Artist
from festival_scout.models.festival import Act, Festival
from festival_scout.providers.cache.memory_cache import MemoryCacheProvider


class FakeClock:
    """Manually advanced monotonic clock for TTL tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ---------------------------------------------------------------------------
# Domain fixtures
# ---------------------------------------------------------------------------


_CREDENTIAL_ENV_VARS = (
    "OPENAI_API_KEY",
    "OPENAI_BASE_URL",
    "ANTHROPIC_API_KEY",
    "SPOTIFY_CLIENT_ID",
    "SPOTIFY_CLIENT_SECRET",
    "CACHE_BACKEND",
    "APP_ENV",
)


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch) -> None:
    """Keep developer credentials out of Settings() built during tests."""
    for name in _CREDENTIAL_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def project_root() -> Path:
    return Path(__file__).parent.parent


@pytest.fixture
def sample_festival() -> Festival:
    """Three-day festival; Arctic Monkeys plays twice, Fontaines D.C. is linked."""
    name = "Summer Sound"
    return Festival(
        id="festival-summer-sound-lisbon-2024-07-20-abcdef12",
        name=name,
        location="Lisbon",
        start_date="2024-07-20",
        end_date="2024-07-22",
        stages=["Main", "Tent"],
        lineup=[
            Act(id="act-1", artist_name="Arctic Monkeys", festival_name=name,
                date="2024-07-20", time="21:30", stage="Main"),
            Act(id="act-2", artist_name="Fontaines D.C.", artist_id="artist-fdc",
                festival_name=name, date="2024-07-20", time="14:00", stage="Tent"),
            Act(id="act-3", artist_name="Arctic Monkeys", festival_name=name,
                date="2024-07-21", time="23:00", stage="Main"),
            Act(id="act-4", artist_name="Little Simz", festival_name=name,
                date="2024-07-22", time="10:30", stage="Tent"),
        ],
    )


@pytest.fixture
def sample_artist() -> Artist:
    return Artist(
        id="artist-fdc",
        name="Fontaines D.C.",
        genres=["Post-Punk", "indie rock"],
        description="Dublin post-punk band.",
        mapping_ids={"spotify": "sp-fdc"},
    )


def make_candidate(
    name: str, candidate_id: str | None = None, followers: int = 0, **kwargs: Any
) -> ArtistCandidate:
    return ArtistCandidate(
        id=candidate_id or f"sp-{name.lower().replace(' ', '-')}",
        name=name,
        genres=kwargs.pop("genres", ()),
        popularity=kwargs.pop("popularity", 50),
        followers=followers,
        **kwargs,
    )


class FakeBrowserSession:
    """Stand-in for ``async_playwright()`` with inspectable browser/context/page mocks."""

    def __init__(self, html: str = "<html><body>Lineup</body></html>", status: int = 200) -> None:
        response = MagicMock(status=status, headers={"content-type": "text/html"})
        self.page = MagicMock()
        self.page.goto = AsyncMock(return_value=response)
        self.page.content = AsyncMock(return_value=html)

        self.context = MagicMock()
        self.context.new_page = AsyncMock(return_value=self.page)
        self.context.close = AsyncMock()

        self.browser = MagicMock()
        self.browser.new_context = AsyncMock(return_value=self.context)
        self.browser.close = AsyncMock()

        self.playwright = MagicMock()
        self.playwright.chromium.launch = AsyncMock(return_value=self.browser)

        manager = MagicMock()
        manager.__aenter__ = AsyncMock(return_value=self.playwright)
        manager.__aexit__ = AsyncMock(return_value=False)
        self.factory = MagicMock(return_value=manager)


# ---------------------------------------------------------------------------
# Mocked collaborators
# ---------------------------------------------------------------------------


@pytest.fixture
def memory_cache() -> MemoryCacheProvider:
    return MemoryCacheProvider(max_size=100, ttl=3600, timer=FakeClock())


@pytest.fixture
def mock_llm() -> MagicMock:
    llm = MagicMock(spec=ILLMProvider)
    llm.complete = AsyncMock(return_value="{}")
    llm.get_provider_name.return_value = "mock-llm"
    llm.is_available.return_value = True
    return llm


@pytest.fixture
def mock_ai() -> MagicMock:
    ai = MagicMock(spec=IFestivalAI)
    ai.generate_extraction_plan = AsyncMock()
    ai.generate_festival_from_documents = AsyncMock()
    ai.generate_artist = AsyncMock()
    ai.generate_recommendations = AsyncMock(return_value=[])
    return ai


@pytest.fixture
def mock_catalog() -> MagicMock:
    catalog = MagicMock(spec=IMusicCatalogProvider)
    catalog.search_artists = AsyncMock(return_value=[])
    catalog.get_artist_by_id = AsyncMock(return_value=None)
    catalog.get_provider_name.return_value = "spotify"
    catalog.is_available.return_value = True
    return catalog


@pytest.fixture
def mock_artist_repository() -> MagicMock:
    repo = MagicMock(spec=IArtistRepository)
    repo.get_artist_by_id = AsyncMock(return_value=None)
    repo.search_artist_by_name = AsyncMock(return_value=None)
    repo.get_artist_by_mapping_id = AsyncMock(return_value=None)
    repo.get_all_artists = AsyncMock(return_value=[])
    repo.save_artist = AsyncMock(side_effect=lambda artist: artist)
    repo.delete_artist = AsyncMock(return_value=True)
    return repo


@pytest.fixture
def mock_festival_repository() -> MagicMock:
    repo = MagicMock(spec=IFestivalRepository)
    repo.get_festival_by_id = AsyncMock(return_value=None)
    repo.get_all_festivals = AsyncMock(return_value=[])
    repo.save_festival = AsyncMock(side_effect=lambda festival: festival)
    repo.delete_festival = AsyncMock(return_value=True)
    return repo
