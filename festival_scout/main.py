"""festival_scout application wiring.

Builds every provider and service from :class:`Settings` and exposes the
three core operations -- crawling a festival, resolving an artist's
identity and generating recommendations -- on :class:`FestivalScoutApp`.

Usage::

    app = await build_application()
    try:
        festival = await app.crawl_festival(["https://example-fest.com/lineup"])
    finally:
        await app.close()
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx
import structlog

from festival_scout.config.loader import load_config
from festival_scout.config.settings import Settings
from festival_scout.interfaces.cache_provider import ICacheProvider
from festival_scout.interfaces.llm_provider import ILLMProvider
from festival_scout.interfaces.music_catalog_provider import IMusicCatalogProvider
from festival_scout.models.artist import Artist
from festival_scout.models.festival import Festival
from festival_scout.models.recommendation import Recommendation, UserPreferences
from festival_scout.providers.cache import MemoryCacheProvider, build_cache_provider
from festival_scout.providers.cache.redis_cache import RedisCacheProvider
from festival_scout.providers.catalog.spotify_provider import SpotifyCatalogProvider
from festival_scout.providers.llm.anthropic_provider import AnthropicLLMProvider
from festival_scout.providers.llm.openai_provider import OpenAILLMProvider
from festival_scout.providers.renderer.playwright_renderer import PlaywrightPageRenderer
from festival_scout.providers.repository.sqlite_artist_repository import SQLiteArtistRepository
from festival_scout.providers.repository.sqlite_festival_repository import (
    SQLiteFestivalRepository,
)
from festival_scout.services.artist_service import ArtistService
from festival_scout.services.extraction.document_parser import StructuredDocumentParser
from festival_scout.services.festival_ai_service import FestivalAIService
from festival_scout.services.festival_crawler import FestivalCrawler
from festival_scout.services.festival_service import FestivalService
from festival_scout.services.identity_resolver import ArtistIdentityResolver
from festival_scout.services.recommendation_postprocessor import RecommendationPostprocessor
from festival_scout.services.recommendation_service import RecommendationService
from festival_scout.utils.concurrency import drain_background_tasks
from festival_scout.utils.errors import ConfigurationError
from festival_scout.utils.logging import configure_logging

logger = structlog.get_logger(logger_name=__name__)


# ---------------------------------------------------------------------------
# Provider selection
# ---------------------------------------------------------------------------


def _build_llm_provider(app_settings: Settings) -> ILLMProvider | None:
    """Select the first LLM provider with credentials.

    Priority order: OpenAI -> Anthropic.  ``None`` disables every AI feature
    (the crawl then relies on structured parsing alone).
    """
    if app_settings.openai_api_key:
        return OpenAILLMProvider(settings=app_settings)
    if app_settings.anthropic_api_key:
        return AnthropicLLMProvider(settings=app_settings)
    return None


def _build_catalog(
    app_settings: Settings, http_client: httpx.AsyncClient
) -> IMusicCatalogProvider | None:
    if not app_settings.has_catalog_credentials():
        return None
    return SpotifyCatalogProvider(
        http_client=http_client,
        client_id=app_settings.spotify_client_id,
        client_secret=app_settings.spotify_client_secret,
    )


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------


@dataclass
class FestivalScoutApp:
    """All wired components plus the core operations."""

    settings: Settings
    config: dict
    cache: ICacheProvider
    http_client: httpx.AsyncClient
    festival_repository: SQLiteFestivalRepository
    artist_repository: SQLiteArtistRepository
    crawler: FestivalCrawler
    festival_service: FestivalService
    artist_service: ArtistService
    resolver: ArtistIdentityResolver | None
    recommendation_service: RecommendationService | None

    async def start(self) -> None:
        await self.festival_repository.initialize()
        await self.artist_repository.initialize()
        if isinstance(self.cache, MemoryCacheProvider):
            await self.cache.start()
        logger.info(
            "application_started",
            name=self.config.get("app", {}).get("name", "festival_scout"),
            cache=self.cache.get_provider_name(),
            llm=self.config.get("llm", {}).get("available_providers", []),
            catalog=self.resolver is not None,
        )

    async def close(self) -> None:
        await drain_background_tasks()
        if isinstance(self.cache, (MemoryCacheProvider, RedisCacheProvider)):
            await self.cache.close()
        await self.http_client.aclose()
        logger.info("application_stopped")

    # -- Core operations --------------------------------------------------

    async def crawl_festival(self, sources: list[str]) -> Festival:
        return await self.crawler.crawl_festival(sources)

    async def resolve_artist_identity(self, name: str, context: dict | None = None) -> Artist | None:
        if self.resolver is None:
            raise ConfigurationError("Artist identity resolution requires catalog credentials")
        return await self.resolver.resolve_artist_identity(name, context)

    async def generate_recommendations(
        self, festival: Festival, preferences: UserPreferences
    ) -> list[Recommendation]:
        if self.recommendation_service is None:
            raise ConfigurationError("Recommendations require an LLM provider")
        return await self.recommendation_service.generate_recommendations(festival, preferences)


def assemble(app_settings: Settings) -> FestivalScoutApp:
    """Construct every provider and service; nothing is started."""
    config = load_config(settings=app_settings)
    http_client = httpx.AsyncClient(timeout=30.0)
    cache = build_cache_provider(app_settings)

    llm = _build_llm_provider(app_settings)
    ai = FestivalAIService(llm_provider=llm, cache=cache) if llm is not None else None
    catalog = _build_catalog(app_settings, http_client)

    festival_repository = SQLiteFestivalRepository(app_settings.db_path)
    artist_repository = SQLiteArtistRepository(app_settings.db_path)

    parser = None
    if ai is not None:
        renderer = PlaywrightPageRenderer(
            user_agent=app_settings.user_agent,
            timeout_ms=app_settings.render_timeout_ms,
            max_attempts=app_settings.render_max_attempts,
            retry_delay=app_settings.render_retry_delay,
        )
        parser = StructuredDocumentParser(renderer=renderer, ai=ai, cache=cache)
    crawler = FestivalCrawler(parser=parser, ai_fallback=ai)

    resolver = (
        ArtistIdentityResolver(catalog=catalog, repository=artist_repository)
        if catalog is not None
        else None
    )
    festival_service = FestivalService(
        repository=festival_repository, crawler=crawler, cache=cache, resolver=resolver
    )
    artist_service = ArtistService(
        repository=artist_repository, resolver=resolver, catalog=catalog, ai=ai, cache=cache
    )
    recommendation_service = (
        RecommendationService(
            ai=ai,
            artist_repository=artist_repository,
            postprocessor=RecommendationPostprocessor(),
            cache=cache,
        )
        if ai is not None
        else None
    )

    return FestivalScoutApp(
        settings=app_settings,
        config=config,
        cache=cache,
        http_client=http_client,
        festival_repository=festival_repository,
        artist_repository=artist_repository,
        crawler=crawler,
        festival_service=festival_service,
        artist_service=artist_service,
        resolver=resolver,
        recommendation_service=recommendation_service,
    )


async def build_application(app_settings: Settings | None = None) -> FestivalScoutApp:
    """Configure logging, assemble the application and start it."""
    app_settings = app_settings or Settings()
    configure_logging(
        log_level=app_settings.log_level,
        json_output=app_settings.app_env == "production",
    )
    app = assemble(app_settings)
    await app.start()
    return app
