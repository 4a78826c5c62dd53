"""Unit tests for provider selection and application assembly."""

from __future__ import annotations

from pathlib import Path

import pytest

from festival_scout.config.settings import Settings
from festival_scout.main import _build_catalog, _build_llm_provider, assemble
from festival_scout.providers.cache.memory_cache import MemoryCacheProvider
from festival_scout.providers.catalog.spotify_provider import SpotifyCatalogProvider
from festival_scout.providers.llm.anthropic_provider import AnthropicLLMProvider
from festival_scout.providers.llm.openai_provider import OpenAILLMProvider
from festival_scout.utils.errors import ConfigurationError


def _settings(tmp_path: Path, **overrides) -> Settings:
    return Settings(_env_file=None, db_path=str(tmp_path / "data" / "scout.db"), **overrides)


class TestProviderSelection:
    def test_openai_preferred(self, tmp_path) -> None:
        provider = _build_llm_provider(
            _settings(tmp_path, openai_api_key="sk-test", anthropic_api_key="sk-ant")
        )
        assert isinstance(provider, OpenAILLMProvider)

    def test_anthropic_second(self, tmp_path) -> None:
        provider = _build_llm_provider(_settings(tmp_path, anthropic_api_key="sk-ant"))
        assert isinstance(provider, AnthropicLLMProvider)

    def test_no_llm(self, tmp_path) -> None:
        assert _build_llm_provider(_settings(tmp_path)) is None

    @pytest.mark.asyncio
    async def test_catalog_needs_both_credentials(self, tmp_path) -> None:
        import httpx

        async with httpx.AsyncClient() as client:
            assert _build_catalog(_settings(tmp_path, spotify_client_id="id"), client) is None
            catalog = _build_catalog(
                _settings(tmp_path, spotify_client_id="id", spotify_client_secret="secret"), client
            )
        assert isinstance(catalog, SpotifyCatalogProvider)


class TestAssemble:
    @pytest.mark.asyncio
    async def test_minimal_app_without_credentials(self, tmp_path) -> None:
        app = assemble(_settings(tmp_path))
        try:
            assert isinstance(app.cache, MemoryCacheProvider)
            assert app.resolver is None
            assert app.recommendation_service is None
            with pytest.raises(ConfigurationError):
                await app.resolve_artist_identity("Little Simz")
        finally:
            await app.close()

    @pytest.mark.asyncio
    async def test_full_app_with_credentials(self, tmp_path) -> None:
        app = assemble(
            _settings(
                tmp_path,
                openai_api_key="sk-test",
                spotify_client_id="id",
                spotify_client_secret="secret",
                cache_backend="none",
            )
        )
        try:
            assert app.resolver is not None
            assert app.recommendation_service is not None
            assert app.cache.get_provider_name() == "none"
            assert app.config["llm"]["available_providers"] == ["openai"]
        finally:
            await app.close()

    @pytest.mark.asyncio
    async def test_start_creates_store(self, tmp_path) -> None:
        app = assemble(_settings(tmp_path))
        await app.start()
        try:
            assert (tmp_path / "data" / "scout.db").exists()
            assert await app.festival_service.get_all_festivals() == []
        finally:
            await app.close()

    @pytest.mark.asyncio
    async def test_crawl_without_ai_is_configuration_error(self, tmp_path) -> None:
        app = assemble(_settings(tmp_path))
        try:
            with pytest.raises(ConfigurationError):
                await app.crawl_festival(["https://fest.example"])
        finally:
            await app.close()
