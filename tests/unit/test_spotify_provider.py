"""Unit tests for SpotifyCatalogProvider using httpx.MockTransport."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from festival_scout.providers.catalog.spotify_provider import SpotifyCatalogProvider
from festival_scout.services.identity_resolver import ArtistIdentityResolver
from festival_scout.utils.errors import CatalogError
from tests.conftest import FakeClock

_ARTIST = {
    "id": "sp-am",
    "name": "Arctic Monkeys",
    "genres": ["indie rock", "garage rock"],
    "popularity": 82,
    "followers": {"total": 1_500_000},
    "images": [{"url": "https://i.scdn.co/image/am.jpg"}],
    "external_urls": {"spotify": "https://open.spotify.com/artist/sp-am"},
}


class _Recorder:
    """Route requests to canned responses and remember them."""

    def __init__(self, api_responses: list[httpx.Response], expires_in: int = 3600) -> None:
        self.api_responses = list(api_responses)
        self.expires_in = expires_in
        self.token_requests = 0
        self.api_requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.host == "accounts.spotify.com":
            self.token_requests += 1
            return httpx.Response(
                200,
                json={"access_token": f"token-{self.token_requests}", "expires_in": self.expires_in},
            )
        self.api_requests.append(request)
        return self.api_responses.pop(0)


def _provider(recorder: _Recorder, clock: FakeClock | None = None) -> SpotifyCatalogProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
    return SpotifyCatalogProvider(
        http_client=client, client_id="cid", client_secret="secret", timer=clock or FakeClock()
    )


class TestSpotifyCatalogProvider:
    def test_provider_name_and_availability(self) -> None:
        provider = _provider(_Recorder([]))
        assert provider.get_provider_name() == "spotify"
        assert provider.is_available() is True

    def test_unavailable_without_credentials(self) -> None:
        provider = SpotifyCatalogProvider(httpx.AsyncClient(), client_id="", client_secret="")
        assert provider.is_available() is False

    @pytest.mark.asyncio
    async def test_search_maps_candidates(self) -> None:
        recorder = _Recorder([httpx.Response(200, json={"artists": {"items": [_ARTIST]}})])
        provider = _provider(recorder)

        candidates = await provider.search_artists("arctic monkeys")

        assert len(candidates) == 1
        candidate = candidates[0]
        assert candidate.id == "sp-am"
        assert candidate.genres == ("indie rock", "garage rock")
        assert candidate.followers == 1_500_000
        assert candidate.image_url == "https://i.scdn.co/image/am.jpg"
        assert candidate.profile_url == "https://open.spotify.com/artist/sp-am"

        request = recorder.api_requests[0]
        assert request.url.path == "/v1/search"
        assert request.url.params["type"] == "artist"
        assert request.url.params["limit"] == "10"
        assert request.headers["Authorization"] == "Bearer token-1"

    @pytest.mark.asyncio
    async def test_blank_query_skips_request(self) -> None:
        recorder = _Recorder([])
        assert await _provider(recorder).search_artists("  ") == []
        assert recorder.token_requests == 0

    @pytest.mark.asyncio
    async def test_token_reused_until_refresh_margin(self) -> None:
        clock = FakeClock()
        recorder = _Recorder(
            [httpx.Response(200, json={"artists": {"items": []}}) for _ in range(3)], expires_in=3600
        )
        provider = _provider(recorder, clock)

        await provider.search_artists("a")
        clock.advance(3000)
        await provider.search_artists("b")
        assert recorder.token_requests == 1

        clock.advance(560)  # within 60 s of expiry
        await provider.search_artists("c")
        assert recorder.token_requests == 2

    @pytest.mark.asyncio
    async def test_get_artist_by_id(self) -> None:
        recorder = _Recorder([httpx.Response(200, json=_ARTIST)])
        candidate = await _provider(recorder).get_artist_by_id("sp-am")
        assert candidate is not None
        assert candidate.name == "Arctic Monkeys"
        assert recorder.api_requests[0].url.path == "/v1/artists/sp-am"

    @pytest.mark.asyncio
    async def test_not_found_returns_none(self) -> None:
        recorder = _Recorder([httpx.Response(404, json={"error": "not found"})])
        assert await _provider(recorder).get_artist_by_id("missing") is None

    @pytest.mark.asyncio
    async def test_unauthorized_refreshes_token_once(self) -> None:
        recorder = _Recorder(
            [httpx.Response(401), httpx.Response(200, json={"artists": {"items": [_ARTIST]}})]
        )
        candidates = await _provider(recorder).search_artists("arctic monkeys")
        assert len(candidates) == 1
        assert recorder.token_requests == 2
        assert recorder.api_requests[1].headers["Authorization"] == "Bearer token-2"

    @pytest.mark.asyncio
    async def test_rate_limit_retries_with_retry_after(self) -> None:
        recorder = _Recorder(
            [
                httpx.Response(429, headers={"Retry-After": "2"}),
                httpx.Response(200, json={"artists": {"items": [_ARTIST]}}),
            ]
        )
        with patch(
            "festival_scout.providers.catalog.spotify_provider.asyncio.sleep", new_callable=AsyncMock
        ) as sleep:
            candidates = await _provider(recorder).search_artists("arctic monkeys")
        assert len(candidates) == 1
        sleep.assert_awaited_once_with(2.0)

    @pytest.mark.asyncio
    async def test_server_errors_exhaust_retries(self) -> None:
        recorder = _Recorder([httpx.Response(503) for _ in range(3)])
        with patch(
            "festival_scout.providers.catalog.spotify_provider.asyncio.sleep", new_callable=AsyncMock
        ):
            with pytest.raises(CatalogError):
                await _provider(recorder).search_artists("arctic monkeys")
        assert len(recorder.api_requests) == 3

    @pytest.mark.asyncio
    async def test_token_failure_raises_catalog_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"error": "invalid_client"})

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        provider = SpotifyCatalogProvider(client, client_id="cid", client_secret="bad")
        with pytest.raises(CatalogError) as exc_info:
            await provider.search_artists("x")
        assert exc_info.value.provider_name == "spotify"

    @pytest.mark.asyncio
    async def test_malformed_body_raises_catalog_error(self) -> None:
        recorder = _Recorder([httpx.Response(200, content=b"<html>maintenance</html>")])
        with pytest.raises(CatalogError) as exc_info:
            await _provider(recorder).search_artists("arctic monkeys")
        assert exc_info.value.provider_name == "spotify"

    @pytest.mark.asyncio
    async def test_malformed_body_leaves_resolver_with_no_candidates(self) -> None:
        recorder = _Recorder([httpx.Response(200, content=b"not json")])
        resolver = ArtistIdentityResolver(_provider(recorder))
        assert await resolver.search_ranked("Arctic Monkeys") == []
