"""Spotify Web API provider implementing IMusicCatalogProvider.

Authenticates with the client-credentials flow (no user context) and caches
the bearer token in memory, refreshing it 60 seconds before Spotify says it
expires.  Searches use ``/search?type=artist&limit=10``; lookups use
``/artists/{id}``.  Rate-limited (429) and server-error (5xx) responses are
retried a bounded number of times, honouring ``Retry-After`` when present.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any

import httpx

from festival_scout.interfaces.music_catalog_provider import ArtistCandidate, IMusicCatalogProvider
from festival_scout.utils.errors import CatalogError
from festival_scout.utils.logging import get_logger

_API_BASE = "https://api.spotify.com/v1"
_TOKEN_URL = "https://accounts.spotify.com/api/token"
_SEARCH_LIMIT = 10
_TOKEN_REFRESH_MARGIN = 60.0
_MAX_RETRIES = 3
_RETRY_BACKOFF = 1.0  # seconds, multiplied by the attempt number
_MAX_RETRY_AFTER = 30.0


class SpotifyCatalogProvider(IMusicCatalogProvider):
    """Artist catalog backed by the Spotify Web API.

    Parameters
    ----------
    http_client:
        Shared ``httpx.AsyncClient``; the provider never closes it.
    client_id, client_secret:
        Spotify application credentials.
    timer:
        Monotonic clock used for token expiry; injectable for tests.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        client_id: str,
        client_secret: str,
        timer=time.monotonic,
    ) -> None:
        self._http = http_client
        self._client_id = client_id
        self._client_secret = client_secret
        self._timer = timer
        self._token: str | None = None
        self._token_expires_at: float = 0.0
        self._token_lock = asyncio.Lock()
        self._logger = get_logger(__name__)

    # ------------------------------------------------------------------
    # IMusicCatalogProvider implementation
    # ------------------------------------------------------------------

    async def search_artists(self, name: str) -> list[ArtistCandidate]:
        if not name.strip():
            return []
        data = await self._get_json(
            "/search", params={"q": name, "type": "artist", "limit": _SEARCH_LIMIT}
        )
        items = ((data or {}).get("artists") or {}).get("items") or []
        candidates = [self._to_candidate(item) for item in items if item and item.get("id")]
        self._logger.debug("spotify_search", query=name, results=len(candidates))
        return candidates

    async def get_artist_by_id(self, artist_id: str) -> ArtistCandidate | None:
        if not artist_id:
            return None
        data = await self._get_json(f"/artists/{artist_id}")
        if not data or not data.get("id"):
            return None
        return self._to_candidate(data)

    def get_provider_name(self) -> str:
        return "spotify"

    def is_available(self) -> bool:
        return bool(self._client_id and self._client_secret)

    # ------------------------------------------------------------------
    # HTTP helpers
    # ------------------------------------------------------------------

    async def _get_access_token(self, force_refresh: bool = False) -> str:
        async with self._token_lock:
            now = self._timer()
            if not force_refresh and self._token and now < self._token_expires_at - _TOKEN_REFRESH_MARGIN:
                return self._token

            if not self.is_available():
                raise CatalogError(
                    message="Spotify client credentials are not configured",
                    provider_name=self.get_provider_name(),
                )
            try:
                response = await self._http.post(
                    _TOKEN_URL,
                    data={"grant_type": "client_credentials"},
                    auth=(self._client_id, self._client_secret),
                    timeout=15.0,
                )
                response.raise_for_status()
                payload = response.json()
            except (httpx.HTTPError, ValueError) as exc:
                raise CatalogError(
                    message=f"Spotify token request failed: {exc}",
                    provider_name=self.get_provider_name(),
                ) from exc

            self._token = payload["access_token"]
            self._token_expires_at = now + float(payload.get("expires_in", 3600))
            self._logger.info("spotify_token_refreshed", expires_in=payload.get("expires_in"))
            return self._token

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any] | None:
        """GET *path* with retries.  ``None`` for 400/404; raises CatalogError otherwise."""
        token = await self._get_access_token()
        refreshed = False

        for attempt in range(1, _MAX_RETRIES + 1):
            try:
                response = await self._http.get(
                    f"{_API_BASE}{path}",
                    params=params,
                    headers={"Authorization": f"Bearer {token}"},
                    timeout=15.0,
                )
            except httpx.HTTPError as exc:
                self._logger.warning("spotify_request_failed", path=path, attempt=attempt, error=str(exc))
                if attempt < _MAX_RETRIES:
                    await asyncio.sleep(_RETRY_BACKOFF * attempt)
                    continue
                raise CatalogError(
                    message=f"Spotify request failed: {exc}",
                    provider_name=self.get_provider_name(),
                ) from exc

            if response.status_code == 200:
                try:
                    return response.json()
                except ValueError as exc:
                    raise CatalogError(
                        message=f"Spotify returned a malformed body for {path}: {exc}",
                        provider_name=self.get_provider_name(),
                    ) from exc

            if response.status_code in (400, 404):
                return None

            if response.status_code == 401 and not refreshed:
                refreshed = True
                token = await self._get_access_token(force_refresh=True)
                continue

            if response.status_code == 429 or response.status_code >= 500:
                backoff = self._retry_after(response) or _RETRY_BACKOFF * attempt
                self._logger.warning(
                    "spotify_retryable_status",
                    path=path,
                    status=response.status_code,
                    attempt=attempt,
                    backoff_s=backoff,
                )
                if attempt < _MAX_RETRIES:
                    await asyncio.sleep(backoff)
                    continue

            raise CatalogError(
                message=f"Spotify returned HTTP {response.status_code} for {path}",
                provider_name=self.get_provider_name(),
            )

        raise CatalogError(
            message=f"Spotify request to {path} exhausted retries",
            provider_name=self.get_provider_name(),
        )

    @staticmethod
    def _retry_after(response: httpx.Response) -> float | None:
        raw = response.headers.get("Retry-After")
        if not raw:
            return None
        try:
            return min(float(raw), _MAX_RETRY_AFTER)
        except ValueError:
            return None

    @staticmethod
    def _to_candidate(item: dict[str, Any]) -> ArtistCandidate:
        images = item.get("images") or []
        return ArtistCandidate(
            id=item["id"],
            name=item.get("name", ""),
            genres=tuple(item.get("genres") or ()),
            popularity=int(item.get("popularity") or 0),
            followers=int((item.get("followers") or {}).get("total") or 0),
            image_url=images[0].get("url") if images else None,
            profile_url=(item.get("external_urls") or {}).get("spotify"),
        )
