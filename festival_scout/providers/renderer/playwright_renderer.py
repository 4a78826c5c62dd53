"""Headless-Chromium page renderer built on async Playwright.

Festival sites often build their lineup client-side, so sources are loaded
in a real browser and the post-script DOM is returned.  Browser, context and
page are created per call and closed on every exit path; nothing is pooled.

Navigation failures (timeouts, connection errors, 429/5xx responses, a browser
session that dies mid-render) raise
:class:`TransientFetchError` and are retried with a fixed delay up to
``max_attempts``.  Anything that retrying cannot fix -- a PDF, a ``data:``
URI, a 4xx page, a browser that will not launch -- raises
:class:`ExtractionError` immediately so the crawler can fall back to AI.
"""

from __future__ import annotations

import asyncio
from urllib.parse import urlparse

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from festival_scout.interfaces.page_renderer import IPageRenderer
from festival_scout.utils.errors import ExtractionError, TransientFetchError
from festival_scout.utils.logging import get_logger

_NON_HTML_SUFFIXES = (".pdf", ".doc", ".docx", ".jpg", ".jpeg", ".png", ".webp")


def is_renderable_source(source: str) -> bool:
    """``True`` for http(s) URLs that do not point at an obvious non-HTML file."""
    parsed = urlparse(source)
    if parsed.scheme not in ("http", "https"):
        return False
    return not parsed.path.lower().endswith(_NON_HTML_SUFFIXES)


class PlaywrightPageRenderer(IPageRenderer):
    """Render pages in headless Chromium.

    Parameters
    ----------
    user_agent:
        User-Agent header presented by the browser context.
    timeout_ms:
        Navigation timeout per attempt.
    max_attempts:
        Total navigation attempts for transient failures.
    retry_delay:
        Fixed delay in seconds between attempts.
    """

    def __init__(
        self,
        user_agent: str,
        timeout_ms: int = 30000,
        max_attempts: int = 3,
        retry_delay: float = 1.0,
    ) -> None:
        self._user_agent = user_agent
        self._timeout_ms = timeout_ms
        self._max_attempts = max(1, max_attempts)
        self._retry_delay = retry_delay
        self._logger = get_logger(__name__)

    async def render(self, source: str) -> str:
        if not is_renderable_source(source):
            raise ExtractionError(
                message=f"Source is not a renderable HTML page: {source[:80]}",
                provider_name=self.get_provider_name(),
            )

        for attempt in range(1, self._max_attempts + 1):
            try:
                html = await self._render_once(source)
            except TransientFetchError as exc:
                self._logger.warning(
                    "render_attempt_failed",
                    source=source,
                    attempt=attempt,
                    max_attempts=self._max_attempts,
                    error=str(exc),
                )
                if attempt >= self._max_attempts:
                    raise
                await asyncio.sleep(self._retry_delay)
                continue
            self._logger.info("render_complete", source=source, attempt=attempt, chars=len(html))
            return html

        # Unreachable: the loop either returns or re-raises on the last attempt.
        raise TransientFetchError(provider_name=self.get_provider_name())

    def get_provider_name(self) -> str:
        return "playwright"

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _render_once(self, source: str) -> str:
        try:
            async with async_playwright() as playwright:
                try:
                    browser = await playwright.chromium.launch(headless=True)
                except PlaywrightError as exc:
                    raise ExtractionError(
                        message=f"Chromium could not be launched: {exc}",
                        provider_name=self.get_provider_name(),
                    ) from exc
                try:
                    return await self._render_in_browser(browser, source)
                finally:
                    await self._close_quietly(browser, "browser", source)
        except PlaywrightError as exc:
            # Context/page creation or content() failed mid-session.
            raise TransientFetchError(
                message=f"Browser session failed for {source}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    async def _render_in_browser(self, browser, source: str) -> str:
        context = await browser.new_context(user_agent=self._user_agent)
        try:
            page = await context.new_page()
            return await self._load(page, source)
        finally:
            await self._close_quietly(context, "context", source)

    async def _close_quietly(self, resource, kind: str, source: str) -> None:
        try:
            await resource.close()
        except PlaywrightError as exc:
            self._logger.warning("render_close_failed", resource=kind, source=source, error=str(exc))

    async def _load(self, page, source: str) -> str:
        try:
            response = await page.goto(source, wait_until="networkidle", timeout=self._timeout_ms)
        except PlaywrightTimeoutError as exc:
            raise TransientFetchError(
                message=f"Timed out loading {source}",
                provider_name=self.get_provider_name(),
            ) from exc
        except PlaywrightError as exc:
            raise TransientFetchError(
                message=f"Navigation to {source} failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if response is not None:
            status = response.status
            if status == 429 or status >= 500:
                raise TransientFetchError(
                    message=f"HTTP {status} loading {source}",
                    provider_name=self.get_provider_name(),
                )
            if status >= 400:
                raise ExtractionError(
                    message=f"HTTP {status} loading {source}",
                    provider_name=self.get_provider_name(),
                )
            content_type = (response.headers or {}).get("content-type", "")
            if content_type and "html" not in content_type:
                raise ExtractionError(
                    message=f"Unsupported content type {content_type!r} at {source}",
                    provider_name=self.get_provider_name(),
                )

        return await page.content()
