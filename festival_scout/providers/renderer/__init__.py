"""Page renderer adapters (IPageRenderer)."""

from festival_scout.providers.renderer.playwright_renderer import PlaywrightPageRenderer

__all__ = ["PlaywrightPageRenderer"]
