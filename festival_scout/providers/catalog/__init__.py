"""Music catalog adapters (IMusicCatalogProvider)."""

from festival_scout.providers.catalog.spotify_provider import SpotifyCatalogProvider

__all__ = ["SpotifyCatalogProvider"]
