"""Application services: crawling, identity resolution, artists, festivals, recommendations."""

from festival_scout.services.artist_service import ArtistCrawlResult, ArtistService
from festival_scout.services.festival_ai_service import FestivalAIService
from festival_scout.services.festival_crawler import FestivalCrawler
from festival_scout.services.festival_service import FestivalService
from festival_scout.services.identity_resolver import ArtistIdentityResolver
from festival_scout.services.recommendation_postprocessor import RecommendationPostprocessor
from festival_scout.services.recommendation_service import RecommendationService

__all__ = [
    "ArtistCrawlResult",
    "ArtistIdentityResolver",
    "ArtistService",
    "FestivalAIService",
    "FestivalCrawler",
    "FestivalService",
    "RecommendationPostprocessor",
    "RecommendationService",
]
