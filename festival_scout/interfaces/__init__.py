"""Public interface definitions for all external collaborators.

Every external service is reached through the abstract base classes in this
package; concrete adapters live in ``festival_scout/providers/`` and are
wired together in ``festival_scout/main.py``.

    Interface               ->  Concrete implementations
    ------------------------------------------------------------------
    ICacheProvider          ->  MemoryCacheProvider, RedisCacheProvider,
                                NullCacheProvider
    ILLMProvider            ->  OpenAILLMProvider, AnthropicLLMProvider
    IFestivalAI             ->  FestivalAIService (services/)
    IMusicCatalogProvider   ->  SpotifyCatalogProvider
    IPageRenderer           ->  PlaywrightPageRenderer
    IFestivalRepository     ->  SQLiteFestivalRepository
    IArtistRepository       ->  SQLiteArtistRepository
"""

from festival_scout.interfaces.cache_provider import ICacheProvider
from festival_scout.interfaces.festival_ai import IFestivalAI
from festival_scout.interfaces.llm_provider import ILLMProvider
from festival_scout.interfaces.music_catalog_provider import ArtistCandidate, IMusicCatalogProvider
from festival_scout.interfaces.page_renderer import IPageRenderer
from festival_scout.interfaces.repository import IArtistRepository, IFestivalRepository

__all__ = [
    "ArtistCandidate",
    "IArtistRepository",
    "ICacheProvider",
    "IFestivalAI",
    "IFestivalRepository",
    "ILLMProvider",
    "IMusicCatalogProvider",
    "IPageRenderer",
]
