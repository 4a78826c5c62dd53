"""Utility modules for festival_scout.

- **errors** -- exception hierarchy rooted at FestivalScoutError.
- **logging** -- structlog setup with console/JSON dual rendering.
- **concurrency** -- semaphore-throttled gather and fire-and-forget tasks.
- **text_normalizer** -- name normalization and the shared match scorer.
- **ids** -- festival, act and artist id generation.
- **schedule** -- time-slot bucketing and festival day numbers.
"""

from festival_scout.utils.concurrency import fire_and_forget, throttled_gather
from festival_scout.utils.errors import (
    CatalogError,
    ConfigurationError,
    DocumentParseError,
    ExtractionError,
    FestivalScoutError,
    LLMError,
    RepositoryError,
    TransientFetchError,
    ValidationError,
)
from festival_scout.utils.logging import configure_logging, get_logger
from festival_scout.utils.text_normalizer import (
    fuzzy_match,
    match_score,
    normalize_name,
    slugify_name,
)

__all__ = [
    "CatalogError",
    "ConfigurationError",
    "DocumentParseError",
    "ExtractionError",
    "FestivalScoutError",
    "LLMError",
    "RepositoryError",
    "TransientFetchError",
    "ValidationError",
    "configure_logging",
    "fire_and_forget",
    "fuzzy_match",
    "get_logger",
    "match_score",
    "normalize_name",
    "slugify_name",
    "throttled_gather",
]
