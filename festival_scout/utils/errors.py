"""Custom exception hierarchy for festival_scout.

All application exceptions inherit from :class:`FestivalScoutError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "spotify", "openai", "playwright") caused the failure.

The hierarchy is organized by subsystem:

    FestivalScoutError  (base -- catch-all for any festival_scout error)
    +-- DocumentParseError       (structured document parsing)
    |   +-- ValidationError      (extracted data failed the schema check)
    |   +-- TransientFetchError  (network / timeout while rendering a source)
    |   +-- ExtractionError      (extraction plan generation or execution)
    +-- ConfigurationError       (required capability or setting missing)
    +-- LLMError                 (any LLM API call failure)
    +-- CatalogError             (external music catalog failure)
    +-- RepositoryError          (durable store failure)

"Not found" is never an exception: lookups return ``None`` or an empty list.
"""


class FestivalScoutError(Exception):
    """Base exception for all festival_scout errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  ``__str__`` prefixes the provider name in brackets for
    structured log output, e.g. ``[spotify] Token request failed``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Structured document parsing
# ---------------------------------------------------------------------------

class DocumentParseError(FestivalScoutError):
    """Raised when the structured document parser cannot produce a festival.

    The crawl orchestrator catches this (and only this) to fall back to the
    AI extraction path.
    """

    def __init__(
        self,
        message: str = "Structured document parsing failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ValidationError(DocumentParseError):
    """Raised when extracted data does not match the festival schema.

    Never retried: the same document yields the same data.
    """

    def __init__(
        self,
        message: str = "Extracted data failed schema validation",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class TransientFetchError(DocumentParseError):
    """Raised when a source could not be fetched due to a network or timeout error.

    The renderer retries these a bounded number of times with a fixed delay
    before letting the error surface.
    """

    def __init__(
        self,
        message: str = "Transient failure while fetching source",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ExtractionError(DocumentParseError):
    """Raised when an extraction plan cannot be generated or executed."""

    def __init__(
        self,
        message: str = "Extraction plan failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# External service / provider errors
# ---------------------------------------------------------------------------

class LLMError(FestivalScoutError):
    """Raised when an LLM API call fails or returns an unparseable response."""

    def __init__(
        self,
        message: str = "LLM API call failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class CatalogError(FestivalScoutError):
    """Raised when the external music catalog cannot be queried."""

    def __init__(
        self,
        message: str = "Music catalog request failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class RepositoryError(FestivalScoutError):
    """Raised when the durable festival/artist store fails."""

    def __init__(
        self,
        message: str = "Repository operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------------

class ConfigurationError(FestivalScoutError):
    """Raised when a required capability or setting is missing."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
