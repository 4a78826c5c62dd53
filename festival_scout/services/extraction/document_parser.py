"""Structured document parser: render, strip, plan, execute, validate.

The parser turns one festival source URL into a :class:`ParsedFestival`
without asking the AI to read the lineup itself.  Instead the AI writes a
small declarative :class:`ExtractionPlan` for the stripped page and a fixed
interpreter runs it, which costs far fewer output tokens and is auditable.

State machine (the current state is logged on every transition)::

    START -> FETCH_CACHE -> HIT: return
                         -> MISS: RENDER -> STRIP_NOISE
                                  -> REQUEST_EXTRACTION_ROUTINE
                                  -> EXECUTE_ROUTINE -> VALIDATE
                                  -> OK: CACHE -> DONE
                                  -> FAIL: ERROR

Every failure surfaces as a :class:`DocumentParseError` subclass; the only
retry is the renderer's bounded fetch retry.
"""

from __future__ import annotations

from enum import Enum

from pydantic import ValidationError as PydanticValidationError

from festival_scout.config import cache_policy
from festival_scout.interfaces.cache_provider import ICacheProvider
from festival_scout.interfaces.festival_ai import IFestivalAI
from festival_scout.interfaces.page_renderer import IPageRenderer
from festival_scout.models.extraction import ParsedFestival
from festival_scout.services.extraction.html_cleaner import strip_noise, visible_text_length
from festival_scout.services.extraction.plan_interpreter import execute_plan
from festival_scout.utils.errors import DocumentParseError, ExtractionError, LLMError, ValidationError
from festival_scout.utils.logging import get_logger


class ParserState(str, Enum):  # noqa: UP042 -- StrEnum requires Python 3.11+
    START = "START"
    FETCH_CACHE = "FETCH_CACHE"
    RENDER = "RENDER"
    STRIP_NOISE = "STRIP_NOISE"
    REQUEST_EXTRACTION_ROUTINE = "REQUEST_EXTRACTION_ROUTINE"
    EXECUTE_ROUTINE = "EXECUTE_ROUTINE"
    VALIDATE = "VALIDATE"
    CACHE = "CACHE"
    DONE = "DONE"
    ERROR = "ERROR"


class StructuredDocumentParser:
    """Parse a festival page into validated lineup data.

    Parameters
    ----------
    renderer:
        Loads the source in a rendering engine.
    ai:
        Writes the extraction plan.
    cache:
        Successful results are cached per source for 24 hours.
    """

    def __init__(self, renderer: IPageRenderer, ai: IFestivalAI, cache: ICacheProvider) -> None:
        self._renderer = renderer
        self._ai = ai
        self._cache = cache
        self._logger = get_logger(__name__)

    async def parse(self, source: str) -> ParsedFestival:
        """Run the parse state machine for *source*.

        Raises
        ------
        ValidationError
            Extracted data failed the schema check, or contained no acts.
        TransientFetchError
            The source could not be fetched within the retry bound.
        ExtractionError
            The page was unusable or the plan could not be produced or run.
        """
        state = ParserState.START
        self._transition(state, source)
        try:
            state = ParserState.FETCH_CACHE
            self._transition(state, source)
            cached = await self._read_cache(source)
            if cached is not None:
                self._logger.info("structured_parse_cache_hit", source=source)
                return cached

            state = ParserState.RENDER
            self._transition(state, source)
            html = await self._renderer.render(source)

            state = ParserState.STRIP_NOISE
            self._transition(state, source)
            stripped = strip_noise(html)
            if visible_text_length(stripped) == 0:
                raise ExtractionError(f"Rendered page has no text content: {source}")

            state = ParserState.REQUEST_EXTRACTION_ROUTINE
            self._transition(state, source, chars=len(stripped))
            try:
                plan = await self._ai.generate_extraction_plan(stripped, source)
            except LLMError as exc:
                raise ExtractionError(
                    f"Extraction plan request failed: {exc.message}", exc.provider_name
                ) from exc

            state = ParserState.EXECUTE_ROUTINE
            self._transition(state, source)
            raw = execute_plan(plan, stripped)

            state = ParserState.VALIDATE
            self._transition(state, source)
            parsed = self._validate(raw, source)

            state = ParserState.CACHE
            self._transition(state, source)
            await self._cache.set(
                cache_policy.parsed_document_key(source),
                parsed.model_dump(mode="json", by_alias=True),
                ttl=cache_policy.PARSED_DOCUMENT_TTL,
            )
        except DocumentParseError as exc:
            self._logger.warning(
                "structured_parse_failed",
                source=source,
                state=state.value,
                state_next=ParserState.ERROR.value,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            raise

        self._transition(ParserState.DONE, source, acts=parsed.act_count())
        return parsed

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _transition(self, state: ParserState, source: str, **context: object) -> None:
        self._logger.debug("structured_parse_state", state=state.value, source=source, **context)

    async def _read_cache(self, source: str) -> ParsedFestival | None:
        key = cache_policy.parsed_document_key(source)
        cached = await self._cache.get(key)
        if cached is None:
            return None
        try:
            return ParsedFestival.model_validate(cached)
        except PydanticValidationError:
            self._logger.warning("structured_parse_cache_corrupt", source=source)
            await self._cache.delete(key)
            return None

    @staticmethod
    def _validate(raw: dict, source: str) -> ParsedFestival:
        try:
            parsed = ParsedFestival.model_validate(raw)
        except PydanticValidationError as exc:
            raise ValidationError(
                f"Extracted data for {source} failed validation: {exc.error_count()} error(s)"
            ) from exc
        if parsed.act_count() == 0:
            raise ValidationError(f"Extraction plan matched no acts on {source}")
        return parsed
