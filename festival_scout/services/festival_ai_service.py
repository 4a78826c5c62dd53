"""LLM-backed implementation of the festival AI capability.

Every AI task in festival_scout is a prompt that asks for a JSON object and
a Pydantic model that validates the answer:

  - **Extraction plans** -- given a noise-stripped page, write an
    :class:`ExtractionPlan` (CSS selectors + transforms) rather than the
    lineup itself.  Much cheaper in output tokens and auditable.
  - **Festival from documents** -- the fallback path: read every source and
    return the lineup directly.  When the first answer lacks a name or
    location, a second, narrower prompt asks for just those two fields.
  - **Artist enrichment** -- describe one artist; ids the model invents are
    discarded and a fresh one is generated.
  - **Recommendations** -- score lineup artists against listener
    preferences.  Identical requests are served from the cache for 3 days.

LLMs wrap JSON in markdown fences or preamble text despite instructions, so
responses go through fence stripping and outermost-brace extraction before
``json.loads``.
"""

from __future__ import annotations

import base64
import binascii
import json
import re
from typing import Any
from urllib.parse import unquote, urlparse

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from festival_scout.config import cache_policy
from festival_scout.interfaces.cache_provider import ICacheProvider
from festival_scout.interfaces.festival_ai import IFestivalAI
from festival_scout.interfaces.llm_provider import ILLMProvider
from festival_scout.models.artist import Artist
from festival_scout.models.extraction import (
    REGEX_TRANSFORM_PREFIX,
    SUPPORTED_TRANSFORMS,
    ExtractionPlan,
    ParsedFestival,
)
from festival_scout.models.festival import Festival
from festival_scout.models.recommendation import ScoredArtist, UserPreferences
from festival_scout.utils.errors import ExtractionError, LLMError
from festival_scout.utils.ids import generate_artist_id
from festival_scout.utils.logging import get_logger

_JSON_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?\s*```", re.DOTALL)

# Upper bound on document text placed in a single prompt.
_MAX_DOCUMENT_CHARS = 120_000

_NO_INVENTION = (
    "DO NOT INVENT ANY INFORMATION, DO NOT MAKE UP ANY DETAILS, "
    "USE ONLY REAL AND VERIFIED INFORMATION."
)

# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------

_PLAN_SYSTEM_PROMPT = f"""\
You write extraction plans for festival websites. An extraction plan is a JSON
object of CSS selectors that a fixed interpreter runs against the HTML you are
given to pull out the festival's lineup. You never return the lineup itself.

How the interpreter works:
- "day_selector" selects one node per lineup day (null = whole document is one day).
- Inside each day node, "day_date" reads the date; "default_date" (YYYY-MM-DD)
  is used when it is missing.
- Inside each day node, "act_selector" selects one node per performance.
- Inside each act node, "act_fields.artist" / "time" / "stage" read values.
- A field rule is {{"selector": CSS or null (null = current node),
  "attribute": attribute name or null (null = text content),
  "value": literal string or null (overrides everything),
  "transforms": list of transforms}}.
- Allowed transforms: {", ".join(sorted(SUPPORTED_TRANSFORMS))},
  and "{REGEX_TRANSFORM_PREFIX}<pattern>" (keeps group 1, or the whole match).
  "date" converts free-text dates to YYYY-MM-DD; "time" extracts HH:MM.
- "festival" holds optional field rules festival_name, festival_location,
  festival_description, festival_website evaluated against the whole document.

Rules:
- Use only selectors that match the HTML you were given (class and id
  attributes are preserved; other attributes were stripped).
- Prefer stable class names over positional selectors.
- Respond with the JSON object only.
"""

_FESTIVAL_SYSTEM_PROMPT = f"""\
You are a data scraper/extractor expert. Your task is to extract music festival
information from the provided festival website, name and other documents.

# Instructions
- First identify the language of the documents; use that language's keywords.
- The lineup is normally a list/table of performances or artists: look for
  "lineup", "program", "performances", "acts", "artists", "stages",
  "timetable" or their equivalents.
- Extract every act with its artist name, stage and start time when available,
  grouped by date (YYYY-MM-DD).
- The festival description must be at most 500 characters and focus on the
  festival's atmosphere, history and unique features.
- Respond with a single JSON object of this shape:
  {{"festivalName": str, "festivalLocation": str, "festivalDescription": str,
    "festivalWebsite": str, "lineup": [{{"date": "YYYY-MM-DD",
    "list": [{{"artist": str, "time": "HH:MM", "stage": str}}]}}]}}

{_NO_INVENTION}
"""

_FESTIVAL_INFO_SYSTEM_PROMPT = f"""\
You identify music festivals. From the provided documents, return only the
festival's name and location as JSON:
{{"festivalName": str, "festivalLocation": str}}

{_NO_INVENTION}
"""

_ARTIST_SYSTEM_PROMPT = f"""\
You are an expert in music and artists. Generate detailed artist information
from the provided artist name and additional data.

# Instructions
- Do not invent descriptions, genres or URLs; if you lack information, use an
  empty value of the right type.
- The description must be at most 1000 characters, focused on the artist's
  live performance and music style, and only if you found one.
- If several artists share the name, use the context provided (festival,
  catalog id) and prefer a local artist or one from a neighbouring country.
- Provide at least 2 genres, and the sources of your information.
- Respond with a single JSON object of this shape:
  {{"name": str, "genres": [str], "description": str, "imageUrl": str,
    "images": {{source: url}}, "socialLinks": {{"website": url, "instagram": url}},
    "sources": [str]}}

{_NO_INVENTION}
"""

_RECOMMENDATION_SYSTEM_PROMPT = f"""\
You are an expert music recommender. You help users choose artists from a list
of available festival artists based on their preferences.

# Instructions
- Focus on the user's comment and favourite genres.
- It is a music festival: focus on live performances, using only real
  reviews or articles about how the artist performs live.
- Only recommend artists from the available list; never recommend an artist
  the user dislikes.
- Provide at least 2 recommendations; if the preferences are too vague,
  still recommend at least 1 available artist.
- Respond with a single JSON object of this shape:
  {{"recommendations": [{{"artistName": str, "artistId": str or null,
    "score": number, "reasons": [str]}}]}}

{_NO_INVENTION}
"""


class _LooseArtist(BaseModel):
    """Fields the model is trusted to supply for an artist."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel, extra="ignore")

    name: str = Field(min_length=1)
    genres: list[str] = Field(default_factory=list)
    description: str | None = Field(default=None, max_length=5000)
    image_url: str | None = None
    images: dict[str, str | None] = Field(default_factory=dict)
    social_links: dict[str, str | None] = Field(default_factory=dict)
    sources: list[str] = Field(default_factory=list)


class FestivalAIService(IFestivalAI):
    """Festival AI capability implemented with prompts over an LLM provider.

    Parameters
    ----------
    llm_provider:
        The text-completion backend.
    cache:
        Optional cache for recommendation responses.
    """

    def __init__(self, llm_provider: ILLMProvider, cache: ICacheProvider | None = None) -> None:
        self._llm = llm_provider
        self._cache = cache
        self._logger = get_logger(__name__)

    # ------------------------------------------------------------------
    # IFestivalAI implementation
    # ------------------------------------------------------------------

    async def generate_extraction_plan(self, stripped_html: str, source_id: str) -> ExtractionPlan:
        user_prompt = (
            f"Website: {source_id}\n\n"
            f"HTML:\n{_truncate(stripped_html)}\n\n"
            "Return the extraction plan JSON."
        )
        try:
            data = await self._complete_json(_PLAN_SYSTEM_PROMPT, user_prompt, temperature=0.0)
            plan = ExtractionPlan.model_validate(data)
        except LLMError as exc:
            raise ExtractionError(f"Extraction plan request failed: {exc.message}", exc.provider_name) from exc
        except PydanticValidationError as exc:
            raise ExtractionError(
                f"AI returned an invalid extraction plan: {exc.error_count()} error(s)",
                self._llm.get_provider_name(),
            ) from exc

        self._logger.info(
            "extraction_plan_generated",
            source=source_id,
            act_selector=plan.act_selector,
            day_selector=plan.day_selector,
        )
        return plan

    async def generate_festival_from_documents(self, sources: list[str]) -> Festival:
        documents = describe_inputs(sources)
        user_prompt = (
            "Extract the festival and its full lineup from the provided data:\n\n"
            f"{documents}\n\n{_NO_INVENTION}"
        )
        data = await self._complete_json(_FESTIVAL_SYSTEM_PROMPT, user_prompt, max_tokens=8000)
        # A bare domain ("www.fest.com") would fail URL validation for the whole festival.
        data["festivalWebsite"] = _http_url_or_none(data.get("festivalWebsite"))
        parsed = self._validate(ParsedFestival, data, "festival")

        if not parsed.festival_name or not parsed.festival_location:
            self._logger.info("festival_info_incomplete", sources=len(sources))
            info = await self._complete_json(
                _FESTIVAL_INFO_SYSTEM_PROMPT,
                f"Identify the festival from the provided data:\n\n{documents}",
                max_tokens=300,
            )
            update: dict[str, Any] = {}
            name = str(info.get("festivalName") or "").strip()
            location = str(info.get("festivalLocation") or "").strip()
            if not parsed.festival_name and name:
                update["festival_name"] = name[:200]
            if not parsed.festival_location and location:
                update["festival_location"] = location[:200]
            if update:
                parsed = parsed.model_copy(update=update)

        festival = parsed.to_festival()
        self._logger.info(
            "festival_generated",
            name=festival.name,
            acts=len(festival.lineup),
            llm_provider=self._llm.get_provider_name(),
        )
        return festival

    async def generate_artist(self, inputs: list[str]) -> Artist:
        user_prompt = (
            "Provide detailed information about the artist:\n\n"
            f"{describe_inputs(inputs)}\n\n{_NO_INVENTION}"
        )
        data = await self._complete_json(_ARTIST_SYSTEM_PROMPT, user_prompt)
        loose = self._validate(_LooseArtist, data, "artist")
        try:
            artist = Artist(
                id=generate_artist_id(),
                name=loose.name,
                genres=loose.genres,
                description=loose.description or None,
                image_url=_http_url_or_none(loose.image_url),
                images={k: v for k, v in loose.images.items() if _http_url_or_none(v)},
                social_links={k: v for k, v in loose.social_links.items() if _http_url_or_none(v)},
                sources=loose.sources,
            )
        except PydanticValidationError as exc:
            raise LLMError(
                f"AI artist data failed validation: {exc.error_count()} error(s)",
                self._llm.get_provider_name(),
            ) from exc
        self._logger.info("artist_generated", name=artist.name, genres=len(artist.genres))
        return artist

    async def generate_recommendations(
        self,
        preferences: UserPreferences,
        available_artists: list[dict[str, Any]],
    ) -> list[ScoredArtist]:
        mapped_preferences = {
            "comment": (preferences.comment or "").strip(),
            "preferredGenres": preferences.genres or None,
            "preferredArtists": preferences.preferred_artists or None,
            "dislikedArtists": preferences.disliked_artists or None,
            "recommendationStyle": preferences.recommendation_style.describe(),
            "recommendationsCount": (
                f"I would like at least {preferences.recommendations_count} recommendations"
            ),
        }
        request = {"preferences": mapped_preferences, "artists": available_artists}
        cache_key = cache_policy.ai_response_key("recommendations", request)

        if self._cache is not None:
            cached = await self._cache.get(cache_key)
            if cached is not None:
                self._logger.info("recommendations_cache_hit", key=cache_key)
                return [ScoredArtist.model_validate(item) for item in cached]

        user_prompt = (
            "Generate music recommendations based on the provided user preferences:\n\n"
            f"User preferences: {json.dumps(mapped_preferences, ensure_ascii=False)}\n"
            f"Available artists: {json.dumps(available_artists, ensure_ascii=False)}\n\n"
            f"{_NO_INVENTION}"
        )
        data = await self._complete_json(_RECOMMENDATION_SYSTEM_PROMPT, user_prompt)
        raw_items = data.get("recommendations")
        if not isinstance(raw_items, list):
            raise LLMError(
                "AI recommendation response missing 'recommendations' list",
                self._llm.get_provider_name(),
            )

        scored: list[ScoredArtist] = []
        for item in raw_items:
            try:
                scored.append(ScoredArtist.model_validate(item))
            except PydanticValidationError:
                self._logger.warning("recommendation_item_invalid", item=str(item)[:200])

        if self._cache is not None:
            await self._cache.set(
                cache_key,
                [s.model_dump(mode="json") for s in scored],
                ttl=cache_policy.AI_RESPONSE_TTL,
            )
        self._logger.info("recommendations_generated", count=len(scored))
        return scored

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _complete_json(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 4000,
    ) -> dict[str, Any]:
        response = await self._llm.complete(
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        try:
            return parse_llm_json(response)
        except (json.JSONDecodeError, ValueError) as exc:
            self._logger.warning(
                "llm_json_unparseable",
                llm_provider=self._llm.get_provider_name(),
                error=str(exc),
                preview=response[:200],
            )
            raise LLMError(
                f"LLM returned unparseable JSON: {exc}", self._llm.get_provider_name()
            ) from exc

    def _validate(self, model: type[BaseModel], data: dict[str, Any], what: str) -> Any:
        try:
            return model.model_validate(data)
        except PydanticValidationError as exc:
            raise LLMError(
                f"AI {what} data failed validation: {exc.error_count()} error(s)",
                self._llm.get_provider_name(),
            ) from exc


# ---------------------------------------------------------------------------
# Module helpers
# ---------------------------------------------------------------------------

def parse_llm_json(response: str) -> dict[str, Any]:
    """Extract a JSON object from an LLM response string.

    Handles markdown code fences and preamble/trailing text around the
    outermost brace pair.

    Raises
    ------
    json.JSONDecodeError
        If no valid JSON could be extracted.
    ValueError
        If the JSON is valid but not an object.
    """
    text = response.strip()

    fence_match = _JSON_FENCE_RE.search(text)
    if fence_match:
        text = fence_match.group(1).strip()

    if not text.startswith("{"):
        brace_start = text.find("{")
        brace_end = text.rfind("}")
        if brace_start != -1 and brace_end > brace_start:
            text = text[brace_start : brace_end + 1]

    parsed = json.loads(text)
    if not isinstance(parsed, dict):
        raise ValueError("LLM response is not a JSON object")
    return parsed


def describe_inputs(inputs: list[str]) -> str:
    """Render source inputs as prompt text.

    http(s) URLs are listed with their media type (PDF when the path ends in
    ``.pdf``); ``data:`` URIs with a text media type are decoded inline,
    other ``data:`` payloads are listed by media type and size; anything else
    is passed through as free text.
    """
    lines: list[str] = []
    for index, item in enumerate(inputs, start=1):
        item = item.strip()
        if not item:
            continue
        if item.startswith(("http://", "https://")):
            media_type = "application/pdf" if urlparse(item).path.lower().endswith(".pdf") else "text/html"
            lines.append(f"Document {index} ({media_type}): {item}")
        elif item.startswith("data:"):
            lines.append(f"Document {index} {_describe_data_uri(item)}")
        else:
            lines.append(f"Input {index}: {item}")
    return _truncate("\n".join(lines))


def _describe_data_uri(uri: str) -> str:
    header, _, payload = uri.partition(",")
    meta = header[len("data:"):]
    media_type = meta.split(";")[0] or "text/plain"
    is_base64 = meta.endswith(";base64")
    if not payload:
        return f"({media_type}): <empty>"
    if media_type.startswith("text/") or media_type in ("application/json", "application/xml"):
        try:
            text = (
                base64.b64decode(payload, validate=False).decode("utf-8", errors="replace")
                if is_base64
                else unquote(payload)
            )
        except (binascii.Error, ValueError):
            return f"({media_type}): <undecodable payload>"
        return f"({media_type}):\n{text}"
    approx_bytes = len(payload) * 3 // 4 if is_base64 else len(payload)
    return f"({media_type}, {approx_bytes} bytes attached, binary content not readable as text)"


def _truncate(text: str) -> str:
    if len(text) <= _MAX_DOCUMENT_CHARS:
        return text
    return text[:_MAX_DOCUMENT_CHARS] + "\n[truncated]"


def _http_url_or_none(value: Any) -> str | None:
    if isinstance(value, str) and value.strip().startswith(("http://", "https://")):
        return value.strip()
    return None
