"""Crawl orchestrator: structured parse first, AI extraction as fallback.

Only the first source is tried with the structured parser; every source is
handed to the AI fallback in a single call.  Structured failures are logged
and never escape; fallback failures propagate unchanged.
"""

from __future__ import annotations

from festival_scout.interfaces.festival_ai import IFestivalAI
from festival_scout.models.festival import Act, Festival
from festival_scout.services.extraction.document_parser import StructuredDocumentParser
from festival_scout.utils.errors import ConfigurationError, DocumentParseError
from festival_scout.utils.ids import generate_act_id, generate_festival_id
from festival_scout.utils.logging import get_logger


def finalize_festival(festival: Festival) -> Festival:
    """Derive schedule defaults and assign every missing id.

    The festival id is derived from name, location and start date; each act
    without an id gets a generated one and is stamped with the festival's
    name and id.
    """
    festival = festival.with_schedule_defaults()
    festival_id = festival.id or generate_festival_id(
        festival.name, festival.location, festival.start_date
    )
    lineup: list[Act] = []
    seen_ids: set[str] = set()
    for act in festival.lineup:
        act_id = act.id
        if not act_id or act_id in seen_ids:
            act_id = generate_act_id(festival.name)
        seen_ids.add(act_id)
        lineup.append(
            act.model_copy(
                update={"id": act_id, "festival_name": festival.name, "festival_id": festival_id}
            )
        )
    return festival.model_copy(update={"id": festival_id, "lineup": lineup})


class FestivalCrawler:
    """Materialize a :class:`Festival` from one or more source documents.

    Parameters
    ----------
    parser:
        Structured document parser; ``None`` skips straight to the fallback.
    ai_fallback:
        AI extraction over all sources; ``None`` means no fallback exists.
    """

    def __init__(
        self,
        parser: StructuredDocumentParser | None,
        ai_fallback: IFestivalAI | None,
    ) -> None:
        self._parser = parser
        self._ai = ai_fallback
        self._logger = get_logger(__name__)

    async def crawl_festival(self, sources: list[str]) -> Festival:
        """Crawl *sources* into a festival with ids assigned.

        Raises
        ------
        ValueError
            If *sources* is empty.
        ConfigurationError
            If the structured parse failed and no AI fallback is configured.
        LLMError
            If the AI fallback fails.
        """
        sources = [s.strip() for s in sources if s and s.strip()]
        if not sources:
            raise ValueError("At least one source is required")

        self._logger.info("crawl_started", sources=sources)
        festival = await self._try_structured(sources[0])

        if festival is None:
            if self._ai is None:
                raise ConfigurationError(
                    "Structured parsing failed and no AI fallback is configured"
                )
            self._logger.info("crawl_ai_fallback", sources=len(sources))
            festival = await self._ai.generate_festival_from_documents(sources)

        festival = finalize_festival(festival)
        self._logger.info(
            "crawl_complete",
            festival_id=festival.id,
            name=festival.name,
            acts=len(festival.lineup),
            stages=len(festival.stages),
        )
        return festival

    async def _try_structured(self, source: str) -> Festival | None:
        if self._parser is None:
            return None
        try:
            parsed = await self._parser.parse(source)
        except DocumentParseError as exc:
            self._logger.warning(
                "crawl_structured_failed",
                source=source,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return None
        except Exception as exc:
            self._logger.error(
                "crawl_structured_unexpected_error",
                source=source,
                error_type=type(exc).__name__,
                error=str(exc),
                exc_info=True,
            )
            return None
        return parsed.to_festival()
