"""Abstract base class for the festival AI capability.

Everything the services ask of generative AI goes through this contract:
writing an extraction plan for a rendered page, extracting a festival
directly from source documents, enriching an artist, and scoring lineup
artists against listener preferences.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from festival_scout.models.artist import Artist
from festival_scout.models.extraction import ExtractionPlan
from festival_scout.models.festival import Festival
from festival_scout.models.recommendation import ScoredArtist, UserPreferences


class IFestivalAI(ABC):
    """Contract for AI-backed festival extraction and recommendation."""

    @abstractmethod
    async def generate_extraction_plan(self, stripped_html: str, source_id: str) -> ExtractionPlan:
        """Produce a declarative extraction plan for a noise-stripped document.

        Parameters
        ----------
        stripped_html:
            The rendered document after noise stripping.
        source_id:
            The source URL, included in the prompt for context.

        Raises
        ------
        festival_scout.utils.errors.ExtractionError
            If the AI call fails or its answer is not a valid plan.
        """

    @abstractmethod
    async def generate_festival_from_documents(self, sources: list[str]) -> Festival:
        """Extract a festival directly from all *sources* in one AI call.

        Raises
        ------
        festival_scout.utils.errors.LLMError
            If the AI call fails or its answer does not validate.
        """

    @abstractmethod
    async def generate_artist(self, inputs: list[str]) -> Artist:
        """Describe an artist from a name plus any context lines.

        The returned artist always carries a freshly generated id.
        """

    @abstractmethod
    async def generate_recommendations(
        self,
        preferences: UserPreferences,
        available_artists: list[dict[str, Any]],
    ) -> list[ScoredArtist]:
        """Score *available_artists* against *preferences*.

        Returns tuples in the AI's ranking order.
        """
