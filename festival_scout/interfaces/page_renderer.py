"""Abstract base class for page renderers.

A renderer loads a source URL in a rendering engine (so client-side scripts
run) and returns the resulting document markup.  Rendering internals are not
part of this contract.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class IPageRenderer(ABC):
    """Contract for turning a source URL into rendered HTML."""

    @abstractmethod
    async def render(self, source: str) -> str:
        """Load *source* and return the rendered HTML.

        Rendering resources are acquired and released within the call.

        Raises
        ------
        festival_scout.utils.errors.TransientFetchError
            Network or timeout failure persisting after the bounded retries.
        festival_scout.utils.errors.ExtractionError
            The source is not an HTML document this renderer can load.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier for this renderer."""
