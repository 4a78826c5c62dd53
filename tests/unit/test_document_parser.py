"""Unit tests for StructuredDocumentParser (renderer and AI mocked)."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from festival_scout.config import cache_policy
from festival_scout.interfaces.page_renderer import IPageRenderer
from festival_scout.models.extraction import ActFieldRules, ExtractionPlan, FieldRule
from festival_scout.services.extraction.document_parser import StructuredDocumentParser
from festival_scout.utils.errors import (
    ExtractionError,
    LLMError,
    TransientFetchError,
    ValidationError,
)

SOURCE = "https://summersound.example/lineup"

_PAGE = (
    "<html><head><script>track()</script></head><body>"
    "<h1>Summer Sound</h1>"
    '<section class="day" data-date="2024-07-20">'
    '<div class="act"><b>Arctic Monkeys</b><i>21:30</i></div>'
    '<div class="act"><b>Fontaines D.C.</b><i>14:00</i></div>'
    "</section></body></html>"
)


def _plan(act_selector: str = "div.act") -> ExtractionPlan:
    return ExtractionPlan(
        act_selector=act_selector,
        default_date="2024-07-20",
        act_fields=ActFieldRules(
            artist=FieldRule(selector="b"),
            time=FieldRule(selector="i", transforms=["time"]),
        ),
    )


@pytest.fixture
def renderer() -> MagicMock:
    mock = MagicMock(spec=IPageRenderer)
    mock.render = AsyncMock(return_value=_PAGE)
    mock.get_provider_name.return_value = "mock-renderer"
    return mock


@pytest.fixture
def parser(renderer, mock_ai, memory_cache) -> StructuredDocumentParser:
    mock_ai.generate_extraction_plan.return_value = _plan()
    return StructuredDocumentParser(renderer, mock_ai, memory_cache)


class TestStructuredDocumentParser:
    @pytest.mark.asyncio
    async def test_parses_and_caches(self, parser, mock_ai, memory_cache) -> None:
        parsed = await parser.parse(SOURCE)

        assert parsed.act_count() == 2
        assert [a.artist for a in parsed.lineup[0].acts] == ["Arctic Monkeys", "Fontaines D.C."]
        assert parsed.lineup[0].date == "2024-07-20"
        assert await memory_cache.has(cache_policy.parsed_document_key(SOURCE))

    @pytest.mark.asyncio
    async def test_plan_request_sees_stripped_page(self, parser, mock_ai) -> None:
        await parser.parse(SOURCE)
        stripped, source_id = mock_ai.generate_extraction_plan.await_args.args
        assert source_id == SOURCE
        assert "<script" not in stripped
        assert "data-date" not in stripped
        assert "Arctic Monkeys" in stripped

    @pytest.mark.asyncio
    async def test_cache_hit_skips_render_and_ai(self, parser, renderer, mock_ai) -> None:
        first = await parser.parse(SOURCE)
        second = await parser.parse(SOURCE)
        assert second == first
        assert renderer.render.await_count == 1
        assert mock_ai.generate_extraction_plan.await_count == 1

    @pytest.mark.asyncio
    async def test_corrupt_cache_entry_is_replaced(self, parser, renderer, memory_cache) -> None:
        await memory_cache.set(cache_policy.parsed_document_key(SOURCE), {"lineup": "not-a-list"})
        parsed = await parser.parse(SOURCE)
        assert parsed.act_count() == 2
        renderer.render.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_zero_acts_is_validation_error(self, parser, mock_ai, memory_cache) -> None:
        mock_ai.generate_extraction_plan.return_value = _plan(act_selector="li.nothing")
        with pytest.raises(ValidationError):
            await parser.parse(SOURCE)
        assert not await memory_cache.has(cache_policy.parsed_document_key(SOURCE))

    @pytest.mark.asyncio
    async def test_llm_failure_becomes_extraction_error(self, parser, mock_ai) -> None:
        mock_ai.generate_extraction_plan.side_effect = LLMError("rate limited", "openai")
        with pytest.raises(ExtractionError) as exc_info:
            await parser.parse(SOURCE)
        assert exc_info.value.provider_name == "openai"
        assert "rate limited" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_blank_page_never_reaches_ai(self, parser, renderer, mock_ai) -> None:
        renderer.render.return_value = "<html><body><script>app()</script><div> </div></body></html>"
        with pytest.raises(ExtractionError):
            await parser.parse(SOURCE)
        mock_ai.generate_extraction_plan.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_fetch_failure_propagates(self, parser, renderer) -> None:
        renderer.render.side_effect = TransientFetchError("timed out", "playwright")
        with pytest.raises(TransientFetchError):
            await parser.parse(SOURCE)
