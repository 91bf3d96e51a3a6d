"""Tests for SuggestionService."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.catalog.memory import InMemoryCatalog
from src.catalog.schemas import Security
from src.suggestions.config import SuggestionsConfig
from src.suggestions.errors import RetrievalError, ValidationError
from src.suggestions.schemas import AdvancedSearchQuery
from src.suggestions.service import SuggestionService
from src.suggestions.strategies import EXACT_SYMBOL, NAME_CONTAINS, SYMBOL_CONTAINS, SYMBOL_PREFIX


@pytest.fixture
def service(memory_catalog: InMemoryCatalog, mock_metrics: MagicMock) -> SuggestionService:
    return SuggestionService(memory_catalog, metrics=mock_metrics)


@pytest.fixture
def failing_catalog() -> AsyncMock:
    catalog = AsyncMock()
    catalog.exact_match = AsyncMock(side_effect=ConnectionError("connection refused"))
    catalog.partial_match = AsyncMock(return_value=[])
    catalog.filtered_match = AsyncMock(side_effect=TimeoutError("statement timeout"))
    return catalog


class TestSearchByText:
    """Tests for free-text search."""

    @pytest.mark.asyncio
    async def test_annotates_match_strategy(self, service: SuggestionService) -> None:
        result = await service.search_by_text("aapl")

        assert result.query == "aapl"
        assert [s.security.symbol for s in result.suggestions] == ["AAPL", "BAAPL"]
        assert result.suggestions[0].strategy is EXACT_SYMBOL
        assert result.suggestions[1].strategy is SYMBOL_CONTAINS

    @pytest.mark.asyncio
    async def test_default_limit(self, memory_catalog: InMemoryCatalog, mock_metrics: MagicMock) -> None:
        config = SuggestionsConfig(text_default_limit=2)
        service = SuggestionService(memory_catalog, config=config, metrics=mock_metrics)

        result = await service.search_by_text("a")

        assert result.count == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   ", "\n"])
    async def test_blank_input_rejected(self, failing_catalog: AsyncMock, mock_metrics: MagicMock, text: str) -> None:
        service = SuggestionService(failing_catalog, metrics=mock_metrics)

        with pytest.raises(ValidationError) as exc_info:
            await service.search_by_text(text)

        assert exc_info.value.errors[0].code == "EMPTY_INPUT"
        assert exc_info.value.errors[0].field == "input"
        failing_catalog.exact_match.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit", [0, -1, 51])
    async def test_limit_out_of_range(self, service: SuggestionService, limit: int) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await service.search_by_text("aapl", limit)

        detail = exc_info.value.errors[0]
        assert detail.code == "INVALID_LIMIT"
        assert detail.message == "Limit must be between 1 and 50"

    @pytest.mark.asyncio
    async def test_limit_bounds_accepted(self, service: SuggestionService) -> None:
        assert (await service.search_by_text("a", 1)).count == 1
        assert (await service.search_by_text("a", 50)).count <= 50

    @pytest.mark.asyncio
    async def test_catalog_failure_wrapped(self, failing_catalog: AsyncMock, mock_metrics: MagicMock) -> None:
        service = SuggestionService(failing_catalog, metrics=mock_metrics)

        with pytest.raises(RetrievalError) as exc_info:
            await service.search_by_text("aapl")

        assert exc_info.value.errors[0].code == "REPOSITORY_ERROR"
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    @pytest.mark.asyncio
    async def test_partial_phase_failure_returns_nothing(self, mock_metrics: MagicMock) -> None:
        catalog = AsyncMock()
        catalog.exact_match = AsyncMock(return_value=[Security(symbol="AAPL", name="Apple Inc", id=1)])
        catalog.partial_match = AsyncMock(side_effect=ConnectionError("lost"))
        service = SuggestionService(catalog, metrics=mock_metrics)

        with pytest.raises(RetrievalError):
            await service.search_by_text("aapl")

    @pytest.mark.asyncio
    async def test_records_outcomes(self, service: SuggestionService, mock_metrics: MagicMock) -> None:
        await service.search_by_text("msft")
        with pytest.raises(ValidationError):
            await service.search_by_text("")

        outcomes = [c.args[:2] for c in mock_metrics.record_search.call_args_list]
        assert outcomes == [("text", "success"), ("text", "validation_error")]


class TestSearchByCriteria:
    """Tests for advanced search."""

    @pytest.mark.asyncio
    async def test_query_description(self, service: SuggestionService) -> None:
        result = await service.search_by_criteria(
            AdvancedSearchQuery(symbol="SHOP", exchange="TSX")
        )

        assert result.query == "Advanced search symbol:SHOP exchange:TSX"
        assert [s.security.id for s in result.suggestions] == [6]

    @pytest.mark.asyncio
    async def test_annotates_with_applicable_strategy(self, service: SuggestionService) -> None:
        result = await service.search_by_criteria(AdvancedSearchQuery(symbol="AAP"))

        by_symbol = {s.security.symbol: s.strategy for s in result.suggestions}
        assert by_symbol["AAPL"] is SYMBOL_PREFIX
        assert by_symbol["BAAPL"] is SYMBOL_CONTAINS

    @pytest.mark.asyncio
    async def test_company_name_strategy(self, service: SuggestionService) -> None:
        result = await service.search_by_criteria(AdvancedSearchQuery(company_name="holding"))

        assert [s.security.symbol for s in result.suggestions] == ["ASML", "BAAPL"]
        assert all(s.strategy is NAME_CONTAINS for s in result.suggestions)

    @pytest.mark.asyncio
    async def test_exchange_only_has_no_strategy(self, service: SuggestionService) -> None:
        result = await service.search_by_criteria(AdvancedSearchQuery(exchange="NASDAQ"))

        assert result.count == 2
        assert all(s.strategy is None for s in result.suggestions)

    @pytest.mark.asyncio
    async def test_no_criteria_rejected(self, failing_catalog: AsyncMock, mock_metrics: MagicMock) -> None:
        service = SuggestionService(failing_catalog, metrics=mock_metrics)

        with pytest.raises(ValidationError) as exc_info:
            await service.search_by_criteria(AdvancedSearchQuery(symbol=" ", currency=""))

        assert exc_info.value.errors[0].code == "NO_SEARCH_CRITERIA"
        failing_catalog.filtered_match.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit", [0, 101])
    async def test_limit_out_of_range(self, service: SuggestionService, limit: int) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await service.search_by_criteria(AdvancedSearchQuery(symbol="A", limit=limit))

        assert exc_info.value.errors[0].message == "Limit must be between 1 and 100"

    @pytest.mark.asyncio
    async def test_catalog_failure_wrapped(self, failing_catalog: AsyncMock, mock_metrics: MagicMock) -> None:
        service = SuggestionService(failing_catalog, metrics=mock_metrics)

        with pytest.raises(RetrievalError) as exc_info:
            await service.search_by_criteria(AdvancedSearchQuery(exchange="NYSE"))

        assert exc_info.value.message == "Failed to retrieve advanced suggestions"
        mock_metrics.record_search.assert_called_once()
        assert mock_metrics.record_search.call_args.args[:2] == ("advanced", "retrieval_error")

    @pytest.mark.asyncio
    async def test_idempotent(self, service: SuggestionService) -> None:
        query = AdvancedSearchQuery(country="united")
        first = await service.search_by_criteria(query)
        second = await service.search_by_criteria(query)
        assert first.securities == second.securities
