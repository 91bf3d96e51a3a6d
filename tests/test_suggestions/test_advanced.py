"""Tests for AdvancedQueryBuilder."""

from unittest.mock import AsyncMock

import pytest

from src.catalog.memory import InMemoryCatalog
from src.suggestions.advanced import AdvancedQueryBuilder
from src.suggestions.errors import ValidationError
from src.suggestions.schemas import AdvancedSearchQuery


@pytest.fixture
def mock_catalog() -> AsyncMock:
    catalog = AsyncMock()
    catalog.filtered_match = AsyncMock(return_value=[])
    return catalog


class TestBuild:
    """Tests for filter compilation."""

    def test_single_criterion(self, mock_catalog: AsyncMock) -> None:
        compiled = AdvancedQueryBuilder(mock_catalog).build(
            AdvancedSearchQuery(exchange="NASDAQ")
        )

        assert compiled.sql == "upper(exchange) LIKE upper($1)"
        assert compiled.params == ("%NASDAQ%",)
        assert compiled.columns == ("exchange",)

    def test_fixed_column_order(self, mock_catalog: AsyncMock) -> None:
        compiled = AdvancedQueryBuilder(mock_catalog).build(
            AdvancedSearchQuery(currency="usd", symbol="AA", company_name="apple")
        )

        assert compiled.columns == ("symbol", "name", "currency")
        assert compiled.sql == (
            "upper(symbol) LIKE upper($1) AND "
            "upper(name) LIKE upper($2) AND "
            "upper(currency) LIKE upper($3)"
        )
        assert compiled.params == ("%AA%", "%apple%", "%usd%")

    def test_identical_criteria_compile_identically(self, mock_catalog: AsyncMock) -> None:
        builder = AdvancedQueryBuilder(mock_catalog)
        query = AdvancedSearchQuery(symbol="MS", country="United States")

        assert builder.build(query) == builder.build(query)
        assert hash(builder.build(query)) == hash(builder.build(query))

    def test_values_are_trimmed_and_blank_fields_skipped(self, mock_catalog: AsyncMock) -> None:
        compiled = AdvancedQueryBuilder(mock_catalog).build(
            AdvancedSearchQuery(symbol="  ", company_name=" Apple ", exchange="")
        )

        assert compiled.columns == ("name",)
        assert compiled.params == ("%Apple%",)

    def test_like_wildcards_escaped(self, mock_catalog: AsyncMock) -> None:
        compiled = AdvancedQueryBuilder(mock_catalog).build(
            AdvancedSearchQuery(company_name="100%_sure")
        )

        assert compiled.params == ("%100\\%\\_sure%",)

    def test_all_blank_rejected(self, mock_catalog: AsyncMock) -> None:
        with pytest.raises(ValidationError) as exc_info:
            AdvancedQueryBuilder(mock_catalog).build(
                AdvancedSearchQuery(symbol=" ", company_name=None, exchange="\t")
            )

        assert exc_info.value.errors[0].code == "NO_SEARCH_CRITERIA"


class TestSearch:
    """Tests for executing compiled filters."""

    @pytest.mark.asyncio
    async def test_all_blank_never_reaches_catalog(self, mock_catalog: AsyncMock) -> None:
        with pytest.raises(ValidationError):
            await AdvancedQueryBuilder(mock_catalog).search(AdvancedSearchQuery(), 10)

        mock_catalog.filtered_match.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_limit_clamped(self, mock_catalog: AsyncMock) -> None:
        builder = AdvancedQueryBuilder(mock_catalog)
        query = AdvancedSearchQuery(symbol="A")

        await builder.search(query, 500)
        assert mock_catalog.filtered_match.await_args.args[1] == 100

        await builder.search(query, 0)
        assert mock_catalog.filtered_match.await_args.args[1] == 1

    @pytest.mark.asyncio
    async def test_exchange_only(self, memory_catalog: InMemoryCatalog) -> None:
        results = await AdvancedQueryBuilder(memory_catalog).search(
            AdvancedSearchQuery(exchange="nasdaq"), 100
        )

        assert [s.id for s in results] == [1, 4]
        assert all("nasdaq" in s.exchange.lower() for s in results)

    @pytest.mark.asyncio
    async def test_criteria_are_conjunctive(self, memory_catalog: InMemoryCatalog) -> None:
        results = await AdvancedQueryBuilder(memory_catalog).search(
            AdvancedSearchQuery(symbol="shop", country="canada"), 10
        )

        assert [s.id for s in results] == [6]

    @pytest.mark.asyncio
    async def test_omitting_criterion_never_narrows(self, memory_catalog: InMemoryCatalog) -> None:
        builder = AdvancedQueryBuilder(memory_catalog)
        narrow = await builder.search(AdvancedSearchQuery(symbol="SHOP", currency="CAD"), 100)
        wide = await builder.search(AdvancedSearchQuery(symbol="SHOP"), 100)

        assert {s.id for s in narrow} <= {s.id for s in wide}
