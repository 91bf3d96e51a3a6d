"""Tests for two-phase CandidateSearch."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.catalog.memory import InMemoryCatalog
from src.catalog.schemas import Security
from src.suggestions.candidate_search import CANDIDATE_CEILING, CandidateSearch, clamp


def _sec(id: int, symbol: str, name: str) -> Security:
    return Security(symbol=symbol, name=name, id=id)


@pytest.fixture
def mock_catalog() -> AsyncMock:
    catalog = AsyncMock()
    catalog.exact_match = AsyncMock(return_value=[])
    catalog.partial_match = AsyncMock(return_value=[])
    return catalog


class TestClamp:
    def test_clamp(self) -> None:
        assert clamp(0, 1, 300) == 1
        assert clamp(-5, 1, 300) == 1
        assert clamp(10, 1, 300) == 10
        assert clamp(301, 1, 300) == 300


class TestCandidateSearchPhases:
    """Tests for phase sizing and merging against a mocked catalog."""

    @pytest.mark.asyncio
    async def test_exact_then_partial(self, mock_catalog: AsyncMock) -> None:
        mock_catalog.exact_match.return_value = [_sec(1, "AAPL", "Apple Inc")]
        mock_catalog.partial_match.return_value = [
            _sec(1, "AAPL", "Apple Inc"),
            _sec(3, "BAAPL", "Beta Apple Corp"),
        ]

        results = await CandidateSearch(mock_catalog).search("AAPL", 10)

        assert [s.symbol for s in results] == ["AAPL", "BAAPL"]
        mock_catalog.exact_match.assert_awaited_once_with("AAPL", 10)
        # remaining (9) plus the exact count (1)
        mock_catalog.partial_match.assert_awaited_once_with("AAPL", 10)

    @pytest.mark.asyncio
    async def test_partial_skipped_when_exact_fills_limit(self, mock_catalog: AsyncMock) -> None:
        mock_catalog.exact_match.return_value = [
            _sec(5, "SHOP", "Shopify Inc"),
            _sec(6, "SHOP", "Shopify Inc"),
        ]

        results = await CandidateSearch(mock_catalog).search("shop", 2)

        assert [s.id for s in results] == [5, 6]
        mock_catalog.partial_match.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_partial_truncated_to_remaining(self, mock_catalog: AsyncMock) -> None:
        mock_catalog.exact_match.return_value = [_sec(1, "AB", "Ab")]
        mock_catalog.partial_match.return_value = [
            _sec(1, "AB", "Ab"),
            _sec(2, "ABC", "Abc"),
            _sec(3, "ABD", "Abd"),
            _sec(4, "ABE", "Abe"),
        ]

        results = await CandidateSearch(mock_catalog).search("ab", 3)

        assert [s.id for s in results] == [1, 2, 3]
        mock_catalog.partial_match.assert_awaited_once_with("ab", 3)

    @pytest.mark.asyncio
    async def test_limit_clamped(self, mock_catalog: AsyncMock) -> None:
        search = CandidateSearch(mock_catalog)

        await search.search("x", 0)
        mock_catalog.exact_match.assert_awaited_with("x", 1)

        await search.search("x", 5000)
        mock_catalog.exact_match.assert_awaited_with("x", CANDIDATE_CEILING)

    @pytest.mark.asyncio
    async def test_query_is_trimmed(self, mock_catalog: AsyncMock) -> None:
        await CandidateSearch(mock_catalog).search("  msft  ", 5)
        mock_catalog.exact_match.assert_awaited_once_with("msft", 5)

    @pytest.mark.asyncio
    async def test_partial_failure_fails_whole_search(self, mock_catalog: AsyncMock) -> None:
        mock_catalog.exact_match.return_value = [_sec(1, "AAPL", "Apple Inc")]
        mock_catalog.partial_match.side_effect = ConnectionError("db down")

        with pytest.raises(ConnectionError):
            await CandidateSearch(mock_catalog).search("AAPL", 10)

    @pytest.mark.asyncio
    async def test_records_phase_latency(self, mock_catalog: AsyncMock) -> None:
        metrics = MagicMock()
        await CandidateSearch(mock_catalog, metrics=metrics).search("a", 5)

        phases = [c.args[0] for c in metrics.record_phase_latency.call_args_list]
        assert phases == ["exact", "partial"]


class TestCandidateSearchScenarios:
    """End-to-end scenarios against the in-memory catalog."""

    @pytest.mark.asyncio
    async def test_near_miss_symbol_is_not_a_partial_match(self) -> None:
        catalog = InMemoryCatalog([
            Security(symbol="AAPL", name="Apple Inc."),
            Security(symbol="APPL", name="Apple Alternative Corp"),
            Security(symbol="MSFT", name="Microsoft Corporation"),
        ])

        results = await CandidateSearch(catalog).search("AAPL", 10)

        assert [s.symbol for s in results] == ["AAPL"]

    @pytest.mark.asyncio
    async def test_containing_symbol_follows_exact(self) -> None:
        catalog = InMemoryCatalog([
            Security(symbol="BAAPL", name="Beta Apple Corp"),
            Security(symbol="AAPL", name="Apple Inc."),
        ])

        results = await CandidateSearch(catalog).search("AAPL", 10)

        assert [s.symbol for s in results] == ["AAPL", "BAAPL"]

    @pytest.mark.asyncio
    async def test_rows_loaded_later_are_not_deduplicated_away(self) -> None:
        catalog = InMemoryCatalog([Security(symbol="AAPL", name="Apple Inc", id=1)])
        catalog.load([Security(symbol="AAPLX", name="Apple Extra")])

        results = await CandidateSearch(catalog).search("AAPL", 10)

        assert [s.symbol for s in results] == ["AAPL", "AAPLX"]

    @pytest.mark.asyncio
    async def test_exact_name_match_ranks_first(self, memory_catalog: InMemoryCatalog) -> None:
        results = await CandidateSearch(memory_catalog).search("shopify inc", 10)

        assert [s.id for s in results] == [5, 6]

    @pytest.mark.asyncio
    async def test_soundness_and_no_duplicates(self, memory_catalog: InMemoryCatalog) -> None:
        for query in ["a", "ap", "apple", "inc", "sh"]:
            for limit in [1, 2, 3, 10]:
                results = await CandidateSearch(memory_catalog).search(query, limit)
                assert len(results) <= limit
                ids = [s.id for s in results]
                assert len(ids) == len(set(ids))
                for s in results:
                    assert query in s.symbol.lower() or query in s.name.lower()

    @pytest.mark.asyncio
    async def test_inactive_rows_excluded(self, memory_catalog: InMemoryCatalog) -> None:
        results = await CandidateSearch(memory_catalog).search("supplier", 10)
        assert results == []

    @pytest.mark.asyncio
    async def test_idempotent(self, memory_catalog: InMemoryCatalog) -> None:
        search = CandidateSearch(memory_catalog)
        first = await search.search("a", 10)
        second = await search.search("a", 10)
        assert first == second

    @pytest.mark.asyncio
    async def test_partial_ordered_by_symbol(self, memory_catalog: InMemoryCatalog) -> None:
        results = await CandidateSearch(memory_catalog).search("a", 50)
        symbols = [s.symbol for s in results]
        assert symbols == sorted(symbols)
