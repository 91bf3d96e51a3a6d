"""Tests for CatalogRefreshJob."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.catalog.schemas import Security
from src.ingestion.http_client import HTTPClientError
from src.ingestion.refresh import CatalogRefreshJob


@pytest.fixture
def source() -> AsyncMock:
    source = AsyncMock()
    source.fetch_all_stocks = AsyncMock(return_value=[
        Security(symbol="AAPL", name="Apple Inc"),
        Security(symbol="MSFT", name="Microsoft Corporation"),
        Security(symbol="NVDA", name="NVIDIA Corporation"),
    ])
    return source


@pytest.fixture
def repository() -> AsyncMock:
    repo = AsyncMock()
    repo.replace_all = AsyncMock(return_value=(10, 3))
    return repo


class TestCatalogRefreshJob:
    """Tests for the fetch-and-store pipeline."""

    @pytest.mark.asyncio
    async def test_success(self, source, repository, mock_metrics: MagicMock):
        job = CatalogRefreshJob(source, repository, batch_size=2, metrics=mock_metrics)

        result = await job.run()

        assert result.success
        assert result.processed == 3
        assert not result.failed
        repository.replace_all.assert_awaited_once()
        assert repository.replace_all.await_args.kwargs["batch_size"] == 2
        mock_metrics.record_catalog_refresh.assert_called_once_with("success", stored=3)

    @pytest.mark.asyncio
    async def test_empty_fetch_leaves_catalog(self, source, repository, mock_metrics: MagicMock):
        source.fetch_all_stocks.return_value = []
        job = CatalogRefreshJob(source, repository, metrics=mock_metrics)

        result = await job.run()

        assert not result.success
        assert not result.failed
        assert result.processed == 0
        assert result.message == "No stocks fetched from market data provider"
        repository.replace_all.assert_not_awaited()
        mock_metrics.record_catalog_refresh.assert_called_once_with("empty")

    @pytest.mark.asyncio
    async def test_fetch_failure_reported(self, source, repository, mock_metrics: MagicMock):
        source.fetch_all_stocks.side_effect = HTTPClientError("Request failed with status 503")
        job = CatalogRefreshJob(source, repository, metrics=mock_metrics)

        result = await job.run()

        assert result.failed
        assert not result.success
        assert result.message.startswith("Failed: ")
        assert "503" in result.error
        repository.replace_all.assert_not_awaited()
        mock_metrics.record_catalog_refresh.assert_called_once_with("error")

    @pytest.mark.asyncio
    async def test_store_failure_reported(self, source, repository, mock_metrics: MagicMock):
        repository.replace_all.side_effect = ConnectionError("connection reset")
        job = CatalogRefreshJob(source, repository, metrics=mock_metrics)

        result = await job.run()

        assert result.failed
        assert result.processed == 0

    def test_rejects_non_positive_batch_size(self, source, repository, mock_metrics: MagicMock):
        with pytest.raises(ValueError):
            CatalogRefreshJob(source, repository, batch_size=0, metrics=mock_metrics)
