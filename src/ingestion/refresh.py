"""
Catalog refresh job.

Pulls the full stock list from the market-data provider and replaces the
catalog contents with it. Failures are reported through RefreshResult,
never raised, so the admin endpoint and CLI can render them directly.
"""

import logging
import time
from dataclasses import dataclass
from typing import Protocol

from src.catalog.repository import CatalogRepository
from src.catalog.schemas import Security
from src.observability.metrics import MetricsCollector, get_metrics

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 1000


class StockSource(Protocol):
    """Anything that can list the full stock universe."""

    async def fetch_all_stocks(self) -> list[Security]: ...


@dataclass(frozen=True)
class RefreshResult:
    """
    Outcome of one refresh run.

    Attributes:
        success: True when the catalog was replaced
        processed: Securities stored (0 unless successful)
        message: Human-readable summary
    """

    success: bool
    processed: int
    message: str
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


class CatalogRefreshJob:
    """
    Fetch-and-store pipeline for the stocks catalog.

    An empty fetch leaves the catalog untouched and yields an unsuccessful
    result; otherwise the catalog is replaced in batches of ``batch_size``
    within a single transaction.
    """

    def __init__(
        self,
        source: StockSource,
        repository: CatalogRepository,
        batch_size: int = DEFAULT_BATCH_SIZE,
        metrics: MetricsCollector | None = None,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be positive")
        self._source = source
        self._repository = repository
        self._batch_size = batch_size
        self._metrics = metrics or get_metrics()

    async def run(self) -> RefreshResult:
        start = time.perf_counter()
        try:
            securities = await self._source.fetch_all_stocks()
            if not securities:
                logger.warning("Market data provider returned no stocks")
                self._metrics.record_catalog_refresh("empty")
                return RefreshResult(
                    success=False,
                    processed=0,
                    message="No stocks fetched from market data provider",
                )

            deleted, inserted = await self._repository.replace_all(
                securities, batch_size=self._batch_size
            )
        except Exception as e:
            logger.error(f"Failed to fetch and store stocks: {e}", exc_info=True)
            self._metrics.record_catalog_refresh("error")
            return RefreshResult(
                success=False,
                processed=0,
                message=f"Failed: {e}",
                error=str(e),
            )

        self._metrics.record_catalog_refresh("success", stored=inserted)
        logger.info(
            f"Catalog refresh complete: {deleted} cleared, {inserted} stored "
            f"in {time.perf_counter() - start:.2f}s"
        )
        return RefreshResult(
            success=True,
            processed=inserted,
            message="Successfully fetched and stored stocks",
        )
