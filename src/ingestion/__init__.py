"""Market data ingestion - provider client and catalog refresh."""

from src.ingestion.http_client import HTTPClient, HTTPClientError, RateLimitError, RetryConfig
from src.ingestion.refresh import CatalogRefreshJob, RefreshResult
from src.ingestion.twelvedata import TwelveDataClient

__all__ = [
    "CatalogRefreshJob",
    "HTTPClient",
    "HTTPClientError",
    "RateLimitError",
    "RefreshResult",
    "RetryConfig",
    "TwelveDataClient",
]
