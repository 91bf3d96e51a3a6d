"""
Dependency injection for FastAPI endpoints.
"""

from src.catalog.repository import CatalogRepository
from src.config.settings import get_settings
from src.ingestion.http_client import RetryConfig
from src.ingestion.refresh import CatalogRefreshJob
from src.ingestion.twelvedata import TwelveDataClient
from src.storage.database import close_database, get_database
from src.suggestions.config import SuggestionsConfig
from src.suggestions.service import SuggestionService

__all__ = [
    "cleanup_dependencies",
    "get_catalog_repository",
    "get_database",
    "get_refresh_job",
    "get_suggestion_service",
]

# Global service instances (initialized on first request)
_catalog_repository: CatalogRepository | None = None
_suggestion_service: SuggestionService | None = None


async def get_catalog_repository() -> CatalogRepository:
    """Get the stocks catalog repository."""
    global _catalog_repository

    if _catalog_repository is None:
        _catalog_repository = CatalogRepository(await get_database())

    return _catalog_repository


async def get_suggestion_service() -> SuggestionService:
    """
    Get suggestion service instance.

    Creates a singleton service over the PostgreSQL catalog.
    """
    global _suggestion_service

    if _suggestion_service is None:
        _suggestion_service = SuggestionService(
            catalog=await get_catalog_repository(),
            config=SuggestionsConfig(),
        )

    return _suggestion_service


async def get_refresh_job() -> CatalogRefreshJob:
    """Build a catalog refresh job for the configured market data provider."""
    settings = get_settings()
    client = TwelveDataClient(
        api_key=settings.twelve_data_api_key or "",
        base_url=settings.twelve_data_base_url,
        retry_config=RetryConfig(
            max_retries=settings.max_http_retries,
            max_backoff_seconds=settings.max_backoff_seconds,
        ),
        timeout=settings.http_timeout_seconds,
    )
    return CatalogRefreshJob(
        source=client,
        repository=await get_catalog_repository(),
        batch_size=settings.catalog_refresh_batch_size,
    )


async def cleanup_dependencies() -> None:
    """Clean up global dependencies on shutdown."""
    global _catalog_repository, _suggestion_service

    _suggestion_service = None
    _catalog_repository = None

    await close_database()
