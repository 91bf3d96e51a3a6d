"""Shared fixtures for API tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from src.api.app import create_app
from src.api.auth import verify_api_key
from src.api.dependencies import get_database, get_refresh_job, get_suggestion_service
from src.catalog.memory import InMemoryCatalog
from src.suggestions.service import SuggestionService


@pytest.fixture
def suggestion_service(memory_catalog: InMemoryCatalog, mock_metrics: MagicMock) -> SuggestionService:
    """Real service over the in-memory sample catalog."""
    return SuggestionService(memory_catalog, metrics=mock_metrics)


@pytest.fixture
def mock_refresh_job() -> AsyncMock:
    """Mock CatalogRefreshJob."""
    job = AsyncMock()
    job.run = AsyncMock()
    return job


@pytest.fixture
def health_database() -> AsyncMock:
    """Mock Database for the health endpoint."""
    db = AsyncMock()
    db.health_check = AsyncMock(return_value=True)
    return db


@pytest.fixture
def app(suggestion_service, mock_refresh_job, health_database):
    """App with dependencies overridden; auth bypassed."""
    app = create_app()
    app.dependency_overrides[verify_api_key] = lambda: "test-key"
    app.dependency_overrides[get_suggestion_service] = lambda: suggestion_service
    app.dependency_overrides[get_refresh_job] = lambda: mock_refresh_job
    app.dependency_overrides[get_database] = lambda: health_database
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
