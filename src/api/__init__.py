"""
FastAPI ticker search service.

Provides REST API for ticker suggestions with:
- GET /v1/suggestions - Typeahead over symbol and company name
- GET /v1/suggestions/search - Advanced multi-criteria search
- POST /admin/fetch-stocks - Catalog refresh from market data
- GET /health - Service health check
"""

from src.api.app import create_app

__all__ = ["create_app"]
