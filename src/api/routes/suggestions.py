"""
Ticker suggestion endpoints.

- GET /v1/suggestions         free-text typeahead over symbol and name
- GET /v1/suggestions/search  conjunctive search by symbol, company name,
                              exchange, country and currency

Limits are range-checked by the suggestion service, not by FastAPI, so
out-of-range values produce the standard 400 error body. Malformed values
(e.g. limit=abc) get the same body from the app-level handler.
"""

from fastapi import APIRouter, Depends, Query
from starlette.requests import Request
import structlog

from src.api.auth import verify_api_key
from src.api.dependencies import get_suggestion_service
from src.api.models import ErrorResponse, SuggestionsResponse
from src.api.rate_limit import limiter, suggestions_limit
from src.suggestions.schemas import AdvancedSearchQuery
from src.suggestions.service import SuggestionService

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/v1/suggestions")

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid query"},
    401: {"description": "Invalid API key"},
    500: {"model": ErrorResponse, "description": "Catalog unavailable"},
}


@router.get(
    "",
    response_model=SuggestionsResponse,
    responses=_ERROR_RESPONSES,
    summary="Ticker typeahead suggestions",
    description="""
    Suggest securities whose symbol or company name matches the input.

    Exact matches (symbol or name equal to the input, case-insensitive)
    come first, followed by partial matches (symbol or name containing the
    input). Each group is ordered by symbol. Every suggestion carries the
    highest-priority strategy that explains it in `match_type`.
    """,
)
@limiter.limit(suggestions_limit)
async def get_suggestions(
    request: Request,
    q: str = Query(default="", description="Search input, e.g. 'AAPL' or 'apple'"),
    limit: int | None = Query(default=None, description="Maximum results (1-50, default 10)"),
    api_key: str = Depends(verify_api_key),
    service: SuggestionService = Depends(get_suggestion_service),
) -> SuggestionsResponse:
    result = await service.search_by_text(q, limit)
    return SuggestionsResponse.from_result(result)


@router.get(
    "/search",
    response_model=SuggestionsResponse,
    responses=_ERROR_RESPONSES,
    summary="Advanced ticker search",
    description="""
    Search securities by any combination of criteria.

    Every supplied criterion is a case-insensitive substring match on its
    field, and all of them must hold. At least one criterion is required.
    Results are ordered by symbol.
    """,
)
@limiter.limit(suggestions_limit)
async def search_suggestions(
    request: Request,
    symbol: str | None = Query(default=None, description="Symbol contains"),
    company_name: str | None = Query(
        default=None, alias="companyName", description="Company name contains"
    ),
    exchange: str | None = Query(default=None, description="Exchange contains"),
    country: str | None = Query(default=None, description="Country contains"),
    currency: str | None = Query(default=None, description="Currency contains"),
    limit: int | None = Query(default=None, description="Maximum results (1-100, default 10)"),
    api_key: str = Depends(verify_api_key),
    service: SuggestionService = Depends(get_suggestion_service),
) -> SuggestionsResponse:
    query = AdvancedSearchQuery(
        symbol=symbol,
        company_name=company_name,
        exchange=exchange,
        country=country,
        currency=currency,
        limit=service.config.advanced_default_limit if limit is None else limit,
    )
    result = await service.search_by_criteria(query)
    return SuggestionsResponse.from_result(result)
