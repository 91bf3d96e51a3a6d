"""
Pydantic models for API request/response validation.
"""

import datetime as dt

from pydantic import BaseModel, Field

from src.suggestions.errors import SuggestionError
from src.suggestions.schemas import ResultSet, Suggestion


class SuggestionItem(BaseModel):
    """A single ticker suggestion."""

    id: int | None = Field(default=None, description="Catalog row id")
    symbol: str = Field(..., description="Ticker symbol, e.g. AAPL")
    name: str = Field(..., description="Company name")
    exchange: str | None = Field(default=None, description="Listing exchange")
    type: str | None = Field(default=None, description="Instrument type, e.g. Common Stock")
    country: str | None = Field(default=None, description="Country of listing")
    currency: str | None = Field(default=None, description="Trading currency")
    match_type: str | None = Field(
        default=None,
        description="Strategy that best explains the match, e.g. symbol_exact",
    )
    match_priority: int | None = Field(
        default=None,
        description="Priority of that strategy (1 is the most relevant)",
    )

    @classmethod
    def from_suggestion(cls, suggestion: Suggestion) -> "SuggestionItem":
        s = suggestion.security
        strategy = suggestion.strategy
        return cls(
            id=s.id,
            symbol=s.symbol,
            name=s.name,
            exchange=s.exchange,
            type=s.type,
            country=s.country,
            currency=s.currency,
            match_type=strategy.name if strategy else None,
            match_priority=strategy.priority if strategy else None,
        )


class SuggestionsResponse(BaseModel):
    """Response model for suggestion searches."""

    suggestions: list[SuggestionItem] = Field(
        default_factory=list,
        description="Matches in rank order, without duplicates",
    )
    query: str = Field(..., description="Search input or advanced search description")
    count: int = Field(..., description="Number of suggestions returned")

    @classmethod
    def from_result(cls, result: ResultSet) -> "SuggestionsResponse":
        return cls(
            suggestions=[SuggestionItem.from_suggestion(s) for s in result.suggestions],
            query=result.query,
            count=result.count,
        )


class ErrorDetailModel(BaseModel):
    field: str
    message: str
    code: str | None = None


class ErrorResponse(BaseModel):
    """Response model for suggestion errors."""

    message: str = Field(..., description="Error summary")
    errors: list[ErrorDetailModel] = Field(
        default_factory=list,
        description="Field-level error details",
    )
    timestamp: dt.datetime = Field(
        default_factory=lambda: dt.datetime.now(dt.timezone.utc),
        description="When the error occurred (UTC)",
    )

    @classmethod
    def from_error(cls, error: SuggestionError) -> "ErrorResponse":
        return cls(
            message=error.message,
            errors=[
                ErrorDetailModel(field=e.field, message=e.message, code=e.code)
                for e in error.errors
            ],
        )


class RefreshResponse(BaseModel):
    """Response model for a catalog refresh."""

    success: bool = Field(..., description="Whether the catalog was replaced")
    message: str = Field(..., description="Outcome summary")
    records_processed: int = Field(
        default=0,
        alias="recordsProcessed",
        description="Securities stored",
    )

    model_config = {"populate_by_name": True}


class ComponentHealth(BaseModel):
    status: str = Field(..., description="healthy or unhealthy")
    latency_ms: float | None = Field(default=None, description="Check latency")
    details: dict | None = Field(default=None, description="Error details, if any")


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(
        ...,
        description="Overall service status: healthy or unhealthy",
    )
    version: str = Field(default="0.1.0", description="Service version")
    components: dict[str, ComponentHealth] = Field(
        default_factory=dict,
        description="Per-dependency health",
    )
    market_data_configured: bool = Field(
        default=False,
        description="Whether a market data API key is configured",
    )
