"""Configuration for suggestion search limits."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SuggestionsConfig(BaseSettings):
    """Limits applied to free-text and advanced suggestion searches."""

    model_config = SettingsConfigDict(
        env_prefix="SUGGESTIONS_",
        case_sensitive=False,
        extra="ignore",
    )

    text_default_limit: int = Field(
        default=10,
        ge=1,
        description="Limit used when a free-text search does not specify one",
    )
    text_max_limit: int = Field(
        default=50,
        ge=1,
        description="Largest limit a caller may request for free-text search",
    )
    candidate_ceiling: int = Field(
        default=300,
        ge=1,
        description="Hard cap on rows fetched per retrieval phase",
    )
    advanced_default_limit: int = Field(
        default=10,
        ge=1,
        description="Limit used when an advanced search does not specify one",
    )
    advanced_max_limit: int = Field(
        default=100,
        ge=1,
        description="Largest limit a caller may request for advanced search",
    )
