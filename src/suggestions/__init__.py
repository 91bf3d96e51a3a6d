"""Ticker suggestion search: ranked free-text typeahead and structured search."""

from src.suggestions.accumulator import RankedAccumulator
from src.suggestions.advanced import AdvancedQueryBuilder
from src.suggestions.candidate_search import CandidateSearch
from src.suggestions.config import SuggestionsConfig
from src.suggestions.errors import ErrorDetail, RetrievalError, SuggestionError, ValidationError
from src.suggestions.schemas import AdvancedSearchQuery, ResultSet, SearchQuery, Suggestion
from src.suggestions.service import SuggestionService
from src.suggestions.strategies import (
    DEFAULT_STRATEGIES,
    MatchMode,
    MatchStrategy,
    SearchField,
    StrategyRegistry,
    extract_search_term,
)

__all__ = [
    "AdvancedQueryBuilder",
    "AdvancedSearchQuery",
    "CandidateSearch",
    "DEFAULT_STRATEGIES",
    "ErrorDetail",
    "MatchMode",
    "MatchStrategy",
    "RankedAccumulator",
    "ResultSet",
    "RetrievalError",
    "SearchField",
    "SearchQuery",
    "StrategyRegistry",
    "Suggestion",
    "SuggestionError",
    "SuggestionService",
    "SuggestionsConfig",
    "ValidationError",
    "extract_search_term",
]
