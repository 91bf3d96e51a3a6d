"""Suggestion service: the free-text and advanced search entry points."""

import time

import structlog

from src.catalog.base import Catalog
from src.catalog.schemas import Security
from src.observability.metrics import MetricsCollector, get_metrics
from src.suggestions.advanced import AdvancedQueryBuilder
from src.suggestions.candidate_search import CandidateSearch
from src.suggestions.config import SuggestionsConfig
from src.suggestions.errors import RetrievalError, SuggestionError, ValidationError
from src.suggestions.schemas import (
    AdvancedSearchQuery,
    ResultSet,
    SearchQuery,
    Suggestion,
    is_blank,
)
from src.suggestions.strategies import StrategyRegistry, applicable_strategies

logger = structlog.get_logger(__name__)


class SuggestionService:
    """
    Validates queries, runs the matching search engine and assembles results.

    Validation happens before any catalog access. Any catalog failure is
    surfaced as a single RetrievalError; no partial result set is ever
    returned.
    """

    def __init__(
        self,
        catalog: Catalog,
        config: SuggestionsConfig | None = None,
        registry: StrategyRegistry | None = None,
        metrics: MetricsCollector | None = None,
    ) -> None:
        self._config = config or SuggestionsConfig()
        self._registry = registry or StrategyRegistry()
        self._metrics = metrics or get_metrics()
        self._candidates = CandidateSearch(
            catalog,
            ceiling=self._config.candidate_ceiling,
            metrics=self._metrics,
        )
        self._advanced = AdvancedQueryBuilder(
            catalog,
            max_limit=self._config.advanced_max_limit,
            metrics=self._metrics,
        )

    @property
    def config(self) -> SuggestionsConfig:
        return self._config

    @property
    def registry(self) -> StrategyRegistry:
        return self._registry

    @property
    def query_builder(self) -> AdvancedQueryBuilder:
        return self._advanced

    # ── Validation ──────────────────────────────────────────────

    def _validate_limit(self, limit: int, upper: int) -> None:
        if not 1 <= limit <= upper:
            raise ValidationError.of(
                "limit",
                f"Limit must be between 1 and {upper}",
                "INVALID_LIMIT",
            )

    def _validate_text(self, query: SearchQuery) -> None:
        if is_blank(query.input):
            raise ValidationError.of("input", "Search input cannot be empty", "EMPTY_INPUT")
        self._validate_limit(query.limit, self._config.text_max_limit)

    def _validate_advanced(self, query: AdvancedSearchQuery) -> None:
        if not query.has_search_criteria:
            raise ValidationError.of(
                "search_criteria",
                "At least one search parameter must be provided",
                "NO_SEARCH_CRITERIA",
            )
        self._validate_limit(query.limit, self._config.advanced_max_limit)

    # ── Assembly ────────────────────────────────────────────────

    def _annotate_text(self, securities: list[Security], query: str) -> list[Suggestion]:
        return [Suggestion(s, self._registry.classify(s, query)) for s in securities]

    def _annotate_advanced(
        self, securities: list[Security], query: AdvancedSearchQuery
    ) -> list[Suggestion]:
        applicable = applicable_strategies(self._registry, query)
        suggestions = []
        for security in securities:
            strategy = next(
                (st for st, term in applicable if st.test(security, term)),
                None,
            )
            suggestions.append(Suggestion(security, strategy))
        return suggestions

    # ── Public API ──────────────────────────────────────────────

    async def search_by_text(self, input: str, limit: int | None = None) -> ResultSet:
        """
        Typeahead search over symbol and company name.

        Raises:
            ValidationError: Blank input or limit outside [1, text_max_limit]
            RetrievalError: The catalog failed
        """
        query = SearchQuery(
            input=input,
            limit=self._config.text_default_limit if limit is None else limit,
        )
        start = time.perf_counter()
        try:
            self._validate_text(query)
            text = query.input.strip()
            logger.info("Executing suggestion search", query=text, limit=query.limit)

            try:
                securities = await self._candidates.search(text, query.limit)
            except Exception as e:
                logger.error("Repository error for query", query=text, error=str(e), exc_info=True)
                raise RetrievalError.of(
                    "repository", "Failed to retrieve suggestions", "REPOSITORY_ERROR"
                ) from e

            result = ResultSet(suggestions=self._annotate_text(securities, text), query=text)
        except SuggestionError as e:
            self._record("text", e, start)
            if isinstance(e, ValidationError):
                logger.warning("Invalid search query", input=input, limit=query.limit, error=e.message)
            raise

        self._metrics.record_search(
            "text", "success", result.count, time.perf_counter() - start
        )
        logger.info("Suggestion search completed", query=text, count=result.count)
        return result

    async def search_by_criteria(self, query: AdvancedSearchQuery) -> ResultSet:
        """
        Conjunctive search over symbol, company name, exchange, country, currency.

        Raises:
            ValidationError: All criteria blank or limit outside [1, advanced_max_limit]
            RetrievalError: The catalog failed
        """
        start = time.perf_counter()
        try:
            self._validate_advanced(query)
            description = query.description
            logger.info("Executing advanced suggestion search", search=description, limit=query.limit)

            try:
                securities = await self._advanced.search(query, query.limit)
            except ValidationError:
                raise
            except Exception as e:
                logger.error("Repository error for advanced search", search=description, error=str(e), exc_info=True)
                raise RetrievalError.of(
                    "repository", "Failed to retrieve advanced suggestions", "REPOSITORY_ERROR"
                ) from e

            result = ResultSet(
                suggestions=self._annotate_advanced(securities, query),
                query=description,
            )
        except SuggestionError as e:
            self._record("advanced", e, start)
            if isinstance(e, ValidationError):
                logger.warning("Invalid advanced search", limit=query.limit, error=e.message)
            raise

        self._metrics.record_search(
            "advanced", "success", result.count, time.perf_counter() - start
        )
        logger.info("Advanced suggestion search completed", search=description, count=result.count)
        return result

    def _record(self, kind: str, error: SuggestionError, start: float) -> None:
        outcome = "validation_error" if isinstance(error, ValidationError) else "retrieval_error"
        self._metrics.record_search(kind, outcome, latency=time.perf_counter() - start)
