"""
Structured multi-criterion search.

Each non-blank criterion becomes a case-insensitive substring predicate
on its catalog column; predicates are joined with AND and compiled with
positional parameters in a fixed column order.
"""

import logging
import time

from src.catalog.base import Catalog, CompiledFilter, FilterTerm, escape_like
from src.catalog.schemas import Security
from src.observability.metrics import MetricsCollector
from src.observability.tracing import get_tracer, traced
from src.suggestions.candidate_search import clamp
from src.suggestions.errors import ValidationError
from src.suggestions.schemas import AdvancedSearchQuery

logger = logging.getLogger(__name__)

ADVANCED_MAX_LIMIT = 100

# Criterion name -> catalog column, in compile order
CRITERIA_COLUMNS: dict[str, str] = {
    "symbol": "symbol",
    "company_name": "name",
    "exchange": "exchange",
    "country": "country",
    "currency": "currency",
}


class AdvancedQueryBuilder:
    """Compiles advanced criteria into a conjunctive filter and executes it."""

    def __init__(
        self,
        catalog: Catalog,
        max_limit: int = ADVANCED_MAX_LIMIT,
        metrics: MetricsCollector | None = None,
    ) -> None:
        self._catalog = catalog
        self._max_limit = max_limit
        self._metrics = metrics
        self._tracer = get_tracer("suggestions.advanced")

    def build(self, criteria: AdvancedSearchQuery) -> CompiledFilter:
        """
        Compile the non-blank criteria of ``criteria``.

        Raises:
            ValidationError: If every criterion is blank. Nothing is
                compiled, so no catalog query can run for this case.
        """
        supplied = dict(criteria.criteria())
        if not supplied:
            raise ValidationError.of(
                "search_criteria",
                "At least one search parameter must be provided",
                "NO_SEARCH_CRITERIA",
            )

        terms: list[FilterTerm] = []
        clauses: list[str] = []
        params: list[str] = []
        for name, column in CRITERIA_COLUMNS.items():
            value = supplied.get(name)
            if value is None:
                continue
            params.append(f"%{escape_like(value)}%")
            clauses.append(f"upper({column}) LIKE upper(${len(params)})")
            terms.append(FilterTerm(column=column, needle=value))

        return CompiledFilter(
            terms=tuple(terms),
            sql=" AND ".join(clauses),
            params=tuple(params),
        )

    async def search(self, criteria: AdvancedSearchQuery, limit: int) -> list[Security]:
        """Run ``criteria`` once against the catalog, ordered by symbol."""
        compiled = self.build(criteria)
        limit = clamp(limit, 1, self._max_limit)

        start = time.perf_counter()
        with traced(
            self._tracer,
            "suggestions.filtered_phase",
            {"limit": limit, "columns": ",".join(compiled.columns)},
        ) as span:
            rows = await self._catalog.filtered_match(compiled, limit)
            span.set_attribute("rows", len(rows))
        if self._metrics is not None:
            self._metrics.record_phase_latency("filtered", time.perf_counter() - start)

        logger.debug("Advanced search on %s returned %d rows", compiled.columns, len(rows))
        return rows[:limit]
