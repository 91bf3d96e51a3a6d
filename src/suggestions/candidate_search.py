"""
Two-phase free-text candidate retrieval.

Phase 1 fetches rows whose symbol or name equals the query exactly; phase 2
fills the remaining capacity with rows whose symbol or name contains the
query. Exact matches always precede partial matches, each phase is ordered
by symbol, and no security appears twice.
"""

import logging
import time

from src.catalog.base import Catalog
from src.catalog.schemas import Security
from src.observability.metrics import MetricsCollector
from src.observability.tracing import get_tracer, traced
from src.suggestions.accumulator import RankedAccumulator

logger = logging.getLogger(__name__)

# Hard ceiling on rows fetched per phase, independent of caller limits
CANDIDATE_CEILING = 300


def clamp(value: int, lower: int, upper: int) -> int:
    return max(lower, min(value, upper))


class CandidateSearch:
    """
    Free-text typeahead engine over a catalog.

    Stateless: one instance can serve any number of concurrent searches.
    Catalog failures propagate unchanged; a failure in the partial phase
    discards the exact-phase results.
    """

    def __init__(
        self,
        catalog: Catalog,
        ceiling: int = CANDIDATE_CEILING,
        metrics: MetricsCollector | None = None,
    ) -> None:
        self._catalog = catalog
        self._ceiling = ceiling
        self._metrics = metrics
        self._tracer = get_tracer("suggestions.candidate_search")

    async def _run_phase(self, phase: str, query: str, limit: int) -> list[Security]:
        fetch = self._catalog.exact_match if phase == "exact" else self._catalog.partial_match
        start = time.perf_counter()
        with traced(self._tracer, f"suggestions.{phase}_phase", {"limit": limit}) as span:
            rows = await fetch(query, limit)
            span.set_attribute("rows", len(rows))
        if self._metrics is not None:
            self._metrics.record_phase_latency(phase, time.perf_counter() - start)
        return rows

    async def search(self, query: str, limit: int) -> list[Security]:
        """
        Return up to ``limit`` securities matching ``query``.

        Args:
            query: Non-blank user input (trimmed here)
            limit: Requested size, clamped into [1, ceiling]

        Returns:
            Exact matches followed by partial matches, without duplicates
        """
        query = query.strip()
        limit = clamp(limit, 1, self._ceiling)

        exact = await self._run_phase("exact", query, limit)
        accumulator = RankedAccumulator(limit)
        accumulator.add(exact)

        remaining = limit - len(exact)
        if remaining <= 0:
            logger.debug("Exact phase filled %d slots for %r", limit, query)
            return accumulator.results

        # Over-fetch by the exact count so dedup cannot leave the page short
        partial = await self._run_phase("partial", query, remaining + len(exact))
        added = accumulator.add(partial)

        logger.debug(
            "Candidate search %r: %d exact, %d partial (fetched %d)",
            query, len(exact), added, len(partial),
        )
        return accumulator.results
