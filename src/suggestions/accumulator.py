"""Capacity-bounded, identity-deduplicating result accumulator."""

from collections.abc import Iterable

from src.catalog.schemas import Security


class RankedAccumulator:
    """
    Collects results from prioritized retrieval phases.

    Phases are added in priority order. Each ``add`` keeps the incoming
    order, skips rows whose id was already collected, and stops once the
    capacity is reached. Rows without an id are deduplicated by value.

    Usage:
        acc = RankedAccumulator(capacity=10)
        acc.add(exact_rows)
        acc.add(partial_rows)
        return acc.results
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 0:
            raise ValueError(f"capacity must be >= 0, got {capacity}")
        self._capacity = capacity
        self._results: list[Security] = []
        self._seen: set = set()

    @staticmethod
    def _identity(security: Security):
        if security.id is not None:
            return ("id", security.id)
        return ("value", security.symbol, security.name, security.exchange)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def remaining(self) -> int:
        return self._capacity - len(self._results)

    @property
    def is_full(self) -> bool:
        return self.remaining <= 0

    @property
    def results(self) -> list[Security]:
        return list(self._results)

    def __len__(self) -> int:
        return len(self._results)

    def __contains__(self, security: Security) -> bool:
        return self._identity(security) in self._seen

    def add(self, securities: Iterable[Security]) -> int:
        """Append unseen securities until full. Returns the number added."""
        added = 0
        for security in securities:
            if self.is_full:
                break
            key = self._identity(security)
            if key in self._seen:
                continue
            self._seen.add(key)
            self._results.append(security)
            added += 1
        return added
