"""In-memory catalog for local development, the CLI demo mode and tests."""

import itertools
import logging
from dataclasses import replace

from src.catalog.base import Catalog, CompiledFilter
from src.catalog.schemas import Security

logger = logging.getLogger(__name__)


def _sort_key(security: Security) -> tuple[str, int]:
    return (security.symbol, security.id or 0)


class InMemoryCatalog(Catalog):
    """
    Catalog backed by a Python list, mirroring CatalogRepository semantics.

    Rows without an id are assigned the next unused id so that
    identity-based deduplication behaves as it does against PostgreSQL.
    Inactive rows and rows without symbol/name are kept but never returned.
    """

    def __init__(self, securities: list[Security] | None = None) -> None:
        self._rows: list[Security] = []
        if securities:
            self.load(securities)

    def load(self, securities: list[Security]) -> int:
        """
        Append securities, assigning ids where missing. Returns count added.

        Assigned ids continue past the largest id already in use, so rows
        with explicit ids and rows without never share an identity.

        Raises:
            ValueError: If an explicit id is already taken. Nothing is loaded.
        """
        used = {s.id for s in self._rows}
        for security in securities:
            if security.id is None:
                continue
            if security.id in used:
                raise ValueError(f"Duplicate security id {security.id}")
            used.add(security.id)

        ids = itertools.count(max(used, default=0) + 1)
        for security in securities:
            if security.id is None:
                security = replace(security, id=next(ids))
            self._rows.append(security)
        self._rows.sort(key=_sort_key)
        logger.debug("Loaded %d securities (total %d)", len(securities), len(self._rows))
        return len(securities)

    def clear(self) -> int:
        """Remove every row. Returns the number removed."""
        removed = len(self._rows)
        self._rows = []
        return removed

    def __len__(self) -> int:
        return len(self._rows)

    def _searchable(self):
        return (s for s in self._rows if s.is_active and s.has_basic_info())

    async def exact_match(self, query: str, limit: int) -> list[Security]:
        needle = query.casefold()
        matches = [
            s for s in self._searchable()
            if s.symbol.casefold() == needle or s.name.casefold() == needle
        ]
        return matches[:limit]

    async def partial_match(self, query: str, limit: int) -> list[Security]:
        needle = query.casefold()
        matches = [
            s for s in self._searchable()
            if needle in s.symbol.casefold() or needle in s.name.casefold()
        ]
        return matches[:limit]

    async def filtered_match(
        self, compiled_filter: CompiledFilter, limit: int
    ) -> list[Security]:
        matches = [s for s in self._searchable() if compiled_filter.matches(s)]
        return matches[:limit]
