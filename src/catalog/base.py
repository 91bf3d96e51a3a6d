"""
Catalog contract consumed by the suggestion search.

Defines the three retrieval operations every catalog backend must provide,
plus the compiled conjunctive filter passed to ``filtered_match``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from src.catalog.schemas import Security


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so the value matches as a literal substring."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


@dataclass(frozen=True)
class FilterTerm:
    """
    One case-insensitive substring predicate of a compiled filter.

    Attributes:
        column: Catalog column the predicate applies to (e.g. "exchange")
        needle: Trimmed search value, without LIKE wildcards
    """

    column: str
    needle: str

    def matches(self, security: Security) -> bool:
        value = getattr(security, self.column) or ""
        return self.needle.casefold() in value.casefold()


@dataclass(frozen=True)
class CompiledFilter:
    """
    A conjunction of substring predicates with positional parameters.

    ``sql`` references parameters ``$1..$n`` in the same order as
    ``params``. Two filters built from identical criteria are equal,
    which makes the filter usable as a cache key.

    Attributes:
        terms: Predicates in compile order
        sql: WHERE fragment, e.g. "upper(symbol) LIKE upper($1)"
        params: LIKE patterns bound to $1..$n
    """

    terms: tuple[FilterTerm, ...]
    sql: str
    params: tuple[str, ...]

    @property
    def columns(self) -> tuple[str, ...]:
        return tuple(t.column for t in self.terms)

    def matches(self, security: Security) -> bool:
        """Evaluate the conjunction in memory (used by non-SQL catalogs)."""
        return all(term.matches(security) for term in self.terms)


class Catalog(ABC):
    """
    Queryable collection of searchable securities.

    All operations only consider active rows and return results ordered
    ascending by symbol (ties broken by id). Failures propagate to the
    caller unchanged; implementations must not retry.
    """

    @abstractmethod
    async def exact_match(self, query: str, limit: int) -> list[Security]:
        """Rows whose symbol OR name equals ``query`` case-insensitively."""

    @abstractmethod
    async def partial_match(self, query: str, limit: int) -> list[Security]:
        """Rows whose symbol OR name contains ``query`` case-insensitively."""

    @abstractmethod
    async def filtered_match(
        self, compiled_filter: CompiledFilter, limit: int
    ) -> list[Security]:
        """Rows satisfying every term of ``compiled_filter``."""
