"""
Priority-ranked match strategies.

Six fixed strategies classify how a security matches a query: exact,
prefix or substring, on symbol or on name. Lower priority numbers are
more relevant. Free-text search retrieves in two tiers built from these
(priorities 1-2 are the exact tier, 3-6 the partial tier); the registry is
also used to label each result with the strategy that explains it.

All strategies normalize the query the same way (trim, case-fold). A blank
query matches nothing.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from src.catalog.schemas import Security

if TYPE_CHECKING:
    from src.suggestions.schemas import AdvancedSearchQuery


class SearchField(str, Enum):
    """Security fields a search term can target."""

    SYMBOL = "symbol"
    NAME = "name"
    EXCHANGE = "exchange"
    TYPE = "type"
    COUNTRY = "country"
    CURRENCY = "currency"


class MatchMode(str, Enum):
    """How the normalized field value is compared to the normalized query."""

    EXACT = "exact"
    PREFIX = "prefix"
    CONTAINS = "contains"


def normalize(value: str | None) -> str:
    return (value or "").strip().casefold()


@dataclass(frozen=True)
class MatchStrategy:
    """
    One single-field, single-mode match predicate with a fixed rank.

    Attributes:
        priority: Rank, 1 is the most relevant
        field: Security field inspected
        mode: Comparison applied to the field
        description: Human-readable label
    """

    priority: int
    field: SearchField
    mode: MatchMode
    description: str

    @property
    def name(self) -> str:
        """Stable identifier, e.g. "symbol_exact"."""
        return f"{self.field.value}_{self.mode.value}"

    def test(self, security: Security, query: str) -> bool:
        """Check a single security against the query."""
        needle = normalize(query)
        if not needle:
            return False

        value = normalize(getattr(security, self.field.value, None))
        if self.mode is MatchMode.EXACT:
            return value == needle
        if self.mode is MatchMode.PREFIX:
            return value.startswith(needle)
        return needle in value

    def matches(self, candidates: list[Security], query: str) -> list[Security]:
        """Filter candidates, preserving their order."""
        if not normalize(query):
            return []
        return [s for s in candidates if self.test(s, query)]


EXACT_SYMBOL = MatchStrategy(1, SearchField.SYMBOL, MatchMode.EXACT, "Exact symbol match")
EXACT_NAME = MatchStrategy(2, SearchField.NAME, MatchMode.EXACT, "Exact name match")
SYMBOL_PREFIX = MatchStrategy(3, SearchField.SYMBOL, MatchMode.PREFIX, "Symbol starts with query")
NAME_PREFIX = MatchStrategy(4, SearchField.NAME, MatchMode.PREFIX, "Name starts with query")
SYMBOL_CONTAINS = MatchStrategy(5, SearchField.SYMBOL, MatchMode.CONTAINS, "Symbol contains query")
NAME_CONTAINS = MatchStrategy(6, SearchField.NAME, MatchMode.CONTAINS, "Name contains query")

DEFAULT_STRATEGIES: tuple[MatchStrategy, ...] = (
    EXACT_SYMBOL,
    EXACT_NAME,
    SYMBOL_PREFIX,
    NAME_PREFIX,
    SYMBOL_CONTAINS,
    NAME_CONTAINS,
)


class StrategyRegistry:
    """Immutable, priority-ordered collection of match strategies."""

    def __init__(self, strategies: tuple[MatchStrategy, ...] = DEFAULT_STRATEGIES) -> None:
        ordered = tuple(sorted(strategies, key=lambda s: s.priority))
        priorities = [s.priority for s in ordered]
        if len(set(priorities)) != len(priorities):
            raise ValueError(f"Strategy priorities must be unique, got {priorities}")
        self._strategies = ordered

    def all(self) -> tuple[MatchStrategy, ...]:
        """All strategies, most relevant first."""
        return self._strategies

    def for_field(self, field: SearchField) -> tuple[MatchStrategy, ...]:
        """Strategies inspecting ``field``, most relevant first."""
        return tuple(s for s in self._strategies if s.field is field)

    def classify(self, security: Security, query: str) -> MatchStrategy | None:
        """The most relevant strategy that matches, or None."""
        for strategy in self._strategies:
            if strategy.test(security, query):
                return strategy
        return None

    def __len__(self) -> int:
        return len(self._strategies)

    def __iter__(self):
        return iter(self._strategies)


# Advanced-query attribute holding the search term for each field.
# TYPE has no advanced-query parameter.
_ADVANCED_FIELDS: dict[SearchField, str | None] = {
    SearchField.SYMBOL: "symbol",
    SearchField.NAME: "company_name",
    SearchField.EXCHANGE: "exchange",
    SearchField.COUNTRY: "country",
    SearchField.CURRENCY: "currency",
    SearchField.TYPE: None,
}


def extract_search_term(query: AdvancedSearchQuery, field: SearchField) -> str | None:
    """Search term an advanced query supplies for ``field``, or None."""
    attr = _ADVANCED_FIELDS[field]
    if attr is None:
        return None
    return getattr(query, attr)


def applicable_strategies(
    registry: StrategyRegistry, query: AdvancedSearchQuery
) -> list[tuple[MatchStrategy, str]]:
    """
    Strategies with a non-blank term in ``query``, paired with that term.

    Strategies whose field has no term (or no advanced parameter at all)
    are skipped.
    """
    applicable = []
    for strategy in registry.all():
        term = extract_search_term(query, strategy.field)
        if term is None or not term.strip():
            continue
        applicable.append((strategy, term))
    return applicable
