"""Query and result models for suggestion search."""

from dataclasses import dataclass, field

from src.catalog.schemas import Security
from src.suggestions.strategies import MatchStrategy


def is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


@dataclass(frozen=True)
class SearchQuery:
    """Free-text typeahead query."""

    input: str
    limit: int = 10


@dataclass(frozen=True)
class AdvancedSearchQuery:
    """
    Structured search over up to five optional criteria.

    Every non-blank criterion is applied as a case-insensitive substring
    match and all of them must hold. Blank criteria impose no constraint.
    """

    symbol: str | None = None
    company_name: str | None = None
    exchange: str | None = None
    country: str | None = None
    currency: str | None = None
    limit: int = 10

    def criteria(self) -> list[tuple[str, str]]:
        """Non-blank criteria as (name, trimmed value), in a fixed order."""
        pairs = [
            ("symbol", self.symbol),
            ("company_name", self.company_name),
            ("exchange", self.exchange),
            ("country", self.country),
            ("currency", self.currency),
        ]
        return [(name, value.strip()) for name, value in pairs if not is_blank(value)]

    @property
    def has_search_criteria(self) -> bool:
        return bool(self.criteria())

    @property
    def description(self) -> str:
        """Human-readable summary, e.g. "Advanced search symbol:AA exchange:NASDAQ"."""
        labels = {"company_name": "company"}
        parts = ["Advanced search"]
        parts.extend(f"{labels.get(name, name)}:{value}" for name, value in self.criteria())
        return " ".join(parts)


@dataclass(frozen=True)
class Suggestion:
    """A matched security and the strategy that best explains the match."""

    security: Security
    strategy: MatchStrategy | None = None


@dataclass
class ResultSet:
    """
    Ordered, duplicate-free search results.

    Attributes:
        suggestions: Matches in rank order
        query: The free-text input, or the advanced search description
    """

    suggestions: list[Suggestion] = field(default_factory=list)
    query: str = ""

    @property
    def count(self) -> int:
        return len(self.suggestions)

    @property
    def securities(self) -> list[Security]:
        return [s.security for s in self.suggestions]
