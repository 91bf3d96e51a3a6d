"""Errors raised by suggestion searches."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ErrorDetail:
    """A single field-level error, e.g. ("input", "...", "EMPTY_INPUT")."""

    field: str
    message: str
    code: str | None = None


class SuggestionError(Exception):
    """Base exception for suggestion search failures."""

    def __init__(self, message: str, errors: list[ErrorDetail] | None = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []

    @classmethod
    def of(cls, field: str, message: str, code: str | None = None) -> "SuggestionError":
        """Build an error carrying a single detail."""
        return cls(message, [ErrorDetail(field, message, code)])


class ValidationError(SuggestionError):
    """Query rejected before any catalog access (client error)."""


class RetrievalError(SuggestionError):
    """The catalog failed; the whole search failed with it (server error)."""
