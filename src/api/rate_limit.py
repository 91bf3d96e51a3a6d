"""
API rate limiting using slowapi.

Provides a shared Limiter keyed by API key (if present) or client IP.
Enable via RATE_LIMIT_ENABLED=true. Counters live in process memory unless
RATE_LIMIT_STORAGE_URI points at a shared backend.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from src.config.settings import get_settings


def _get_rate_limit_key(request: Request) -> str:
    """Extract rate limit key: API key header or remote IP."""
    return request.headers.get("X-API-KEY") or get_remote_address(request)


def suggestions_limit() -> str:
    """Per-key limit for the typeahead routes, which see keystroke traffic."""
    return get_settings().rate_limit_suggestions


def create_limiter() -> Limiter:
    """Create a configured Limiter instance."""
    settings = get_settings()
    return Limiter(
        key_func=_get_rate_limit_key,
        default_limits=[settings.rate_limit_default],
        storage_uri=settings.rate_limit_storage_uri,
        enabled=settings.rate_limit_enabled,
    )


limiter = create_limiter()
