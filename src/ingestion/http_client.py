"""
HTTP client with retry logic for market data providers.

Provides:
- RetryConfig: Exponential backoff configuration
- HTTPClient: Async GET client that retries 429/5xx responses and
  transport errors, then raises HTTPClientError / RateLimitError

Retries live here, at the provider boundary. The search path never
retries catalog calls.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Any

import httpx

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})
_RETRYABLE_EXCEPTIONS = (httpx.TimeoutException, httpx.ConnectError, httpx.ReadError)


@dataclass
class RetryConfig:
    """
    Exponential backoff with jitter.

    Formula: min(max_backoff, base_delay * 2^attempt) * (1 + random(0, jitter_factor))
    """

    max_retries: int = 3
    max_backoff_seconds: float = 60.0
    base_delay: float = 1.0
    jitter_factor: float = 0.1

    def calculate_backoff(self, attempt: int) -> float:
        """Backoff in seconds for a 0-indexed retry attempt."""
        delay = min(self.base_delay * (2**attempt), self.max_backoff_seconds)
        return delay + delay * self.jitter_factor * random.random()

    def is_retryable_status(self, status_code: int) -> bool:
        return status_code in _RETRYABLE_STATUS

    def is_retryable_exception(self, exc: Exception) -> bool:
        return isinstance(exc, _RETRYABLE_EXCEPTIONS)


class HTTPClientError(Exception):
    """Base exception for HTTP client errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class RateLimitError(HTTPClientError):
    """Raised when rate limit is hit and all retries exhausted."""


class HTTPClient:
    """
    Async HTTP client with retry logic.

    Example:
        async with HTTPClient(RetryConfig(max_retries=3)) as client:
            response = await client.get(
                "https://api.twelvedata.com/stocks",
                params={"apikey": key},
            )
    """

    def __init__(
        self,
        retry_config: RetryConfig | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.retry_config = retry_config or RetryConfig()
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "HTTPClient":
        self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _backoff(self, attempt: int, url: str, reason: str) -> None:
        backoff = self.retry_config.calculate_backoff(attempt)
        logger.warning(
            f"{reason} from {url}, attempt {attempt + 1}/"
            f"{self.retry_config.max_retries + 1}, backing off {backoff:.2f}s"
        )
        await asyncio.sleep(backoff)

    async def get(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """
        Perform a GET request, retrying transient failures.

        Raises:
            HTTPClientError: On non-retryable errors or after retries exhausted
            RateLimitError: When still rate limited after the last retry
        """
        if not self._client:
            raise RuntimeError("HTTPClient must be used as async context manager")

        max_retries = self.retry_config.max_retries
        for attempt in range(max_retries + 1):
            try:
                response = await self._client.get(url, params=params, headers=headers)
            except httpx.HTTPError as e:
                if self.retry_config.is_retryable_exception(e) and attempt < max_retries:
                    await self._backoff(attempt, url, f"Retryable error {type(e).__name__}")
                    continue
                raise HTTPClientError(
                    f"Request failed after {attempt + 1} attempts: {e}"
                ) from e

            if self.retry_config.is_retryable_status(response.status_code):
                if attempt < max_retries:
                    await self._backoff(attempt, url, f"Retryable status {response.status_code}")
                    continue
                error_cls = RateLimitError if response.status_code == 429 else HTTPClientError
                raise error_cls(
                    f"Request failed with status {response.status_code} after {attempt + 1} attempts",
                    status_code=response.status_code,
                    response_body=response.text,
                )

            if response.status_code >= 400:
                raise HTTPClientError(
                    f"Request failed with status {response.status_code}",
                    status_code=response.status_code,
                    response_body=response.text,
                )

            return response

        raise HTTPClientError(f"Request failed after {max_retries + 1} attempts")
