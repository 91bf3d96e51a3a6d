"""
TwelveData market-data client.

Fetches the full listed-stock universe from ``GET {base_url}/stocks`` and
maps each entry to a catalog Security. Entries without a symbol or name
are dropped; symbols are trimmed and uppercased, names trimmed.

Usage:
    client = TwelveDataClient(api_key="...")
    securities = await client.fetch_all_stocks()
"""

import logging
from typing import Any

from src.catalog.schemas import Security
from src.ingestion.http_client import HTTPClient, HTTPClientError, RetryConfig

logger = logging.getLogger(__name__)

TWELVE_DATA_BASE_URL = "https://api.twelvedata.com"

# Optional provider fields copied verbatim onto Security
_PASSTHROUGH_FIELDS = (
    "currency",
    "exchange",
    "mic_code",
    "country",
    "type",
    "figi_code",
    "cfi_code",
    "isin",
    "cusip",
)


def _clean(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_stock(entry: dict[str, Any], data_version: int = 1) -> Security | None:
    """
    Map one provider entry to a Security.

    Returns:
        The Security, or None if the entry lacks a symbol or name
    """
    symbol = _clean(entry.get("symbol"))
    name = _clean(entry.get("name"))
    if symbol is None or name is None:
        return None

    optional = {field: _clean(entry.get(field)) for field in _PASSTHROUGH_FIELDS}
    return Security(
        symbol=symbol.upper(),
        name=name,
        data_version=data_version,
        **optional,
    )


def parse_stocks_response(payload: Any, data_version: int = 1) -> list[Security]:
    """Map a ``/stocks`` payload, skipping invalid entries."""
    if not isinstance(payload, dict):
        return []
    entries = payload.get("data") or []

    securities: list[Security] = []
    skipped = 0
    for entry in entries:
        security = parse_stock(entry, data_version) if isinstance(entry, dict) else None
        if security is None:
            skipped += 1
            continue
        securities.append(security)

    if skipped:
        logger.info(f"Skipped {skipped} provider entries without symbol or name")
    return securities


class TwelveDataClient:
    """Async client for the TwelveData reference-data API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = TWELVE_DATA_BASE_URL,
        retry_config: RetryConfig | None = None,
        timeout: float = 30.0,
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._retry_config = retry_config
        self._timeout = timeout

    async def fetch_all_stocks(self, data_version: int = 1) -> list[Security]:
        """
        Fetch every listed stock.

        Raises:
            HTTPClientError: Transport failure, non-2xx status after retries,
                an undecodable body or an error status in the payload
        """
        logger.info("Fetching available stocks from market data provider")
        async with HTTPClient(self._retry_config, timeout=self._timeout) as http:
            response = await http.get(
                f"{self._base_url}/stocks",
                params={"apikey": self._api_key},
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise HTTPClientError(
                "Market data provider returned invalid JSON",
                status_code=response.status_code,
                response_body=response.text,
            ) from e

        if isinstance(payload, dict) and payload.get("status") == "error":
            raise HTTPClientError(
                f"Market data provider error: {payload.get('message', 'unknown error')}",
                status_code=payload.get("code"),
                response_body=response.text,
            )

        securities = parse_stocks_response(payload, data_version)
        logger.info(f"{len(securities)} stocks fetched from market data provider")
        return securities
