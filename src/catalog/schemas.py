"""Data models for the securities catalog."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Security:
    """A listed security (stock/ETF/fund) in the catalog.

    Symbols are not unique across exchanges (e.g., "SHOP" on NYSE and TSX),
    so ``id`` is the identity used for deduplication. Rows without an id
    (not yet persisted) compare by value only.

    The identifier codes (FIGI, CFI, ISIN, CUSIP) are carried as opaque
    strings straight from the market data provider.
    """

    symbol: str
    name: str
    id: int | None = None
    currency: str | None = None
    exchange: str | None = None
    mic_code: str | None = None
    country: str | None = None
    type: str | None = None
    figi_code: str | None = None
    cfi_code: str | None = None
    isin: str | None = None
    cusip: str | None = None
    data_version: int | None = None
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def display_name(self) -> str:
        """Symbol and company name, e.g. "AAPL - Apple Inc"."""
        if self.name:
            return f"{self.symbol} - {self.name}"
        return self.symbol

    def has_basic_info(self) -> bool:
        """True if both symbol and name are non-blank (searchable row)."""
        return bool(self.symbol and self.symbol.strip() and self.name and self.name.strip())
