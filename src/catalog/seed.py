"""JSON seed loading for local catalogs."""

import json
import logging
from pathlib import Path

from src.catalog.schemas import Security

logger = logging.getLogger(__name__)

SEED_FILE = Path(__file__).parent / "data" / "seed_stocks.json"


def parse_seed_entry(entry: dict) -> Security:
    """Convert a JSON seed entry to a Security dataclass."""
    return Security(
        symbol=entry["symbol"].strip().upper(),
        name=entry["name"].strip(),
        currency=entry.get("currency"),
        exchange=entry.get("exchange"),
        mic_code=entry.get("mic_code"),
        country=entry.get("country"),
        type=entry.get("type"),
        figi_code=entry.get("figi_code"),
        cfi_code=entry.get("cfi_code"),
        isin=entry.get("isin"),
        cusip=entry.get("cusip"),
        is_active=entry.get("is_active", True),
    )


def load_seed_securities(path: Path | None = None) -> list[Security]:
    """
    Read securities from a JSON array file.

    Entries missing a symbol or name are skipped, the same rule catalog
    refresh applies to provider data.
    """
    seed_path = path or SEED_FILE
    with open(seed_path) as f:
        entries = json.load(f)

    securities = [
        parse_seed_entry(e) for e in entries
        if (e.get("symbol") or "").strip() and (e.get("name") or "").strip()
    ]
    skipped = len(entries) - len(securities)
    if skipped:
        logger.warning("Skipped %d seed entries without symbol/name", skipped)
    logger.info("Loaded %d seed securities from %s", len(securities), seed_path)
    return securities
