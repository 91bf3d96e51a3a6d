"""PostgreSQL-backed catalog over the stocks table."""

import logging

from src.catalog.base import Catalog, CompiledFilter, escape_like
from src.catalog.schemas import Security
from src.storage.database import Database

logger = logging.getLogger(__name__)

_CREATE_TABLE_SQL = """
CREATE EXTENSION IF NOT EXISTS pg_trgm;

CREATE TABLE IF NOT EXISTS stocks (
    id            BIGSERIAL PRIMARY KEY,
    symbol        VARCHAR(50)  NOT NULL,
    name          VARCHAR(500) NOT NULL,
    currency      VARCHAR(10),
    exchange      VARCHAR(100),
    mic_code      VARCHAR(20),
    country       VARCHAR(100),
    type          VARCHAR(100),
    figi_code     VARCHAR(50),
    cfi_code      VARCHAR(20),
    isin          VARCHAR(50),
    cusip         VARCHAR(50),
    is_active     BOOLEAN     NOT NULL DEFAULT TRUE,
    data_version  BIGINT      NOT NULL DEFAULT 1,
    created_at    TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at    TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_stock_symbol ON stocks(symbol COLLATE "C", id);
CREATE INDEX IF NOT EXISTS idx_stock_exchange ON stocks(exchange);
CREATE INDEX IF NOT EXISTS idx_stock_country ON stocks(country);
CREATE INDEX IF NOT EXISTS idx_stock_active ON stocks(is_active) WHERE is_active = TRUE;
CREATE INDEX IF NOT EXISTS idx_stock_symbol_lower ON stocks(lower(symbol));
CREATE INDEX IF NOT EXISTS idx_stock_name_lower ON stocks(lower(name));
CREATE INDEX IF NOT EXISTS idx_stock_symbol_trgm
    ON stocks USING GIN (lower(symbol) gin_trgm_ops);
CREATE INDEX IF NOT EXISTS idx_stock_name_trgm
    ON stocks USING GIN (lower(name) gin_trgm_ops);
"""

_COLUMNS = (
    "id, symbol, name, currency, exchange, mic_code, country, type, "
    "figi_code, cfi_code, isin, cusip, data_version, is_active, "
    "created_at, updated_at"
)

# Byte-order symbol sort, independent of the database collation
_ORDER_BY = 'ORDER BY symbol COLLATE "C" ASC, id ASC'

_EXACT_SQL = f"""
SELECT {_COLUMNS}
FROM stocks
WHERE is_active = TRUE
  AND (lower(symbol) = lower($1) OR lower(name) = lower($1))
{_ORDER_BY}
LIMIT $2
"""

_PARTIAL_SQL = f"""
SELECT {_COLUMNS}
FROM stocks
WHERE is_active = TRUE
  AND (lower(symbol) LIKE $1 OR lower(name) LIKE $1)
{_ORDER_BY}
LIMIT $2
"""

_BULK_INSERT_SQL = """
INSERT INTO stocks (
    symbol, name, currency, exchange, mic_code, country, type,
    figi_code, cfi_code, isin, cusip, data_version
)
SELECT * FROM unnest(
    $1::varchar[], $2::varchar[], $3::varchar[], $4::varchar[],
    $5::varchar[], $6::varchar[], $7::varchar[], $8::varchar[],
    $9::varchar[], $10::varchar[], $11::varchar[], $12::bigint[]
)
"""


def _record_to_security(record) -> Security:
    """Convert an asyncpg Record to a Security dataclass."""
    return Security(
        id=record["id"],
        symbol=record["symbol"],
        name=record["name"],
        currency=record["currency"],
        exchange=record["exchange"],
        mic_code=record["mic_code"],
        country=record["country"],
        type=record["type"],
        figi_code=record["figi_code"],
        cfi_code=record["cfi_code"],
        isin=record["isin"],
        cusip=record["cusip"],
        data_version=record["data_version"],
        is_active=record["is_active"],
        created_at=record["created_at"],
        updated_at=record["updated_at"],
    )


def _bulk_insert_args(securities: list[Security], data_version: int) -> tuple[list, ...]:
    """Split securities into the parallel arrays consumed by unnest()."""
    return (
        [s.symbol for s in securities],
        [s.name for s in securities],
        [s.currency for s in securities],
        [s.exchange for s in securities],
        [s.mic_code for s in securities],
        [s.country for s in securities],
        [s.type for s in securities],
        [s.figi_code for s in securities],
        [s.cfi_code for s in securities],
        [s.isin for s in securities],
        [s.cusip for s in securities],
        [s.data_version or data_version for s in securities],
    )


class CatalogRepository(Catalog):
    """Search and bulk-load operations for the stocks table."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def create_table(self) -> None:
        """Create the stocks table and indexes (idempotent)."""
        await self._db.execute(_CREATE_TABLE_SQL)
        logger.info("Stocks table ensured")

    # ── Search ──────────────────────────────────────────────────

    async def exact_match(self, query: str, limit: int) -> list[Security]:
        rows = await self._db.fetch(_EXACT_SQL, query, limit)
        return [_record_to_security(r) for r in rows]

    async def partial_match(self, query: str, limit: int) -> list[Security]:
        pattern = f"%{escape_like(query.lower())}%"
        rows = await self._db.fetch(_PARTIAL_SQL, pattern, limit)
        return [_record_to_security(r) for r in rows]

    async def filtered_match(
        self, compiled_filter: CompiledFilter, limit: int
    ) -> list[Security]:
        limit_idx = len(compiled_filter.params) + 1
        sql = f"""
            SELECT {_COLUMNS}
            FROM stocks
            WHERE is_active = TRUE AND {compiled_filter.sql}
            {_ORDER_BY}
            LIMIT ${limit_idx}
        """
        rows = await self._db.fetch(sql, *compiled_filter.params, limit)
        return [_record_to_security(r) for r in rows]

    async def get_by_id(self, security_id: int) -> Security | None:
        """Fetch a single security by surrogate id."""
        row = await self._db.fetchrow(
            f"SELECT {_COLUMNS} FROM stocks WHERE id = $1", security_id
        )
        return _record_to_security(row) if row else None

    async def count(self) -> int:
        """Count active securities."""
        return await self._db.fetchval(
            "SELECT COUNT(*) FROM stocks WHERE is_active = TRUE"
        )

    # ── Bulk load ───────────────────────────────────────────────

    async def insert_batch(
        self, securities: list[Security], data_version: int = 1
    ) -> int:
        """Insert securities in one statement. Returns the number inserted."""
        if not securities:
            return 0

        await self._db.execute(
            _BULK_INSERT_SQL, *_bulk_insert_args(securities, data_version)
        )
        logger.info("Inserted %d securities", len(securities))
        return len(securities)

    async def delete_all(self) -> int:
        """Delete every row. Returns the number of rows removed."""
        result = await self._db.execute("DELETE FROM stocks")
        deleted = int(result.split()[-1])
        logger.info("Deleted %d securities", deleted)
        return deleted

    async def replace_all(
        self,
        securities: list[Security],
        batch_size: int = 1000,
        data_version: int = 1,
    ) -> tuple[int, int]:
        """
        Atomically replace the catalog contents.

        Deletes every row and inserts ``securities`` in batches inside a
        single transaction, so searches never observe a half-loaded catalog.

        Returns:
            Tuple of (rows deleted, rows inserted)
        """
        inserted = 0
        async with self._db.transaction() as conn:
            result = await conn.execute("DELETE FROM stocks")
            deleted = int(result.split()[-1])

            for start in range(0, len(securities), batch_size):
                batch = securities[start:start + batch_size]
                await conn.execute(
                    _BULK_INSERT_SQL, *_bulk_insert_args(batch, data_version)
                )
                inserted += len(batch)
                logger.debug(
                    "Inserted batch %d-%d of %d",
                    start + 1, start + len(batch), len(securities),
                )

        logger.info("Catalog replaced: %d deleted, %d inserted", deleted, inserted)
        return deleted, inserted
