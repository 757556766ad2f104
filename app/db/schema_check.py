import asyncio
import logging
from typing import List

from sqlalchemy import inspect, text
from sqlalchemy.ext.asyncio import AsyncEngine

import app.core.models  # noqa: F401  (registers tables on Base.metadata)
from app.db.session import Base, engine

logger = logging.getLogger(__name__)


# Databases created before receipt numbering: add the serial column and its uniqueness.
ALTER_FEE_TRANSACTIONS_RECEIPT_SERIAL: str = """
    DO $$
    BEGIN
        IF NOT EXISTS (
            SELECT 1 FROM information_schema.columns
            WHERE table_name = 'fee_transactions' AND column_name = 'receipt_serial'
        ) THEN
            ALTER TABLE fee_transactions ADD COLUMN receipt_serial INTEGER;
        END IF;
    END $$;
"""

CREATE_RECEIPT_SERIAL_UNIQUE_INDEX: str = """
    CREATE UNIQUE INDEX IF NOT EXISTS fee_transactions_receipt_serial_unique
    ON fee_transactions (receipt_serial);
"""


async def ensure_tables(db_engine: AsyncEngine) -> List[str]:
    """
    Create any missing tables and bring legacy PostgreSQL databases up to date.
    Returns the names of the tables that were created.
    """
    async with db_engine.begin() as conn:
        existing = set(await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names()))
        missing = [t.name for t in Base.metadata.sorted_tables if t.name not in existing]
        await conn.run_sync(Base.metadata.create_all)

        if conn.dialect.name == "postgresql" and "fee_transactions" in existing:
            await conn.execute(text(ALTER_FEE_TRANSACTIONS_RECEIPT_SERIAL))
            await conn.execute(text(CREATE_RECEIPT_SERIAL_UNIQUE_INDEX))

    if missing:
        logger.info("Created missing tables: %s", ", ".join(missing))
    else:
        logger.info("All required tables already exist in the database.")
    return missing


async def main() -> None:
    logging.basicConfig(level=logging.INFO)
    await ensure_tables(engine)


if __name__ == "__main__":
    asyncio.run(main())
