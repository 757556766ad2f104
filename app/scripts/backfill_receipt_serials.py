"""
Assign receipt serials to fee transactions recorded before receipt numbering existed.

Run once (idempotent): only numbers transactions that have no serial, in payment date order,
continuing after the highest serial already assigned.
Usage: python -m app.scripts.backfill_receipt_serials
"""

import asyncio
import sys

from app.api.v1.receipts.service import backfill_receipt_serials
from app.core.exceptions import ServiceError
from app.db.schema_check import ensure_tables
from app.db.session import AsyncSessionLocal, engine


async def run_backfill() -> int:
    await ensure_tables(engine)
    try:
        async with AsyncSessionLocal() as session:
            try:
                assigned = await backfill_receipt_serials(session)
            except ServiceError as e:
                print(f"Backfill failed: {e.message}", file=sys.stderr)
                return 1
    finally:
        await engine.dispose()
    if assigned:
        print(f"Done. Assigned {assigned} receipt serial(s).")
    else:
        print("No fee transactions without a receipt serial found. Exiting.")
    return 0


def main() -> None:
    sys.exit(asyncio.run(run_backfill()))


if __name__ == "__main__":
    main()
