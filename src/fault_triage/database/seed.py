"""Reference rows for local runs: two customers, their stations and assets.

Run once against a fresh database with:

    python -m src.fault_triage.database.seed

or set SEED_REFERENCE_DATA=true to have the API seed on startup.
"""

import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import text

from src.fault_triage.customers.models import (
    CustomerModel,
    LocationAssetModel,
    LocationModel,
)
from src.fault_triage.database.database import DatabaseManager
from src.fault_triage.logging_config import setup_logging

logger = logging.getLogger(__name__)

# Ids match the ones the upstream feeds report for these customers and assets
SEED_CUSTOMERS = [
    {"id": 107, "name": "Fast Response Corp", "sla_hours": 2},
    {"id": 261, "name": "Standard Service LLC", "sla_hours": 4},
]
SEED_LOCATIONS = [
    {"id": 1, "name": "Downtown Station", "customer_id": 107},
    {"id": 2, "name": "Mall Charging Hub", "customer_id": 261},
]
SEED_ASSETS = [
    {"id": 12920, "name": "Station A", "location_id": 1, "customer_id": 107},
    {"id": 56828, "name": "Station B", "location_id": 2, "customer_id": 261},
]

# Parents first so foreign keys resolve on flush
SEED_TABLES = [
    (CustomerModel, SEED_CUSTOMERS),
    (LocationModel, SEED_LOCATIONS),
    (LocationAssetModel, SEED_ASSETS),
]


async def seed_reference_data(db: AsyncSession) -> int:
    """Insert missing reference rows; rows already present are left untouched."""
    inserted = 0
    for model, rows in SEED_TABLES:
        for row in rows:
            if await db.get(model, row["id"]) is not None:
                continue
            db.add(model(**row))
            inserted += 1
        await db.flush()

        # Explicit ids bypass the serial sequence, move it past them
        table = model.__tablename__
        await db.execute(
            text(
                f"SELECT setval(pg_get_serial_sequence('{table}', 'id'), "
                f"(SELECT COALESCE(MAX(id), 1) FROM {table}))"
            )
        )

    await db.commit()
    logger.info(f"Seeded {inserted} reference row(s)")
    return inserted


async def main():
    setup_logging()
    try:
        await DatabaseManager.connect()
        await DatabaseManager.create_tables()
        async with DatabaseManager.session_scope() as db_session:
            await seed_reference_data(db_session)
    finally:
        await DatabaseManager.disconnect()


if __name__ == "__main__":
    asyncio.run(main())
