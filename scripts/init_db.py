"""Create the appointments schema without running migrations.

Usage:
    python scripts/init_db.py           # create missing tables
    python scripts/init_db.py --reset   # drop and recreate (wipes bookings)
"""

import asyncio
import sys

import structlog

from clinic_booking.config import settings
from clinic_booking.database import engine
from clinic_booking.middleware.logging import configure_logging
from clinic_booking.models.appointments import metadata

logger = structlog.get_logger()


async def init_db(reset: bool = False) -> None:
    """Create the appointments table, optionally dropping it first."""
    async with engine.begin() as conn:
        if reset:
            await conn.run_sync(metadata.drop_all)
            logger.warning("appointments_schema_dropped")
        await conn.run_sync(metadata.create_all)

    await engine.dispose()
    logger.info(
        "appointments_schema_ready",
        backend="sqlite" if settings.is_sqlite else "postgresql",
        reset=reset,
    )


if __name__ == "__main__":
    configure_logging()
    asyncio.run(init_db(reset="--reset" in sys.argv[1:]))
