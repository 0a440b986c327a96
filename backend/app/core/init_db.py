"""
Database initialization script.

Creates the breach workflow schema on the configured database.
Run this to initialize a fresh database.
"""

import asyncio
import logging

from backend.app.core.database import Base, engine
import backend.app.models  # noqa: F401  (registers tables with Base)

logger = logging.getLogger(__name__)


async def init_database():
    """Create all tables that do not exist yet."""
    logger.info("Creating breach workflow tables...")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ready")


async def drop_all_tables():
    """Drop all tables (use with caution!)."""
    async with engine.begin() as conn:
        logger.warning("Dropping all tables...")
        await conn.run_sync(Base.metadata.drop_all)


if __name__ == "__main__":
    import sys

    logging.basicConfig(level=logging.INFO)
    if len(sys.argv) > 1 and sys.argv[1] == "--drop":
        print("⚠️ WARNING: This will drop all tables!")
        confirm = input("Type 'yes' to confirm: ")
        if confirm == "yes":
            asyncio.run(drop_all_tables())
        else:
            print("Aborted.")
    else:
        asyncio.run(init_database())
