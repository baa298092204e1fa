import asyncio
import logging

from skoropad.db.database import engine, Base, AsyncSessionLocal, load_models, seed_demo_data

logger = logging.getLogger(__name__)

async def reset_database():
    """Drops every table, recreates the schema and seeds the demo data."""
    load_models()

    async with engine.begin() as conn:
        logger.info("Dropping all tables...")
        await conn.run_sync(Base.metadata.drop_all)
        logger.info("Creating schema...")
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        await seed_demo_data(session)

    await engine.dispose()
    logger.info("Database reset complete")

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(reset_database())
