"""
Create every table of the application on the configured database
"""
import sys
import asyncio
from pathlib import Path

# Make the project root importable when run as a file
sys.path.append(str(Path(__file__).parent.parent.parent))

from app.database.base import Base
from app.database.session import engine
from app.utils.logger import logger


async def init_db() -> None:
    if engine is None:
        raise RuntimeError("DATABASE_URI is not configured")

    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)
    logger.info("✅ Database tables created successfully")


if __name__ == "__main__":
    asyncio.run(init_db())
