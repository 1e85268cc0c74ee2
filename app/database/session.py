from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
import logging
import re

from app.core.config import settings

logger = logging.getLogger(__name__)


# Helper to get the async driver
def get_async_driver(uri: str) -> str:
    if uri.startswith("postgresql"):
        # Replaces postgresql:// or postgresql+psycopg2:// with postgresql+asyncpg://
        return re.sub(r"postgresql(\+psycopg2)?://", "postgresql+asyncpg://", uri)
    if uri.startswith("mysql"):
        # Replaces mysql:// or mysql+pymysql:// with mysql+aiomysql://
        return re.sub(r"mysql(\+pymysql)?://", "mysql+aiomysql://", uri)
    if uri.startswith("sqlite"):
        return re.sub(r"sqlite(\+pysqlite)?://", "sqlite+aiosqlite://", uri)
    return uri


def build_engine(uri: str):
    async_db_uri = get_async_driver(uri)
    if async_db_uri.startswith("sqlite"):
        return create_async_engine(async_db_uri, echo=False)

    return create_async_engine(
        async_db_uri,
        pool_pre_ping=True,
        pool_recycle=settings.DB_POOL_RECYCLE,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        echo=False,
    )


if settings.DATABASE_URI:
    engine = build_engine(settings.DATABASE_URI)

    AsyncSessionLocal = sessionmaker(
        bind=engine,
        class_=AsyncSession,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
else:
    logger.warning("DATABASE_URI is not configured. Database features are unavailable.")
    engine = None
    AsyncSessionLocal = None


async def get_db() -> AsyncSession:
    if AsyncSessionLocal is None:
        raise ValueError("No database connection configured")

    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def check_database() -> dict:
    """Run a trivial query to report whether the database is reachable"""
    if engine is None:
        return {"healthy": False, "error": "No database engine configured"}

    try:
        async with engine.connect() as connection:
            await connection.execute(text("SELECT 1"))
        return {"healthy": True, "driver": engine.dialect.name}
    except Exception as e:
        logger.error(f"🚨 Database health check failed: {e}")
        return {"healthy": False, "error": str(e)}
