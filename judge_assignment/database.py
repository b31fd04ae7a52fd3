"""
judge_assignment/database.py
Database configuration for the assignment engine
"""
import logging

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from judge_assignment.config import settings
# Import Base from orm.base to avoid circular imports
from judge_assignment.orm.base import Base
import judge_assignment.orm  # ensures all models are registered

logger = logging.getLogger(__name__)

DATABASE_URL = settings.DATABASE_URL

if not DATABASE_URL:
    raise ValueError("DATABASE_URL environment variable is not set")

if "sqlite" in DATABASE_URL.lower():
    # SQLite: busy timeout so concurrent readers wait instead of failing
    engine = create_async_engine(
        DATABASE_URL,
        echo=settings.SQL_ECHO,
        pool_pre_ping=True,
        connect_args={
            "timeout": 30.0,
        }
    )
else:
    # PostgreSQL/MySQL: Use standard pool
    engine = create_async_engine(
        DATABASE_URL,
        echo=settings.SQL_ECHO,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
        pool_timeout=30,
        pool_recycle=3600,
    )

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db():
    """Dependency for getting async database session"""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db():
    """Create all tables. Idempotent: safe to run multiple times."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("✓ Database tables ready")


async def close_db():
    """Dispose the engine's connection pool."""
    await engine.dispose()
    logger.info("Database connections closed")
