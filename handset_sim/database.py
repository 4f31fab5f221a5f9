"""Optional PostgreSQL persistence for games and settled rounds.

The kernel never depends on this module. Games live in memory and the API
writes copies here only after ``check_connection`` succeeded at startup.
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base

from .config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

# DATABASE_URL from the platform wins over the settings file
database_url = os.environ.get("DATABASE_URL") or settings.database_url

async_engine = create_async_engine(
    database_url,
    echo=settings.debug,
    pool_size=5,
    max_overflow=10,
    pool_pre_ping=True,
)

AsyncSessionLocal = async_sessionmaker(
    async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

Base = declarative_base()


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """Session that commits on success and rolls back on error."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def check_connection() -> bool:
    """Ping the database and create the game tables.

    Returns False instead of raising so the API can run memory-only.
    """
    # Registers GameRecord and RoundSnapshot on Base.metadata
    from . import models  # noqa: F401

    try:
        async with async_engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
            await conn.run_sync(Base.metadata.create_all)
    except Exception as e:
        logger.warning(f"Database unavailable, games are kept in memory only: {e}")
        return False
    logger.info("Database connection successful")
    return True


async def dispose():
    await async_engine.dispose()
