# src/rankladder/db/session.py

"""Database session management."""
import logging
import os
from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

logger = logging.getLogger(__name__)

# Local SQLite file unless DATABASE_URL points elsewhere
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./rankladder.db")


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    """Turn on FK enforcement so season deletes cascade inside SQLite."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine_for_url(url: str) -> AsyncEngine:
    """Create an async engine with appropriate configuration.

    SQLite gets foreign-key enforcement and no pool tuning; server
    databases get pool sizing from DB_POOL_SIZE, DB_MAX_OVERFLOW and
    DB_POOL_RECYCLE.
    """
    echo = os.getenv("DB_ECHO", "false").lower() == "true"

    if url.startswith("sqlite"):
        sqlite_engine = create_async_engine(url, echo=echo)
        event.listen(sqlite_engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return sqlite_engine

    return create_async_engine(
        url,
        pool_size=int(os.getenv("DB_POOL_SIZE", "20")),
        max_overflow=int(os.getenv("DB_MAX_OVERFLOW", "10")),
        pool_pre_ping=True,  # Verify connections before use
        pool_recycle=int(os.getenv("DB_POOL_RECYCLE", "3600")),
        echo=echo,
    )


def create_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Build the session factory used by the app and by tests.

    autoflush=False: services flush explicitly before reading back rank state.
    expire_on_commit=False: objects remain accessible after commit.
    """
    return async_sessionmaker(
        bind=bind, autocommit=False, autoflush=False, expire_on_commit=False
    )


engine = create_engine_for_url(DATABASE_URL)

AsyncSessionLocal = create_session_factory(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session; rolled back if the request fails mid-way."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception as e:
            logger.debug("Request failed, rolling back session: %s", e)
            await session.rollback()
            raise
