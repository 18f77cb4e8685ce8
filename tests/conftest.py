# tests/conftest.py

"""Pytest configuration and fixtures."""

from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from rankladder.db.models import Base
from rankladder.db.session import create_engine_for_url, create_session_factory, get_db
from rankladder.main import app
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


async def _create_schema(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """A fresh in-memory database per test, with the full schema."""
    test_engine = create_engine_for_url(TEST_DATABASE_URL)
    await _create_schema(test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Fixture to provide a database session bound to the per-test database."""
    session_factory = create_session_factory(engine)
    async with session_factory() as session:
        yield session


@pytest.fixture
async def file_session_factory(
    tmp_path,
) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """
    Session factory over a temporary SQLite file.

    Unlike the in-memory database, every session gets its own connection,
    which is what concurrent writers look like in production.
    """
    file_engine = create_engine_for_url(
        f"sqlite+aiosqlite:///{tmp_path / 'ladder.db'}"
    )
    await _create_schema(file_engine)
    yield create_session_factory(file_engine)
    await file_engine.dispose()


@pytest.fixture
async def async_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Fixture to provide an async test client for the API."""

    # Override the get_db dependency to use the test database
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    # Clean up the override after the test
    del app.dependency_overrides[get_db]
