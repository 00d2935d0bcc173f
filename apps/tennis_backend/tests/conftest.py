"""
Shared pytest configuration for backend tests.

Uses a local SQLite file through aiosqlite by default so the suite runs
without a database server; set TEST_DATABASE_URL to run against PostgreSQL.

SAFETY: This module REFUSES to run against any database whose name does not
contain the substring "test".  This prevents accidental drop of the
development or production database when environment variables are
misconfigured.
"""

import os

DEFAULT_TEST_DATABASE_URL = "sqlite+aiosqlite:///./tennis_test.db"


def _resolve_test_database_url() -> str:
    """Build the test database URL with safety checks.

    Raises ``RuntimeError`` if the resolved URL does not point to a database
    whose name contains "test".
    """
    url = os.getenv("TEST_DATABASE_URL", DEFAULT_TEST_DATABASE_URL)

    # ── Safety gate: database name MUST contain "test" ──────────────────
    # Extract the database name (last segment after the final '/').
    db_name = url.rsplit("/", 1)[-1].split("?")[0]  # strip query params
    if "test" not in db_name.lower():
        raise RuntimeError(
            f"\n{'=' * 70}\n"
            f"  SAFETY: Refusing to run tests against database '{db_name}'.\n"
            f"  The database name must contain 'test' to prevent accidental\n"
            f"  data loss in development or production databases.\n\n"
            f"  Resolved URL: {url}\n\n"
            f"  Fix: set TEST_DATABASE_URL to a test database, e.g.:\n"
            f"    export TEST_DATABASE_URL=postgresql+asyncpg://.../{db_name}_test\n"
            f"{'=' * 70}"
        )

    return url


# Test database configuration, validated at import time so pytest fails
# immediately with a clear message rather than silently hitting the wrong DB.
TEST_DATABASE_URL = _resolve_test_database_url()

# Must be set before the application modules are imported: db.py builds its
# engine from DATABASE_URL and the routes read ENV to disable rate limiting.
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["ENV"] = "test"

import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402
from tennis_backend.database.db import Base  # noqa: E402


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine with a fresh schema for each test."""
    # Use NullPool to avoid connection reuse issues across event loops
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=NullPool,  # No connection pooling - each operation gets a new connection
    )

    async with engine.begin() as conn:
        # Ensure models are imported so Base.metadata includes all tables
        from tennis_backend.database import models  # noqa: F401

        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine):
    """Create a test database session bound to the fresh schema."""
    async_session_maker = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with async_session_maker() as session:
        try:
            yield session
        finally:
            await session.rollback()
            await session.close()
