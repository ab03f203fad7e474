"""
Shared test fixtures.

Uses an in-memory SQLite database (via aiosqlite) so tests run without
Docker / PostgreSQL.  The core ports are replaced by the fakes in
``tests.fakes``.
"""

import os
from datetime import datetime, timezone
from typing import AsyncGenerator

# Must be set before ``src.config`` is imported anywhere.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("CREATE_TABLES_ON_STARTUP", "false")

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from src.infrastructure.database import Base
from src.infrastructure import models  # noqa: F401  (registers tables)
from tests.fakes import InMemoryTripRepository, RecordingEventSink, StubPredictor


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest.fixture
def predictor() -> StubPredictor:
    return StubPredictor()


@pytest.fixture
def repository() -> InMemoryTripRepository:
    return InMemoryTripRepository()


@pytest.fixture
def events() -> RecordingEventSink:
    return RecordingEventSink()


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 3, 14, 9, 26, 53, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def db_engine():
    """Fresh in-memory database with all tables for one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session
