"""
Noter Backend: Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── settings: Settings with no .env file and short timeouts
    ├── database: Database over an in-memory SQLite (aiosqlite) with the schema created
    ├── test_client: HTTPX AsyncClient for an app bound to `database`
    ├── mock_database: MagicMock(spec=Database) (ping/close are AsyncMocks)
    ├── mock_note_repository: MagicMock(spec=NoteRepository)
    └── mock_client: HTTPX AsyncClient whose NoteRepository is the mock
"""

from typing import AsyncGenerator
from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from noter.config import Settings
from noter.database import Base, Database
from noter.main import create_app
from noter.models.note import Note  # noqa: F401  (registers the table)
from noter.repositories.note_repository import NoteRepository, get_note_repository


# ══════════════════════════════════════════════════════════════════════════
# Settings
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def settings() -> Settings:
    """Settings independent of the developer's .env and environment."""
    return Settings(
        _env_file=None,
        db_connect_timeout=1.0,
        db_health_timeout=0.5,
        shutdown_timeout=0.2,
        log_level="WARNING",
    )


# ══════════════════════════════════════════════════════════════════════════
# Real (SQLite) Store
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def database() -> AsyncGenerator[Database, None]:
    """
    Provides a Database over an in-memory SQLite store.

    StaticPool keeps the single in-memory connection alive for the whole
    test, so the schema created here is visible to every session.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    db = Database(engine)
    yield db
    await db.close()


@pytest_asyncio.fixture
async def test_client(database: Database) -> AsyncGenerator[AsyncClient, None]:
    """
    Provides an async HTTP client talking to an app bound to the SQLite store.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    app = create_app(database)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ══════════════════════════════════════════════════════════════════════════
# Mocked Store
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_database():
    return MagicMock(spec=Database)


@pytest.fixture
def mock_note_repository():
    """
    A NoteRepository stand-in.

    spec= makes create_note / get_all_notes / get_note_by_id AsyncMocks, so
    tests can assert whether the store was touched at all.
    """
    return MagicMock(spec=NoteRepository)


@pytest_asyncio.fixture
async def mock_client(mock_database, mock_note_repository) -> AsyncGenerator[AsyncClient, None]:
    app = create_app(mock_database)
    app.dependency_overrides[get_note_repository] = lambda: mock_note_repository
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
