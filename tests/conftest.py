"""Root conftest: test infrastructure for all backend tests.

Provides:
- Transaction-rollback db_session fixture (integration tests only)
- mock_db for unit tests where every DB call is mocked
- API client with dependency overrides (mocked DB, GitHub and generator)
- Autouse guard against real GitHub and model provider calls
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlmodel import SQLModel

from app.config.settings import settings

# ─────────────────────────────────────────────────────────────────────────────
# Markers
# ─────────────────────────────────────────────────────────────────────────────


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "integration: DB integration tests (transaction rollback)")


# ─────────────────────────────────────────────────────────────────────────────
# Transaction-Rollback Engine (direct connection)
# ─────────────────────────────────────────────────────────────────────────────

TEST_ENGINE = create_async_engine(
    settings.database_url_direct,
    echo=False,
    pool_pre_ping=True,
    pool_size=3,
    max_overflow=2,
    connect_args={
        "command_timeout": 30,
    },
)


@pytest.fixture
async def db_session():
    """Database session wrapped in a transaction that is ALWAYS rolled back.

    Tables are created inside the outer transaction, so nothing persists,
    not even the schema. SAVEPOINTs let application code call commit().
    Skips when no database is reachable.
    """
    try:
        conn = await TEST_ENGINE.connect()
    except Exception as e:
        pytest.skip(f"Database not reachable: {e}")

    try:
        trans = await conn.begin()
        await conn.run_sync(SQLModel.metadata.create_all)
        session = AsyncSession(bind=conn, expire_on_commit=False)
        await conn.begin_nested()

        @event.listens_for(session.sync_session, "after_transaction_end")
        def restart_savepoint(session_sync, transaction):
            """Restart the SAVEPOINT after each nested transaction ends."""
            if transaction.nested and not transaction._parent.nested:
                session_sync.begin_nested()

        try:
            yield session
        finally:
            await session.close()
            await trans.rollback()
    finally:
        await conn.close()


# ─────────────────────────────────────────────────────────────────────────────
# Mocked collaborators (unit tests)
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def mock_db() -> AsyncMock:
    """AsyncSession stand-in; tests set db.execute return values as needed."""
    db = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def mock_github() -> MagicMock:
    github = MagicMock()
    github.get_repository = AsyncMock()
    github.list_tree = AsyncMock()
    github.get_file_contents = AsyncMock(return_value=[])
    github.get_readme = AsyncMock(return_value=None)
    github.get_language_stats = AsyncMock(return_value={})
    return github


@pytest.fixture
def mock_generator() -> MagicMock:
    generator = MagicMock()
    generator.generate = AsyncMock()
    return generator


@pytest.fixture
async def api_client(mock_db, mock_github, mock_generator):
    """HTTP client with the DB, GitHub and generator dependencies mocked.

    Overrides: get_db, get_parser_registry, get_github_reader, get_structured_generator
    """
    from app.api.deps import (
        get_github_reader,
        get_parser_registry,
        get_structured_generator,
    )
    from app.core.database import get_db
    from app.main import app

    async def override_db():
        yield mock_db

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_parser_registry] = lambda: MagicMock()
    app.dependency_overrides[get_github_reader] = lambda: mock_github
    app.dependency_overrides[get_structured_generator] = lambda: mock_generator

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# ─────────────────────────────────────────────────────────────────────────────
# External Service Guard (autouse)
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def mock_external_services():
    """SAFETY: never reach GitHub or a model provider from tests.

    Tests that exercise these clients patch them again more specifically.
    """
    blocked_client = MagicMock()
    blocked_client.get = AsyncMock(side_effect=RuntimeError("Real GitHub call blocked in tests"))

    with (
        patch(
            "app.services.github.read_operations.get_github_client",
            return_value=blocked_client,
        ) as mock_github_client,
        patch("app.services.llm.anthropic_generator.anthropic.AsyncAnthropic") as mock_anthropic,
        patch("app.services.llm.openai_generator.AsyncOpenAI") as mock_openai,
    ):
        yield {
            "github_client": mock_github_client,
            "anthropic": mock_anthropic,
            "openai": mock_openai,
        }
