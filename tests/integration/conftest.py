"""Integration test conftest: DB rollback fixtures.

Inherits the root conftest.py fixtures (db_session, mock_external_services)
and adds integration-specific markers and entities.

All tests in this directory use the transaction-rollback pattern:
real SQL executes, but nothing persists.
"""

import uuid

import pytest
from sqlalchemy.ext.asyncio import AsyncSession


@pytest.fixture(autouse=True)
def _mark_integration(request):
    """Auto-mark all tests in this directory as integration."""
    request.node.add_marker(pytest.mark.integration)


@pytest.fixture
async def test_repository(db_session: AsyncSession):
    """A saved repository with a unique GitHub id."""
    from app.domain.repository_operations import repository_ops

    suffix = uuid.uuid4().hex[:8]
    return await repository_ops.upsert_from_github(
        db_session,
        {
            "github_id": int(uuid.uuid4().int % 2_000_000_000),
            "name": f"test-repo-{suffix}",
            "full_name": f"test-org/test-repo-{suffix}",
            "owner": "test-org",
            "description": "Test repository",
            "url": f"https://github.com/test-org/test-repo-{suffix}",
            "default_branch": "main",
            "language": "TypeScript",
            "stars_count": 0,
            "forks_count": 0,
        },
    )
