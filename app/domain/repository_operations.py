"""Repository operations.

Repositories are keyed by their GitHub id: saving the same GitHub
repository twice refreshes its metadata instead of creating a duplicate.
"""

import uuid as uuid_pkg
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.repository import Repository


class RepositoryOperations:
    """CRUD operations for Repository model."""

    def __init__(self):
        self.model = Repository

    async def get(self, db: AsyncSession, id: uuid_pkg.UUID) -> Repository | None:
        """Get a repository by ID."""
        statement = select(Repository).where(Repository.id == id)
        result = await db.execute(statement)
        return result.scalar_one_or_none()

    async def get_many(self, db: AsyncSession, ids: list[uuid_pkg.UUID]) -> list[Repository]:
        """Get repositories by a list of IDs (missing IDs are skipped)."""
        if not ids:
            return []
        statement = select(Repository).where(Repository.id.in_(ids))  # type: ignore[attr-defined]
        result = await db.execute(statement)
        return list(result.scalars().all())

    async def get_by_github_id(self, db: AsyncSession, github_id: int) -> Repository | None:
        """Get a repository by its GitHub ID."""
        statement = select(Repository).where(Repository.github_id == github_id)
        result = await db.execute(statement)
        return result.scalar_one_or_none()

    async def list_all(
        self,
        db: AsyncSession,
        skip: int = 0,
        limit: int = 100,
    ) -> list[Repository]:
        """List saved repositories, newest first."""
        statement = (
            select(Repository)
            .order_by(Repository.created_at.desc())  # type: ignore[attr-defined]
            .offset(skip)
            .limit(limit)
        )
        result = await db.execute(statement)
        return list(result.scalars().all())

    async def upsert_from_github(self, db: AsyncSession, data: dict[str, Any]) -> Repository:
        """Create a repository from GitHub metadata, or refresh the existing one.

        Args:
            data: Normalized GitHub fields; must include `github_id`.
        """
        existing = await self.get_by_github_id(db, data["github_id"])
        if existing:
            for field, value in data.items():
                setattr(existing, field, value)
            existing.updated_at = datetime.now(UTC)
            db.add(existing)
            await db.flush()
            await db.refresh(existing)
            return existing

        db_obj = Repository(**data)
        db.add(db_obj)
        await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def mark_analyzed(
        self,
        db: AsyncSession,
        repository_id: uuid_pkg.UUID,
        analyzed_at: datetime,
    ) -> None:
        """Stamp last_analyzed_at after a completed analysis."""
        repo = await self.get(db, repository_id)
        if repo is None:
            return
        repo.last_analyzed_at = analyzed_at
        repo.updated_at = datetime.now(UTC)
        db.add(repo)
        await db.flush()


repository_ops = RepositoryOperations()
