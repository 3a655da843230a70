"""Analysis operations.

The "at most one IN_PROGRESS analysis per repository" guard lives here and
is enforced by the database, not by process memory: a conditional insert
against the partial unique index either creates the row or yields nothing,
in which case the existing IN_PROGRESS row is returned instead.
"""

import logging
import uuid as uuid_pkg
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import Select, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.analysis import IN_PROGRESS_INDEX_WHERE, Analysis, AnalysisStatus
from app.models.repository import Repository

logger = logging.getLogger(__name__)

# An IN_PROGRESS row may finish between the failed insert and the lookup;
# a couple of attempts covers that window.
MAX_START_ATTEMPTS = 3


def _latest_completed_ids(*conditions: Any) -> Select:
    """Ids of the newest COMPLETED analysis per repository among rows matching conditions."""
    ranked = (
        select(
            Analysis.id.label("analysis_id"),  # type: ignore[union-attr]
            func.row_number()
            .over(
                partition_by=Analysis.repository_id,
                order_by=Analysis.completed_at.desc(),  # type: ignore[union-attr]
            )
            .label("position"),
        )
        .where(Analysis.status == AnalysisStatus.COMPLETED.value, *conditions)
        .subquery()
    )
    return select(ranked.c.analysis_id).where(ranked.c.position == 1)


class AnalysisOperations:
    """Persistence operations for Analysis records."""

    def __init__(self):
        self.model = Analysis

    async def get(self, db: AsyncSession, id: uuid_pkg.UUID) -> Analysis | None:
        """Get an analysis by ID."""
        statement = select(Analysis).where(Analysis.id == id)
        result = await db.execute(statement)
        return result.scalar_one_or_none()

    async def get_in_progress(
        self,
        db: AsyncSession,
        repository_id: uuid_pkg.UUID,
    ) -> Analysis | None:
        """Find the IN_PROGRESS analysis for a repository, if any."""
        statement = select(Analysis).where(
            Analysis.repository_id == repository_id,
            Analysis.status == AnalysisStatus.IN_PROGRESS.value,
        )
        result = await db.execute(statement)
        return result.scalar_one_or_none()

    async def start_or_get_in_progress(
        self,
        db: AsyncSession,
        repository_id: uuid_pkg.UUID,
    ) -> tuple[Analysis, bool]:
        """Atomically start a new analysis unless one is already running.

        Returns:
            (analysis, created) - created is False when an existing
            IN_PROGRESS analysis was returned instead.
        """
        for _ in range(MAX_START_ATTEMPTS):
            now = datetime.now(UTC)
            statement = (
                pg_insert(Analysis)
                .values(
                    id=uuid_pkg.uuid4(),
                    repository_id=repository_id,
                    status=AnalysisStatus.IN_PROGRESS.value,
                    started_at=now,
                    created_at=now,
                    updated_at=now,
                )
                .on_conflict_do_nothing(
                    index_elements=["repository_id"],
                    index_where=IN_PROGRESS_INDEX_WHERE,
                )
                .returning(Analysis.id)
            )
            result = await db.execute(statement)
            inserted_id = result.scalar_one_or_none()

            if inserted_id is not None:
                await db.flush()
                analysis = await self.get(db, inserted_id)
                if analysis is None:
                    raise RuntimeError(f"Inserted analysis {inserted_id} could not be reloaded")
                return analysis, True

            existing = await self.get_in_progress(db, repository_id)
            if existing is not None:
                return existing, False

            logger.debug(f"IN_PROGRESS analysis for {repository_id} finished mid-start, retrying")

        raise RuntimeError(f"Could not start analysis for repository {repository_id}")

    async def get_latest_completed(
        self,
        db: AsyncSession,
        repository_id: uuid_pkg.UUID,
    ) -> Analysis | None:
        """Latest COMPLETED analysis for a repository."""
        statement = (
            select(Analysis)
            .where(
                Analysis.repository_id == repository_id,
                Analysis.status == AnalysisStatus.COMPLETED.value,
            )
            .order_by(Analysis.completed_at.desc())  # type: ignore[union-attr]
            .limit(1)
        )
        result = await db.execute(statement)
        return result.scalar_one_or_none()

    async def get_latest(
        self,
        db: AsyncSession,
        repository_id: uuid_pkg.UUID,
    ) -> Analysis | None:
        """Most recently started analysis for a repository, any status."""
        statement = (
            select(Analysis)
            .where(Analysis.repository_id == repository_id)
            .order_by(Analysis.started_at.desc())  # type: ignore[attr-defined]
            .limit(1)
        )
        result = await db.execute(statement)
        return result.scalar_one_or_none()

    async def list_for_repository(
        self,
        db: AsyncSession,
        repository_id: uuid_pkg.UUID,
        limit: int = 50,
    ) -> list[Analysis]:
        """All analyses for a repository, newest first."""
        statement = (
            select(Analysis)
            .where(Analysis.repository_id == repository_id)
            .order_by(Analysis.started_at.desc())  # type: ignore[attr-defined]
            .limit(limit)
        )
        result = await db.execute(statement)
        return list(result.scalars().all())

    async def mark_completed(
        self,
        db: AsyncSession,
        analysis: Analysis,
        payload: dict[str, Any],
    ) -> Analysis:
        """Terminal update: store the result payload and set COMPLETED."""
        if analysis.is_terminal:
            raise ValueError(f"Analysis {analysis.id} is already {analysis.status}")

        for field, value in payload.items():
            setattr(analysis, field, value)
        now = datetime.now(UTC)
        analysis.status = AnalysisStatus.COMPLETED.value
        analysis.completed_at = now
        analysis.updated_at = now
        db.add(analysis)
        await db.flush()
        await db.refresh(analysis)
        return analysis

    async def mark_failed(
        self,
        db: AsyncSession,
        analysis_id: uuid_pkg.UUID,
        error_message: str,
    ) -> Analysis | None:
        """Terminal update: set FAILED with a truncated error message.

        No-op if the analysis is missing or already terminal.
        """
        analysis = await self.get(db, analysis_id)
        if analysis is None or analysis.is_terminal:
            return analysis

        now = datetime.now(UTC)
        analysis.status = AnalysisStatus.FAILED.value
        analysis.error_message = error_message[:500]
        analysis.completed_at = now
        analysis.updated_at = now
        db.add(analysis)
        await db.flush()
        return analysis

    async def list_searchable(
        self,
        db: AsyncSession,
        repository_ids: list[uuid_pkg.UUID] | None = None,
        languages: list[str] | None = None,
        complexity: str | None = None,
    ) -> list[tuple[Repository, Analysis]]:
        """Latest COMPLETED analysis with AST data for each candidate repository.

        Repository filters (ids, language) are applied in SQL. The complexity
        filter applies to the latest analysis itself, so it runs afterwards.
        """
        statement = (
            select(Repository, Analysis)
            .join(Analysis, Analysis.repository_id == Repository.id)
            .where(
                Analysis.id.in_(  # type: ignore[attr-defined]
                    _latest_completed_ids(Analysis.ast_data.is_not(None))  # type: ignore[union-attr]
                )
            )
            .order_by(Analysis.repository_id)
        )
        if repository_ids:
            statement = statement.where(Repository.id.in_(repository_ids))  # type: ignore[attr-defined]
        if languages:
            lowered = [lang.lower() for lang in languages]
            statement = statement.where(func.lower(Repository.language).in_(lowered))

        result = await db.execute(statement)
        rows = [(repo, analysis) for repo, analysis in result.all()]

        if complexity:
            rows = [(repo, analysis) for repo, analysis in rows if analysis.complexity == complexity]
        return rows

    async def list_with_searchable_content(
        self,
        db: AsyncSession,
        repository_ids: list[uuid_pkg.UUID] | None = None,
    ) -> list[tuple[Repository, Analysis]]:
        """Latest COMPLETED analysis per repository that has a searchable index."""
        statement = (
            select(Repository, Analysis)
            .join(Analysis, Analysis.repository_id == Repository.id)
            .where(
                Analysis.id.in_(  # type: ignore[attr-defined]
                    _latest_completed_ids(Analysis.searchable_content.is_not(None))  # type: ignore[union-attr]
                )
            )
            .order_by(Analysis.repository_id)
        )
        if repository_ids:
            statement = statement.where(Repository.id.in_(repository_ids))  # type: ignore[attr-defined]
        result = await db.execute(statement)
        return [(repo, analysis) for repo, analysis in result.all()]


analysis_ops = AnalysisOperations()
