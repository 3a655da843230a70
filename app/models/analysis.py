"""Analysis model: one run of the analysis pipeline over a repository.

An analysis is created IN_PROGRESS and updated exactly once more, to
COMPLETED or FAILED. Terminal records are never reopened; re-analysis
always inserts a fresh row.

The partial unique index on (repository_id) WHERE status = 'IN_PROGRESS'
is what makes the single-flight guard safe across processes.
"""

import uuid as uuid_pkg
from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import Column, DateTime, ForeignKey, Index, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlmodel import Field, SQLModel

from app.models.base import TimestampMixin, UUIDMixin, utc_now


class AnalysisStatus(str, Enum):
    """Lifecycle state of an analysis run."""

    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


IN_PROGRESS_INDEX_WHERE = text("status = 'IN_PROGRESS'")


def _jsonb() -> Column:
    # SQL NULL for None so "IS NOT NULL" filters mean "has a payload"
    return Column(JSONB(none_as_null=True))


class Analysis(UUIDMixin, TimestampMixin, SQLModel, table=True):
    """Stored result of analyzing one repository."""

    __tablename__ = "analyses"
    __table_args__ = (
        Index(
            "uq_analyses_repository_in_progress",
            "repository_id",
            unique=True,
            postgresql_where=IN_PROGRESS_INDEX_WHERE,
        ),
        Index("ix_analyses_repository_status_completed", "repository_id", "status", "completed_at"),
    )

    repository_id: uuid_pkg.UUID = Field(
        sa_column=Column(
            PG_UUID(as_uuid=True),
            ForeignKey("repositories.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
    )

    status: str = Field(
        default=AnalysisStatus.IN_PROGRESS.value,
        max_length=20,
        index=True,
    )
    started_at: datetime = Field(  # type: ignore[call-overload]
        default_factory=utc_now,
        nullable=False,
        sa_type=DateTime(timezone=True),
    )
    completed_at: datetime | None = Field(  # type: ignore[call-overload]
        default=None,
        sa_type=DateTime(timezone=True),
    )
    error_message: str | None = Field(default=None, max_length=500)

    # Result payload (null until COMPLETED)
    features: list[dict[str, Any]] | None = Field(default=None, sa_column=_jsonb())
    structure: dict[str, Any] | None = Field(default=None, sa_column=_jsonb())
    tech_stack: dict[str, Any] | None = Field(default=None, sa_column=_jsonb())
    ast_data: dict[str, Any] | None = Field(default=None, sa_column=_jsonb())
    code_metrics: dict[str, Any] | None = Field(default=None, sa_column=_jsonb())
    searchable_content: dict[str, Any] | None = Field(default=None, sa_column=_jsonb())
    dependencies: dict[str, int] | None = Field(default=None, sa_column=_jsonb())
    documentation: dict[str, Any] | None = Field(default=None, sa_column=_jsonb())
    summary: str | None = Field(default=None)
    complexity: str | None = Field(default=None, max_length=10, index=True)

    @property
    def is_terminal(self) -> bool:
        return self.status != AnalysisStatus.IN_PROGRESS.value


class AnalysisRead(SQLModel):
    """Full analysis payload as returned by the API."""

    id: uuid_pkg.UUID
    repository_id: uuid_pkg.UUID
    status: str
    started_at: datetime
    completed_at: datetime | None = None
    error_message: str | None = None
    features: list[dict[str, Any]] | None = None
    structure: dict[str, Any] | None = None
    tech_stack: dict[str, Any] | None = None
    ast_data: dict[str, Any] | None = None
    code_metrics: dict[str, Any] | None = None
    searchable_content: dict[str, Any] | None = None
    dependencies: dict[str, int] | None = None
    documentation: dict[str, Any] | None = None
    summary: str | None = None
    complexity: str | None = None


class AnalysisListItem(SQLModel):
    """Lightweight analysis row for history listings (no heavy payloads)."""

    id: uuid_pkg.UUID
    status: str
    started_at: datetime
    completed_at: datetime | None = None
    error_message: str | None = None
    complexity: str | None = None
