import uuid as uuid_pkg
from datetime import datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from app.models.base import TimestampMixin, UUIDMixin


class RepositoryBase(SQLModel):
    """Base fields for Repository."""

    name: str = Field(max_length=255, index=True)
    full_name: str = Field(max_length=500, index=True)
    owner: str = Field(max_length=255)
    description: str | None = Field(default=None, max_length=2000)
    url: str | None = Field(default=None, max_length=500)
    default_branch: str = Field(default="main", max_length=100)
    language: str | None = Field(default=None, max_length=50)

    # GitHub metadata (refreshed on every save)
    github_id: int = Field(unique=True, index=True)
    stars_count: int = Field(default=0)
    forks_count: int = Field(default=0)


class RepositorySave(SQLModel):
    """Request body for saving a GitHub repository."""

    owner: str
    name: str


class RepositoryRead(RepositoryBase):
    """Repository as returned by the API."""

    id: uuid_pkg.UUID
    last_analyzed_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class Repository(RepositoryBase, UUIDMixin, TimestampMixin, table=True):
    """A source repository that can be analyzed and searched."""

    __tablename__ = "repositories"

    last_analyzed_at: datetime | None = Field(  # type: ignore[call-overload]
        default=None,
        sa_type=DateTime(timezone=True),
    )
