"""Initial schema: repositories and analyses

Revision ID: 0001
Revises:
Create Date: 2026-10-18

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create repositories and analyses, with the single-flight index."""
    op.create_table(
        "repositories",
        sa.Column("id", sa.Uuid(), server_default=sa.text("gen_random_uuid()"), nullable=False),
        sa.Column("name", sa.VARCHAR(255), nullable=False),
        sa.Column("full_name", sa.VARCHAR(500), nullable=False),
        sa.Column("owner", sa.VARCHAR(255), nullable=False),
        sa.Column("description", sa.VARCHAR(2000), nullable=True),
        sa.Column("url", sa.VARCHAR(500), nullable=True),
        sa.Column("default_branch", sa.VARCHAR(100), nullable=False),
        sa.Column("language", sa.VARCHAR(50), nullable=True),
        sa.Column("github_id", sa.Integer(), nullable=False),
        sa.Column("stars_count", sa.Integer(), nullable=False),
        sa.Column("forks_count", sa.Integer(), nullable=False),
        sa.Column("last_analyzed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_repositories_id", "repositories", ["id"])
    op.create_index("ix_repositories_name", "repositories", ["name"])
    op.create_index("ix_repositories_full_name", "repositories", ["full_name"])
    op.create_index("ix_repositories_github_id", "repositories", ["github_id"], unique=True)

    op.create_table(
        "analyses",
        sa.Column("id", sa.Uuid(), server_default=sa.text("gen_random_uuid()"), nullable=False),
        sa.Column("repository_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("status", sa.VARCHAR(20), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("error_message", sa.VARCHAR(500), nullable=True),
        sa.Column("features", postgresql.JSONB(), nullable=True),
        sa.Column("structure", postgresql.JSONB(), nullable=True),
        sa.Column("tech_stack", postgresql.JSONB(), nullable=True),
        sa.Column("ast_data", postgresql.JSONB(), nullable=True),
        sa.Column("code_metrics", postgresql.JSONB(), nullable=True),
        sa.Column("searchable_content", postgresql.JSONB(), nullable=True),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column("complexity", sa.VARCHAR(10), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.ForeignKeyConstraint(["repository_id"], ["repositories.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_analyses_id", "analyses", ["id"])
    op.create_index("ix_analyses_repository_id", "analyses", ["repository_id"])
    op.create_index("ix_analyses_status", "analyses", ["status"])
    op.create_index("ix_analyses_complexity", "analyses", ["complexity"])
    op.create_index(
        "ix_analyses_repository_status_completed",
        "analyses",
        ["repository_id", "status", "completed_at"],
    )
    # At most one IN_PROGRESS analysis per repository
    op.create_index(
        "uq_analyses_repository_in_progress",
        "analyses",
        ["repository_id"],
        unique=True,
        postgresql_where=sa.text("status = 'IN_PROGRESS'"),
    )


def downgrade() -> None:
    """Drop analyses and repositories."""
    op.drop_index("uq_analyses_repository_in_progress", table_name="analyses")
    op.drop_index("ix_analyses_repository_status_completed", table_name="analyses")
    op.drop_index("ix_analyses_complexity", table_name="analyses")
    op.drop_index("ix_analyses_status", table_name="analyses")
    op.drop_index("ix_analyses_repository_id", table_name="analyses")
    op.drop_index("ix_analyses_id", table_name="analyses")
    op.drop_table("analyses")
    op.drop_index("ix_repositories_github_id", table_name="repositories")
    op.drop_index("ix_repositories_full_name", table_name="repositories")
    op.drop_index("ix_repositories_name", table_name="repositories")
    op.drop_index("ix_repositories_id", table_name="repositories")
    op.drop_table("repositories")
