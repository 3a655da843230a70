"""Add dependencies and documentation to analyses

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-19

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0002"
down_revision: Union[str, None] = "0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Store language byte counts and the README alongside each analysis."""
    op.add_column("analyses", sa.Column("dependencies", postgresql.JSONB(), nullable=True))
    op.add_column("analyses", sa.Column("documentation", postgresql.JSONB(), nullable=True))


def downgrade() -> None:
    op.drop_column("analyses", "documentation")
    op.drop_column("analyses", "dependencies")
