"""Create role records

Revision ID: 001
Revises:
Create Date: 2026-10-16 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "role_records",
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("role_id", sa.String(32), nullable=False),
        sa.Column("token_ttl", sa.Integer(), nullable=False),
        sa.Column("max_ttl", sa.Integer(), nullable=False),
        sa.Column(
            "permission_targets",
            postgresql.JSONB(astext_type=sa.Text()),
            server_default="[]",
            nullable=False,
        ),
        sa.Column("raw_permission_targets", sa.Text(), server_default="", nullable=False),
        sa.Column("state", sa.String(20), nullable=False),
        sa.Column("previous_permission_targets", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("name"),
        sa.UniqueConstraint("role_id"),
    )
    op.create_index("ix_role_records_state", "role_records", ["state"])


def downgrade() -> None:
    op.drop_index("ix_role_records_state", table_name="role_records")
    op.drop_table("role_records")
