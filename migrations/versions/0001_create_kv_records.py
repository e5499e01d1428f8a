"""create kv_records table

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Key-value store behind the craving event log and the strategy usage log.
One row per (collection, user); `value` is a JSON array rewritten whole on
every append. Downgrade drops cleanly.
"""
from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "kv_records",
        sa.Column("key", sa.String(191), primary_key=True),
        sa.Column("value", sa.Text(), nullable=False, server_default="[]"),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )


def downgrade() -> None:
    op.drop_table("kv_records")
