"""create powerpulse tables

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Readings, profiles, insights cache / history and per-user rate limits.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# JSONB on Postgres, JSON elsewhere (SQLite for local runs)
JSONDocument = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "readings",
        sa.Column("user_id", sa.String(128), nullable=False),
        sa.Column("date", sa.String(10), nullable=False),
        sa.Column("usage", sa.Float(), nullable=False),
        sa.Column(
            "timestamp",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("user_id", "date"),
    )

    op.create_table(
        "user_profiles",
        sa.Column("user_id", sa.String(128), nullable=False),
        sa.Column("location", sa.Text(), nullable=False),
        sa.Column("home_type", sa.String(50), nullable=False),
        sa.Column("appliances", JSONDocument, nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("user_id"),
    )

    op.create_table(
        "insights_cache",
        sa.Column("user_id", sa.String(128), nullable=False),
        sa.Column("request_hash", sa.String(64), nullable=False),
        sa.Column("status", sa.String(10), nullable=False),
        sa.Column("insights", JSONDocument, nullable=True),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("expires_at", sa.BigInteger(), nullable=False),
        sa.PrimaryKeyConstraint("user_id", "request_hash"),
    )
    op.create_index("ix_insights_cache_expires_at", "insights_cache", ["expires_at"])

    op.create_table(
        "insights_history",
        sa.Column("user_id", sa.String(128), nullable=False),
        sa.Column("date", sa.String(10), nullable=False),
        sa.Column("timestamp", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("insights", JSONDocument, nullable=False),
        sa.Column("metadata", JSONDocument, nullable=False),
        sa.Column("expires_at", sa.BigInteger(), nullable=False),
        sa.PrimaryKeyConstraint("user_id", "date"),
    )
    op.create_index("ix_insights_history_expires_at", "insights_history", ["expires_at"])

    op.create_table(
        "rate_limits",
        sa.Column("user_id", sa.String(128), nullable=False),
        sa.Column("window_start", sa.BigInteger(), nullable=False),
        sa.Column("count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_request_at", sa.BigInteger(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("user_id"),
    )
    # Housekeeping scans idle rows by last accepted request
    op.create_index("ix_rate_limits_last_request_at", "rate_limits", ["last_request_at"])


def downgrade() -> None:
    op.drop_index("ix_rate_limits_last_request_at", table_name="rate_limits")
    op.drop_table("rate_limits")
    op.drop_index("ix_insights_history_expires_at", table_name="insights_history")
    op.drop_table("insights_history")
    op.drop_index("ix_insights_cache_expires_at", table_name="insights_cache")
    op.drop_table("insights_cache")
    op.drop_table("user_profiles")
    op.drop_table("readings")
