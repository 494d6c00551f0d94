"""Analytics tables

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-18 12:00:00.000000

Creates the four analytics tables:
- events: one row per pageview/heartbeat, aggregated for the stats dashboard
- live_sessions: one row per session, refreshed by every event
- reads: unique read counter per blog post
- reader_dedup: (path, session_id, date) claims gating reads increments

Written manually and kept dialect-neutral so it runs on SQLite and Postgres.
"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

revision: str = "a1b2c3d4e5f6"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("date", sa.String(10), nullable=False),
        sa.Column("path", sa.String(200), nullable=False),
        sa.Column("source", sa.String(50), nullable=False),
        sa.Column("session_id", sa.String(100), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True),
                  server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_events_date_type", "events", ["date", "type"])
    op.create_index("ix_events_date_path", "events", ["date", "path"])

    op.create_table(
        "live_sessions",
        sa.Column("session_id", sa.String(100), primary_key=True),
        sa.Column("path", sa.String(200), nullable=False),
        sa.Column("last_seen", sa.BigInteger(), nullable=False),
    )
    op.create_index("ix_live_sessions_last_seen", "live_sessions", ["last_seen"])

    op.create_table(
        "reads",
        sa.Column("path", sa.String(200), primary_key=True),
        sa.Column("count", sa.Integer(), nullable=False, server_default="0"),
    )

    op.create_table(
        "reader_dedup",
        sa.Column("path", sa.String(200), primary_key=True),
        sa.Column("session_id", sa.String(100), primary_key=True),
        sa.Column("date", sa.String(10), primary_key=True),
    )


def downgrade() -> None:
    op.drop_table("reader_dedup")
    op.drop_table("reads")
    op.drop_index("ix_live_sessions_last_seen", table_name="live_sessions")
    op.drop_table("live_sessions")
    op.drop_index("ix_events_date_path", table_name="events")
    op.drop_index("ix_events_date_type", table_name="events")
    op.drop_table("events")
