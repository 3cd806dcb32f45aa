"""Initial schema: profiles, journal, content catalogue, XP ledger, mentor limits

Revision ID: 5a1c7e3d9b20
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "5a1c7e3d9b20"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _created_at(name: str = "created_at") -> sa.Column:
    return sa.Column(
        name, sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
    )


def upgrade() -> None:
    """Create every table used by the API."""
    op.create_table(
        "profiles",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("xp", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("current_level", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("daily_salt", sa.String(32), nullable=False, server_default=""),
        sa.Column("timezone", sa.String(64), nullable=True),
        _created_at(),
        _created_at("updated_at"),
    )
    op.create_index("ix_profiles_xp_desc", "profiles", ["xp"])

    op.create_table(
        "journal_entries",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id", sa.String(64),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("text_content", sa.Text(), nullable=False, server_default=""),
        sa.Column("mood", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("question_response", sa.Text(), nullable=False, server_default=""),
        sa.Column("challenge_response", sa.Text(), nullable=False, server_default=""),
        sa.Column("challenge_title", sa.String(200), nullable=False, server_default=""),
        sa.Column("challenge_status", sa.String(10), nullable=True),
        sa.Column(
            "challenge_completed", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        _created_at("updated_at"),
        sa.UniqueConstraint("user_id", "date", name="uq_journal_entries_user_date"),
    )

    op.create_table(
        "readings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("quote", sa.Text(), nullable=False),
        sa.Column("body", sa.Text(), nullable=True),
        sa.Column("author", sa.String(200), nullable=True),
        sa.Column("tags", postgresql.JSONB(), nullable=True),
        sa.Column("type", sa.String(30), nullable=True),
        sa.Column("philosophy", sa.String(100), nullable=True),
    )
    op.create_table(
        "philosophers",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("dates", sa.String(100), nullable=True),
        sa.Column("role", sa.String(100), nullable=True),
        sa.Column("school", sa.String(100), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("key_ideas", postgresql.JSONB(), nullable=True),
        sa.Column("icon", sa.String(50), nullable=True),
    )
    op.create_table(
        "meditations",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(50), nullable=True),
        sa.Column("difficulty", sa.String(20), nullable=True),
        sa.Column("duration_minutes", sa.Integer(), nullable=False, server_default="5"),
        sa.Column("content", sa.Text(), nullable=True),
    )
    op.create_table(
        "tasks",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
    )
    op.create_table(
        "daily_questions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("question", sa.Text(), nullable=False),
    )

    op.create_table(
        "saved_readings",
        sa.Column(
            "user_id", sa.String(64),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True,
        ),
        sa.Column(
            "reading_id", sa.Integer(),
            sa.ForeignKey("readings.id", ondelete="CASCADE"), primary_key=True,
        ),
        _created_at("saved_at"),
    )

    op.create_table(
        "activity_log",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id", sa.String(64),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("event_type", sa.String(50), nullable=False),
        sa.Column("source_event_id", sa.String(100), nullable=True),
        sa.Column("xp_delta", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("metadata", postgresql.JSONB(), nullable=True),
        _created_at("timestamp"),
    )
    op.create_index(
        "ix_activity_log_idempotent",
        "activity_log",
        ["user_id", "source_event_id"],
        unique=True,
        postgresql_where=sa.text("source_event_id IS NOT NULL"),
    )
    op.create_index("ix_activity_log_user_time", "activity_log", ["user_id", "timestamp"])

    op.create_table(
        "mentor_rate_limit_events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        _created_at("timestamp"),
    )
    op.create_index(
        "ix_mentor_rate_limit_user_ts",
        "mentor_rate_limit_events",
        ["user_id", "timestamp"],
    )


def downgrade() -> None:
    """Drop every table, dependents first."""
    op.drop_index("ix_mentor_rate_limit_user_ts", table_name="mentor_rate_limit_events")
    op.drop_table("mentor_rate_limit_events")
    op.drop_index("ix_activity_log_user_time", table_name="activity_log")
    op.drop_index("ix_activity_log_idempotent", table_name="activity_log")
    op.drop_table("activity_log")
    op.drop_table("saved_readings")
    op.drop_table("daily_questions")
    op.drop_table("tasks")
    op.drop_table("meditations")
    op.drop_table("philosophers")
    op.drop_table("readings")
    op.drop_table("journal_entries")
    op.drop_index("ix_profiles_xp_desc", table_name="profiles")
    op.drop_table("profiles")
