"""
santuario.database.models — SQLAlchemy 2.0 Data Models
=======================================================

Tables:
- profiles           — One row per authenticated user (external auth subject PK)
- journal_entries    — One document per user per calendar date
- readings           — Daily reading catalogue
- philosophers       — Philosopher bios
- meditations        — Guided meditation scripts
- tasks              — Daily challenge catalogue
- daily_questions    — Evening-ritual questions
- saved_readings     — A user's personal library
- activity_log       — Append-only XP ledger with idempotent insert
- mentor_rate_limit_events — Sliding-window counter for AI mentor calls
"""

from __future__ import annotations

import enum
from datetime import date, datetime

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all Santuario ORM models."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class InteractionType(enum.StrEnum):
    """All event types that flow through the XP ledger."""
    JOURNAL_WRITING = "JOURNAL_WRITING"
    CHALLENGE_SUCCESS = "CHALLENGE_SUCCESS"
    MENTOR_REVIEW = "MENTOR_REVIEW"
    READING_SAVED = "READING_SAVED"
    MANUAL_AWARD = "MANUAL_AWARD"
    LEVEL_UP = "LEVEL_UP"


class ChallengeStatus(enum.StrEnum):
    SUCCESS = "success"
    FAILED = "failed"


# ---------------------------------------------------------------------------
# Profiles — one row per user
# ---------------------------------------------------------------------------
class Profile(Base):
    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    username: Mapped[str] = mapped_column(String(100), nullable=False)
    xp: Mapped[int] = mapped_column(Integer, default=0)
    current_level: Mapped[int] = mapped_column(Integer, default=1)
    daily_salt: Mapped[str] = mapped_column(String(32), default="")
    timezone: Mapped[str | None] = mapped_column(String(64), default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    entries: Mapped[list[JournalEntry]] = relationship(
        back_populates="profile", cascade="all, delete-orphan"
    )
    activity_logs: Mapped[list[ActivityLog]] = relationship(
        back_populates="profile", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_profiles_xp_desc", "xp"),
    )

    def __repr__(self) -> str:
        return f"<Profile id={self.id!r} name={self.username!r} lvl={self.current_level}>"


# ---------------------------------------------------------------------------
# JournalEntry — one rich-text document per user per date
# ---------------------------------------------------------------------------
class JournalEntry(Base):
    """A day's journal.

    ``text_content`` is an opaque HTML document holding up to one morning
    ritual block, free writing, and up to one evening ritual block (see
    :mod:`santuario.engine.journal`).
    """
    __tablename__ = "journal_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    entry_date: Mapped[date] = mapped_column("date", Date, nullable=False)
    text_content: Mapped[str] = mapped_column(Text, default="")
    mood: Mapped[int] = mapped_column(Integer, default=0)
    question_response: Mapped[str] = mapped_column(Text, default="")
    challenge_response: Mapped[str] = mapped_column(Text, default="")
    challenge_title: Mapped[str] = mapped_column(String(200), default="")
    challenge_status: Mapped[str | None] = mapped_column(String(10), default=None)
    # Legacy flag, kept in sync with challenge_status
    challenge_completed: Mapped[bool] = mapped_column(Boolean, default=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    profile: Mapped[Profile] = relationship(back_populates="entries")

    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_journal_entries_user_date"),
    )

    @property
    def effective_challenge_status(self) -> str | None:
        """``challenge_status``, falling back to the legacy boolean."""
        if self.challenge_status:
            return self.challenge_status
        return ChallengeStatus.SUCCESS.value if self.challenge_completed else None

    def __repr__(self) -> str:
        return f"<JournalEntry user={self.user_id!r} date={self.entry_date} mood={self.mood}>"


# ---------------------------------------------------------------------------
# Content catalogue — read-only to this service
# ---------------------------------------------------------------------------
class ReadingRow(Base):
    __tablename__ = "readings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    quote: Mapped[str] = mapped_column(Text, nullable=False)
    body: Mapped[str | None] = mapped_column(Text, default=None)
    author: Mapped[str | None] = mapped_column(String(200), default=None)
    tags: Mapped[list | None] = mapped_column(JSONB, default=list)
    type: Mapped[str | None] = mapped_column(String(30), default=None)
    philosophy: Mapped[str | None] = mapped_column(String(100), default=None)

    def __repr__(self) -> str:
        return f"<ReadingRow id={self.id} title={self.title!r}>"


class PhilosopherRow(Base):
    __tablename__ = "philosophers"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    dates: Mapped[str | None] = mapped_column(String(100), default=None)
    role: Mapped[str | None] = mapped_column(String(100), default=None)
    school: Mapped[str | None] = mapped_column(String(100), default=None)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    key_ideas: Mapped[list | None] = mapped_column(JSONB, default=list)
    icon: Mapped[str | None] = mapped_column(String(50), default=None)

    def __repr__(self) -> str:
        return f"<PhilosopherRow id={self.id!r} name={self.name!r}>"


class MeditationRow(Base):
    __tablename__ = "meditations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    category: Mapped[str | None] = mapped_column(String(50), default=None)
    difficulty: Mapped[str | None] = mapped_column(String(20), default=None)
    duration_minutes: Mapped[int] = mapped_column(Integer, default=5)
    content: Mapped[str | None] = mapped_column(Text, default=None)

    def __repr__(self) -> str:
        return f"<MeditationRow id={self.id} title={self.title!r}>"


class TaskRow(Base):
    __tablename__ = "tasks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)

    def __repr__(self) -> str:
        return f"<TaskRow id={self.id} title={self.title!r}>"


class DailyQuestionRow(Base):
    __tablename__ = "daily_questions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    question: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<DailyQuestionRow id={self.id}>"


# ---------------------------------------------------------------------------
# SavedReading — personal library
# ---------------------------------------------------------------------------
class SavedReading(Base):
    __tablename__ = "saved_readings"

    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True
    )
    reading_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("readings.id", ondelete="CASCADE"), primary_key=True
    )
    saved_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    reading: Mapped[ReadingRow] = relationship()

    def __repr__(self) -> str:
        return f"<SavedReading user={self.user_id!r} reading={self.reading_id}>"


# ---------------------------------------------------------------------------
# ActivityLog — append-only XP ledger
# ---------------------------------------------------------------------------
class ActivityLog(Base):
    __tablename__ = "activity_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    event_type: Mapped[str] = mapped_column(String(50), nullable=False)
    source_event_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    xp_delta: Mapped[int] = mapped_column(Integer, default=0)
    metadata_: Mapped[dict | None] = mapped_column("metadata", JSONB, nullable=True)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    profile: Mapped[Profile] = relationship(back_populates="activity_logs")

    __table_args__ = (
        # Partial unique index for idempotent awards
        Index(
            "ix_activity_log_idempotent",
            "user_id",
            "source_event_id",
            unique=True,
            postgresql_where=source_event_id.isnot(None),
        ),
        Index("ix_activity_log_user_time", "user_id", "timestamp"),
    )

    def __repr__(self) -> str:
        return f"<ActivityLog id={self.id} user={self.user_id!r} type={self.event_type}>"


# ---------------------------------------------------------------------------
# MentorRateLimitEvent — durable rate limiting for AI mentor calls
# ---------------------------------------------------------------------------
class MentorRateLimitEvent(Base):
    __tablename__ = "mentor_rate_limit_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        Index("ix_mentor_rate_limit_user_ts", "user_id", "timestamp"),
    )
