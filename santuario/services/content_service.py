"""
santuario.services.content_service — Content Snapshots & Daily Selection
=========================================================================

Loads the content catalogue (readings, philosophers, meditations, tasks,
questions) in primary-key order, converts rows into boundary records, and
runs the seeded selector for a user's date.

The collection order matters: the selector indexes into it, so every
caller that wants to agree on "today" must load through
:func:`load_collections`.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.orm import Session

from santuario.database.engine import get_session
from santuario.database.models import (
    DailyQuestionRow,
    MeditationRow,
    PhilosopherRow,
    ReadingRow,
    TaskRow,
)
from santuario.engine.daily import DailySelection, select_daily
from santuario.engine.dates import resolve_zone, today_in
from santuario.engine.records import (
    DailyQuestion,
    Meditation,
    PhilosopherBio,
    Reading,
    Task,
    coerce_records,
)
from santuario.services.reward_service import get_or_create_profile

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ContentSnapshot:
    """All collections as ordered tuples of records."""

    readings: tuple[Reading, ...] = field(default_factory=tuple)
    philosophers: tuple[PhilosopherBio, ...] = field(default_factory=tuple)
    meditations: tuple[Meditation, ...] = field(default_factory=tuple)
    tasks: tuple[Task, ...] = field(default_factory=tuple)
    questions: tuple[DailyQuestion, ...] = field(default_factory=tuple)


def _row_dict(row) -> dict:
    return {col.key: getattr(row, col.key) for col in row.__table__.columns}


def _load(session: Session, model, record_type) -> tuple:
    rows = session.scalars(select(model).order_by(model.id)).all()
    return tuple(coerce_records((_row_dict(r) for r in rows), record_type))


def load_collections(engine: Engine) -> ContentSnapshot:
    """Read every content table into a :class:`ContentSnapshot`."""
    with Session(engine) as session:
        return ContentSnapshot(
            readings=_load(session, ReadingRow, Reading),
            philosophers=_load(session, PhilosopherRow, PhilosopherBio),
            meditations=_load(session, MeditationRow, Meditation),
            tasks=_load(session, TaskRow, Task),
            questions=_load(session, DailyQuestionRow, DailyQuestion),
        )


def get_daily_salt(engine: Engine, user_id: str) -> str:
    with Session(engine) as session:
        profile = get_or_create_profile(session, user_id)
        salt = profile.daily_salt or ""
        session.commit()
        return salt


def daily_selection(
    engine: Engine,
    user_id: str,
    date_iso: str,
    snapshot: ContentSnapshot | None = None,
) -> DailySelection:
    """Today's content for *user_id* on *date_iso*, honouring their reset salt."""
    snap = snapshot if snapshot is not None else load_collections(engine)
    return select_daily(
        date_iso,
        snap.readings,
        snap.philosophers,
        snap.meditations,
        snap.tasks,
        snap.questions,
        user_salt=get_daily_salt(engine, user_id),
    )


def reset_daily_salt(engine: Engine, user_id: str) -> str:
    """Give *user_id* a fresh salt so their daily content is re-drawn.

    Returns the new salt.  The previous draw cannot be recovered.
    """
    salt = secrets.token_hex(8)
    with get_session(engine) as session:
        profile = get_or_create_profile(session, user_id)
        profile.daily_salt = salt
    logger.info("Daily content reset for user %s", user_id)
    return salt


def user_today(
    engine: Engine,
    user_id: str,
    default_timezone: str,
    *,
    now: datetime | None = None,
) -> date:
    """The calendar date it currently is for *user_id*.

    Uses the profile's timezone, falling back to *default_timezone*.
    """
    with Session(engine) as session:
        profile = get_or_create_profile(session, user_id)
        zone_name = profile.timezone
        session.commit()
    return today_in(resolve_zone(zone_name, default_timezone), now=now)
