"""
santuario.services.library_service — Personal Library
======================================================

Readings a user has saved from their daily page.  Saving a reading for the
first time earns the reading XP; un-saving and re-saving never earns again.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from santuario.database.models import InteractionType, ReadingRow, SavedReading
from santuario.engine.events import JournalEvent, reading_source_id
from santuario.engine.records import Reading
from santuario.engine.reward import AwardResult
from santuario.services.reward_service import apply_event, get_or_create_profile

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)


class ReadingNotFoundError(LookupError):
    """Raised when a reading id does not exist in the catalogue."""


def list_saved_readings(engine: Engine, user_id: str) -> list[Reading]:
    """Saved readings, most recently saved first.  Malformed rows are skipped."""
    with Session(engine) as session:
        saved = session.scalars(
            select(SavedReading)
            .options(selectinload(SavedReading.reading))
            .where(SavedReading.user_id == user_id)
            .order_by(SavedReading.saved_at.desc(), SavedReading.reading_id.desc())
        ).all()
        readings = []
        for item in saved:
            row = item.reading
            record = Reading.from_mapping({
                "id": row.id, "title": row.title, "quote": row.quote,
                "body": row.body, "author": row.author, "tags": row.tags,
                "type": row.type, "philosophy": row.philosophy,
            })
            if record is not None:
                readings.append(record)
        return readings


def toggle_saved_reading(
    engine: Engine, user_id: str, reading_id: int
) -> tuple[bool, AwardResult | None]:
    """Save *reading_id* if it is not in the library, remove it otherwise.

    Returns ``(saved, award)`` where *award* is set only when this save
    earned XP.

    Raises
    ------
    ReadingNotFoundError
        If *reading_id* is not a catalogue reading.
    """
    with Session(engine) as session:
        if session.get(ReadingRow, reading_id) is None:
            raise ReadingNotFoundError(f"Reading {reading_id} does not exist")

        get_or_create_profile(session, user_id)
        existing = session.get(SavedReading, (user_id, reading_id))
        if existing is not None:
            session.delete(existing)
            session.commit()
            logger.debug("User %s removed reading %s", user_id, reading_id)
            return False, None

        session.add(SavedReading(user_id=user_id, reading_id=reading_id))
        result, duplicate = apply_event(session, JournalEvent(
            user_id=user_id,
            event_type=InteractionType.READING_SAVED,
            source_event_id=reading_source_id(reading_id),
        ))
        session.commit()
        return True, None if duplicate else result
