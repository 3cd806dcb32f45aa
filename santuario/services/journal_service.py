"""
santuario.services.journal_service — Per-day Journal Persistence
=================================================================

One :class:`JournalEntry` per ``(user_id, date)``, created on the first save
of that date and mutated by every later one.  All document edits go through
:func:`santuario.engine.journal.merge_journal_content`, so ritual blocks are
replaced in place and free writing accumulates.

Writes are last-writer-wins on the row; the XP ledger is idempotent, so a
retried save never awards twice.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from santuario.constants import (
    DEFAULT_RITUAL_MOOD,
    MAX_MOOD,
    WRITING_XP_MIN_CHARS,
    mood_label,
)
from santuario.database.engine import get_session
from santuario.database.models import ChallengeStatus, InteractionType, JournalEntry
from santuario.engine.dates import iso_date
from santuario.engine.events import JournalEvent, challenge_source_id, writing_source_id
from santuario.engine.journal import (
    SectionKind,
    merge_journal_content,
    plain_text,
    render_ritual_block,
)
from santuario.services.reward_service import apply_event, get_or_create_profile

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _validate_mood(mood: int) -> int:
    if isinstance(mood, bool) or not isinstance(mood, int) or not 0 <= mood <= MAX_MOOD:
        raise ValueError(f"Mood must be an integer between 0 and {MAX_MOOD}, got {mood!r}")
    return mood


def _get_or_create_entry(session: Session, user_id: str, day: date) -> JournalEntry:
    entry = session.scalar(
        select(JournalEntry).where(
            JournalEntry.user_id == user_id, JournalEntry.entry_date == day
        )
    )
    if entry is None:
        get_or_create_profile(session, user_id)
        entry = JournalEntry(
            user_id=user_id,
            entry_date=day,
            text_content="",
            mood=0,
            question_response="",
            challenge_response="",
            challenge_title="",
            challenge_completed=False,
        )
        session.add(entry)
        session.flush()
    return entry


def _detach(session: Session, entry: JournalEntry) -> JournalEntry:
    session.commit()
    session.refresh(entry)
    session.expunge(entry)
    return entry


def _award(session: Session, event: JournalEvent) -> int:
    result, duplicate = apply_event(session, event)
    return 0 if duplicate else result.xp


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------
def get_entry(engine: Engine, user_id: str, day: date) -> JournalEntry | None:
    """The entry for *day*, or ``None`` when nothing was written that day."""
    with Session(engine, expire_on_commit=False) as session:
        entry = session.scalar(
            select(JournalEntry).where(
                JournalEntry.user_id == user_id, JournalEntry.entry_date == day
            )
        )
        if entry is not None:
            session.expunge(entry)
        return entry


def list_entries(engine: Engine, user_id: str) -> list[JournalEntry]:
    """All of *user_id*'s entries, most recent date first."""
    with Session(engine, expire_on_commit=False) as session:
        entries = session.scalars(
            select(JournalEntry)
            .where(JournalEntry.user_id == user_id)
            .order_by(JournalEntry.entry_date.desc())
        ).all()
        session.expunge_all()
        return list(entries)


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------
def save_fragment(
    engine: Engine,
    user_id: str,
    day: date,
    fragment: str,
    kind: SectionKind | str = SectionKind.FREE,
    *,
    mood: int | None = None,
    question_response: str | None = None,
) -> tuple[JournalEntry, int]:
    """Merge *fragment* into the entry for *day*, creating it if needed.

    Returns ``(entry, awarded_xp)``.  The first save of a date whose plain
    text is longer than the writing threshold earns the daily writing XP.

    Raises
    ------
    ValueError
        If *mood* is outside ``0..5`` or *kind* is not a section kind.
    """
    kind = SectionKind(kind)
    if mood is not None:
        _validate_mood(mood)

    with Session(engine, expire_on_commit=False) as session:
        entry = _get_or_create_entry(session, user_id, day)
        entry.text_content = merge_journal_content(entry.text_content, fragment, kind)
        if mood is not None:
            entry.mood = mood
        if question_response is not None:
            entry.question_response = question_response

        awarded = 0
        if len(plain_text(entry.text_content).strip()) > WRITING_XP_MIN_CHARS:
            awarded = _award(session, JournalEvent(
                user_id=user_id,
                event_type=InteractionType.JOURNAL_WRITING,
                source_event_id=writing_source_id(iso_date(day)),
            ))

        logger.debug("Saved %s fragment for %s on %s", kind.value, user_id, day)
        return _detach(session, entry), awarded


def save_ritual(
    engine: Engine,
    user_id: str,
    day: date,
    kind: SectionKind | str,
    answers: dict[str, str],
    *,
    mood: int | None = None,
    daily_question_text: str | None = None,
) -> tuple[JournalEntry, int]:
    """Render a morning/evening ritual from its step *answers* and save it.

    Re-running a ritual replaces its block.  The evening ``daily_question``
    answer is also stored as the entry's question response.  When no mood has
    been recorded for the day and none is given, the ritual records a neutral
    mood.
    """
    kind = SectionKind(kind)
    block = render_ritual_block(kind, answers, daily_question_text)

    question_response = None
    if kind is SectionKind.EVENING:
        answer = (answers.get("daily_question") or "").strip()
        question_response = answer or None

    if mood is None:
        existing = get_entry(engine, user_id, day)
        if existing is None or not existing.mood:
            mood = DEFAULT_RITUAL_MOOD

    return save_fragment(
        engine, user_id, day, block, kind,
        mood=mood, question_response=question_response,
    )


def set_mood(engine: Engine, user_id: str, day: date, mood: int) -> JournalEntry:
    """Record the day's mood (``0`` clears it)."""
    _validate_mood(mood)
    with Session(engine, expire_on_commit=False) as session:
        entry = _get_or_create_entry(session, user_id, day)
        entry.mood = mood
        return _detach(session, entry)


def set_challenge(
    engine: Engine,
    user_id: str,
    day: date,
    status: ChallengeStatus | str,
    title: str | None = None,
    response: str | None = None,
) -> tuple[JournalEntry, int]:
    """Mark the day's challenge as succeeded or failed.

    Returns ``(entry, awarded_xp)``; success earns the challenge XP once per
    date, even if the status is toggled back and forth.
    """
    try:
        status = ChallengeStatus(status)
    except ValueError as exc:
        raise ValueError(f"Unknown challenge status: {status!r}") from exc

    with Session(engine, expire_on_commit=False) as session:
        entry = _get_or_create_entry(session, user_id, day)
        entry.challenge_status = status.value
        entry.challenge_completed = status is ChallengeStatus.SUCCESS
        if title is not None:
            entry.challenge_title = title
        if response is not None:
            entry.challenge_response = response

        awarded = 0
        if status is ChallengeStatus.SUCCESS:
            awarded = _award(session, JournalEvent(
                user_id=user_id,
                event_type=InteractionType.CHALLENGE_SUCCESS,
                source_event_id=challenge_source_id(iso_date(day)),
            ))
        return _detach(session, entry), awarded


def append_mentor_note(
    engine: Engine, user_id: str, day: date, note_html: str
) -> tuple[JournalEntry, int]:
    """Append the mentor's note to the day's free writing.

    Every review earns the mentor XP.  Returns ``(entry, awarded_xp)``.
    """
    with Session(engine, expire_on_commit=False) as session:
        entry = _get_or_create_entry(session, user_id, day)
        entry.text_content = merge_journal_content(
            entry.text_content, note_html, SectionKind.FREE
        )
        awarded = _award(session, JournalEvent(
            user_id=user_id,
            event_type=InteractionType.MENTOR_REVIEW,
            metadata={"date": iso_date(day)},
        ))
        return _detach(session, entry), awarded


# ---------------------------------------------------------------------------
# Export / clear
# ---------------------------------------------------------------------------
def entry_to_dict(entry: JournalEntry) -> dict:
    return {
        "date": iso_date(entry.entry_date),
        "text_content": entry.text_content or "",
        "mood": entry.mood or 0,
        "mood_label": mood_label(entry.mood or 0),
        "question_response": entry.question_response or "",
        "challenge_title": entry.challenge_title or "",
        "challenge_response": entry.challenge_response or "",
        "challenge_status": entry.effective_challenge_status,
        "challenge_completed": bool(entry.challenge_completed),
    }


def export_journal(engine: Engine, user_id: str) -> dict[str, dict]:
    """Every entry of *user_id* keyed by ISO date, oldest first."""
    entries = sorted(list_entries(engine, user_id), key=lambda e: e.entry_date)
    return {iso_date(e.entry_date): entry_to_dict(e) for e in entries}


def clear_journal(engine: Engine, user_id: str) -> int:
    """Delete every entry of *user_id*.  Returns the number removed.

    XP already earned is kept.
    """
    with get_session(engine) as session:
        result = session.execute(
            delete(JournalEntry).where(JournalEntry.user_id == user_id)
        )
    removed = result.rowcount or 0
    logger.info("Cleared %d journal entries for user %s", removed, user_id)
    return removed
