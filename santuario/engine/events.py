"""
santuario.engine.events — JournalEvent and base XP table
=========================================================

Every XP-earning interaction (a day's first real writing, a completed
challenge, a mentor review, a saved reading, a manual grant) is normalized
into a :class:`JournalEvent` before the reward pipeline processes it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

from santuario.database.models import InteractionType

__all__ = ["BASE_XP", "JournalEvent", "challenge_source_id", "reading_source_id", "writing_source_id"]

# ---------------------------------------------------------------------------
# Base XP per interaction type
# ---------------------------------------------------------------------------
BASE_XP: dict[InteractionType, int] = {
    InteractionType.JOURNAL_WRITING: 1,
    InteractionType.CHALLENGE_SUCCESS: 3,
    InteractionType.MENTOR_REVIEW: 2,
    InteractionType.READING_SAVED: 10,
    InteractionType.MANUAL_AWARD: 0,  # explicit amount
    InteractionType.LEVEL_UP: 0,
}


# ---------------------------------------------------------------------------
# Natural keys for once-only awards
# ---------------------------------------------------------------------------
def writing_source_id(date_iso: str) -> str:
    return f"writing:{date_iso}"


def challenge_source_id(date_iso: str) -> str:
    return f"challenge:{date_iso}"


def reading_source_id(reading_id: int | str) -> str:
    return f"reading:{reading_id}"


# ---------------------------------------------------------------------------
# JournalEvent — the event envelope
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class JournalEvent:
    """Normalized XP-earning event.

    ``source_event_id`` makes the award idempotent per user; ``None`` means
    every occurrence counts.  ``amount`` is only read for manual awards.
    """

    user_id: str
    event_type: InteractionType
    source_event_id: str | None = None
    amount: int = 0
    metadata: dict = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
