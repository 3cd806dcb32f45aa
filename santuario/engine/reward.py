"""
santuario.engine.reward — XP Award Calculation
===============================================

Pure calculation, no DB I/O.

    JournalEvent → base XP (or explicit amount) → new total → level check → AwardResult
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from santuario.constants import calculate_level
from santuario.database.models import InteractionType
from santuario.engine.events import BASE_XP, JournalEvent

logger = logging.getLogger(__name__)

__all__ = ["AwardResult", "calculate_award", "xp_for_event"]


@dataclass
class AwardResult:
    """Output of the award pipeline."""

    xp: int = 0
    total_xp: int = 0
    leveled_up: bool = False
    new_level: int | None = None
    new_title: str | None = None


def xp_for_event(event: JournalEvent) -> int:
    """XP granted by *event* before any level bookkeeping."""
    if event.event_type == InteractionType.MANUAL_AWARD:
        return event.amount
    return BASE_XP.get(event.event_type, 0)


def calculate_award(event: JournalEvent, current_xp: int = 0) -> AwardResult:
    """Apply *event* to a profile holding *current_xp*.

    A level-up is reported whenever the level of the new total differs
    upward from the level of *current_xp*; negative manual awards never
    level up.
    """
    xp = xp_for_event(event)
    total = current_xp + xp

    before = calculate_level(current_xp)
    after = calculate_level(total)
    leveled_up = after.level > before.level

    if leveled_up:
        logger.debug(
            "User %s reaches level %d (%s)", event.user_id, after.level, after.title
        )

    return AwardResult(
        xp=xp,
        total_xp=total,
        leveled_up=leveled_up,
        new_level=after.level if leveled_up else None,
        new_title=after.title if leveled_up else None,
    )
