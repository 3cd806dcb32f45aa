"""
santuario.services.reward_service — XP Ledger & Level Application
==================================================================

Idempotent event persistence into ``activity_log`` plus the matching update
of ``profiles.xp`` / ``profiles.current_level``.

Events carrying a ``source_event_id`` are awarded at most once per user
(partial unique index ``ix_activity_log_idempotent``); events without one
(mentor reviews, manual grants) always count.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from santuario.constants import LevelData, calculate_level
from santuario.database.models import ActivityLog, InteractionType, Profile
from santuario.engine.events import JournalEvent
from santuario.engine.reward import AwardResult, calculate_award

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)

DEFAULT_USERNAME = "Estoico"


def get_or_create_profile(
    session: Session, user_id: str, username: str | None = None
) -> Profile:
    """Fetch or insert a Profile row."""
    profile = session.get(Profile, user_id)
    if profile is None:
        profile = Profile(
            id=user_id,
            username=username or DEFAULT_USERNAME,
            xp=0,
            current_level=1,
            daily_salt="",
        )
        session.add(profile)
        session.flush()
    elif username and profile.username != username:
        profile.username = username
    return profile


def apply_event(session: Session, event: JournalEvent) -> tuple[AwardResult, bool]:
    """Apply *event* inside an open *session* without committing.

    Returns ``(AwardResult, was_duplicate)``.  A duplicate leaves the profile
    untouched and reports zero XP.
    """
    profile = get_or_create_profile(session, event.user_id)
    result = calculate_award(event, current_xp=profile.xp)

    log = ActivityLog(
        user_id=event.user_id,
        event_type=event.event_type.value,
        source_event_id=event.source_event_id,
        xp_delta=result.xp,
        metadata_=event.metadata or None,
        timestamp=event.timestamp,
    )
    if event.source_event_id is not None:
        # SAVEPOINT + IntegrityError: on_conflict_do_nothing cannot reliably
        # target the partial unique index, so the DB enforces it directly.
        try:
            with session.begin_nested():
                session.add(log)
                session.flush()
        except IntegrityError:
            logger.debug(
                "Duplicate award %s for user %s ignored",
                event.source_event_id, event.user_id,
            )
            return AwardResult(xp=0, total_xp=profile.xp), True
    else:
        session.add(log)

    old_level = profile.current_level
    profile.xp = result.total_xp
    profile.current_level = calculate_level(profile.xp).level

    if result.leveled_up:
        session.add(ActivityLog(
            user_id=profile.id,
            event_type=InteractionType.LEVEL_UP.value,
            xp_delta=0,
            metadata_={"old_level": old_level, "new_level": profile.current_level},
        ))
        logger.info(
            "User %s leveled up: %d → %d", profile.id, old_level, profile.current_level
        )

    return result, False


def process_event(engine: Engine, event: JournalEvent) -> tuple[AwardResult, bool]:
    """Persist *event* and update the profile.

    Returns ``(AwardResult, was_duplicate)``.  If ``was_duplicate`` is True
    the event was already awarded and nothing changed.
    """
    with Session(engine) as session:
        result, duplicate = apply_event(session, event)
        session.commit()
        return result, duplicate


def award_manual(
    engine: Engine,
    *,
    user_id: str,
    xp: int,
    reason: str = "",
) -> AwardResult:
    """Grant (or withdraw, for negative *xp*) an explicit amount of XP."""
    event = JournalEvent(
        user_id=user_id,
        event_type=InteractionType.MANUAL_AWARD,
        amount=xp,
        metadata={"reason": reason} if reason else {},
    )
    result, _ = process_event(engine, event)
    return result


def get_level_data(engine: Engine, user_id: str) -> LevelData:
    """XP / level snapshot for *user_id* (a fresh profile when unknown)."""
    with Session(engine) as session:
        profile = get_or_create_profile(session, user_id)
        session.commit()
        return calculate_level(profile.xp)


def list_activity(engine: Engine, user_id: str, limit: int = 50) -> list[ActivityLog]:
    """Most recent ledger rows for *user_id*, newest first."""
    with Session(engine, expire_on_commit=False) as session:
        rows = session.scalars(
            select(ActivityLog)
            .where(ActivityLog.user_id == user_id)
            .order_by(ActivityLog.timestamp.desc(), ActivityLog.id.desc())
            .limit(limit)
        ).all()
        session.expunge_all()
        return list(rows)
