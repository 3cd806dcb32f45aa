"""
tests/test_reward_service.py — XP Ledger Integration Tests
===========================================================
Idempotent persistence, profile creation, XP/level application.

Uses an in-memory SQLite database via the shared conftest fixtures.
"""

from __future__ import annotations

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session

from santuario.database.models import ActivityLog, InteractionType, Profile
from santuario.engine.events import JournalEvent
from santuario.services import reward_service


@pytest.fixture
def engine(db_engine):
    """Re-use the shared conftest db_engine (SQLite, StaticPool)."""
    return db_engine


def _make_event(
    user_id: str = "user-1",
    event_type: InteractionType = InteractionType.READING_SAVED,
    source_event_id: str | None = "reading:1",
    amount: int = 0,
) -> JournalEvent:
    return JournalEvent(
        user_id=user_id,
        event_type=event_type,
        source_event_id=source_event_id,
        amount=amount,
    )


class TestProcessEvent:
    def test_creates_profile_on_first_event(self, engine):
        reward_service.process_event(engine, _make_event())
        with Session(engine) as s:
            profile = s.get(Profile, "user-1")
            assert profile is not None
            assert profile.username == reward_service.DEFAULT_USERNAME

    def test_xp_is_applied(self, engine):
        result, dup = reward_service.process_event(engine, _make_event())
        assert not dup
        assert result.xp == 10
        with Session(engine) as s:
            assert s.get(Profile, "user-1").xp == 10

    def test_activity_log_created(self, engine):
        reward_service.process_event(engine, _make_event())
        with Session(engine) as s:
            logs = s.scalars(select(ActivityLog)).all()
            assert len(logs) == 1
            assert logs[0].event_type == "READING_SAVED"
            assert logs[0].source_event_id == "reading:1"
            assert logs[0].xp_delta == 10

    def test_idempotent_duplicate_event(self, engine):
        _, dup1 = reward_service.process_event(engine, _make_event())
        result, dup2 = reward_service.process_event(engine, _make_event())
        assert not dup1
        assert dup2
        assert result.xp == 0
        with Session(engine) as s:
            assert s.get(Profile, "user-1").xp == 10
            assert len(s.scalars(select(ActivityLog)).all()) == 1

    def test_same_source_id_for_different_users(self, engine):
        reward_service.process_event(engine, _make_event(user_id="a"))
        _, dup = reward_service.process_event(engine, _make_event(user_id="b"))
        assert not dup

    def test_events_without_source_id_always_insert(self, engine):
        for _ in range(3):
            _, dup = reward_service.process_event(engine, _make_event(
                event_type=InteractionType.MENTOR_REVIEW, source_event_id=None,
            ))
            assert not dup
        with Session(engine) as s:
            assert s.get(Profile, "user-1").xp == 6

    def test_level_up_logged(self, engine):
        reward_service.award_manual(engine, user_id="user-1", xp=245)
        result, _ = reward_service.process_event(engine, _make_event())
        assert result.leveled_up
        assert result.new_level == 2
        with Session(engine) as s:
            assert s.get(Profile, "user-1").current_level == 2
            level_logs = s.scalars(
                select(ActivityLog).where(ActivityLog.event_type == "LEVEL_UP")
            ).all()
            assert len(level_logs) == 1
            assert level_logs[0].metadata_ == {"old_level": 1, "new_level": 2}


class TestAwardManual:
    def test_negative_award_lowers_level(self, engine):
        reward_service.award_manual(engine, user_id="user-1", xp=300)
        reward_service.award_manual(engine, user_id="user-1", xp=-100, reason="corrección")
        with Session(engine) as s:
            profile = s.get(Profile, "user-1")
            assert profile.xp == 200
            assert profile.current_level == 1

    def test_reason_recorded(self, engine):
        reward_service.award_manual(engine, user_id="user-1", xp=5, reason="bienvenida")
        with Session(engine) as s:
            log = s.scalars(select(ActivityLog)).one()
            assert log.metadata_ == {"reason": "bienvenida"}


class TestReads:
    def test_level_data_for_unknown_user(self, engine):
        data = reward_service.get_level_data(engine, "nuevo")
        assert data.level == 1
        assert data.current_xp == 0

    def test_list_activity_newest_first(self, engine):
        reward_service.process_event(engine, _make_event(source_event_id="reading:1"))
        reward_service.process_event(engine, _make_event(source_event_id="reading:2"))
        rows = reward_service.list_activity(engine, "user-1")
        assert [r.source_event_id for r in rows] == ["reading:2", "reading:1"]
