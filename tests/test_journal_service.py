"""
tests/test_journal_service.py — Per-day Journal Persistence
============================================================
Upsert per (user, date), merging through the document engine, XP awards,
mood / challenge bookkeeping, export and clear.
"""

from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session

from santuario.database.models import ActivityLog, JournalEntry, Profile
from santuario.engine.journal import parse_document
from santuario.services import journal_service

DAY = date(2024, 3, 15)
LONG_TEXT = "<p>Hoy practiqué la templanza durante la comida.</p>"


@pytest.fixture
def engine(db_engine):
    return db_engine


def _entries(engine) -> list[JournalEntry]:
    with Session(engine) as s:
        return list(s.scalars(select(JournalEntry)).all())


class TestSaveFragment:
    def test_creates_single_entry_per_day(self, engine):
        journal_service.save_fragment(engine, "u1", DAY, "<p>uno</p>")
        journal_service.save_fragment(engine, "u1", DAY, "<p>dos</p>")
        entries = _entries(engine)
        assert len(entries) == 1
        assert entries[0].text_content == "<p>uno</p><br><br><p>dos</p>"

    def test_separate_days_and_users(self, engine):
        journal_service.save_fragment(engine, "u1", DAY, "<p>a</p>")
        journal_service.save_fragment(engine, "u1", date(2024, 3, 16), "<p>b</p>")
        journal_service.save_fragment(engine, "u2", DAY, "<p>c</p>")
        assert len(_entries(engine)) == 3

    def test_writing_xp_awarded_once_per_day(self, engine):
        _, first = journal_service.save_fragment(engine, "u1", DAY, LONG_TEXT)
        _, second = journal_service.save_fragment(engine, "u1", DAY, LONG_TEXT)
        assert first == 1
        assert second == 0
        with Session(engine) as s:
            assert s.get(Profile, "u1").xp == 1

    def test_short_writing_earns_nothing(self, engine):
        _, awarded = journal_service.save_fragment(engine, "u1", DAY, "<p>corto</p>")
        assert awarded == 0

    def test_mood_and_question_response(self, engine):
        entry, _ = journal_service.save_fragment(
            engine, "u1", DAY, "<p>x</p>", mood=4, question_response="La respuesta"
        )
        assert entry.mood == 4
        assert entry.question_response == "La respuesta"

    def test_invalid_mood_rejected(self, engine):
        with pytest.raises(ValueError):
            journal_service.save_fragment(engine, "u1", DAY, "<p>x</p>", mood=9)
        assert _entries(engine) == []

    def test_returned_entry_is_detached_and_loaded(self, engine):
        entry, _ = journal_service.save_fragment(engine, "u1", DAY, "<p>x</p>")
        assert entry.entry_date == DAY
        assert entry.text_content == "<p>x</p>"


class TestSaveRitual:
    def test_morning_ritual_replaced_not_duplicated(self, engine):
        journal_service.save_fragment(engine, "u1", DAY, "<p>libre</p>")
        journal_service.save_ritual(engine, "u1", DAY, "morning", {"intent": "Coraje"})
        entry, _ = journal_service.save_ritual(engine, "u1", DAY, "morning", {"intent": "Justicia"})
        doc = parse_document(entry.text_content)
        assert "Justicia" in doc.morning
        assert "Coraje" not in entry.text_content
        assert doc.free == "<p>libre</p>"

    def test_ritual_sets_default_mood(self, engine):
        entry, _ = journal_service.save_ritual(engine, "u1", DAY, "morning", {"intent": "Coraje"})
        assert entry.mood == 3

    def test_ritual_keeps_existing_mood(self, engine):
        journal_service.set_mood(engine, "u1", DAY, 5)
        entry, _ = journal_service.save_ritual(engine, "u1", DAY, "morning", {"intent": "Coraje"})
        assert entry.mood == 5

    def test_evening_question_response(self, engine):
        entry, _ = journal_service.save_ritual(
            engine, "u1", DAY, "evening",
            {"daily_question": "A mi vecino", "review": "Bien"},
            daily_question_text="¿A quién has ayudado hoy?",
        )
        assert entry.question_response == "A mi vecino"
        assert "¿A quién has ayudado hoy?" in parse_document(entry.text_content).evening

    def test_rejects_free_kind(self, engine):
        with pytest.raises(ValueError):
            journal_service.save_ritual(engine, "u1", DAY, "free", {})


class TestMoodAndChallenge:
    def test_set_mood(self, engine):
        entry = journal_service.set_mood(engine, "u1", DAY, 2)
        assert entry.mood == 2

    @pytest.mark.parametrize("bad", [-1, 6, True])
    def test_set_mood_out_of_range(self, engine, bad):
        with pytest.raises(ValueError):
            journal_service.set_mood(engine, "u1", DAY, bad)

    def test_challenge_success_syncs_legacy_flag(self, engine):
        entry, awarded = journal_service.set_challenge(
            engine, "u1", DAY, "success", title="Ayuno de Quejas"
        )
        assert entry.challenge_status == "success"
        assert entry.challenge_completed is True
        assert entry.challenge_title == "Ayuno de Quejas"
        assert awarded == 3

    def test_challenge_toggle_awards_once(self, engine):
        journal_service.set_challenge(engine, "u1", DAY, "success")
        entry, _ = journal_service.set_challenge(engine, "u1", DAY, "failed")
        assert entry.challenge_completed is False
        _, awarded = journal_service.set_challenge(engine, "u1", DAY, "success")
        assert awarded == 0

    def test_unknown_status(self, engine):
        with pytest.raises(ValueError, match="challenge status"):
            journal_service.set_challenge(engine, "u1", DAY, "maybe")

    def test_legacy_flag_reads_as_success(self, engine):
        with Session(engine) as s:
            s.add(Profile(id="u1", username="x"))
            s.add(JournalEntry(user_id="u1", entry_date=DAY, challenge_completed=True))
            s.commit()
        entry = journal_service.get_entry(engine, "u1", DAY)
        assert entry.effective_challenge_status == "success"


class TestMentorNote:
    def test_note_appended_as_free_and_awarded_each_time(self, engine):
        journal_service.save_ritual(engine, "u1", DAY, "evening", {"review": "Bien"})
        _, first = journal_service.append_mentor_note(engine, "u1", DAY, "<div>nota 1</div>")
        entry, second = journal_service.append_mentor_note(engine, "u1", DAY, "<div>nota 2</div>")
        assert first == second == 2
        doc = parse_document(entry.text_content)
        assert "nota 1" in doc.free and "nota 2" in doc.free
        assert doc.evening is not None
        assert entry.text_content.endswith(doc.evening)
        with Session(engine) as s:
            reviews = s.scalars(
                select(ActivityLog).where(ActivityLog.event_type == "MENTOR_REVIEW")
            ).all()
            assert len(reviews) == 2


class TestListExportClear:
    def test_list_newest_first(self, engine):
        journal_service.save_fragment(engine, "u1", date(2024, 1, 1), "<p>a</p>")
        journal_service.save_fragment(engine, "u1", date(2024, 2, 1), "<p>b</p>")
        dates = [e.entry_date for e in journal_service.list_entries(engine, "u1")]
        assert dates == [date(2024, 2, 1), date(2024, 1, 1)]

    def test_export_keyed_by_date(self, engine):
        journal_service.save_fragment(engine, "u1", DAY, "<p>a</p>", mood=2)
        data = journal_service.export_journal(engine, "u1")
        assert list(data) == ["2024-03-15"]
        assert data["2024-03-15"]["mood"] == 2
        assert data["2024-03-15"]["mood_label"] == "Duda"
        assert data["2024-03-15"]["text_content"] == "<p>a</p>"

    def test_clear_only_own_entries(self, engine):
        journal_service.save_fragment(engine, "u1", DAY, "<p>a</p>")
        journal_service.save_fragment(engine, "u1", date(2024, 3, 16), "<p>b</p>")
        journal_service.save_fragment(engine, "u2", DAY, "<p>c</p>")
        assert journal_service.clear_journal(engine, "u1") == 2
        assert journal_service.list_entries(engine, "u1") == []
        assert len(journal_service.list_entries(engine, "u2")) == 1

    def test_get_entry_missing(self, engine):
        assert journal_service.get_entry(engine, "u1", DAY) is None
