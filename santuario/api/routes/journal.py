"""
santuario.api.routes.journal — Journal endpoints
=================================================

    GET    /journal                         — all entries, newest first
    GET    /journal/export                  — JSON attachment keyed by date
    DELETE /journal                         — delete every entry
    GET    /journal/{date}                  — entry + display sections
    POST   /journal/{date}/fragments        — merge a free/morning/evening fragment
    POST   /journal/{date}/rituals/{kind}   — save a ritual from step answers
    PUT    /journal/{date}/mood             — set the day's mood
    PUT    /journal/{date}/challenge        — mark the daily challenge
    POST   /journal/{date}/review           — mentor review appended to the entry
    GET    /journal/{date}/prompt           — mentor writing prompt
"""

from __future__ import annotations

import json
from dataclasses import asdict
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response
from pydantic import BaseModel, Field
from sqlalchemy import Engine

from santuario.api.deps import get_config, get_current_user, get_engine
from santuario.api.rate_limit import rate_limited_user
from santuario.api.routes.today import parse_day, question_text, task_title
from santuario.config import SantuarioConfig
from santuario.constants import MAX_MOOD
from santuario.database.engine import run_db
from santuario.database.models import ChallengeStatus, JournalEntry
from santuario.engine.dates import iso_date
from santuario.engine.journal import (
    SectionKind,
    plain_text,
    render_mentor_note,
    split_for_display,
)
from santuario.services import content_service, journal_service, mentor_service

router = APIRouter(tags=["journal"])


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class FragmentIn(BaseModel):
    fragment: str
    kind: SectionKind = SectionKind.FREE
    mood: int | None = Field(default=None, ge=0, le=MAX_MOOD)


class RitualIn(BaseModel):
    answers: dict[str, str] = Field(default_factory=dict)
    mood: int | None = Field(default=None, ge=0, le=MAX_MOOD)


class MoodIn(BaseModel):
    mood: int = Field(ge=0, le=MAX_MOOD)


class ChallengeIn(BaseModel):
    status: ChallengeStatus
    title: str | None = None
    response: str | None = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _entry_payload(entry: JournalEntry | None) -> dict:
    if entry is None:
        return {"entry": None, "sections": {"morning": None, "free": "", "evening": None}}
    return {
        "entry": journal_service.entry_to_dict(entry),
        "sections": asdict(split_for_display(entry.text_content)),
    }


def _saved(entry: JournalEntry, awarded_xp: int) -> dict:
    return {**_entry_payload(entry), "awarded_xp": awarded_xp}


# ---------------------------------------------------------------------------
# Collection
# ---------------------------------------------------------------------------
@router.get("/journal")
async def list_journal(
    user_id: str = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    entries = await run_db(journal_service.list_entries, engine, user_id)
    return [journal_service.entry_to_dict(e) for e in entries]


@router.get("/journal/export")
async def export_journal(
    user_id: str = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
    cfg: SantuarioConfig = Depends(get_config),
):
    data = await run_db(journal_service.export_journal, engine, user_id)
    today = await run_db(content_service.user_today, engine, user_id, cfg.default_timezone)
    filename = f"santuario_journal_{iso_date(today)}.json"
    return Response(
        content=json.dumps(data, ensure_ascii=False, indent=2),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.delete("/journal")
async def clear_journal(
    user_id: str = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    deleted = await run_db(journal_service.clear_journal, engine, user_id)
    return {"deleted": deleted}


# ---------------------------------------------------------------------------
# Single day
# ---------------------------------------------------------------------------
@router.get("/journal/{date}")
async def get_day(
    date: str,
    user_id: str = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    day = parse_day(date)
    entry = await run_db(journal_service.get_entry, engine, user_id, day)
    return {"date": iso_date(day), **_entry_payload(entry)}


@router.post("/journal/{date}/fragments")
async def save_fragment(
    date: str,
    body: FragmentIn,
    user_id: str = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    day = parse_day(date)
    entry, awarded = await run_db(
        journal_service.save_fragment, engine, user_id, day, body.fragment, body.kind,
        mood=body.mood,
    )
    return _saved(entry, awarded)


@router.post("/journal/{date}/rituals/{kind}")
async def save_ritual(
    date: str,
    kind: Literal["morning", "evening"],
    body: RitualIn,
    user_id: str = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    day = parse_day(date)
    question = None
    if kind == SectionKind.EVENING:
        selection = await run_db(
            content_service.daily_selection, engine, user_id, iso_date(day)
        )
        question = question_text(selection)
    entry, awarded = await run_db(
        journal_service.save_ritual, engine, user_id, day, kind, body.answers,
        mood=body.mood, daily_question_text=question,
    )
    return _saved(entry, awarded)


@router.put("/journal/{date}/mood")
async def set_mood(
    date: str,
    body: MoodIn,
    user_id: str = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    day = parse_day(date)
    entry = await run_db(journal_service.set_mood, engine, user_id, day, body.mood)
    return _entry_payload(entry)


@router.put("/journal/{date}/challenge")
async def set_challenge(
    date: str,
    body: ChallengeIn,
    user_id: str = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    day = parse_day(date)
    title = body.title
    if title is None:
        selection = await run_db(
            content_service.daily_selection, engine, user_id, iso_date(day)
        )
        title = task_title(selection)
    entry, awarded = await run_db(
        journal_service.set_challenge, engine, user_id, day, body.status, title,
        body.response,
    )
    return _saved(entry, awarded)


# ---------------------------------------------------------------------------
# Mentor
# ---------------------------------------------------------------------------
@router.post("/journal/{date}/review")
async def review_day(
    date: str,
    user_id: str = Depends(rate_limited_user),
    engine: Engine = Depends(get_engine),
    cfg: SantuarioConfig = Depends(get_config),
):
    """Ask the mentor to review the day and append its note to the journal.

    Answers ``feedback: null`` when the day holds too little to review.
    """
    day = parse_day(date)
    entry = await run_db(journal_service.get_entry, engine, user_id, day)
    if entry is None:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Nothing written on this date")

    feedback = await mentor_service.generate_feedback(
        plain_text(entry.text_content),
        entry.question_response or "",
        entry.mood or 0,
        entry.effective_challenge_status,
        model=cfg.mentor_model,
        timeout=cfg.mentor_timeout_seconds,
    )
    if feedback is None:
        return {"feedback": None, "awarded_xp": 0, **_entry_payload(entry)}

    note = render_mentor_note(feedback.observation, feedback.advice)
    entry, awarded = await run_db(
        journal_service.append_mentor_note, engine, user_id, day, note
    )
    return {"feedback": feedback.model_dump(), **_saved(entry, awarded)}


@router.get("/journal/{date}/prompt")
async def writing_prompt(
    date: str,
    user_id: str = Depends(rate_limited_user),
    engine: Engine = Depends(get_engine),
    cfg: SantuarioConfig = Depends(get_config),
):
    day = parse_day(date)
    entry = await run_db(journal_service.get_entry, engine, user_id, day)
    selection = await run_db(
        content_service.daily_selection, engine, user_id, iso_date(day)
    )
    reading_title = selection.reading.title if selection.reading else ""
    prompt = await mentor_service.generate_journal_prompt(
        entry.mood if entry else 0,
        reading_title,
        model=cfg.mentor_model,
        timeout=cfg.mentor_timeout_seconds,
    )
    return {"date": iso_date(day), "prompt": prompt}
