"""
santuario.api.routes.today — Daily content
===========================================

    GET /today?date=YYYY-MM-DD   — the user's reading, philosopher, meditation,
                                   task and evening question for a date
                                   (default: today in the user's timezone)
"""

from __future__ import annotations

from dataclasses import asdict
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import Engine

from santuario.api.deps import get_config, get_current_user, get_engine
from santuario.config import SantuarioConfig
from santuario.constants import (
    FALLBACK_QUESTION,
    FALLBACK_TASK_DESCRIPTION,
    FALLBACK_TASK_TITLE,
)
from santuario.database.engine import run_db
from santuario.engine.daily import DailySelection
from santuario.engine.dates import iso_date, parse_iso_date
from santuario.services import content_service

router = APIRouter(tags=["today"])


# ---------------------------------------------------------------------------
# Helpers shared with the journal routes
# ---------------------------------------------------------------------------
def parse_day(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` path/query value or fail with 400."""
    try:
        return parse_iso_date(value)
    except ValueError as exc:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, str(exc))


async def resolve_day(
    value: str | None, engine: Engine, user_id: str, cfg: SantuarioConfig
) -> date:
    if value:
        return parse_day(value)
    return await run_db(content_service.user_today, engine, user_id, cfg.default_timezone)


def question_text(selection: DailySelection) -> str:
    return selection.question.question if selection.question else FALLBACK_QUESTION


def task_title(selection: DailySelection) -> str:
    return selection.task.title if selection.task else FALLBACK_TASK_TITLE


def selection_dict(day: date, selection: DailySelection) -> dict:
    task = (
        asdict(selection.task) if selection.task
        else {"title": FALLBACK_TASK_TITLE, "description": FALLBACK_TASK_DESCRIPTION, "id": None}
    )
    return {
        "date": iso_date(day),
        "reading": asdict(selection.reading) if selection.reading else None,
        "philosopher": asdict(selection.philosopher) if selection.philosopher else None,
        "is_match": selection.is_match,
        "meditation": asdict(selection.meditation) if selection.meditation else None,
        "task": task,
        "question": question_text(selection),
    }


# ---------------------------------------------------------------------------
# GET /today
# ---------------------------------------------------------------------------
@router.get("/today")
async def get_today(
    date_param: str | None = Query(default=None, alias="date"),
    user_id: str = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
    cfg: SantuarioConfig = Depends(get_config),
):
    day = await resolve_day(date_param, engine, user_id, cfg)
    selection = await run_db(
        content_service.daily_selection, engine, user_id, iso_date(day)
    )
    return selection_dict(day, selection)
