"""
santuario.api.routes.profile — Progress & daily reset
======================================================

    GET  /profile              — XP, level, progress and recent XP activity
    POST /profile/reset-daily  — re-draw the user's daily content
"""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends
from sqlalchemy import Engine

from santuario.api.deps import get_current_user, get_engine
from santuario.database.engine import run_db
from santuario.database.models import ActivityLog
from santuario.services import content_service, reward_service

router = APIRouter(tags=["profile"])


def _activity_dict(row: ActivityLog) -> dict:
    return {
        "event_type": row.event_type,
        "xp_delta": row.xp_delta,
        "source_event_id": row.source_event_id,
        "timestamp": row.timestamp.isoformat() if row.timestamp else None,
    }


@router.get("/profile")
async def get_profile(
    user_id: str = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    level = await run_db(reward_service.get_level_data, engine, user_id)
    activity = await run_db(reward_service.list_activity, engine, user_id, 20)
    return {
        "id": user_id,
        **asdict(level),
        "activity": [_activity_dict(a) for a in activity],
    }


@router.post("/profile/reset-daily")
async def reset_daily(
    user_id: str = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    salt = await run_db(content_service.reset_daily_salt, engine, user_id)
    return {"status": "ok", "daily_salt": salt}
