"""
santuario.api.routes.library — Saved readings
==============================================

    GET  /library                — the user's saved readings
    POST /library/{reading_id}   — save / un-save a reading
"""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import Engine

from santuario.api.deps import get_current_user, get_engine
from santuario.database.engine import run_db
from santuario.services import library_service

router = APIRouter(tags=["library"])


@router.get("/library")
async def list_library(
    user_id: str = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    readings = await run_db(library_service.list_saved_readings, engine, user_id)
    return [asdict(r) for r in readings]


@router.post("/library/{reading_id}")
async def toggle_reading(
    reading_id: int,
    user_id: str = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    try:
        saved, award = await run_db(
            library_service.toggle_saved_reading, engine, user_id, reading_id
        )
    except library_service.ReadingNotFoundError:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Reading not found")
    return {
        "reading_id": reading_id,
        "saved": saved,
        "awarded_xp": award.xp if award else 0,
        "leveled_up": bool(award and award.leveled_up),
    }
