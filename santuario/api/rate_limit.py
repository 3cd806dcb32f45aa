"""
santuario.api.rate_limit — Per-User Mentor Rate Limiting
=========================================================

Every mentor call costs an external AI request, so each user gets a fixed
number of them per sliding window (``mentor.rate_limit`` calls per
``mentor.rate_window_seconds`` in ``config.yaml``).

Keyed by user ID (JWT ``sub`` claim).  Returns HTTP 429 with a
``Retry-After`` header when the limit is exceeded.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime, timedelta
from typing import Any

from fastapi import Depends, HTTPException, status
from sqlalchemy import Engine, delete, func, select
from sqlalchemy.orm import Session

from santuario.api.deps import get_current_user
from santuario.database.models import MentorRateLimitEvent

logger = logging.getLogger(__name__)

DEFAULT_RATE_LIMIT = 10
DEFAULT_WINDOW_SECONDS = 3600


class MentorRateLimiter:
    """Sliding-window rate limiter keyed by user ID.

    DB-backed only — uses the ``mentor_rate_limit_events`` table for durable
    state that survives restarts.
    """

    def __init__(
        self,
        max_requests: int = DEFAULT_RATE_LIMIT,
        window_seconds: int = DEFAULT_WINDOW_SECONDS,
        *,
        engine: Engine,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.engine = engine

    def _normalize_dt(self, value: datetime) -> datetime:
        # SQLite hands back naive datetimes
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    def _prune(self, session: Session, user_id: str, cutoff: datetime) -> None:
        session.execute(
            delete(MentorRateLimitEvent).where(
                MentorRateLimitEvent.user_id == user_id,
                MentorRateLimitEvent.timestamp < cutoff,
            )
        )

    def check(self, user_id: str) -> tuple[bool, dict[str, Any]]:
        """Check if the user is within rate limits.

        Returns (allowed, info) where info contains:
          - remaining: calls remaining in the window
          - reset: seconds until the oldest call expires
          - limit: the max calls per window
        """
        now = datetime.now(UTC)
        cutoff = now - timedelta(seconds=self.window_seconds)

        with Session(self.engine) as session:
            self._prune(session, user_id, cutoff)
            timestamps = session.scalars(
                select(MentorRateLimitEvent.timestamp)
                .where(MentorRateLimitEvent.user_id == user_id)
                .order_by(MentorRateLimitEvent.timestamp.asc())
            ).all()
            session.commit()

        count = len(timestamps)
        if count >= self.max_requests:
            oldest = self._normalize_dt(timestamps[0])
            reset = (oldest + timedelta(seconds=self.window_seconds) - now).total_seconds()
            return False, {
                "remaining": 0,
                "reset": max(1, int(reset) + 1),
                "limit": self.max_requests,
            }

        return True, {
            "remaining": self.max_requests - count,
            "reset": self.window_seconds,
            "limit": self.max_requests,
        }

    def record(self, user_id: str) -> dict[str, Any]:
        """Record a call and return updated rate-limit info."""
        now = datetime.now(UTC)
        cutoff = now - timedelta(seconds=self.window_seconds)

        with Session(self.engine) as session:
            self._prune(session, user_id, cutoff)
            session.add(MentorRateLimitEvent(user_id=user_id, timestamp=now))
            session.flush()

            count = session.scalar(
                select(func.count()).select_from(
                    select(MentorRateLimitEvent.id)
                    .where(MentorRateLimitEvent.user_id == user_id)
                    .subquery()
                )
            ) or 0
            session.commit()

        return {
            "remaining": max(0, self.max_requests - count),
            "reset": self.window_seconds,
            "limit": self.max_requests,
        }

    def reset(self, user_id: str | None = None) -> None:
        """Clear rate limit state. If user_id is None, clear all."""
        with Session(self.engine) as session:
            stmt = delete(MentorRateLimitEvent)
            if user_id is not None:
                stmt = stmt.where(MentorRateLimitEvent.user_id == user_id)
            session.execute(stmt)
            session.commit()


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------
_limiter: MentorRateLimiter | None = None


def get_rate_limiter() -> MentorRateLimiter:
    """Return the global rate limiter instance."""
    if _limiter is None:
        raise RuntimeError("Rate limiter not configured — call configure_rate_limiter() first")
    return _limiter


def configure_rate_limiter(
    *,
    engine: Engine,
    max_requests: int = DEFAULT_RATE_LIMIT,
    window_seconds: int = DEFAULT_WINDOW_SECONDS,
) -> MentorRateLimiter:
    """Configure the global limiter to use durable DB-backed storage."""
    global _limiter
    _limiter = MentorRateLimiter(
        max_requests=max_requests,
        window_seconds=window_seconds,
        engine=engine,
    )
    return _limiter


# ---------------------------------------------------------------------------
# FastAPI dependency — chains after get_current_user
# ---------------------------------------------------------------------------
async def rate_limited_user(user_id: str = Depends(get_current_user)) -> str:
    """Validate the JWT *and* count the request against the mentor limit.

    Use ``Depends(rate_limited_user)`` on every route that calls the mentor.
    Raises HTTP 429 when the limit is exceeded.
    """
    limiter = get_rate_limiter()
    allowed, info = await asyncio.to_thread(limiter.check, user_id)

    if not allowed:
        logger.warning(
            "Mentor rate limit exceeded for user %s: %d calls per %ds",
            user_id, limiter.max_requests, limiter.window_seconds,
        )
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={
                "error": "rate_limit_exceeded",
                "message": (
                    f"Rate limit exceeded: {limiter.max_requests}"
                    f" mentor calls per {limiter.window_seconds} seconds."
                ),
                "retry_after": info["reset"],
            },
            headers={"Retry-After": str(info["reset"])},
        )

    await asyncio.to_thread(limiter.record, user_id)
    return user_id
