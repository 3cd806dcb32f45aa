"""
santuario.api.main — FastAPI application entry point
=====================================================

Run with::

    uvicorn santuario.api.main:app --reload --port 8000

or ``python -m santuario`` to use the port from ``config.yaml``.
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

load_dotenv()

from santuario import __version__  # noqa: E402
from santuario.api.deps import get_config, get_engine  # noqa: E402
from santuario.api.rate_limit import configure_rate_limiter  # noqa: E402
from santuario.api.routes.journal import router as journal_router  # noqa: E402
from santuario.api.routes.library import router as library_router  # noqa: E402
from santuario.api.routes.profile import router as profile_router  # noqa: E402
from santuario.api.routes.today import router as today_router  # noqa: E402

logger = logging.getLogger(__name__)


def _cors_origins() -> list[str]:
    """Resolve allowed CORS origins from env with safe defaults.

    Priority:
      1) CORS_ALLOW_ORIGINS (comma-separated)
      2) FRONTEND_URL (single origin)
    """
    raw = os.getenv("CORS_ALLOW_ORIGINS", "").strip()
    if raw:
        return [origin.strip().rstrip("/") for origin in raw.split(",") if origin.strip()]

    frontend_url = os.getenv("FRONTEND_URL", "").strip()
    if frontend_url:
        return [frontend_url.rstrip("/")]

    return []


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle — warm the DB engine and the mentor limiter."""
    engine = get_engine()
    cfg = get_config()
    configure_rate_limiter(
        engine=engine,
        max_requests=cfg.mentor_rate_limit,
        window_seconds=cfg.mentor_rate_window_seconds,
    )
    logger.info("%s API started — engine ready (%s)", cfg.app_name, engine.url.database)
    yield
    logger.info("%s API shutting down", cfg.app_name)


app = FastAPI(
    title="Santuario API",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    """Services reject invalid input with ValueError — surface it as 400."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)}
    )


# Mount routers
app.include_router(today_router, prefix="/api")
app.include_router(journal_router, prefix="/api")
app.include_router(profile_router, prefix="/api")
app.include_router(library_router, prefix="/api")


@app.get("/api/health")
def health():
    return {"status": "ok"}
