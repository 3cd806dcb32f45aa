"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import os

# ---------------------------------------------------------------------------
# Ensure a valid JWT_SECRET is always set for test runs.
# This must happen before any import of santuario.api.deps which validates
# the secret at module-load time.
# ---------------------------------------------------------------------------
_TEST_JWT_SECRET = "test-secret-for-pytest-only-" + "x" * 40  # > 32 chars
os.environ.setdefault("JWT_SECRET", _TEST_JWT_SECRET)
# Mentor calls never leave the test process
os.environ.pop("MENTOR_API_KEY", None)

import pytest  # noqa: E402
from sqlalchemy import Engine, create_engine  # noqa: E402

# ---------------------------------------------------------------------------
# Make JSONB columns work in SQLite for testing.
# SQLite doesn't support JSONB natively, but SQLAlchemy's JSON type works.
# We register a custom type compiler so SQLite renders JSONB as TEXT.
# ---------------------------------------------------------------------------
from sqlalchemy.dialects.postgresql import JSONB as PG_JSONB  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from santuario.config import SantuarioConfig  # noqa: E402
from santuario.database.models import Base  # noqa: E402

_jsonb_sqlite_registered = False


def _register_jsonb_sqlite_compat():
    """Register SQLite compilation for PG JSONB type (idempotent)."""
    global _jsonb_sqlite_registered
    if _jsonb_sqlite_registered:
        return
    from sqlalchemy.ext.compiler import compiles

    @compiles(PG_JSONB, "sqlite")
    def _compile_jsonb_as_text(type_, compiler, **kw):
        return "TEXT"

    _jsonb_sqlite_registered = True


_register_jsonb_sqlite_compat()


@pytest.fixture
def db_engine() -> Engine:
    """Create an in-memory SQLite engine with all Santuario tables.

    JSONB columns are transparently mapped to TEXT for SQLite compatibility.
    Uses StaticPool so all threads share the same in-memory database
    (required by ``asyncio.to_thread`` used by ``run_db`` and the limiter).
    """
    from sqlalchemy.pool import StaticPool

    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def seeded_engine(db_engine: Engine) -> Engine:
    """``db_engine`` with the starter content catalogue."""
    from santuario.database.seed import seed_default_content

    seed_default_content(db_engine)
    return db_engine


@pytest.fixture
def db_session(db_engine: Engine):
    """Provide a transactional session that rolls back after each test."""
    with Session(db_engine) as session:
        yield session
        session.rollback()


@pytest.fixture
def test_config() -> SantuarioConfig:
    return SantuarioConfig(
        app_name="Santuario Test",
        app_motto="",
        api_port=8000,
        default_timezone="Europe/Madrid",
        mentor_rate_limit=3,
        mentor_rate_window_seconds=3600,
    )


def make_user_token(sub: str = "user-1", **claims) -> str:
    """Create a user JWT.  Usable as a factory from any test module."""
    import jwt

    from santuario.api.deps import JWT_ALGORITHM, JWT_SECRET

    return jwt.encode({"sub": sub, **claims}, JWT_SECRET, algorithm=JWT_ALGORITHM)


@pytest.fixture
def user_token() -> str:
    return make_user_token()


@pytest.fixture
def client(seeded_engine: Engine, test_config: SantuarioConfig):
    """FastAPI TestClient wired to the in-memory DB and a test config."""
    from fastapi.testclient import TestClient

    from santuario.api.deps import get_config, get_engine
    from santuario.api.main import app
    from santuario.api.rate_limit import configure_rate_limiter

    app.dependency_overrides[get_engine] = lambda: seeded_engine
    app.dependency_overrides[get_config] = lambda: test_config
    configure_rate_limiter(
        engine=seeded_engine,
        max_requests=test_config.mentor_rate_limit,
        window_seconds=test_config.mentor_rate_window_seconds,
    )
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
