"""
alembic/env.py — Santuario migration environment
=================================================
Online runs reuse :func:`santuario.database.engine.create_db_engine`, so the
migrator connects exactly like the API does (same ``DATABASE_URL``, same
SQLite special-casing).  Offline runs (``alembic upgrade head --sql``) fall
back to ``sqlalchemy.url`` from ``alembic.ini`` when the variable is unset.
"""

from __future__ import annotations

import logging
import os
from logging.config import fileConfig

from dotenv import load_dotenv

from alembic import context
from santuario.database.engine import create_db_engine
from santuario.database.models import Base

load_dotenv()

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

logger = logging.getLogger("alembic.env")

target_metadata = Base.metadata


def _configure_kwargs(url: str) -> dict:
    # SQLite cannot ALTER most columns in place
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        "render_as_batch": url.startswith("sqlite"),
    }


def run_migrations_offline() -> None:
    """Emit SQL for the journal / rewards schema without a connection."""
    url = os.getenv("DATABASE_URL") or config.get_main_option("sqlalchemy.url")
    logger.info("Generating offline migration SQL")
    context.configure(
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_kwargs(url),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    if not os.getenv("DATABASE_URL"):
        os.environ["DATABASE_URL"] = config.get_main_option("sqlalchemy.url")
    engine = create_db_engine()
    try:
        with engine.connect() as connection:
            context.configure(
                connection=connection,
                **_configure_kwargs(str(engine.url)),
            )
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
