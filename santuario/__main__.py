"""
santuario.__main__ — Entry point for ``python -m santuario``
============================================================

Wiring:
1. Load .env (secrets).
2. Load config.yaml (soft settings).
3. Create the SQLAlchemy engine, ensure tables exist, seed starter content.
4. Serve the API with uvicorn on ``api_port``.

Run with::

    python -m santuario
"""

from __future__ import annotations

import logging

import uvicorn
from dotenv import load_dotenv

from santuario.config import load_config
from santuario.database.engine import create_db_engine, init_db

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("santuario")


def main() -> None:
    """Bootstrap the database and run the API server."""

    # 1. Environment variables (secrets).
    load_dotenv()

    # 2. Soft configuration.
    cfg = load_config()
    logger.info("Config loaded — %s (%s)", cfg.app_name, cfg.default_timezone)

    # 3. Database.
    engine = create_db_engine()
    init_db(engine)
    engine.dispose()

    # 4. API (blocks until Ctrl+C or SIGTERM).
    uvicorn.run("santuario.api.main:app", host="0.0.0.0", port=cfg.api_port)


if __name__ == "__main__":
    main()
