"""
santuario.config — YAML Configuration Loader
=============================================

Reads ``config.yaml`` for deployment settings (identity, default timezone,
AI mentor tuning).  Secrets (``DATABASE_URL``, ``JWT_SECRET``,
``MENTOR_API_KEY``) come from the environment / ``.env`` instead.

Usage::

    from santuario.config import load_config

    cfg = load_config()          # reads ./config.yaml by default
    print(cfg.app_name)          # "Santuario"
    print(cfg.default_timezone)  # "Europe/Madrid"
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class SantuarioConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    # Identity
    app_name: str
    app_motto: str

    # API
    api_port: int

    # Calendar — "today" for users without a stored timezone
    default_timezone: str

    # AI mentor
    mentor_model: str = "gemini-3-flash-preview"
    mentor_timeout_seconds: float = 20.0
    mentor_rate_limit: int = 10  # calls per window per user
    mentor_rate_window_seconds: int = 3600


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def default_config_path() -> Path:
    """Return the config path from ``SANTUARIO_CONFIG`` or ``./config.yaml``."""
    return Path(os.getenv("SANTUARIO_CONFIG", "config.yaml"))


def load_config(path: str | Path | None = None) -> SantuarioConfig:
    """Read *path* and return a :class:`SantuarioConfig` instance.

    Parameters
    ----------
    path:
        Filesystem path to the YAML configuration file.
        Defaults to :func:`default_config_path`.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    KeyError
        If a required key is missing from the YAML file.
    ValueError
        If ``default_timezone`` is not a known IANA zone.
    """
    config_path = Path(path) if path is not None else default_config_path()
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    tz_name = raw["default_timezone"]
    try:
        ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown default_timezone: {tz_name!r}") from exc

    mentor: dict = raw.get("mentor") or {}

    return SantuarioConfig(
        app_name=raw["app_name"],
        app_motto=raw.get("app_motto", ""),
        api_port=int(raw["api_port"]),
        default_timezone=tz_name,
        mentor_model=mentor.get("model", "gemini-3-flash-preview"),
        mentor_timeout_seconds=float(mentor.get("timeout_seconds", 20.0)),
        mentor_rate_limit=int(mentor.get("rate_limit", 10)),
        mentor_rate_window_seconds=int(mentor.get("rate_window_seconds", 3600)),
    )
