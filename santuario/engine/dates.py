"""
santuario.engine.dates — Calendar-date helpers
===============================================

Daily content is keyed by a logical calendar day, never by an instant, so the
same day yields the same seed in every timezone.  These helpers convert
between :class:`datetime.date` and the ``YYYY-MM-DD`` strings used as seeds
and URL parameters.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

__all__ = ["iso_date", "offset_date", "parse_iso_date", "resolve_zone", "today_in"]

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def iso_date(day: date) -> str:
    """Format *day* as ``YYYY-MM-DD`` (datetimes are truncated to their date)."""
    if isinstance(day, datetime):
        day = day.date()
    return day.isoformat()


def parse_iso_date(value: str) -> date:
    """Parse a strict ``YYYY-MM-DD`` string.

    Raises
    ------
    ValueError
        If *value* has a time component, a different layout, or is not a
        real calendar date.
    """
    if not isinstance(value, str) or not _ISO_DATE_RE.match(value):
        raise ValueError(f"Expected a YYYY-MM-DD date, got {value!r}")
    return date.fromisoformat(value)


def resolve_zone(name: str | None, fallback: str) -> ZoneInfo:
    """Return the zone for *name*, or *fallback* when unset or unknown."""
    if name:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            pass
    return ZoneInfo(fallback)


def today_in(zone: ZoneInfo, *, now: datetime | None = None) -> date:
    """The calendar date at *now* (default: current time) in *zone*."""
    moment = now if now is not None else datetime.now(zone)
    return moment.astimezone(zone).date()


def offset_date(date_iso: str, days: int) -> str:
    """Shift an ISO date by *days* and return it in ISO form."""
    return iso_date(parse_iso_date(date_iso) + timedelta(days=days))
