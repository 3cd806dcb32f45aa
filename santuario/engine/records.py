"""
santuario.engine.records — Content records at the selection boundary
=====================================================================

Rows from the content store (or JSON produced by the AI generator) are
loosely shaped.  Each content type is normalized here into a frozen
dataclass with named optional fields, so the selector never sees a missing
attribute.  Records lacking their required fields are rejected (``None``)
rather than propagated.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

__all__ = [
    "DailyQuestion",
    "Meditation",
    "PhilosopherBio",
    "Reading",
    "Task",
    "coerce_records",
]

R = TypeVar("R")


def _text(data: Mapping[str, Any], key: str, default: str = "") -> str:
    value = data.get(key)
    if value is None:
        return default
    return str(value).strip()


def _str_list(data: Mapping[str, Any], key: str) -> tuple[str, ...]:
    value = data.get(key)
    if isinstance(value, str):
        return (value,) if value.strip() else ()
    if isinstance(value, Iterable):
        return tuple(str(v) for v in value if v is not None and str(v).strip())
    return ()


def _int(data: Mapping[str, Any], key: str, default: int) -> int:
    try:
        return int(data.get(key, default))
    except (TypeError, ValueError):
        return default


def _id(data: Mapping[str, Any]) -> str | int | None:
    value = data.get("id")
    return value if isinstance(value, (str, int)) and value != "" else None


@dataclass(frozen=True, slots=True)
class Reading:
    title: str
    quote: str
    body: str = ""
    author: str = ""
    tags: tuple[str, ...] = field(default_factory=tuple)
    type: str | None = None
    philosophy: str | None = None
    id: str | int | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Reading | None:
        title, quote = _text(data, "title"), _text(data, "quote")
        if not title or not quote:
            return None
        return cls(
            title=title,
            quote=quote,
            body=_text(data, "body"),
            author=_text(data, "author"),
            tags=_str_list(data, "tags"),
            type=_text(data, "type") or None,
            philosophy=_text(data, "philosophy") or None,
            id=_id(data),
        )


@dataclass(frozen=True, slots=True)
class PhilosopherBio:
    id: str
    name: str
    dates: str = ""
    role: str = ""
    school: str = ""
    description: str = ""
    key_ideas: tuple[str, ...] = field(default_factory=tuple)
    icon: str = ""

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> PhilosopherBio | None:
        pid, name = _text(data, "id"), _text(data, "name")
        if not pid or not name:
            return None
        return cls(
            id=pid,
            name=name,
            dates=_text(data, "dates"),
            role=_text(data, "role"),
            school=_text(data, "school"),
            # "desc" is the key used by AI-generated bios
            description=_text(data, "description") or _text(data, "desc"),
            key_ideas=_str_list(data, "key_ideas"),
            icon=_text(data, "icon"),
        )


@dataclass(frozen=True, slots=True)
class Meditation:
    title: str
    description: str = ""
    category: str = ""
    duration_minutes: int = 5
    difficulty: str | None = None
    content: str = ""
    id: str | int | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Meditation | None:
        title = _text(data, "title")
        if not title:
            return None
        return cls(
            title=title,
            description=_text(data, "description"),
            category=_text(data, "category"),
            duration_minutes=max(1, _int(data, "duration_minutes", 5)),
            difficulty=_text(data, "difficulty") or None,
            content=_text(data, "content"),
            id=_id(data),
        )


@dataclass(frozen=True, slots=True)
class Task:
    title: str
    description: str = ""
    id: str | int | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Task | None:
        title = _text(data, "title")
        if not title:
            return None
        return cls(title=title, description=_text(data, "description"), id=_id(data))


@dataclass(frozen=True, slots=True)
class DailyQuestion:
    question: str
    id: str | int | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> DailyQuestion | None:
        question = _text(data, "question")
        if not question:
            return None
        return cls(question=question, id=_id(data))


def coerce_records(rows: Iterable[Mapping[str, Any]], record_type: type[R]) -> list[R]:
    """Convert *rows* with ``record_type.from_mapping``, dropping rejects.

    Input order is preserved — the seeded selector indexes into it.
    """
    records: list[R] = []
    rejected = 0
    for row in rows:
        record = record_type.from_mapping(row)  # type: ignore[attr-defined]
        if record is None:
            rejected += 1
            continue
        records.append(record)
    if rejected:
        logger.warning(
            "Rejected %d malformed %s record(s)", rejected, record_type.__name__
        )
    return records
