"""
santuario.engine.daily — Seeded Daily Selector
===============================================

Every user sees the same reading, philosopher, meditation, task and question
on a given calendar date, with no server-side scheduling: the choice is a pure
function of ``(date, collection, slot salt, user salt)``.

Pure calculation — no DB I/O, no clock, no RNG state.

    seed  = date_iso + slot_salt + user_salt
    index = |djb2(seed)| % len(items)
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TypeVar

from santuario.constants import (
    SLOT_MEDITATION,
    SLOT_PHILOSOPHER,
    SLOT_QUESTION,
    SLOT_READING,
    SLOT_TASK,
)
from santuario.engine.records import (
    DailyQuestion,
    Meditation,
    PhilosopherBio,
    Reading,
    Task,
)

__all__ = [
    "DailySelection",
    "find_matching_philosopher",
    "seeded_index",
    "select_daily",
    "select_seeded",
]

T = TypeVar("T")

_DJB2_START = 5381


def _to_int32(value: int) -> int:
    """Wrap *value* to a signed 32-bit integer."""
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def _utf16_units(text: str) -> list[int]:
    data = text.encode("utf-16-le")
    return [int.from_bytes(data[i:i + 2], "little") for i in range(0, len(data), 2)]


def seeded_index(seed: str, length: int) -> int:
    """Deterministic index in ``[0, length)`` derived from *seed*.

    DJB2 (``hash * 33 + c``) computed as ``(hash << 5) + hash + c`` where the
    shift operates on the 32-bit two's complement value of ``hash``, over the
    UTF-16 code units of *seed*.  This is the same arithmetic browser clients
    use, so a web client and this service agree on "today" for every seed.
    """
    if length <= 0:
        return 0
    h = _DJB2_START
    for unit in _utf16_units(seed):
        h = _to_int32(_to_int32(h) << 5) + h + unit
    return abs(h) % length


def select_seeded(
    date_iso: str,
    items: Sequence[T],
    slot_salt: str = "",
    user_salt: str = "",
) -> T | None:
    """Pick "today's" item from *items* for the calendar date *date_iso*.

    Returns ``None`` for an empty collection — callers show a placeholder.
    """
    if not items:
        return None
    return items[seeded_index(date_iso + slot_salt + user_salt, len(items))]


def find_matching_philosopher(
    reading: Reading | None, philosophers: Sequence[PhilosopherBio]
) -> PhilosopherBio | None:
    """First philosopher whose name and the reading's author contain one another.

    Case-insensitive substring match in either direction.  Ambiguous authors
    (shared surnames) resolve to the first match in collection order.
    """
    if reading is None or not reading.author:
        return None
    author = reading.author.lower()
    for bio in philosophers:
        name = bio.name.lower()
        if name and (name in author or author in name):
            return bio
    return None


@dataclass(frozen=True, slots=True)
class DailySelection:
    """Derived daily content; recomputing with identical inputs is identical."""

    reading: Reading | None
    philosopher: PhilosopherBio | None
    is_match: bool
    meditation: Meditation | None
    task: Task | None
    question: DailyQuestion | None


def select_daily(
    date_iso: str,
    readings: Sequence[Reading],
    philosophers: Sequence[PhilosopherBio],
    meditations: Sequence[Meditation],
    tasks: Sequence[Task],
    questions: Sequence[DailyQuestion],
    user_salt: str = "",
) -> DailySelection:
    """Compute every daily slot for *date_iso*.

    The philosopher follows the reading's author when one matches
    (``is_match=True``); otherwise it gets its own seeded slot.
    """
    reading = select_seeded(date_iso, readings, SLOT_READING, user_salt)

    philosopher = find_matching_philosopher(reading, philosophers)
    is_match = philosopher is not None
    if philosopher is None:
        philosopher = select_seeded(date_iso, philosophers, SLOT_PHILOSOPHER, user_salt)

    return DailySelection(
        reading=reading,
        philosopher=philosopher,
        is_match=is_match,
        meditation=select_seeded(date_iso, meditations, SLOT_MEDITATION, user_salt),
        task=select_seeded(date_iso, tasks, SLOT_TASK, user_salt),
        question=select_seeded(date_iso, questions, SLOT_QUESTION, user_salt),
    )
