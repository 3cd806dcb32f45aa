"""
santuario.engine.journal — Journal Document Parse / Merge / Display
====================================================================

A day's journal is one HTML document with three logical sections:

    ┌──────────────────────────────────────────────┐
    │ <div class="ritual-block ritual-block-morning"> … </div>   (0 or 1)
    │ free writing                                               (0..n pieces)
    │ <div class="ritual-block ritual-block-evening"> … </div>   (0 or 1)
    └──────────────────────────────────────────────┘

``ritual-block-morning`` / ``ritual-block-evening`` are the only markers;
persisted documents depend on them, so they must never change.

Pure functions — no I/O.  Nothing here raises on malformed input: a block
whose ``<div>`` never closes is simply not a block, and its text is treated
as free writing.
"""

from __future__ import annotations

import enum
import html
import logging
import re
from dataclasses import dataclass, replace

from santuario.constants import RITUALS

logger = logging.getLogger(__name__)

__all__ = [
    "DisplaySections",
    "EVENING_MARKER",
    "JournalDocument",
    "MORNING_MARKER",
    "SectionKind",
    "classify_fragment",
    "merge_journal_content",
    "parse_document",
    "plain_text",
    "render_mentor_note",
    "render_ritual_block",
    "sanitize_for_display",
    "split_for_display",
]

MORNING_MARKER = "ritual-block-morning"
EVENING_MARKER = "ritual-block-evening"

# Joins two free-writing saves; sections themselves are joined by a newline
FREE_SEPARATOR = "<br><br>"
SECTION_SEPARATOR = "\n"


class SectionKind(enum.StrEnum):
    MORNING = "morning"
    EVENING = "evening"
    FREE = "free"


_MARKERS: dict[SectionKind, str] = {
    SectionKind.MORNING: MORNING_MARKER,
    SectionKind.EVENING: EVENING_MARKER,
}

_DIV_TAG_RE = re.compile(r"<(/?)div\b[^>]*>", re.IGNORECASE)
_CLASS_ATTR_RE = re.compile(
    r"""\bclass\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'>]+))""", re.IGNORECASE
)
_STYLE_ATTR_RE = re.compile(
    r"""\s+style\s*=\s*(?:"[^"]*"|'[^']*')""", re.IGNORECASE
)
_HEADING_RE = re.compile(
    r"<h([1-4])\b[^>]*>(.*?)</h\1\s*>", re.IGNORECASE | re.DOTALL
)
_TAG_RE = re.compile(r"<[^>]*>?")


# ---------------------------------------------------------------------------
# Parse
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class JournalDocument:
    """Parsed form of a journal document."""

    morning: str | None = None
    evening: str | None = None
    free: str = ""

    def render(self) -> str:
        """Reassemble in fixed order: morning → free → evening."""
        parts = [p for p in (self.morning, self.free, self.evening) if p]
        return SECTION_SEPARATOR.join(parts)


def _class_tokens(tag: str) -> set[str]:
    match = _CLASS_ATTR_RE.search(tag)
    if match is None:
        return set()
    value = next(g for g in match.groups() if g is not None)
    return set(value.split())


def _find_block(
    text: str, marker: str, exclude: tuple[int, int] | None = None
) -> tuple[int, int] | None:
    """Span of the first ``<div>`` carrying *marker*, through its balancing ``</div>``.

    Candidates opening inside *exclude* are skipped.  Returns ``None`` when
    there is no such div or the first one is never closed.
    """
    for opening in _DIV_TAG_RE.finditer(text):
        if opening.group(1):
            continue
        if exclude is not None and exclude[0] <= opening.start() < exclude[1]:
            continue
        if marker not in _class_tokens(opening.group(0)):
            continue

        depth = 1
        for tag in _DIV_TAG_RE.finditer(text, opening.end()):
            depth += -1 if tag.group(1) else 1
            if depth == 0:
                return opening.start(), tag.end()
        return None
    return None


def parse_document(text: str | None) -> JournalDocument:
    """Split *text* into morning block, evening block, and free writing.

    Only the first block of each kind counts; later duplicates stay in the
    free writing untouched.  A block nested inside the other kind's block
    belongs to that block, never to its own section.
    """
    text = text or ""
    morning_span = _find_block(text, MORNING_MARKER)
    evening_span = _find_block(text, EVENING_MARKER, exclude=morning_span)
    if (
        morning_span is not None
        and evening_span is not None
        and evening_span[0] <= morning_span[0] < evening_span[1]
    ):
        # First morning candidate sits inside the evening block
        morning_span = _find_block(text, MORNING_MARKER, exclude=evening_span)

    spans = sorted(s for s in (morning_span, evening_span) if s is not None)
    pieces: list[str] = []
    cursor = 0
    for start, end in spans:
        pieces.append(text[cursor:start])
        cursor = end
    pieces.append(text[cursor:])

    free = SECTION_SEPARATOR.join(p.strip() for p in pieces if p.strip())
    return JournalDocument(
        morning=text[morning_span[0]:morning_span[1]] if morning_span else None,
        evening=text[evening_span[0]:evening_span[1]] if evening_span else None,
        free=free,
    )


def classify_fragment(fragment: str | None) -> SectionKind:
    """Morning / evening when *fragment* holds that block, otherwise free."""
    doc = parse_document(fragment)
    if doc.morning is not None:
        return SectionKind.MORNING
    if doc.evening is not None:
        return SectionKind.EVENING
    return SectionKind.FREE


# ---------------------------------------------------------------------------
# Merge
# ---------------------------------------------------------------------------
def merge_journal_content(
    existing_document: str | None,
    new_fragment: str | None,
    section_kind: SectionKind | str = SectionKind.FREE,
) -> str:
    """Fold *new_fragment* into *existing_document*.

    Ritual blocks replace the previous block of the same kind wholesale;
    free writing is appended to the existing free writing.  The fragment's
    markup decides its kind — *section_kind* is only a hint.
    """
    doc = parse_document(existing_document)
    frag = parse_document(new_fragment)

    detected = classify_fragment(new_fragment)
    if SectionKind(section_kind) != detected:
        logger.debug(
            "Fragment saved as %s but classified as %s", section_kind, detected.value
        )

    if frag.morning is not None:
        doc = replace(doc, morning=frag.morning)
    if frag.evening is not None:
        doc = replace(doc, evening=frag.evening)
    if frag.free:
        free = f"{doc.free}{FREE_SEPARATOR}{frag.free}" if doc.free else frag.free
        doc = replace(doc, free=free)

    return doc.render()


# ---------------------------------------------------------------------------
# Display
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class DisplaySections:
    morning: str | None
    evening: str | None
    free: str


def sanitize_for_display(fragment: str) -> str:
    """Drop inline ``style`` attributes and collapse ``<h1>``–``<h4>`` headings."""
    cleaned = _STYLE_ATTR_RE.sub("", fragment)
    return _HEADING_RE.sub(r"<p><strong>\2</strong></p>", cleaned)


def split_for_display(document: str | None) -> DisplaySections:
    """Sections of *document*, sanitized for rendering.

    Uses :func:`parse_document`, so what is displayed is always what the
    merge would edit.
    """
    doc = parse_document(document)
    return DisplaySections(
        morning=sanitize_for_display(doc.morning) if doc.morning is not None else None,
        evening=sanitize_for_display(doc.evening) if doc.evening is not None else None,
        free=sanitize_for_display(doc.free),
    )


def plain_text(document: str | None) -> str:
    """Text content of *document* with tags removed and entities decoded."""
    return html.unescape(_TAG_RE.sub("", document or ""))


# ---------------------------------------------------------------------------
# Renderers
# ---------------------------------------------------------------------------
def render_ritual_block(
    kind: SectionKind | str,
    answers: dict[str, str],
    daily_question_text: str | None = None,
) -> str:
    """Build the HTML block for a completed morning/evening ritual.

    Steps without an answer are omitted.  Answers are HTML-escaped.

    Raises
    ------
    ValueError
        If *kind* is not ``morning`` or ``evening``.
    """
    kind = SectionKind(kind)
    if kind is SectionKind.FREE:
        raise ValueError("Free writing has no ritual block")
    ritual = RITUALS[kind.value]

    out = [
        f'<div class="ritual-block {_MARKERS[kind]}" style="margin-top: 2rem; '
        'margin-bottom: 2rem; padding: 1.5rem; background-color: rgba(125,125,125,0.05); '
        'border-radius: 16px;">',
        f'<h4 style="color: {ritual.header_color}; font-size: 0.85rem; '
        'text-transform: uppercase; letter-spacing: 0.1em; font-weight: bold;">'
        f"{ritual.icon} {ritual.short}</h4>",
    ]
    for step in ritual.steps:
        answer = (answers.get(step.id) or "").strip()
        if not answer:
            continue
        prompt = daily_question_text if step.id == "daily_question" else step.prompt
        out.append('<div style="margin-bottom: 1.5rem;">')
        out.append(
            '<p style="font-size: 0.7rem; opacity: 0.6; text-transform: uppercase;">'
            f"{html.escape(step.label)}</p>"
        )
        if prompt:
            out.append(
                '<p style="font-style: italic; font-size: 0.9rem; opacity: 0.85;">'
                f"{html.escape(prompt)}</p>"
            )
        out.append(f'<p style="font-size: 1rem; line-height: 1.6;">{html.escape(answer)}</p>')
        out.append("</div>")
    out.append("</div>")
    return "".join(out)


def render_mentor_note(observation: str, advice: str) -> str:
    """HTML for the mentor's nightly verdict, appended as free writing."""
    return (
        '<div class="mentor-note" style="border-left: 3px solid #D4AF37; '
        'padding: 15px; margin-top: 20px; background-color: rgba(212, 175, 55, 0.05);">'
        '<p style="font-size: 0.8em; text-transform: uppercase; letter-spacing: 2px;">'
        "<strong>Veredicto Nocturno</strong></p>"
        f"<p>&quot;{html.escape(observation)}&quot;</p>"
        f"<p><em>Consejo: {html.escape(advice)}</em></p>"
        "</div>"
    )
