"""
santuario.constants — Shared Constants & Helpers
=================================================

Single source of truth for the leveling table, daily-slot salts, display
placeholders and the ritual step catalogue.  Import from here instead of
duplicating in engine, services, and routes.
"""

from __future__ import annotations

from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Daily slots — each slot salts the seed so slots don't correlate
# ---------------------------------------------------------------------------
SLOT_READING = "reading"
SLOT_PHILOSOPHER = "bio"
SLOT_MEDITATION = "meditation"
SLOT_TASK = "task"
SLOT_QUESTION = "question"

# ---------------------------------------------------------------------------
# Placeholders shown when a collection is empty
# ---------------------------------------------------------------------------
FALLBACK_QUESTION = "¿Qué depende de ti?"
FALLBACK_TASK_TITLE = "Sin Reto"
FALLBACK_TASK_DESCRIPTION = "El sistema está cargando..."
FALLBACK_JOURNAL_PROMPT = "¿Qué es esencial hoy?"

MOOD_LABELS: list[str] = ["", "Caos", "Duda", "Paz", "Claridad", "Areté"]
MAX_MOOD = 5
DEFAULT_RITUAL_MOOD = 3


def mood_label(mood: int) -> str:
    """Name of a mood, empty when unset or out of range."""
    return MOOD_LABELS[mood] if 0 <= mood < len(MOOD_LABELS) else ""


# Plain-text length a save must exceed to earn the daily writing XP
WRITING_XP_MIN_CHARS = 20


# ---------------------------------------------------------------------------
# Leveling table — THE single canonical implementation
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class Level:
    level: int
    title: str
    min_xp: int
    max_xp: int | None  # None = open-ended top level


LEVELS: list[Level] = [
    Level(1, "Novicio", 0, 250),
    Level(2, "Estudiante", 250, 800),
    Level(3, "Prokopton", 800, 2000),
    Level(4, "Filósofo", 2000, 5000),
    Level(5, "Sabio", 5000, None),
]


@dataclass(frozen=True, slots=True)
class LevelData:
    """Progress snapshot for a given XP total."""

    level: int
    title: str
    progress: float  # 0 - 100
    current_xp: int
    next_level_xp: int | None
    xp_to_next: int


def calculate_level(current_xp: int = 0) -> LevelData:
    """Resolve *current_xp* against :data:`LEVELS`.

    Each level covers ``min_xp <= xp < max_xp``.  Negative totals fall into
    the first level; the top level reports 100% progress and no next target.
    """
    current = LEVELS[0] if current_xp < LEVELS[0].min_xp else LEVELS[-1]
    for lvl in LEVELS:
        if current_xp >= lvl.min_xp and (lvl.max_xp is None or current_xp < lvl.max_xp):
            current = lvl
            break

    if current.max_xp is None:
        return LevelData(
            level=current.level,
            title=current.title,
            progress=100.0,
            current_xp=current_xp,
            next_level_xp=None,
            xp_to_next=0,
        )

    span = current.max_xp - current.min_xp
    gained = current_xp - current.min_xp
    progress = min(100.0, max(0.0, gained / span * 100))
    return LevelData(
        level=current.level,
        title=current.title,
        progress=progress,
        current_xp=current_xp,
        next_level_xp=current.max_xp,
        xp_to_next=current.max_xp - current_xp,
    )


# ---------------------------------------------------------------------------
# Ritual catalogue (morning / evening guided steps)
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class RitualStep:
    id: str
    label: str
    prompt: str | None = None


@dataclass(frozen=True, slots=True)
class Ritual:
    title: str
    short: str
    icon: str
    header_color: str
    steps: tuple[RitualStep, ...]
    tags: tuple[str, ...]


RITUALS: dict[str, Ritual] = {
    "morning": Ritual(
        title="Ritual del Amanecer",
        short="Amanecer",
        icon="\U0001f305",  # 🌅
        header_color="#D97706",
        steps=(
            RitualStep("intent", "Propósito",
                       "¿Cuál es la virtud principal que guiará mis acciones?"),
            RitualStep("premeditatio", "Anticipación",
                       "¿Qué obstáculo podría surgir y cómo responderé estoicamente?"),
            RitualStep("gratitude", "Gratitud",
                       "Una cosa simple por la que vale la pena vivir."),
        ),
        tags=("morning", "ritual"),
    ),
    "evening": Ritual(
        title="Cierre del Día",
        short="Anochecer",
        icon="\U0001f319",  # 🌙
        header_color="#4F46E5",
        steps=(
            # Prompt is the seeded question of the day, filled in at render time
            RitualStep("daily_question", "Pregunta del Día"),
            RitualStep("review", "Examen", "¿En qué fallé? ¿Qué hice bien?"),
            RitualStep("peace", "Paz",
                       "Suelto lo que no controlo para poder descansar."),
        ),
        tags=("evening", "ritual"),
    ),
}
