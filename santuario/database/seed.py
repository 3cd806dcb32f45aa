"""
santuario.database.seed — Starter Content Seeder
=================================================

A small catalogue of readings, philosophers, meditations, tasks and evening
questions so a fresh install has "today" content immediately.

Idempotent per table — a collection is only seeded while it is empty.
Content curated or imported later is never touched.
"""

from __future__ import annotations

import logging

from sqlalchemy import Engine, func, select
from sqlalchemy.orm import Session

from santuario.database.models import (
    DailyQuestionRow,
    MeditationRow,
    PhilosopherRow,
    ReadingRow,
    TaskRow,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Starter catalogue
# ---------------------------------------------------------------------------
DEFAULT_READINGS: list[dict] = [
    {"title": "La Ciudadela", "quote": "La mente sin pasiones es una fortaleza.",
     "body": "No busques retiros externos. Tienes en ti mismo un refugio al que puedes retirarte siempre.",
     "author": "Marco Aurelio", "tags": ["Paz", "Refugio"], "type": "reflexion",
     "philosophy": "Estoicismo"},
    {"title": "El Obstáculo", "quote": "El impedimento a la acción avanza la acción.",
     "body": "Lo que se interpone en el camino se convierte en el camino.",
     "author": "Marco Aurelio", "tags": ["Resiliencia"], "type": "reflexion",
     "philosophy": "Estoicismo"},
    {"title": "Mortalidad", "quote": "Podrías dejar la vida ahora mismo.",
     "body": "Deja que eso determine lo que haces, dices y piensas.",
     "author": "Marco Aurelio", "tags": ["Memento Mori"], "type": "ejercicio",
     "philosophy": "Estoicismo"},
    {"title": "Control", "quote": "De las cosas, unas dependen de nosotros y otras no.",
     "body": "Juicio y deseo son tuyos. Cuerpo y fama no.",
     "author": "Epicteto", "tags": ["Control"], "type": "reflexion",
     "philosophy": "Estoicismo"},
    {"title": "Juicios", "quote": "No son las cosas las que atormentan, sino las opiniones.",
     "body": "La muerte no es terrible, el juicio sobre ella sí.",
     "author": "Epicteto", "tags": ["Juicio"], "type": "reflexion",
     "philosophy": "Estoicismo"},
    {"title": "Banquete", "quote": "La vida es un banquete.",
     "body": "Toma con moderación lo que pasa frente a ti. No anheles lo que no llega.",
     "author": "Epicteto", "tags": ["Moderación"], "type": "parabola",
     "philosophy": "Estoicismo"},
    {"title": "Tiempo", "quote": "No es que tengamos poco tiempo, es que perdemos mucho.",
     "body": "La vida es larga si se usa bien.",
     "author": "Séneca", "tags": ["Tiempo"], "type": "cita",
     "philosophy": "Estoicismo"},
]

DEFAULT_PHILOSOPHERS: list[dict] = [
    {"id": "maurelio", "name": "Marco Aurelio", "dates": "121-180 d.C.", "role": "Emperador",
     "school": "Estoicismo",
     "description": "El rey filósofo. Escribió las 'Meditaciones' en el frente de batalla.",
     "key_ideas": ["Ciudadela Interior", "Deber Cívico", "Impermanencia"], "icon": "ph-crown"},
    {"id": "seneca", "name": "Séneca", "dates": "4 a.C.-65 d.C.", "role": "Estadista",
     "school": "Estoicismo",
     "description": "Consejero de Nerón, dramaturgo. Maestro de la psicología humana y el tiempo.",
     "key_ideas": ["Brevedad de la Vida", "Clemencia", "Premeditatio"], "icon": "ph-scroll"},
    {"id": "epicteto", "name": "Epicteto", "dates": "50-135 d.C.", "role": "Maestro",
     "school": "Estoicismo",
     "description": "Nacido esclavo, enseñó que la libertad es enteramente interior.",
     "key_ideas": ["Dicotomía de Control", "Prohairesis", "Voluntad"], "icon": "ph-chains"},
    {"id": "zenon", "name": "Zenón de Citio", "dates": "334-262 a.C.", "role": "Fundador",
     "school": "Estoicismo",
     "description": "Comerciante fenicio que naufragó, perdió todo y fundó la Stoa en Atenas.",
     "key_ideas": ["Vivir acorde a Naturaleza", "Katalepsis"], "icon": "ph-columns"},
]

DEFAULT_MEDITATIONS: list[dict] = [
    {"title": "Vista de Pájaro", "description": "Contempla tus problemas desde lo alto.",
     "category": "perspectiva", "difficulty": "beginner", "duration_minutes": 5,
     "content": "Cierra los ojos.\nEleva tu mirada sobre la ciudad.\nTus preocupaciones se hacen pequeñas."},
    {"title": "Premeditatio Malorum", "description": "Anticipa la adversidad con serenidad.",
     "category": "preparación", "difficulty": "advanced", "duration_minutes": 10,
     "content": "Imagina el obstáculo del día.\nObserva tu respuesta.\nElige la virtud."},
]

DEFAULT_TASKS: list[dict] = [
    {"title": "Ayuno de Quejas", "description": "Pasa el día entero sin quejarte en voz alta."},
    {"title": "Incomodidad Voluntaria", "description": "Termina tu ducha con un minuto de agua fría."},
    {"title": "Dicotomía del Control", "description": "Anota tres preocupaciones y marca cuáles dependen de ti."},
]

DEFAULT_QUESTIONS: list[str] = [
    "¿En qué has puesto tu atención hoy?",
    "¿Qué te ha perturbado y qué juicio lo causó?",
    "¿Qué harías distinto si hoy fuera tu último día?",
    "¿A quién has ayudado hoy?",
]


def _seed_table(session: Session, model, rows: list[dict]) -> int:
    """Insert *rows* into *model*'s table if it is empty.  Returns rows added."""
    existing = session.scalar(select(func.count()).select_from(model)) or 0
    if existing:
        return 0
    session.add_all(model(**row) for row in rows)
    return len(rows)


def seed_default_content(engine: Engine) -> int:
    """Seed every empty content table.  Returns the total rows inserted."""
    with Session(engine) as session:
        inserted = 0
        inserted += _seed_table(session, ReadingRow, DEFAULT_READINGS)
        inserted += _seed_table(session, PhilosopherRow, DEFAULT_PHILOSOPHERS)
        inserted += _seed_table(session, MeditationRow, DEFAULT_MEDITATIONS)
        inserted += _seed_table(session, TaskRow, DEFAULT_TASKS)
        inserted += _seed_table(
            session, DailyQuestionRow, [{"question": q} for q in DEFAULT_QUESTIONS]
        )
        session.commit()

    if inserted:
        logger.info("Seeded %d starter content rows.", inserted)
    return inserted
