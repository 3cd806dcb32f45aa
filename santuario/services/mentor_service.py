"""
santuario.services.mentor_service — AI Stoic Mentor
====================================================

Thin client for the Gemini ``generateContent`` REST endpoint.

Two calls:

* :func:`generate_feedback` — nightly review of the day (virtue, observation,
  advice), rendered into the journal by the review route.
* :func:`generate_journal_prompt` — a single reflective question for the
  free-writing editor.

The mentor is never load-bearing: transport errors, timeouts, non-JSON or
malformed answers all degrade to fixed fallback content and a WARNING log.

Environment:
    MENTOR_API_KEY   — API key; when unset every call returns the fallback.
    MENTOR_API_URL   — optional endpoint override (``{model}`` is substituted).
"""

from __future__ import annotations

import json
import logging
import os
import re

import httpx
from pydantic import BaseModel, Field, ValidationError

from santuario.constants import FALLBACK_JOURNAL_PROMPT, mood_label

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-3-flash-preview"
DEFAULT_API_URL = (
    "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
)
DEFAULT_TIMEOUT = 20.0

# Below both thresholds there is nothing to review
MIN_JOURNAL_CHARS = 10
MIN_RESPONSE_CHARS = 5

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)


class MentorFeedback(BaseModel):
    virtue: str = Field(min_length=1)
    observation: str = Field(min_length=1)
    advice: str = Field(min_length=1)


FALLBACK_FEEDBACK = MentorFeedback(
    virtue="Fortaleza",
    observation="El silencio del oráculo es también una prueba. Tu esfuerzo hoy cuenta.",
    advice="Mañana, mantén la constancia en lo pequeño.",
)

_FEEDBACK_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "virtue": {"type": "STRING"},
        "observation": {"type": "STRING"},
        "advice": {"type": "STRING"},
    },
    "required": ["virtue", "observation", "advice"],
}


class MentorUnavailableError(RuntimeError):
    """The mentor endpoint could not produce a usable answer."""


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------
def strip_code_fences(text: str) -> str:
    """Remove Markdown code fences the model sometimes wraps JSON in."""
    return _FENCE_RE.sub("", text).strip()


def _endpoint(model: str) -> str:
    # Plain substitution: an override may carry other literal braces
    return os.getenv("MENTOR_API_URL", DEFAULT_API_URL).replace("{model}", model)


def _candidate_text(payload: dict) -> str:
    try:
        parts = payload["candidates"][0]["content"]["parts"]
        return "".join(p.get("text", "") for p in parts)
    except (KeyError, IndexError, TypeError, AttributeError) as exc:
        raise MentorUnavailableError("Response has no candidate text") from exc


async def _generate(
    prompt: str,
    *,
    client: httpx.AsyncClient | None,
    model: str,
    timeout: float,
    response_schema: dict | None = None,
) -> str:
    """POST *prompt* and return the first candidate's text.

    Raises
    ------
    MentorUnavailableError
        If no API key is configured, the request fails, or the response
        carries no text.
    """
    api_key = os.getenv("MENTOR_API_KEY")
    if not api_key:
        raise MentorUnavailableError("MENTOR_API_KEY is not set")

    body: dict = {"contents": [{"parts": [{"text": prompt}]}]}
    if response_schema is not None:
        body["generationConfig"] = {
            "responseMimeType": "application/json",
            "responseSchema": response_schema,
        }
    headers = {"x-goog-api-key": api_key, "Content-Type": "application/json"}

    try:
        url = _endpoint(model)
        if client is None:
            async with httpx.AsyncClient(timeout=timeout) as own_client:
                resp = await own_client.post(url, json=body, headers=headers)
        else:
            resp = await client.post(url, json=body, headers=headers)
        resp.raise_for_status()
        payload = resp.json()
    except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
        raise MentorUnavailableError(str(exc) or type(exc).__name__) from exc

    return _candidate_text(payload)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def build_feedback_prompt(
    journal_text: str, question_response: str, mood: int, challenge_status: str | None
) -> str:
    label = mood_label(mood)
    mood_text = f"{mood} ({label})" if label else str(mood)
    return (
        "Actúa como un mentor estoico sabio y empático (estilo Marco Aurelio o Séneca).\n"
        "Analiza el día del estudiante basándote en sus registros:\n\n"
        f"- Ánimo (1-5): {mood_text}\n"
        f'- Diario: "{journal_text[:500]}..."\n'
        f'- Respuesta a Pregunta del Día: "{question_response[:300]}..."\n'
        f"- Estado del Reto Diario: {challenge_status or 'pendiente'}\n\n"
        "Genera un feedback breve y estructurado en JSON:\n"
        '- virtue: Una única palabra (la virtud principal que demostró o la que necesita, ej: "Templanza", "Coraje").\n'
        "- observation: Una frase perspicaz sobre su estado mental actual (máx 15 palabras).\n"
        "- advice: Un consejo directo y accionable para mañana (máx 20 palabras).\n\n"
        "Tono: Sereno, directo, sin adornos innecesarios."
    )


async def generate_feedback(
    journal_text: str,
    question_response: str,
    mood: int,
    challenge_status: str | None,
    *,
    client: httpx.AsyncClient | None = None,
    model: str = DEFAULT_MODEL,
    timeout: float = DEFAULT_TIMEOUT,
) -> MentorFeedback | None:
    """Review the day.

    Returns ``None`` when there is too little to review (short journal *and*
    short question response), otherwise the model's feedback or
    :data:`FALLBACK_FEEDBACK`.
    """
    journal_text = journal_text or ""
    question_response = question_response or ""
    if len(journal_text) < MIN_JOURNAL_CHARS and len(question_response) < MIN_RESPONSE_CHARS:
        return None

    prompt = build_feedback_prompt(journal_text, question_response, mood, challenge_status)
    try:
        text = await _generate(
            prompt, client=client, model=model, timeout=timeout,
            response_schema=_FEEDBACK_SCHEMA,
        )
        return MentorFeedback.model_validate(json.loads(strip_code_fences(text)))
    except (MentorUnavailableError, ValidationError, ValueError) as exc:
        logger.warning("Mentor feedback unavailable, using fallback: %s", exc)
        return FALLBACK_FEEDBACK


async def generate_journal_prompt(
    mood: int,
    reading_title: str,
    *,
    client: httpx.AsyncClient | None = None,
    model: str = DEFAULT_MODEL,
    timeout: float = DEFAULT_TIMEOUT,
) -> str:
    """One short reflective question tuned to *mood* and today's reading."""
    prompt = (
        "Genera una única pregunta de journaling filosófica, breve y muy profunda.\n"
        f'Contexto: El usuario siente un ánimo de {mood}/5 y leyó sobre "{reading_title}".\n'
        "Estilo: Estoico, poético, directo y penetrante. Sin introducciones, solo la pregunta.\n"
        'Ejemplo: "¿Qué parte de ti se resiste a lo inevitable?"'
    )
    try:
        text = await _generate(prompt, client=client, model=model, timeout=timeout)
    except MentorUnavailableError as exc:
        logger.warning("Journal prompt unavailable, using fallback: %s", exc)
        return FALLBACK_JOURNAL_PROMPT
    return text.strip().replace('"', "") or FALLBACK_JOURNAL_PROMPT
