"""Adaptador de planificación de clases con IA (SDK OpenAI compatible).

Responsabilidad:
- Construir el prompt con las restricciones de `ScheduleRequest`.
- Hacer UNA llamada al proveedor (sin reintentos: el usuario decide si repite).
- Parsear la salida JSON como `ScheduleResult`.

Cualquier fallo (sin API key, error del proveedor, JSON inválido) se
convierte en un `ClassifiedError` de tipo `server`.
"""

from __future__ import annotations

import json
import re
from typing import Any

from openai import AsyncOpenAI, OpenAIError
from pydantic import BaseModel, Field, ValidationError

from core.config import AppSettings
from core.domain.reports import ScheduleRequest, ScheduleResult
from core.errors import ClassifiedError, ErrorDetail, ErrorKind
from core.logger import get_logger

logger = get_logger("qldt.ai")

_JSON_FENCE_RE = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL | re.IGNORECASE)

SCHEDULE_FAILED_MESSAGE = "Could not get a schedule suggestion from the AI service."

SYSTEM_PROMPT = (
    "You are an AI assistant that schedules classes, minimizing conflicts and "
    "optimizing resource allocation.\n"
    "Consider all constraints and trade-offs, and provide reasoning for your decision.\n"
    "Answer ONLY with a JSON object:\n"
    "{\n"
    '  "scheduledTime": "day and time range chosen",\n'
    '  "classroom": "classroom chosen",\n'
    '  "reasoning": "short justification"\n'
    "}"
)


class _AISchedulePayload(BaseModel):
    scheduled_time: str = Field(..., alias="scheduledTime", min_length=1)
    classroom: str = Field(..., min_length=1)
    reasoning: str = ""


def build_ai_client(settings: AppSettings) -> AsyncOpenAI:
    return AsyncOpenAI(
        api_key=settings.ai_api_key,
        base_url=settings.ai_base_url,
        timeout=settings.ai_timeout_seconds,
        max_retries=0,
    )


def _extract_json_object(text: str) -> str:
    """Obtiene el primer objeto JSON presente en la respuesta del proveedor."""
    match = _JSON_FENCE_RE.search(text)
    if match:
        return match.group(1).strip()

    stripped = text.strip()
    if stripped.startswith("{") and stripped.endswith("}"):
        return stripped

    start = stripped.find("{")
    end = stripped.rfind("}")
    if 0 <= start < end:
        candidate = stripped[start : end + 1]
        try:
            json.loads(candidate)
            return candidate
        except json.JSONDecodeError:
            pass

    raise ValueError("Could not locate a valid JSON object in the AI provider response.")


def build_user_prompt(request: ScheduleRequest) -> str:
    return (
        "Given the following information, determine the optimal time to schedule the class.\n\n"
        f"Instructor Availability: {request.instructor_availability}\n"
        f"Classroom Availability: {request.classroom_availability}\n"
        f"Class Duration: {request.class_duration}\n"
        f"Existing Schedule: {request.existing_schedule or 'None'}\n"
        f"Class Name: {request.class_name}\n"
    )


def _schedule_error(cause: BaseException | str) -> ClassifiedError:
    reason = cause if isinstance(cause, str) else f"{type(cause).__name__}: {cause}"
    return ClassifiedError(
        ErrorDetail(
            kind=ErrorKind.SERVER,
            message=SCHEDULE_FAILED_MESSAGE,
            method="POST",
            path="ai/schedule-class",
            cause=reason,
        )
    )


def parse_schedule(content: str, *, model: str | None = None) -> ScheduleResult:
    data: Any = json.loads(_extract_json_object(content))
    parsed = _AISchedulePayload.model_validate(data)
    return ScheduleResult(
        scheduled_time=parsed.scheduled_time.strip(),
        classroom=parsed.classroom.strip(),
        reasoning=parsed.reasoning.strip(),
        model=model,
    )


async def schedule_class(
    request: ScheduleRequest,
    *,
    settings: AppSettings | None = None,
    client: AsyncOpenAI | None = None,
) -> ScheduleResult:
    """Pide al modelo el hueco óptimo para una clase.

    Por qué sin reintentos:
    - La llamada es cara y lenta; un reintento automático duplica la espera
      sin cambiar el resultado en la mayoría de fallos (cuota, modelo).
    """

    settings = settings or AppSettings()
    if client is None:
        if not settings.ai_api_key:
            raise _schedule_error("missing_api_key")
        client = build_ai_client(settings)

    try:
        response = await client.chat.completions.create(
            model=settings.ai_model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_user_prompt(request)},
            ],  # type: ignore[arg-type]
            temperature=0.2,
            max_tokens=600,
        )
        content = (response.choices[0].message.content or "").strip()
        result = parse_schedule(content, model=settings.ai_model)
    except (OpenAIError, ValidationError, ValueError, IndexError, AttributeError) as exc:
        logger.warning("AI scheduling failed: %s", exc)
        raise _schedule_error(exc) from exc

    logger.debug("AI scheduled %r at %s in %s", request.class_name, result.scheduled_time, result.classroom)
    return result
