"""Mappers de lecciones, materiales adjuntos y progreso."""

from __future__ import annotations

from typing import Any

from core.domain.models import AttachedFile, Lesson, LessonProgress, LessonProgressInput
from core.mappers._fields import as_bool, as_float, as_int, as_opt_int, as_str, pick

_VIDEO_HOSTS = ("youtube.com", "youtu.be")


def content_type_for(kind: object, url: str) -> str:
    """Tipo de contenido UI a partir del tipo del API (`PDF`/`LINK`) y la URL."""

    kind_u = as_str(kind).upper()
    if kind_u == "PDF" and url:
        return "pdf_url"
    if kind_u == "LINK" and url:
        if any(host in url for host in _VIDEO_HOSTS):
            return "video_url"
        return "external_link"
    return "text"


def map_lesson(data: object) -> Lesson:
    url = as_str(pick(data, "urlPdf", "fileUrl", "link", "content"))
    return Lesson(
        id=as_int(pick(data, "id", "lessonId")),
        title=as_str(pick(data, "title")),
        content_type=content_type_for(pick(data, "type"), url),
        content=url,
        total_duration_seconds=as_int(pick(data, "totalDurationSeconds")),
        position=as_opt_int(pick(data, "position")),
    )


def map_attached_file(data: object) -> AttachedFile:
    kind = as_str(pick(data, "type")).lower()
    return AttachedFile(
        id=as_int(pick(data, "id")),
        title=as_str(pick(data, "title")),
        type=kind if kind in ("pdf", "link") else "other",
        url=as_str(pick(data, "link", "url", "fileUrl")),
    )


def map_lesson_progress(data: object) -> LessonProgress:
    """El API envía el progreso como fracción (0..1); la UI lo usa en %."""

    fraction = as_float(pick(data, "progressPercentage"))
    return LessonProgress(
        lesson_id=as_int(pick(data, "lessonId", "id")),
        progress_percentage=round(fraction * 100),
        current_page=as_opt_int(pick(data, "currentPage")),
        current_time_second=as_opt_int(pick(data, "currentTimeSecond")),
        is_completed=as_bool(pick(data, "isCompleted")),
    )


def lesson_progress_payload(progress: LessonProgressInput) -> dict[str, Any]:
    payload: dict[str, Any] = {"lessonId": progress.lesson_id}
    if progress.current_page is not None:
        payload["currentPage"] = progress.current_page
    if progress.current_time_second is not None:
        payload["currentTimeSecond"] = progress.current_time_second
    return payload
