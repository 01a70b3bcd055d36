"""Servicio de lecciones (sub-recurso de curso).

Un curso sin lecciones responde 404 en el listado: se trata como lista
vacía. Es la única lectura de este servicio que traga un error.
"""

from __future__ import annotations

from typing import Iterable

from adapters.resource_client import MultipartForm, ResourceClient
from core import endpoints
from core.domain.models import Lesson, LessonInput, ReorderLesson
from core.errors import invalid_argument
from core.mappers.lesson import map_lesson
from core.services._collections import read_nested_collection
from core.validation import path_id, require_ids, require_positive


def _lesson_form(payload: LessonInput) -> MultipartForm:
    form = MultipartForm()
    if payload.title:
        form.add("Title", payload.title)
    form.add_file("FilePdf", payload.file)
    if payload.link:
        form.add("Link", payload.link)
    if payload.total_duration_seconds:
        form.add("TotalDurationSeconds", payload.total_duration_seconds)
    return form


class LessonsService:
    def __init__(self, client: ResourceClient) -> None:
        self._client = client

    async def list_lessons(self, course_id: str) -> list[Lesson]:
        path = endpoints.LESSONS.format(course_id=path_id(course_id, "course_id"))
        return await read_nested_collection(self._client, path, map_lesson)

    async def create_lesson(self, course_id: str, payload: LessonInput) -> Lesson | None:
        if not (payload.title or "").strip():
            raise invalid_argument("Lesson title is required", field="title")
        path = endpoints.LESSONS.format(course_id=path_id(course_id, "course_id"))
        body = await self._client.post(path, _lesson_form(payload))
        return map_lesson(body) if isinstance(body, dict) else None

    async def update_lesson(self, course_id: str, lesson_id: int, payload: LessonInput) -> Lesson | None:
        path = endpoints.LESSON.format(
            course_id=path_id(course_id, "course_id"),
            lesson_id=require_positive(lesson_id, "lesson_id"),
        )
        body = await self._client.put(path, _lesson_form(payload))
        return map_lesson(body) if isinstance(body, dict) else None

    async def delete_lessons(self, course_id: str, lesson_ids: Iterable[int]) -> None:
        """Borrado masivo: una sola petición con todos los ids en el cuerpo."""

        path = endpoints.LESSONS.format(course_id=path_id(course_id, "course_id"))
        await self._client.delete(path, {"ids": require_ids(lesson_ids, "lesson_ids")})

    async def reorder_lesson(self, course_id: str, payload: ReorderLesson) -> None:
        """Mueve `lesson_id` detrás de `previous_lesson_id` (None = al principio)."""

        path = endpoints.LESSONS_REORDER.format(course_id=path_id(course_id, "course_id"))
        await self._client.put(
            path,
            {"lessonId": payload.lesson_id, "previousLessonId": payload.previous_lesson_id},
        )
