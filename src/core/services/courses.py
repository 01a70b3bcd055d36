"""Servicio de cursos."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from adapters.resource_client import MultipartForm, ResourceClient
from core import endpoints
from core.domain.models import Course, PaginatedResult
from core.mappers._fields import pick
from core.mappers.course import (
    course_create_payload,
    course_update_payload,
    map_course,
    map_enrolled_course,
)
from core.mappers.pagination import map_paginated
from core.services._collections import read_collection, read_entity
from core.validation import path_id, require_id, require_str_ids


class CoursesService:
    """Listado, detalle, alta/edición multipart, borrado lógico y matrícula.

    Las altas y ediciones van como multipart porque llevan la miniatura
    (`ThumbUrlFile`) y listas repetidas (`DepartmentIds`, `eLevelIds`).
    """

    def __init__(self, client: ResourceClient) -> None:
        self._client = client
        self._settings = client.settings

    def _map(self, data: object) -> Course:
        return map_course(data, asset_base_url=self._settings.asset_base_url)

    async def list_courses(
        self,
        *,
        page: int = 1,
        page_size: int | None = None,
        search: str | None = None,
        filters: Mapping[str, Any] | None = None,
    ) -> PaginatedResult[Course]:
        """Página de cursos; con `search` se usa el endpoint de búsqueda."""

        size = page_size or self._settings.default_page_size
        params: dict[str, Any] = dict(filters or {})
        if page != 1:
            params["page"] = page
        if size != self._settings.default_page_size:
            params["pageSize"] = size

        path = endpoints.COURSES
        keyword = (search or "").strip()
        if keyword:
            path = endpoints.COURSES_SEARCH
            params["keyword"] = keyword

        body = await self._client.get(path, params)
        return map_paginated(body, self._map, page=page, page_size=size)

    async def get_course(self, course_id: str) -> Course:
        path = endpoints.COURSE.format(course_id=path_id(course_id, "course_id"))
        return await read_entity(self._client, path, self._map)

    async def create_course(self, course: Course) -> Course:
        form = MultipartForm.from_payload(course_create_payload(course))
        body = await self._client.post(endpoints.COURSES, form)
        created_id = pick(body, "id")
        if created_id:
            return await self.get_course(str(created_id))
        return self._map(body)

    async def update_course(self, course_id: str, course: Course, original: Course | None = None) -> Course:
        """Edición diff-only; devuelve el curso tal como queda en el servidor."""

        course_id = require_id(course_id, "course_id")
        form = MultipartForm.from_payload(course_update_payload(course, original))
        body = await self._client.put(endpoints.COURSE.format(course_id=path_id(course_id, "course_id")), form)
        updated_id = pick(body, "id")
        return await self.get_course(str(updated_id) if updated_id else course_id)

    async def soft_delete_courses(self, course_ids: Iterable[str]) -> None:
        ids = require_str_ids(course_ids, "course_ids")
        await self._client.post(endpoints.COURSES_SOFT_DELETE, {"ids": ids})

    async def enrolled_courses(self) -> list[Course]:
        """Cursos del usuario actual (con progreso)."""

        return await read_collection(
            self._client,
            endpoints.COURSES_ENROLLED,
            lambda d: map_enrolled_course(d, asset_base_url=self._settings.asset_base_url),
        )

    async def enroll(self, course_id: str) -> None:
        path = endpoints.COURSE_ENROLL.format(course_id=path_id(course_id, "course_id"))
        await self._client.post(path)
