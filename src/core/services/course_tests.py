"""Servicio de tests (exámenes) de un curso."""

from __future__ import annotations

from adapters.resource_client import ResourceClient
from core import endpoints
from core.domain.models import CourseTest
from core.mappers.course_test import (
    course_test_create_payload,
    course_test_update_payload,
    map_course_test,
)
from core.services._collections import read_entity, read_nested_collection
from core.validation import path_id, require_positive


class CourseTestsService:
    """CRUD de tests; el listado de un curso sin tests (404) es `[]`.

    Un 403 en el listado NO se trata como vacío: se propaga como
    `authorization`.
    """

    def __init__(self, client: ResourceClient) -> None:
        self._client = client

    async def list_tests(self, course_id: str) -> list[CourseTest]:
        path = endpoints.TESTS.format(course_id=path_id(course_id, "course_id"))
        return await read_nested_collection(self._client, path, map_course_test)

    async def get_test(self, course_id: str, test_id: int) -> CourseTest:
        path = endpoints.TEST.format(
            course_id=path_id(course_id, "course_id"),
            test_id=require_positive(test_id, "test_id"),
        )
        return await read_entity(self._client, path, map_course_test)

    async def create_test(self, course_id: str, test: CourseTest) -> CourseTest | None:
        path = endpoints.TEST_CREATE.format(course_id=path_id(course_id, "course_id"))
        body = await self._client.post(path, course_test_create_payload(test))
        return map_course_test(body) if isinstance(body, dict) else None

    async def update_test(self, course_id: str, test_id: int, test: CourseTest) -> CourseTest | None:
        path = endpoints.TEST_UPDATE.format(
            course_id=path_id(course_id, "course_id"),
            test_id=require_positive(test_id, "test_id"),
        )
        body = await self._client.put(path, course_test_update_payload(test))
        return map_course_test(body) if isinstance(body, dict) else None

    async def delete_test(self, course_id: str, test_id: int) -> None:
        path = endpoints.TEST_DELETE.format(
            course_id=path_id(course_id, "course_id"),
            test_id=require_positive(test_id, "test_id"),
        )
        await self._client.delete(path)
