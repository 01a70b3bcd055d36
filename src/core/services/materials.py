"""Servicios de material adjunto y progreso de lecciones."""

from __future__ import annotations

from typing import Sequence

from adapters.resource_client import MultipartForm, ResourceClient
from core import endpoints
from core.domain.models import AttachedFile, AttachedFileInput, LessonProgress, LessonProgressInput
from core.errors import invalid_argument
from core.mappers.lesson import lesson_progress_payload, map_attached_file, map_lesson_progress
from core.services._collections import as_collection, read_nested_collection
from core.validation import path_id, require_positive


def attached_files_form(items: Sequence[AttachedFileInput]) -> MultipartForm:
    """Subida por lotes con nombres indexados: `request[i].Title|File|Link`."""

    form = MultipartForm()
    for index, item in enumerate(items):
        prefix = f"request[{index}]"
        form.add(f"{prefix}.Title", item.title)
        form.add_file(f"{prefix}.File", item.file)
        if item.link:
            form.add(f"{prefix}.Link", item.link)
    return form


class AttachedFilesService:
    def __init__(self, client: ResourceClient) -> None:
        self._client = client

    async def list_files(self, course_id: str) -> list[AttachedFile]:
        path = endpoints.ATTACHED_FILES.format(course_id=path_id(course_id, "course_id"))
        return await read_nested_collection(self._client, path, map_attached_file)

    async def upload_files(self, course_id: str, items: Sequence[AttachedFileInput]) -> list[AttachedFile]:
        if not items:
            raise invalid_argument("Nothing to upload", field="files")
        for item in items:
            if item.file is None and not item.link:
                raise invalid_argument("Each attachment needs a file or a link", field="files")
        path = endpoints.ATTACHED_FILES.format(course_id=path_id(course_id, "course_id"))
        body = await self._client.post(path, attached_files_form(items))
        return [map_attached_file(f) for f in as_collection(body)]

    async def delete_file(self, course_id: str, file_id: int) -> None:
        path = endpoints.ATTACHED_FILE.format(
            course_id=path_id(course_id, "course_id"),
            file_id=require_positive(file_id, "file_id"),
        )
        await self._client.delete(path)


class LessonProgressService:
    def __init__(self, client: ResourceClient) -> None:
        self._client = client

    async def list_progress(self, course_id: str) -> list[LessonProgress]:
        path = endpoints.LESSON_PROGRESS.format(course_id=path_id(course_id, "course_id"))
        return await read_nested_collection(self._client, path, map_lesson_progress)

    async def upsert_progress(self, payload: LessonProgressInput) -> None:
        await self._client.post(endpoints.LESSON_PROGRESS_UPSERT, lesson_progress_payload(payload))
