"""Servicio de preguntas (sub-recurso de test)."""

from __future__ import annotations

from typing import Any, Iterable

from adapters.resource_client import ResourceClient
from core import endpoints
from core.domain.models import PaginatedResult, Question
from core.errors import invalid_argument
from core.mappers.pagination import map_paginated
from core.mappers.question import map_question, question_payload
from core.validation import require_ids, require_positive


class QuestionsService:
    def __init__(self, client: ResourceClient) -> None:
        self._client = client
        self._settings = client.settings

    async def list_questions(
        self,
        test_id: int,
        *,
        page: int = 1,
        page_size: int | None = None,
    ) -> PaginatedResult[Question]:
        size = page_size or self._settings.default_page_size
        params: dict[str, Any] = {}
        if page != 1:
            params["page"] = page
        if size != self._settings.default_page_size:
            params["pageSize"] = size
        path = endpoints.QUESTIONS.format(test_id=require_positive(test_id, "test_id"))
        body = await self._client.get(path, params)
        return map_paginated(body, map_question, page=page, page_size=size)

    async def create_question(self, test_id: int, question: Question) -> Question | None:
        path = endpoints.QUESTIONS.format(test_id=require_positive(test_id, "test_id"))
        body = await self._client.post(path, question_payload(question))
        return map_question(body) if isinstance(body, dict) else None

    async def create_questions(self, test_id: int, questions: Iterable[Question]) -> None:
        payload = [question_payload(q) for q in questions]
        if not payload:
            raise invalid_argument("questions must not be empty", field="questions")
        path = endpoints.QUESTIONS.format(test_id=require_positive(test_id, "test_id"))
        await self._client.post(path, payload)

    async def update_question(self, test_id: int, question_id: int, question: Question) -> Question | None:
        path = endpoints.QUESTION.format(
            test_id=require_positive(test_id, "test_id"),
            question_id=require_positive(question_id, "question_id"),
        )
        body = await self._client.put(path, question_payload(question))
        return map_question(body) if isinstance(body, dict) else None

    async def delete_questions(self, test_id: int, question_ids: Iterable[int]) -> None:
        path = endpoints.QUESTIONS.format(test_id=require_positive(test_id, "test_id"))
        await self._client.delete(path, {"ids": require_ids(question_ids, "question_ids")})
