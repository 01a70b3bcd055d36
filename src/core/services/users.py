"""Servicio de usuarios.

Peculiaridades del backend:
- Paginación en PascalCase (`Page`, `Limit`, `SortField`, `SortType`).
- `Limit` debe ser menor que el máximo del backend; si no, se omite y el
  backend aplica su tamaño por defecto.
- La búsqueda usa `keyword` en `/Users/search`.
- Con avatar, la edición se envía como multipart (`UrlAvatar`).
"""

from __future__ import annotations

from typing import Any

from adapters.resource_client import MultipartForm, ResourceClient
from core import endpoints
from core.domain.models import PaginatedResult
from core.domain.organization import ResetPasswordInput, User, UserInput
from core.errors import invalid_argument
from core.mappers.pagination import map_paginated
from core.mappers.user import map_user, user_payload
from core.services._collections import read_entity
from core.validation import path_id


class UsersService:
    def __init__(self, client: ResourceClient) -> None:
        self._client = client
        self._settings = client.settings

    def backend_params(
        self,
        *,
        page: int = 1,
        limit: int | None = None,
        search: str | None = None,
        sort_field: str | None = None,
        sort_type: str | None = None,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {"Page": page}
        if limit and limit < self._settings.max_page_size:
            params["Limit"] = limit
        params["SortField"] = sort_field
        params["SortType"] = sort_type
        keyword = (search or "").strip()
        if keyword:
            params["keyword"] = keyword
        return params

    async def list_users(
        self,
        *,
        page: int = 1,
        limit: int | None = None,
        search: str | None = None,
        sort_field: str | None = None,
        sort_type: str | None = None,
    ) -> PaginatedResult[User]:
        params = self.backend_params(
            page=page, limit=limit, search=search, sort_field=sort_field, sort_type=sort_type
        )
        path = endpoints.USERS_SEARCH if "keyword" in params else endpoints.USERS
        body = await self._client.get(path, params)
        return map_paginated(
            body,
            map_user,
            page=page,
            page_size=params.get("Limit") or self._settings.max_page_size,
        )

    async def get_user(self, user_id: str) -> User:
        path = endpoints.USER.format(user_id=path_id(user_id, "user_id"))
        return await read_entity(self._client, path, map_user)

    async def create_user(self, user: UserInput) -> User:
        if not (user.full_name or "").strip() or not (user.email or "").strip():
            raise invalid_argument("Full name and email are required", field="email")
        body = await self._client.post(endpoints.USERS_CREATE, user_payload(user))
        return map_user(body)

    async def _update(self, path: str, user: UserInput) -> User:
        payload = user_payload(user)
        if user.avatar is not None:
            form = MultipartForm.from_payload(payload).add_file("UrlAvatar", user.avatar)
            return map_user(await self._client.put(path, form))
        return map_user(await self._client.put(path, payload))

    async def update_user_by_admin(self, user_id: str, user: UserInput) -> User:
        path = endpoints.USER_UPDATE_ADMIN.format(user_id=path_id(user_id, "user_id"))
        return await self._update(path, user)

    async def update_profile(self, user: UserInput) -> User:
        return await self._update(endpoints.USERS_UPDATE_PROFILE, user)

    async def delete_user(self, user_id: str) -> None:
        """Borrado lógico."""

        path = endpoints.USER_SOFT_DELETE.format(user_id=path_id(user_id, "user_id"))
        await self._client.delete(path)

    async def reset_password(self, user_id: str, payload: ResetPasswordInput) -> None:
        if payload.new_password != payload.confirm_new_password:
            raise invalid_argument("Passwords do not match", field="confirm_new_password")
        path = endpoints.USER_RESET_PASSWORD.format(user_id=path_id(user_id, "user_id"))
        await self._client.patch(
            path,
            {"newPassword": payload.new_password, "confirmNewPassword": payload.confirm_new_password},
        )
