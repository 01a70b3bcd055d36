"""Servicios de departamentos, cargos y roles."""

from __future__ import annotations

from adapters.resource_client import Crud, ResourceClient
from core import endpoints
from core.domain.organization import Department, DepartmentInput, Position, PositionInput, RoleInput, ServiceRole
from core.errors import error_from_response
from core.mappers.organization import (
    department_payload,
    map_department,
    map_position,
    map_role,
    position_payload,
    role_payload,
)
from core.services._collections import read_collection, read_entity
from core.validation import path_id, require_id, require_positive


class DepartmentsService:
    """CRUD de departamentos; el listado devuelve el árbol (raíces con `children`)."""

    def __init__(self, client: ResourceClient) -> None:
        self._client = client

    async def list_departments(self, *, status: str | None = None) -> list[Department]:
        return await read_collection(
            self._client, endpoints.DEPARTMENTS, map_department, {"status": status}
        )

    async def get_department(self, department_id: str) -> Department:
        path = endpoints.DEPARTMENT.format(department_id=path_id(department_id, "department_id"))
        return await read_entity(self._client, path, map_department)

    async def create_department(self, payload: DepartmentInput) -> Department:
        body = await self._client.post(endpoints.DEPARTMENTS, department_payload(payload))
        return map_department(body)

    async def update_department(self, department_id: str, payload: DepartmentInput) -> None:
        path = endpoints.DEPARTMENT.format(department_id=path_id(department_id, "department_id"))
        await self._client.put(path, department_payload(payload))

    async def delete_department(self, department_id: str) -> None:
        path = endpoints.DEPARTMENT.format(department_id=path_id(department_id, "department_id"))
        await self._client.delete(path)


class PositionsService:
    def __init__(self, client: ResourceClient) -> None:
        self._crud: Crud[Position] = Crud(client, endpoints.POSITIONS, map_position)

    async def list_positions(self, *, name: str | None = None) -> list[Position]:
        return await self._crud.list({"name": name})

    async def get_position(self, position_id: int) -> Position:
        return await self._crud.get(require_positive(position_id, "position_id"))

    async def create_position(self, payload: PositionInput) -> Position:
        return await self._crud.create(position_payload(payload))

    async def update_position(self, position_id: int, payload: PositionInput) -> Position | None:
        return await self._crud.update(require_positive(position_id, "position_id"), position_payload(payload))

    async def delete_position(self, position_id: int) -> None:
        await self._crud.remove(require_positive(position_id, "position_id"))


class RolesService:
    def __init__(self, client: ResourceClient) -> None:
        self._crud: Crud[ServiceRole] = Crud(client, endpoints.ROLES, map_role)

    async def list_roles(self, *, name: str | None = None) -> list[ServiceRole]:
        return await self._crud.list({"name": name})

    async def get_role(self, role_id: str) -> ServiceRole:
        return await self._crud.get(require_id(role_id, "role_id"))

    async def get_role_by_name(self, name: str) -> ServiceRole:
        """Rol cuyo nombre coincide exactamente (sin distinguir mayúsculas).

        El backend filtra por `name` de forma parcial; sin coincidencia
        exacta se responde not-found como cualquier entidad ausente.
        """

        wanted = require_id(name, "name")
        for role in await self.list_roles(name=wanted):
            if role.name.casefold() == wanted.casefold():
                return role
        raise error_from_response(404, None, method="GET", path=endpoints.ROLES)

    async def create_role(self, payload: RoleInput) -> ServiceRole:
        return await self._crud.create(role_payload(payload))

    async def update_role(self, role_id: str, payload: RoleInput) -> ServiceRole | None:
        return await self._crud.update(require_id(role_id, "role_id"), role_payload(payload))

    async def delete_role(self, role_id: str) -> None:
        await self._crud.remove(require_id(role_id, "role_id"))
