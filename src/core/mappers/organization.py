"""Mappers de departamentos (árbol), cargos y roles."""

from __future__ import annotations

from typing import Any, Mapping

from core.domain.organization import (
    Department,
    DepartmentInput,
    Position,
    PositionInput,
    RoleInput,
    ServiceRole,
)
from core.mappers._fields import as_int, as_list, as_opt_int, as_opt_str, as_str, pick


def map_department(data: object) -> Department:
    """Departamento del API -> UI, recursivo sobre `children`.

    `status` llega como texto (`"Đang hoạt động"`) o como `{id, name}`.
    """

    status = pick(data, "status")
    if isinstance(status, Mapping):
        status_name = as_str(pick(status, "name"), "Unknown")
        status_id = as_opt_int(pick(status, "id"))
    else:
        status_name = as_str(status, "Unknown")
        status_id = as_opt_int(pick(data, "statusId"))

    parent_id = pick(data, "parentId")
    return Department(
        department_id=as_str(pick(data, "departmentId", "id"), "N/A"),
        name=as_str(pick(data, "departmentName", "name"), "N/A"),
        code=as_str(pick(data, "departmentCode", "code"), "N/A"),
        description=as_opt_str(pick(data, "description")),
        parent_id=as_str(parent_id) if parent_id else None,
        parent_name=as_opt_str(pick(data, "parentName")),
        manager_id=as_opt_str(pick(data, "managerId")),
        manager_name=as_opt_str(pick(data, "managerName")),
        status=status_name,
        status_id=status_id,
        level=as_int(pick(data, "level")),
        path=[as_str(p) for p in as_list(pick(data, "path"))],
        created_at=as_opt_str(pick(data, "createdAt")),
        updated_at=as_opt_str(pick(data, "updatedAt")),
        children=[map_department(c) for c in as_list(pick(data, "children"))],
    )


def flatten_departments(tree: list[Department]) -> list[Department]:
    """Recorrido en profundidad (padre antes que hijos)."""

    out: list[Department] = []
    stack = list(reversed(tree))
    while stack:
        node = stack.pop()
        out.append(node)
        stack.extend(reversed(node.children))
    return out


def department_payload(dept: DepartmentInput) -> dict[str, Any]:
    return {
        "DepartmentName": dept.name,
        "DepartmentCode": dept.code,
        "Description": dept.description,
        "StatusId": dept.status_id,
        "ManagerId": dept.manager_id,
        "ParentId": dept.parent_id or None,
    }


def map_position(data: object) -> Position:
    return Position(
        id=as_int(pick(data, "positionId", "id")),
        name=as_str(pick(data, "positionName", "name")),
    )


def position_payload(position: PositionInput) -> dict[str, Any]:
    return {"positionName": position.name}


def map_role(data: object) -> ServiceRole:
    return ServiceRole(
        id=as_str(pick(data, "id", "roleId")),
        name=as_str(pick(data, "name", "roleName")),
    )


def role_payload(role: RoleInput) -> dict[str, Any]:
    payload: dict[str, Any] = {"name": role.name}
    if role.description is not None:
        payload["description"] = role.description
    return payload
