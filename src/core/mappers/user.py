"""Mapper de usuarios.

El DTO del backend trae una errata histórica: `modifedAt` (sin la segunda
`i`). Se lee aquí y en ningún otro sitio.
"""

from __future__ import annotations

from typing import Any, Mapping

from core.domain.organization import VALID_ROLES, User, UserInput
from core.mappers._fields import as_opt_str, as_ref, as_str, drop_none, pick

DEFAULT_ROLE = "HOCVIEN"


def normalize_role(value: object) -> str:
    role = as_str(value).strip().upper()
    return role if role in VALID_ROLES else DEFAULT_ROLE


def map_user(data: object) -> User:
    """Usuario del API -> UI. `None` (o basura) produce el usuario por defecto."""

    if not isinstance(data, Mapping) or not data:
        return User()

    status = pick(data, "userStatus")
    department = pick(data, "department")
    level = pick(data, "employeeLevel")
    return User(
        id=as_str(pick(data, "id"), "N/A"),
        full_name=as_str(pick(data, "fullName"), "N/A"),
        url_avatar=as_opt_str(pick(data, "urlAvatar")),
        id_card=as_str(pick(data, "idCard"), "N/A"),
        email=as_str(pick(data, "email"), "N/A"),
        phone_number=as_str(pick(data, "phoneNumber"), "N/A"),
        role=normalize_role(pick(data, "role")),
        employee_id=as_opt_str(pick(data, "code")),
        department_name=as_opt_str(pick(data, "departmentName")) or as_opt_str(pick(department, "departmentName", "name")),
        position_name=as_opt_str(pick(data, "eLevelName")) or as_opt_str(pick(level, "eLevelName", "name")),
        user_status=as_ref(status),
        manager=as_opt_str(pick(data, "managerBy")),
        start_work=as_opt_str(pick(data, "startWork")),
        end_work=as_opt_str(pick(data, "endWork")),
        created_at=as_opt_str(pick(data, "createdAt")),
        modified_at=as_opt_str(pick(data, "modifedAt", "modifiedAt")),
    )


def user_payload(user: UserInput) -> dict[str, Any]:
    """UI -> payload PascalCase (sin campos vacíos ni el avatar)."""

    payload = {
        "FullName": user.full_name,
        "Email": user.email,
        "IdCard": user.id_card,
        "Code": user.code,
        "RoleId": user.role_id,
        "eLevelId": user.level_id,
        "ManagerUId": user.manager_id,
        "DepartmentId": user.department_id,
        "StatusId": user.status_id,
        "NumberPhone": user.phone_number,
        "StartWork": user.start_work,
        "EndWork": user.end_work,
        "Password": user.password,
        "ConfirmPassword": user.confirm_password,
    }
    return drop_none(payload)
