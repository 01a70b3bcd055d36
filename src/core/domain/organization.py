"""Modelos de organización: usuarios, departamentos y cargos."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from core.domain.models import NamedRef, UploadFile

Role = Literal["ADMIN", "HR", "HOCVIEN"]
VALID_ROLES: tuple[str, ...] = ("ADMIN", "HR", "HOCVIEN")


class User(BaseModel):
    """Usuario en forma UI.

    `HOCVIEN` (alumno) es el rol por defecto cuando el backend no envía uno
    reconocible.
    """

    id: str = "N/A"
    full_name: str = "N/A"
    url_avatar: str | None = None
    id_card: str = "N/A"
    email: str = "N/A"
    phone_number: str = "N/A"
    role: Role = "HOCVIEN"
    employee_id: str | None = None
    department_name: str | None = None
    position_name: str | None = None
    user_status: NamedRef | None = None
    manager: str | None = None
    start_work: str | None = None
    end_work: str | None = None
    created_at: str | None = None
    modified_at: str | None = None


class UserInput(BaseModel):
    """Alta/edición de usuario (se envía en PascalCase)."""

    full_name: str | None = None
    email: str | None = None
    id_card: str | None = None
    code: str | None = None
    role_id: str | None = None
    level_id: int | None = None
    manager_id: str | None = None
    department_id: int | None = None
    status_id: int | None = None
    phone_number: str | None = None
    start_work: str | None = None
    end_work: str | None = None
    password: str | None = None
    confirm_password: str | None = None
    avatar: UploadFile | None = Field(
        default=None,
        description="Si está presente, la petición se envía como multipart.",
    )


class ResetPasswordInput(BaseModel):
    new_password: str = Field(..., min_length=1)
    confirm_new_password: str = Field(..., min_length=1)


class Department(BaseModel):
    """Departamento (nodo de un árbol)."""

    department_id: str
    name: str = "N/A"
    code: str = "N/A"
    description: str | None = None
    parent_id: str | None = None
    parent_name: str | None = None
    manager_id: str | None = None
    manager_name: str | None = None
    status: str = "Unknown"
    status_id: int | None = None
    level: int = 0
    path: list[str] = Field(default_factory=list)
    created_at: str | None = None
    updated_at: str | None = None
    children: list["Department"] = Field(default_factory=list)


class DepartmentInput(BaseModel):
    name: str | None = None
    code: str | None = None
    description: str | None = None
    status_id: int | None = None
    manager_id: str | None = None
    parent_id: int | None = None


class Position(BaseModel):
    id: int
    name: str = ""


class PositionInput(BaseModel):
    name: str = Field(..., min_length=1)


class ServiceRole(BaseModel):
    """Rol tal como lo gestiona el backend (`/roles`), no el `Role` de la UI."""

    id: str
    name: str = ""


class RoleInput(BaseModel):
    name: str = Field(..., min_length=1)
    description: str | None = None
