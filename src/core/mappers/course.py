"""Mapper de cursos (cable <-> UI).

Por qué aquí y no en el servicio:
- Es el único punto donde se decide el valor por defecto de cada campo.
- El backend mezcla nombres (`departments` vs `DepartmentInfo`,
  `eLevels` vs `EmployeeLevel`) y devuelve miniaturas relativas o basura
  (`"FormFile"`); aquí se normaliza todo eso.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping
from urllib.parse import quote

from core.domain.models import Course, CourseDepartment, CourseDuration, CourseLevel
from core.mappers._fields import (
    as_float,
    as_int,
    as_list,
    as_opt_int,
    as_opt_str,
    as_ref,
    as_str,
    drop_none,
    pick,
)

NOT_AVAILABLE = "Không có"
MANDATORY = "Bắt buộc"
OPTIONAL = "Tùy chọn"
OPEN_STATUS = "Đang mở"
PLACEHOLDER_IMAGE = "https://placehold.co/600x400/f97316/white?text={text}"


def absolute_image_url(thumb_url: object, name: object = None, *, asset_base_url: str = "") -> str:
    """URL absoluta de la miniatura, o un placeholder con el nombre del curso."""

    placeholder = PLACEHOLDER_IMAGE.format(text=quote(as_str(name, "Course"), safe=""))
    url = as_str(thumb_url)
    if not url or "formfile" in url.lower():
        return placeholder
    if url.startswith("http") or url.startswith("data:"):
        return url
    base = asset_base_url.rstrip("/")
    return f"{base}{'' if url.startswith('/') else '/'}{url}"


def _departments(data: Mapping[str, Any]) -> list[CourseDepartment]:
    out: list[CourseDepartment] = []
    for raw in as_list(pick(data, "departments", "DepartmentInfo")):
        dept_id = as_opt_int(pick(raw, "departmentId", "id"))
        if dept_id is None:
            continue
        out.append(
            CourseDepartment(
                department_id=dept_id,
                department_name=as_str(pick(raw, "departmentName", "name")),
            )
        )
    return out


def _levels(data: Mapping[str, Any]) -> list[CourseLevel]:
    out: list[CourseLevel] = []
    for raw in as_list(pick(data, "eLevels", "EmployeeLevel")):
        level_id = as_opt_int(pick(raw, "eLevelId", "id"))
        if level_id is None:
            continue
        out.append(CourseLevel(level_id=level_id, level_name=as_str(pick(raw, "eLevelName", "name"))))
    return out


def _enrollment(data: Mapping[str, Any]) -> str:
    return "mandatory" if as_str(pick(data, "optional")) == MANDATORY else "optional"


def _learning_type(data: Mapping[str, Any]) -> str:
    return "offline" if as_str(pick(data, "format")).lower() == "offline" else "online"


def map_course(data: object, *, asset_base_url: str = "") -> Course:
    """Curso del API -> forma UI."""

    data = data if isinstance(data, Mapping) else {}
    name = pick(data, "name", "title")
    status = pick(data, "status")
    category = pick(data, "category")
    enrollment = _enrollment(data)
    user_ids = [
        as_str(pick(u, "id"))
        for u in as_list(pick(data, "students", "users"))
        if as_str(pick(u, "id"))
    ]
    return Course(
        id=as_str(pick(data, "id"), NOT_AVAILABLE),
        title=as_str(name, NOT_AVAILABLE),
        course_code=as_str(pick(data, "code", "courseCode"), NOT_AVAILABLE),
        description=as_str(pick(data, "description")),
        objectives=as_str(pick(data, "objectives")),
        image=absolute_image_url(pick(data, "thumbUrl"), name, asset_base_url=asset_base_url),
        location=as_str(pick(data, "location")),
        status=as_str(pick(status, "name"), NOT_AVAILABLE) if isinstance(status, Mapping) else as_str(status, NOT_AVAILABLE),
        status_id=as_opt_int(pick(status, "id")) if isinstance(status, Mapping) else as_opt_int(pick(data, "statusId")),
        enrollment_type=enrollment,
        is_public=enrollment != "mandatory",
        instructor=as_str(pick(pick(data, "lecturer"), "name"), NOT_AVAILABLE),
        duration=CourseDuration(
            sessions=as_int(pick(data, "sessions")),
            hours_per_session=as_float(pick(data, "hoursPerSessions")),
        ),
        learning_type=_learning_type(data),
        max_participants=as_opt_int(pick(data, "maxParticipant")),
        start_date=as_opt_str(pick(data, "startDate")),
        end_date=as_opt_str(pick(data, "endDate")),
        registration_start_date=as_opt_str(pick(data, "registrationStartDate")),
        registration_deadline=as_opt_str(pick(data, "registrationClosingDate")),
        departments=_departments(data),
        levels=_levels(data),
        category=as_ref(category, name_keys=("name", "categoryName"), default_name=NOT_AVAILABLE),
        user_ids=user_ids,
        created_at=as_opt_str(pick(data, "createdAt")),
        modified_at=as_opt_str(pick(data, "modifiedAt")),
        created_by=as_str(pick(data, "createdBy"), NOT_AVAILABLE),
        modified_by=as_str(pick(data, "updatedBy", "modifiedBy"), NOT_AVAILABLE),
    )


def map_enrolled_course(data: object, *, asset_base_url: str = "") -> Course:
    """Curso matriculado (DTO reducido de `/Courses/enroll-courses`) -> UI."""

    data = data if isinstance(data, Mapping) else {}
    name = pick(data, "name")
    enrollment = _enrollment(data)
    progress = pick(data, "progressPercentage")
    return Course(
        id=as_str(pick(data, "id"), NOT_AVAILABLE),
        title=as_str(name),
        course_code=as_str(pick(data, "code", "courseCode")),
        description=as_str(pick(data, "description")),
        objectives=as_str(pick(data, "objectives")),
        image=absolute_image_url(pick(data, "thumbUrl"), name, asset_base_url=asset_base_url),
        location=as_str(pick(data, "location")),
        status=OPEN_STATUS,
        enrollment_type=enrollment,
        is_public=enrollment != "mandatory",
        instructor=as_str(pick(data, "instructor"), NOT_AVAILABLE),
        duration=CourseDuration(
            sessions=as_int(pick(data, "sessions")),
            hours_per_session=as_float(pick(data, "hoursPerSessions")),
        ),
        learning_type=_learning_type(data),
        max_participants=as_opt_int(pick(data, "maxParticipant")),
        start_date=as_opt_str(pick(data, "startDate")),
        end_date=as_opt_str(pick(data, "endDate")),
        registration_start_date=as_opt_str(pick(data, "registrationStartDate")),
        registration_deadline=as_opt_str(pick(data, "registrationClosingDate")),
        progress_percentage=round(as_float(progress)) if progress else 0,
    )


def _iso(value: str | None) -> str | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).isoformat()
    except ValueError:
        return None


def course_create_payload(course: Course) -> dict[str, Any]:
    """UI -> payload de alta (claves PascalCase del backend)."""

    payload: dict[str, Any] = {
        "Code": course.course_code,
        "Name": course.title,
        "Description": course.description,
        "Objectives": course.objectives,
        "Format": course.learning_type,
        "Sessions": course.duration.sessions,
        "HoursPerSessions": course.duration.hours_per_session,
        "Optional": MANDATORY if course.enrollment_type == "mandatory" else OPTIONAL,
        "MaxParticipant": course.max_participants,
        "StartDate": _iso(course.start_date),
        "EndDate": _iso(course.end_date),
        "RegistrationStartDate": _iso(course.registration_start_date),
        "RegistrationClosingDate": _iso(course.registration_deadline),
        "Location": course.location,
        "StatusId": course.status_id,
        "DepartmentIds": [d.department_id for d in course.departments],
        "eLevelIds": [lv.level_id for lv in course.levels],
        "UserIds": list(course.user_ids),
    }
    if course.category is not None:
        payload["CategoryId"] = course.category.id
    if course.image_file is not None:
        payload["ThumbUrlFile"] = course.image_file
    return drop_none(payload)


def _differs(new: Any, old: Any) -> bool:
    if isinstance(new, list) and isinstance(old, list):
        return sorted(map(str, new)) != sorted(map(str, old))
    return new != old


def course_update_payload(course: Course, original: Course | None = None) -> dict[str, Any]:
    """UI -> payload de edición con solo los campos que cambian.

    Sin `original` se envían todos los campos (equivale al alta).
    """

    if original is None:
        return course_create_payload(course)

    new = course_create_payload(course.model_copy(update={"image_file": None}))
    old = course_create_payload(original.model_copy(update={"image_file": None}))
    payload: dict[str, Any] = {}
    for key, value in new.items():
        if _differs(value, old.get(key)):
            payload[key] = value
    # Sesiones y horas viajan juntas.
    if "Sessions" in payload or "HoursPerSessions" in payload:
        payload["Sessions"] = new.get("Sessions")
        payload["HoursPerSessions"] = new.get("HoursPerSessions")
    if course.category is None and original.category is not None:
        payload["CategoryId"] = None
    if course.image_file is not None:
        payload["ThumbUrlFile"] = course.image_file
    return payload
