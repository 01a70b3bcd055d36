"""Helpers de lectura tolerante para payloads del cable.

Todas las funciones son totales: un campo ausente o de tipo inesperado
devuelve el `default`, nunca lanza.
"""

from __future__ import annotations

import math
from typing import Any, Mapping

from core.domain.models import NamedRef


def pick(data: object, *names: str, default: Any = None) -> Any:
    """Primer valor no-None entre `names`, sin distinguir mayúsculas.

    Ejemplo: `pick(d, "departmentName", "name")` encuentra `DepartmentName`.
    """

    if not isinstance(data, Mapping):
        return default
    lowered: dict[str, Any] | None = None
    for name in names:
        if name in data and data[name] is not None:
            return data[name]
        if lowered is None:
            lowered = {str(k).lower(): v for k, v in data.items()}
        value = lowered.get(name.lower())
        if value is not None:
            return value
    return default


def as_str(value: object, default: str = "") -> str:
    if value is None:
        return default
    if isinstance(value, str):
        return value if value.strip() else default
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return default


def as_opt_str(value: object) -> str | None:
    s = as_str(value)
    return s or None


def as_int(value: object, default: int = 0) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else default
    if isinstance(value, str):
        try:
            return int(float(value.strip()))
        except (ValueError, OverflowError):
            return default
    return default


def as_opt_int(value: object) -> int | None:
    if isinstance(value, (bool, int, float)):
        return as_int(value)
    if isinstance(value, str):
        try:
            return int(float(value.strip()))
        except (ValueError, OverflowError):
            return None
    return None


def as_float(value: object, default: float = 0.0) -> float:
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except (ValueError, OverflowError):
            return default
    return default


def as_bool(value: object, default: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes"):
            return True
        if lowered in ("false", "0", "no"):
            return False
    return default


def as_list(value: object) -> list[Any]:
    if isinstance(value, list):
        return value
    if isinstance(value, tuple):
        return list(value)
    return []


def as_dict(value: object) -> dict[str, Any]:
    if isinstance(value, Mapping):
        return dict(value)
    return {}


def drop_none(payload: Mapping[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in payload.items() if v is not None}


def as_ref(value: object, *, name_keys: tuple[str, ...] = ("name",), default_name: str = "") -> NamedRef | None:
    """`{id, name}` -> NamedRef; None si no hay un id utilizable."""

    ref_id = pick(value, "id")
    if isinstance(ref_id, bool) or not isinstance(ref_id, (int, str)):
        return None
    return NamedRef(id=ref_id, name=as_str(pick(value, *name_keys), default_name))
