"""Query Keys: identificadores por valor de lecturas cacheadas.

Una clave es una tupla de primitivos (`str`, `int`, `float`, `bool`, `None`)
y, opcionalmente, mappings de filtros. La forma canónica (JSON con claves
ordenadas y filtros `None` eliminados) es la clave real del mapa de caché:
dos claves estructuralmente iguales comparten estado aunque sean objetos
distintos.
"""

from __future__ import annotations

import json
from typing import Any, Mapping, Sequence

from pydantic import BaseModel

QueryKey = tuple[Any, ...]

_PRIMITIVES = (str, int, float, bool, type(None))


def normalize_part(part: object) -> Any:
    """Convierte una parte de la clave a una forma JSON estable."""

    if isinstance(part, _PRIMITIVES):
        return part
    if isinstance(part, BaseModel):
        return normalize_part(part.model_dump(exclude_none=True))
    if isinstance(part, Mapping):
        return {
            str(k): normalize_part(v)
            for k, v in sorted(part.items(), key=lambda kv: str(kv[0]))
            if v is not None
        }
    if isinstance(part, (list, tuple)):
        return [normalize_part(v) for v in part]
    raise TypeError(f"Unsupported query key part: {type(part).__name__}")


def _dump(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def key_parts(key: Sequence[object]) -> tuple[str, ...]:
    """Forma canónica parte a parte (base del matching por prefijo)."""

    if isinstance(key, (str, bytes)):
        raise TypeError("A query key must be a sequence of parts, not a string")
    return tuple(_dump(normalize_part(p)) for p in key)


def canonical_key(key: Sequence[object]) -> str:
    return "[" + ",".join(key_parts(key)) + "]"


def matches_prefix(parts: tuple[str, ...], prefix: tuple[str, ...]) -> bool:
    return parts[: len(prefix)] == prefix


def key_family(key: Sequence[object]) -> str:
    """Familia de la clave: su primer elemento (p.ej. `"lessons"`)."""

    return str(key[0]) if len(key) else ""
