"""Validación de argumentos antes de cualquier I/O.

Los servicios rechazan identificadores vacíos o no positivos con un
`ClassifiedError` de tipo `validation`, el mismo contrato que un 400 del
servidor.
"""

from __future__ import annotations

from typing import Iterable
from urllib.parse import quote

from core.errors import invalid_argument


def require_id(value: object, field: str = "id") -> str:
    """Identificador no vacío (string o entero positivo) -> string."""

    if isinstance(value, bool):
        raise invalid_argument(f"{field} must be a non-empty identifier", field=field)
    if isinstance(value, int):
        return str(require_positive(value, field))
    if not isinstance(value, str) or not value.strip():
        raise invalid_argument(f"{field} must be a non-empty identifier", field=field)
    return value.strip()


def path_id(value: object, field: str = "id") -> str:
    """Identificador listo para una plantilla de ruta.

    Por qué existe:
    - Un `/`, `?` o `#` dentro del id no debe cambiar el endpoint destino.
    """

    return quote(require_id(value, field), safe="")


def require_positive(value: object, field: str = "id") -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise invalid_argument(f"{field} must be a positive integer", field=field)
    return value


def require_ids(values: Iterable[object], field: str = "ids") -> list[int]:
    ids = [require_positive(v, field) for v in values]
    if not ids:
        raise invalid_argument(f"{field} must not be empty", field=field)
    return ids


def require_str_ids(values: Iterable[object], field: str = "ids") -> list[str]:
    ids = [require_id(v, field) for v in values]
    if not ids:
        raise invalid_argument(f"{field} must not be empty", field=field)
    return ids
