"""Lecturas de colecciones y de entidades con la política de "vacío esperado".

Política (por código de estado, nunca por texto del mensaje):
- 404 en una colección anidada (lecciones de un curso sin lecciones) -> `[]`.
- Cuerpo nulo en una lectura de colección -> `[]`.
- 404 en una entidad concreta -> se propaga como `not-found`.
Cualquier otro error (incluido 403) se propaga sin tocar.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, TypeVar

from adapters.resource_client import ResourceClient
from core.errors import ClassifiedError, ErrorKind, error_from_response
from core.logger import get_logger
from core.mappers._fields import as_list, pick

logger = get_logger("qldt.services")

T = TypeVar("T")


def as_collection(body: object) -> list[Any]:
    """Cuerpo de colección -> lista (acepta `{items}`/`{data}` y `None`)."""

    if isinstance(body, Mapping):
        body = pick(body, "items", "data")
    return as_list(body)


async def read_collection(
    client: ResourceClient,
    path: str,
    mapper: Callable[[Any], T],
    params: Mapping[str, Any] | None = None,
) -> list[T]:
    body = await client.get(path, params)
    return [mapper(item) for item in as_collection(body)]


async def read_nested_collection(
    client: ResourceClient,
    path: str,
    mapper: Callable[[Any], T],
    params: Mapping[str, Any] | None = None,
) -> list[T]:
    """Como `read_collection`, pero un 404 significa "todavía no hay ninguno"."""

    try:
        body = await client.get(path, params)
    except ClassifiedError as exc:
        if exc.kind is ErrorKind.NOT_FOUND:
            logger.debug("GET %s -> 404, treated as empty collection", path)
            return []
        raise
    return [mapper(item) for item in as_collection(body)]


async def read_entity(
    client: ResourceClient,
    path: str,
    mapper: Callable[[Any], T],
    params: Mapping[str, Any] | None = None,
) -> T:
    body = await client.get(path, params)
    if body is None:
        raise error_from_response(404, None, method="GET", path=path)
    return mapper(body)
