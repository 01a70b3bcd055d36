"""Mapper de respuestas paginadas.

Formas aceptadas:
- `{items, pagination: {totalItems, itemsPerPage, currentPage}}`
- `{items, totalCount, page, pageSize}`
- una lista desnuda (una sola página con todo)
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from core.domain.models import PaginatedResult
from core.mappers._fields import as_int, as_list, pick

T = TypeVar("T")


def map_paginated(
    data: object,
    item_mapper: Callable[[Any], T],
    *,
    page: int = 1,
    page_size: int = 10,
) -> PaginatedResult[T]:
    """`page`/`page_size` son los valores pedidos; se usan si el cable no trae los suyos."""

    if isinstance(data, list):
        raw_items: list[Any] = data
        meta: object = {}
    else:
        raw_items = as_list(pick(data, "items", "data"))
        meta = pick(data, "pagination") or data

    items = [item_mapper(i) for i in raw_items]
    total = as_int(pick(meta, "totalItems", "totalCount"), len(items))
    size = as_int(pick(meta, "itemsPerPage", "pageSize", "limit"), page_size)
    current = as_int(pick(meta, "currentPage", "page"), page)
    return PaginatedResult(
        items=items,
        total_count=max(total, len(items)),
        page=max(current, 1),
        page_size=max(size, len(items), 1),
    )
