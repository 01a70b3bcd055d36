"""Descriptores de mutación."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Iterable, Sequence, TypeVar, Union

from core.errors import ClassifiedError
from core.query.keys import QueryKey

V = TypeVar("V")
R = TypeVar("R")

InvalidationTargets = Union[
    Sequence[QueryKey],
    Callable[[Any, Any], Iterable[QueryKey]],
]


@dataclass(frozen=True)
class Mutation(Generic[V, R]):
    """Operación de escritura y las claves que deja obsoletas.

    `invalidates` puede ser una lista fija de claves/prefijos o una función
    `(variables, result) -> claves`, para mutaciones cuyo destino depende de
    la entrada (p.ej. `("lessons", course_id)`).

    Los callbacks pueden ser síncronos o async.
    """

    fn: Callable[[V], Awaitable[R]]
    invalidates: InvalidationTargets = ()
    on_success: Callable[[R, V], Any] | None = None
    on_error: Callable[[ClassifiedError, V], Any] | None = None
    notify: bool = True
    name: str = ""

    def targets(self, variables: V, result: R) -> list[QueryKey]:
        if callable(self.invalidates):
            return [tuple(k) for k in self.invalidates(variables, result)]
        return [tuple(k) for k in self.invalidates]
