"""Caché de consultas con deduplicación, stale-while-revalidate e invalidación.

Por qué una caché explícita:
- Las vistas piden datos por Query Key; la caché decide si hace falta red.
- Las mutaciones declaran qué claves invalidan, así las lecturas dependientes
  se vuelven a pedir en vez de divergir del servidor.

Protocolo por entrada:
- Como mucho una petición en vuelo por clave; las lecturas concurrentes se
  enganchan a ella (vía `asyncio.shield`, para que cancelar a un consumidor
  no cancele la petición compartida).
- Cada petición recibe un número de secuencia creciente. Una respuesta solo
  se escribe si su secuencia es mayor que la última aplicada y que la
  secuencia vigente en la última invalidación.
- Un fallo nunca toca el valor cacheado y no se cachea.

Todo ocurre en un único event loop: no hay locks.
"""

from __future__ import annotations

import asyncio
import inspect
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Sequence

from core.config import AppSettings
from core.errors import ClassifiedError, ErrorHandler, classify
from core.logger import get_logger
from core.query.keys import QueryKey, canonical_key, key_family, key_parts, matches_prefix
from core.query.mutations import Mutation, R, V

logger = get_logger("qldt.query")

Fetcher = Callable[[], Awaitable[Any]]


@dataclass
class CacheEntry:
    """Estado de una Query Key."""

    key: QueryKey
    parts: tuple[str, ...]
    value: Any = None
    has_value: bool = False
    updated_at: float | None = None
    invalidated: bool = False
    seq: int = 0
    applied_seq: int = 0
    invalidated_seq: int = 0
    in_flight: asyncio.Task | None = None
    subscribers: int = 0
    unobserved_since: float = field(default_factory=time.monotonic)


class Subscription:
    """Observador activo de una clave (cuenta de referencias)."""

    def __init__(self, cache: "QueryCache", canonical: str) -> None:
        self._cache = cache
        self._canonical = canonical
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._cache._release(self._canonical)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class QueryCache:
    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        error_handler: ErrorHandler | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._settings = settings or AppSettings()
        self._error_handler = error_handler or ErrorHandler(
            dedupe_seconds=self._settings.notify_dedupe_seconds
        )
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._background: set[asyncio.Task] = set()

    @property
    def settings(self) -> AppSettings:
        return self._settings

    @property
    def error_handler(self) -> ErrorHandler:
        return self._error_handler

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, (tuple, list)):
            return False
        return canonical_key(key) in self._entries

    # ------------------------------------------------------------------
    # Lecturas

    async def fetch(
        self,
        key: Sequence[object],
        fetcher: Fetcher,
        *,
        stale_seconds: float | None = None,
        force: bool = False,
    ) -> Any:
        """Devuelve el valor de `key`, pidiéndolo a `fetcher` si hace falta.

        - Fresco: se devuelve sin red.
        - Obsoleto por tiempo: se devuelve ya y se lanza una revalidación en
          segundo plano (solo si no hay otra en vuelo).
        - Ausente, invalidado o `force`: se espera a la petición en vuelo o
          se lanza una nueva.

        Raises:
            ClassifiedError: si la petición esperada falla.
        """

        entry = self._entry(key)
        if entry.subscribers == 0:
            entry.unobserved_since = self._clock()

        window = stale_seconds if stale_seconds is not None else self._settings.stale_seconds_for(key_family(key))

        if not force and entry.has_value and not entry.invalidated:
            if self._clock() - (entry.updated_at or 0.0) < window:
                return entry.value
            if entry.in_flight is None:
                self._start(entry, fetcher, background=True)
            return entry.value

        task = entry.in_flight or self._start(entry, fetcher)
        return await asyncio.shield(task)

    def get_query_data(self, key: Sequence[object]) -> Any:
        entry = self._entries.get(canonical_key(key))
        if entry is None or not entry.has_value:
            return None
        return entry.value

    def set_query_data(self, key: Sequence[object], value: Any) -> Any:
        """Escribe un valor directamente (p.ej. tras una mutación).

        `value` puede ser una función `old -> new`. La escritura cuenta como
        la respuesta más reciente: una petición anterior aún en vuelo ya no
        podrá sobrescribirla.
        """

        entry = self._entry(key)
        if callable(value):
            value = value(entry.value if entry.has_value else None)
        entry.seq += 1
        self._apply(entry, entry.seq, value)
        return value

    def is_stale(self, key: Sequence[object], stale_seconds: float | None = None) -> bool:
        entry = self._entries.get(canonical_key(key))
        if entry is None or not entry.has_value or entry.invalidated:
            return True
        window = stale_seconds if stale_seconds is not None else self._settings.stale_seconds_for(key_family(key))
        return self._clock() - (entry.updated_at or 0.0) >= window

    # ------------------------------------------------------------------
    # Invalidación y mutaciones

    def invalidate(self, prefix: Sequence[object]) -> int:
        """Marca obsoletas todas las entradas cuya clave empieza por `prefix`.

        Las peticiones en vuelo se desenganchan: su respuesta ya no se
        escribirá y la siguiente lectura lanzará una petición nueva.
        """

        parts = key_parts(prefix)
        count = 0
        for entry in self._entries.values():
            if not matches_prefix(entry.parts, parts):
                continue
            entry.invalidated = True
            entry.invalidated_seq = entry.seq
            entry.in_flight = None
            count += 1
        logger.debug("Invalidated %d cache entries for prefix %s", count, list(prefix))
        return count

    async def mutate(self, mutation: Mutation[V, R], variables: V) -> R:
        """Ejecuta una mutación e invalida sus destinos antes de `on_success`.

        Cada destino se invalida una sola vez aunque aparezca repetido. Los
        fallos pasan por el ErrorHandler y se relanzan clasificados.
        """

        try:
            result = await mutation.fn(variables)
        except Exception as exc:
            error = self._error_handler.handle(exc, notify=mutation.notify)
            if mutation.on_error is not None:
                await _maybe_await(mutation.on_error(error, variables))
            if error is exc:
                raise
            raise error from exc

        seen: set[str] = set()
        for target in mutation.targets(variables, result):
            canonical = canonical_key(target)
            if canonical in seen:
                continue
            seen.add(canonical)
            self.invalidate(target)

        if mutation.on_success is not None:
            await _maybe_await(mutation.on_success(result, variables))
        return result

    # ------------------------------------------------------------------
    # Observadores y recolección

    def subscribe(self, key: Sequence[object]) -> Subscription:
        entry = self._entry(key)
        entry.subscribers += 1
        return Subscription(self, canonical_key(key))

    def _release(self, canonical: str) -> None:
        entry = self._entries.get(canonical)
        if entry is None or entry.subscribers == 0:
            return
        entry.subscribers -= 1
        if entry.subscribers == 0:
            entry.unobserved_since = self._clock()

    def collect_garbage(self) -> int:
        """Elimina entradas sin observadores ni peticiones durante `gc_seconds`."""

        now = self._clock()
        expired = [
            canonical
            for canonical, entry in self._entries.items()
            if entry.subscribers == 0
            and entry.in_flight is None
            and now - entry.unobserved_since >= self._settings.gc_seconds
        ]
        for canonical in expired:
            del self._entries[canonical]
        if expired:
            logger.debug("Garbage-collected %d cache entries", len(expired))
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()

    # ------------------------------------------------------------------
    # Internos

    def _entry(self, key: Sequence[object]) -> CacheEntry:
        parts = key_parts(key)
        canonical = "[" + ",".join(parts) + "]"
        entry = self._entries.get(canonical)
        if entry is None:
            entry = CacheEntry(key=tuple(key), parts=parts, unobserved_since=self._clock())
            self._entries[canonical] = entry
        return entry

    def _start(self, entry: CacheEntry, fetcher: Fetcher, *, background: bool = False) -> asyncio.Task:
        entry.seq += 1
        task = asyncio.ensure_future(self._run(entry, fetcher, entry.seq))
        entry.in_flight = task
        if background:
            self._background.add(task)
        task.add_done_callback(lambda t: self._on_done(t, entry, background))
        return task

    async def _run(self, entry: CacheEntry, fetcher: Fetcher, seq: int) -> Any:
        try:
            value = await fetcher()
        except ClassifiedError:
            raise
        except Exception as exc:
            raise classify(exc) from exc
        self._apply(entry, seq, value)
        return value

    def _apply(self, entry: CacheEntry, seq: int, value: Any) -> bool:
        if self._entries.get(canonical_key(entry.key)) is not entry:
            return False
        if seq <= entry.applied_seq or seq <= entry.invalidated_seq:
            logger.debug("Discarded out-of-date response for %s (seq=%d)", list(entry.key), seq)
            return False
        entry.value = value
        entry.has_value = True
        entry.updated_at = self._clock()
        entry.invalidated = False
        entry.applied_seq = seq
        return True

    def _on_done(self, task: asyncio.Task, entry: CacheEntry, background: bool) -> None:
        if entry.in_flight is task:
            entry.in_flight = None
        self._background.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None and background:
            self._error_handler.handle(exc, notify=False)


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value
