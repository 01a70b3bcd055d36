"""Taxonomía de errores y manejador de errores.

Por qué un único tipo de error:
- Las capas superiores (caché, vistas, CLI) capturan solo `ClassifiedError`;
  nunca una excepción de transporte cruda.
- La clasificación ocurre una vez, en el borde del Resource Client; el resto
  de capas propaga el error sin envolverlo de nuevo.

Reglas de clasificación (por status HTTP):
- 401/403 -> authorization
- 404 -> not-found
- resto de 4xx -> validation
- 5xx -> server
- sin respuesta (fallo de transporte) -> network
- cualquier otra cosa -> client
"""

from __future__ import annotations

import contextlib
import logging
import time
from enum import Enum
from typing import Any, Callable, Mapping

import httpx
from pydantic import BaseModel, ConfigDict, Field

from core.error_messages import lookup_message
from core.logger import get_logger

logger = get_logger("qldt.errors")


class ErrorKind(str, Enum):
    """Tipos de error normalizados."""

    NETWORK = "network"
    VALIDATION = "validation"
    AUTHORIZATION = "authorization"
    NOT_FOUND = "not-found"
    SERVER = "server"
    CLIENT = "client"


FALLBACK_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.NETWORK: "Cannot reach the server. Check your connection and try again.",
    ErrorKind.VALIDATION: "The submitted data is invalid.",
    ErrorKind.AUTHORIZATION: "You do not have permission to perform this action.",
    ErrorKind.NOT_FOUND: "The requested resource was not found.",
    ErrorKind.SERVER: "The server failed to process the request. Please try again later.",
    ErrorKind.CLIENT: "An unknown error occurred. Please try again.",
}


class ErrorDetail(BaseModel):
    """Contenido inmutable de un error clasificado.

    `message` es el texto corto apto para el usuario; el resto es contexto
    para logs y diagnóstico.
    """

    model_config = ConfigDict(frozen=True)

    kind: ErrorKind
    message: str = Field(..., min_length=1)
    status: int | None = None
    code: str | None = None
    server_message: str | None = None
    errors: tuple[str, ...] = ()
    field_errors: dict[str, tuple[str, ...]] = Field(default_factory=dict)
    method: str | None = None
    path: str | None = None
    cause: str | None = Field(
        default=None,
        description="Representación de la excepción original (solo logs).",
    )


class ClassifiedError(Exception):
    """Error normalizado que cruza todas las capas."""

    def __init__(self, detail: ErrorDetail) -> None:
        super().__init__(detail.message)
        self._detail = detail

    @property
    def detail(self) -> ErrorDetail:
        return self._detail

    @property
    def kind(self) -> ErrorKind:
        return self._detail.kind

    @property
    def message(self) -> str:
        return self._detail.message

    @property
    def status(self) -> int | None:
        return self._detail.status

    @property
    def code(self) -> str | None:
        return self._detail.code

    @property
    def method(self) -> str | None:
        return self._detail.method

    @property
    def path(self) -> str | None:
        return self._detail.path

    @property
    def field_errors(self) -> dict[str, tuple[str, ...]]:
        return dict(self._detail.field_errors)

    def __str__(self) -> str:
        return self._detail.message

    def __repr__(self) -> str:
        return f"ClassifiedError(kind={self.kind.value!r}, status={self.status!r}, message={self.message!r})"


def kind_for_status(status: int | None) -> ErrorKind:
    """Función pura status HTTP -> tipo de error."""

    if status is None:
        return ErrorKind.NETWORK
    if status in (401, 403):
        return ErrorKind.AUTHORIZATION
    if status == 404:
        return ErrorKind.NOT_FOUND
    if 400 <= status < 500:
        return ErrorKind.VALIDATION
    if 500 <= status < 600:
        return ErrorKind.SERVER
    return ErrorKind.CLIENT


def _clean_str(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    s = value.strip()
    return s or None


def _parse_error_body(body: object) -> dict[str, Any]:
    """Extrae code/mensaje/errores de un cuerpo de error del servidor.

    Acepta `{code, message}`, problem details de ASP.NET (`title`, `detail`,
    `errors: {Campo: [..]}`), o una lista plana en `errors`.
    """

    out: dict[str, Any] = {"code": None, "server_message": None, "errors": (), "field_errors": {}}
    if isinstance(body, str):
        out["server_message"] = _clean_str(body) if len(body) <= 300 else None
        return out
    if not isinstance(body, Mapping):
        return out

    code = body.get("code") or body.get("errorCode")
    out["code"] = str(code).strip() if code not in (None, "") else None
    out["server_message"] = (
        _clean_str(body.get("message")) or _clean_str(body.get("title")) or _clean_str(body.get("detail"))
    )

    raw_errors = body.get("errors")
    if isinstance(raw_errors, list):
        out["errors"] = tuple(s for s in (_clean_str(e) for e in raw_errors) if s)
    elif isinstance(raw_errors, Mapping):
        field_errors: dict[str, tuple[str, ...]] = {}
        for name, messages in raw_errors.items():
            if isinstance(messages, str):
                messages = [messages]
            if not isinstance(messages, list):
                continue
            cleaned = tuple(s for s in (_clean_str(m) for m in messages) if s)
            if cleaned:
                field_errors[str(name)] = cleaned
        out["field_errors"] = field_errors
    return out


def resolve_message(kind: ErrorKind, code: str | None, server_message: str | None) -> str:
    """Tabla por código -> mensaje del servidor -> texto genérico del tipo."""

    return lookup_message(code) or server_message or FALLBACK_MESSAGES[kind]


def _response_body(response: httpx.Response) -> object:
    try:
        return response.json()
    except ValueError:
        return response.text


def error_from_response(
    status: int | None,
    body: object,
    *,
    method: str | None = None,
    path: str | None = None,
    kind: ErrorKind | None = None,
) -> ClassifiedError:
    """Construye el error a partir de un status y un cuerpo ya decodificado."""

    kind = kind or kind_for_status(status)
    parsed = _parse_error_body(body)
    return ClassifiedError(
        ErrorDetail(
            kind=kind,
            message=resolve_message(kind, parsed["code"], parsed["server_message"]),
            status=status,
            code=parsed["code"],
            server_message=parsed["server_message"],
            errors=parsed["errors"],
            field_errors=parsed["field_errors"],
            method=method,
            path=path,
        )
    )


def classify(raw: BaseException, *, method: str | None = None, path: str | None = None) -> ClassifiedError:
    """Convierte cualquier fallo en exactamente un `ClassifiedError`.

    Determinista: la misma condición produce siempre el mismo tipo. Un
    `ClassifiedError` se devuelve tal cual (nunca se re-envuelve).
    """

    if isinstance(raw, ClassifiedError):
        return raw

    if isinstance(raw, httpx.HTTPStatusError):
        response = raw.response
        return error_from_response(
            response.status_code,
            _response_body(response),
            method=method or raw.request.method,
            path=path or raw.request.url.path,
        )

    if isinstance(raw, httpx.TransportError):
        kind = ErrorKind.NETWORK
    else:
        kind = ErrorKind.CLIENT

    return ClassifiedError(
        ErrorDetail(
            kind=kind,
            message=FALLBACK_MESSAGES[kind],
            method=method,
            path=path,
            cause=f"{type(raw).__name__}: {raw}",
        )
    )


def invalid_argument(message: str, *, field: str | None = None) -> ClassifiedError:
    """Error de validación local (entrada inválida antes de cualquier I/O)."""

    field_errors = {field: (message,)} if field else {}
    return ClassifiedError(
        ErrorDetail(
            kind=ErrorKind.VALIDATION,
            message=message,
            server_message=message,
            field_errors=field_errors,
        )
    )


Notifier = Callable[[ClassifiedError], None]


class ErrorHandler:
    """Registra errores y decide si se muestra un aviso al usuario.

    Contrato:
    - `handle` siempre registra el error en el log.
    - Con `notify=True` llama al notifier como mucho una vez por
      (tipo, mensaje) dentro de `dedupe_seconds`, para que N peticiones
      paralelas fallidas produzcan un solo aviso.
    - Nunca lanza: un fallo al registrar/notificar no oculta el error original.
    """

    def __init__(
        self,
        notifier: Notifier | None = None,
        *,
        dedupe_seconds: float = 2.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._notifier = notifier
        self._dedupe_seconds = dedupe_seconds
        self._clock = clock
        self._last_notified: dict[tuple[ErrorKind, str], float] = {}

    def handle(self, error: BaseException, notify: bool = False) -> ClassifiedError:
        classified = classify(error)
        with contextlib.suppress(Exception):
            self._log(classified)
        if notify and self._notifier is not None:
            try:
                self._notify(classified)
            except Exception:
                with contextlib.suppress(Exception):
                    logger.exception("Error notifier failed for %r", classified)
        return classified

    def _log(self, error: ClassifiedError) -> None:
        level = logging.ERROR if error.kind in (ErrorKind.SERVER, ErrorKind.CLIENT) else logging.WARNING
        detail = error.detail
        logger.log(
            level,
            "[%s] %s %s -> %s (status=%s, code=%s)%s",
            detail.kind.value,
            detail.method or "-",
            detail.path or "-",
            detail.message,
            detail.status,
            detail.code,
            f" cause={detail.cause}" if detail.cause else "",
        )

    def _notify(self, error: ClassifiedError) -> None:
        now = self._clock()
        self._last_notified = {
            k: t for k, t in self._last_notified.items() if now - t < self._dedupe_seconds
        }
        key = (error.kind, error.message)
        if key in self._last_notified:
            return
        self._last_notified[key] = now
        assert self._notifier is not None
        self._notifier(error)
