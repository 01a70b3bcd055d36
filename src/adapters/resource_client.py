"""Resource Client: el único componente que hace I/O contra la API REST.

Responsabilidad:
- Emitir GET/POST/PUT/PATCH/DELETE con el cliente httpx compartido.
- Serializar query params y cuerpos (JSON o multipart).
- Desenvolver `{success, message, data}` y devolver el valor desnudo.
- Convertir cualquier fallo en un `ClassifiedError` con método y ruta.

Los servicios de dominio componen este cliente; no heredan de él.
"""

from __future__ import annotations

from typing import Any, Callable, Generic, Mapping, NoReturn, TypeVar

import httpx
from pydantic import BaseModel

from adapters.http_client import build_async_client
from core.config import AppSettings
from core.domain.models import UploadFile
from core.errors import ErrorKind, classify, error_from_response
from core.logger import get_logger
from core.mappers._fields import as_list
from core.validation import path_id

logger = get_logger("qldt.http")

T = TypeVar("T")

TokenProvider = Callable[[], "str | None"]

# Claves que puede traer un sobre de respuesta además de `data`.
ENVELOPE_KEYS = frozenset({"success", "message", "data", "code", "statusCode", "errors", "accessToken"})


def _param_value(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def serialize_params(params: Mapping[str, Any] | None) -> list[tuple[str, str]]:
    """Query params -> lista de pares.

    Reglas: `None` y `""` se omiten; listas/tuplas se repiten como claves;
    booleanos como `true`/`false`.
    """

    out: list[tuple[str, str]] = []
    for key, value in (params or {}).items():
        if value is None or value == "":
            continue
        if isinstance(value, (list, tuple, set, frozenset)):
            for item in value:
                if item is None or item == "":
                    continue
                out.append((key, _param_value(item)))
            continue
        out.append((key, _param_value(value)))
    return out


class MultipartForm:
    """Cuerpo multipart/form-data: campos de texto y ficheros.

    Admite nombres indexados (`request[0].Title`) y claves repetidas
    (`DepartmentIds`). Los valores `None` se ignoran.
    """

    def __init__(self) -> None:
        self._fields: list[tuple[str, str]] = []
        self._files: list[tuple[str, UploadFile]] = []

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "MultipartForm":
        form = cls()
        for name, value in payload.items():
            if isinstance(value, UploadFile):
                form.add_file(name, value)
            else:
                form.add(name, value)
        return form

    @property
    def fields(self) -> list[tuple[str, str]]:
        return list(self._fields)

    @property
    def files(self) -> list[tuple[str, UploadFile]]:
        return list(self._files)

    def add(self, name: str, value: object) -> "MultipartForm":
        if value is None:
            return self
        if isinstance(value, (list, tuple)):
            for item in value:
                self.add(name, item)
            return self
        self._fields.append((name, _param_value(value)))
        return self

    def add_file(self, name: str, upload: UploadFile | None) -> "MultipartForm":
        if upload is not None:
            self._files.append((name, upload))
        return self

    def to_httpx(self) -> list[tuple[str, tuple[Any, ...]]]:
        parts: list[tuple[str, tuple[Any, ...]]] = [
            (name, (None, value.encode("utf-8"))) for name, value in self._fields
        ]
        parts.extend(
            (name, (f.filename, f.content, f.content_type)) for name, f in self._files
        )
        return parts

    def __len__(self) -> int:
        return len(self._fields) + len(self._files)


def _jsonable(body: object) -> Any:
    if isinstance(body, BaseModel):
        return body.model_dump(mode="json", exclude_none=True)
    if isinstance(body, (list, tuple)):
        return [_jsonable(b) for b in body]
    if isinstance(body, Mapping):
        return {k: _jsonable(v) for k, v in body.items()}
    return body


def decode_body(response: httpx.Response) -> object:
    """Cuerpo vacío -> None; JSON si se puede; si no, el texto."""

    if not response.content or not response.content.strip():
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def is_envelope(body: object) -> bool:
    return (
        isinstance(body, dict)
        and ("data" in body or "success" in body)
        and set(body).issubset(ENVELOPE_KEYS)
    )


class ResourceClient:
    """Cliente genérico de recursos sobre `httpx.AsyncClient`."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        token_provider: TokenProvider | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._client = client or build_async_client(self._settings)
        self._owns_client = client is None
        self._token_provider = token_provider

    @property
    def settings(self) -> AppSettings:
        return self._settings

    async def get(self, path: str, params: Mapping[str, Any] | None = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, body: object = None) -> Any:
        return await self.request("POST", path, body=body)

    async def put(self, path: str, body: object = None) -> Any:
        return await self.request("PUT", path, body=body)

    async def patch(self, path: str, body: object = None) -> Any:
        return await self.request("PATCH", path, body=body)

    async def delete(self, path: str, body: object = None) -> Any:
        """DELETE con cuerpo opcional (borrados masivos con `{"ids": [...]}`)."""

        return await self.request("DELETE", path, body=body)

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        body: object = None,
    ) -> Any:
        logger.debug("%s %s", method, path)
        try:
            kwargs: dict[str, Any] = {"headers": self._auth_headers()}
            if params:
                kwargs["params"] = serialize_params(params)
            if isinstance(body, MultipartForm):
                kwargs["files"] = body.to_httpx()
            elif body is not None:
                kwargs["json"] = _jsonable(body)
            response = await self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except Exception as exc:
            self.handle_error(method, path, exc)

        payload = decode_body(response)
        if not is_envelope(payload):
            return payload
        if payload.get("success") is False:
            status = payload.get("statusCode")
            status = status if isinstance(status, int) and status >= 400 else None
            error = error_from_response(
                status,
                payload,
                method=method,
                path=path,
                kind=None if status else ErrorKind.VALIDATION,
            )
            logger.warning("%s %s -> envelope failure (%s)", method, path, error.message)
            raise error
        return payload.get("data")

    def handle_error(self, method: str, path: str, raw: BaseException) -> NoReturn:
        """Convierte y relanza cualquier fallo con el contexto de la petición."""

        error = classify(raw, method=method, path=path)
        logger.warning("%s %s failed: kind=%s status=%s", method, path, error.kind.value, error.status)
        raise error from raw

    def _auth_headers(self) -> dict[str, str]:
        token = self._token_provider() if self._token_provider else self._settings.api_token
        if not token:
            return {}
        return {"Authorization": f"Bearer {token}"}

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "ResourceClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


class Crud(Generic[T]):
    """Funciones CRUD ligadas a una ruta y un mapper.

    Para recursos sin comportamiento propio (p.ej. cargos): el servicio
    compone un `Crud` en lugar de heredar de una clase base.
    """

    def __init__(
        self,
        client: ResourceClient,
        path: str,
        mapper: Callable[[Any], T],
        *,
        item_path: str | None = None,
    ) -> None:
        self._client = client
        self._path = path
        self._item_path = item_path or path + "/{id}"
        self._mapper = mapper

    def item(self, item_id: object) -> str:
        return self._item_path.format(id=path_id(item_id))

    async def list(self, params: Mapping[str, Any] | None = None) -> list[T]:
        body = await self._client.get(self._path, params)
        return [self._mapper(item) for item in as_list(body)]

    async def get(self, item_id: object) -> T:
        return self._mapper(await self._client.get(self.item(item_id)))

    async def create(self, payload: object) -> T:
        return self._mapper(await self._client.post(self._path, payload))

    async def update(self, item_id: object, payload: object) -> T | None:
        body = await self._client.put(self.item(item_id), payload)
        return self._mapper(body) if body is not None else None

    async def remove(self, item_id: object) -> None:
        await self._client.delete(self.item(item_id))

