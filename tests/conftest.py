"""
Shared pytest fixtures.

HTTP is stubbed with `httpx.MockTransport`: no test touches the network.
"""

import json
from typing import Callable

import httpx
import pytest

from adapters.http_client import build_async_client
from adapters.resource_client import ResourceClient
from core.config import AppSettings

API_BASE = "http://api.test/api"

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def settings() -> AppSettings:
    """Settings isolated from any .env on the machine."""
    return AppSettings(
        _env_file=None,
        api_base_url=API_BASE,
        api_token="test-token",
        default_page_size=10,
        max_page_size=24,
    )


@pytest.fixture
def make_client(settings: AppSettings) -> Callable[[Handler], ResourceClient]:
    """Builds a ResourceClient whose requests are answered by `handler`."""

    def _make(handler: Handler) -> ResourceClient:
        http = build_async_client(settings, transport=httpx.MockTransport(handler))
        return ResourceClient(settings, client=http)

    return _make


def json_response(status: int, body: object = None) -> httpx.Response:
    if body is None:
        return httpx.Response(status)
    return httpx.Response(status, json=body)


def request_json(request: httpx.Request) -> object:
    return json.loads(request.content.decode("utf-8")) if request.content else None
