from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest

from marklogic_client import Configuration, Connection, MarkLogicClient, reset_configuration


class FakeServer:
    """Routes requests by method, path and optional ``uri`` parameter."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: list[tuple[str, str, str | None, Callable[[httpx.Request], httpx.Response]]] = []

    def add(
        self,
        method: str,
        path: str,
        status_code: int = 200,
        *,
        uri: str | None = None,
        **kwargs,
    ) -> None:
        self.add_handler(method, path, lambda request: httpx.Response(status_code, **kwargs), uri=uri)

    def add_handler(
        self,
        method: str,
        path: str,
        handler: Callable[[httpx.Request], httpx.Response],
        *,
        uri: str | None = None,
    ) -> None:
        self._routes.append((method, path, uri, handler))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for method, path, uri, handler in self._routes:
            if request.method != method or request.url.path != path:
                continue
            if uri is not None and request.url.params.get("uri") != uri:
                continue
            return handler(request)
        return httpx.Response(404, text="no route")

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture(autouse=True)
def clear_configuration() -> None:
    reset_configuration()
    yield
    reset_configuration()


@pytest.fixture
def config() -> Configuration:
    return Configuration(
        host="ml-host",
        port=8010,
        username="ml-user",
        password="ml-pass",
        auth_type="basic",
    )


@pytest.fixture
def server() -> FakeServer:
    return FakeServer()


@pytest.fixture
def connection(config, server) -> Connection:
    conn = Connection(config, transport=httpx.MockTransport(server))
    yield conn
    conn.shutdown()


@pytest.fixture
def api(connection) -> MarkLogicClient:
    return MarkLogicClient(connection)
