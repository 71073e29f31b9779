from __future__ import annotations

import base64

import httpx
import pytest

from marklogic_client import (
    Configuration,
    Connection,
    ConnectionError,
    InvalidArgumentError,
    MarkLogicError,
    __version__,
)


def test_get_builds_url_and_query(connection, server):
    server.add("GET", "/v1/documents", json={"ok": True})

    response = connection.get("/v1/documents", {"uri": "/docs/a b.json", "format": "json"})

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    request = server.last_request
    assert request.url.host == "ml-host"
    assert request.url.port == 8010
    assert request.url.params["uri"] == "/docs/a b.json"
    assert request.url.params["format"] == "json"


def test_empty_params_send_no_query_string(connection, server):
    server.add("GET", "/v1/ping")

    connection.get("/v1/ping", {})

    assert server.last_request.url.query == b""


def test_default_headers(connection, server):
    server.add("GET", "/v1/ping")

    connection.get("/v1/ping")

    headers = server.last_request.headers
    assert headers["User-Agent"] == f"marklogic-client-python/{__version__}"
    assert headers["Content-Type"] == "application/json"
    assert headers["Accept"] == "application/json"


def test_caller_headers_override_defaults(connection, server):
    server.add("PUT", "/v1/documents", 201)

    connection.put("/v1/documents", "<a/>", {"content-type": "application/xml", "X-Extra": "1"})

    headers = server.last_request.headers
    assert headers.get_list("Content-Type") == ["application/xml"]
    assert headers["X-Extra"] == "1"
    assert server.last_request.content == b"<a/>"


@pytest.mark.parametrize("method", ["GET", "POST", "PUT", "DELETE", "HEAD"])
def test_supported_methods(connection, server, method):
    server.add(method, "/v1/resource", 204)

    response = connection.request(method.lower(), "/v1/resource")

    assert response.status_code == 204
    assert server.last_request.method == method


def test_post_sends_body(connection, server):
    server.add("POST", "/v1/eval")

    connection.post("/v1/eval", "xquery=1", {"Content-Type": "application/x-www-form-urlencoded"})

    assert server.last_request.content == b"xquery=1"


def test_delete_and_head_accept_params(connection, server):
    server.add("DELETE", "/v1/documents", 204)
    server.add("HEAD", "/v1/documents")

    connection.delete("/v1/documents", {}, {"uri": "/x.json"})
    assert server.last_request.url.params["uri"] == "/x.json"

    connection.head("/v1/documents", {"uri": "/y.json"})
    assert server.last_request.url.params["uri"] == "/y.json"


def test_non_2xx_response_is_returned_unmodified(connection, server):
    server.add("GET", "/v1/documents", 500, text="boom")

    response = connection.get("/v1/documents")

    assert response.status_code == 500
    assert response.text == "boom"


def test_unsupported_method_raises_before_io(connection, server):
    with pytest.raises(InvalidArgumentError, match="Unsupported HTTP method: PATCH"):
        connection.request("PATCH", "/v1/documents")

    assert server.requests == []


def test_basic_auth_header(connection, server):
    server.add("GET", "/v1/ping")

    connection.get("/v1/ping")

    expected = base64.b64encode(b"ml-user:ml-pass").decode()
    assert server.last_request.headers["Authorization"] == f"Basic {expected}"


def test_no_auth_without_credentials(server):
    server.add("GET", "/v1/ping")
    conn = Connection(Configuration(auth_type="basic"), transport=httpx.MockTransport(server))

    conn.get("/v1/ping")
    conn.shutdown()

    assert "Authorization" not in server.last_request.headers


def test_basic_auth_with_empty_password(server):
    server.add("GET", "/v1/ping")
    config = Configuration(username="ml-user", password="", auth_type="basic")
    conn = Connection(config, transport=httpx.MockTransport(server))

    conn.get("/v1/ping")
    conn.shutdown()

    expected = base64.b64encode(b"ml-user:").decode()
    assert server.last_request.headers["Authorization"] == f"Basic {expected}"


def test_digest_auth_answers_challenge(server):
    def handler(request):
        if "Authorization" not in request.headers:
            return httpx.Response(
                401,
                headers={
                    "WWW-Authenticate": 'Digest realm="public", nonce="abc123", qop="auth", algorithm=MD5'
                },
            )
        return httpx.Response(200, json={"ok": True})

    server.add_handler("GET", "/v1/ping", handler)
    config = Configuration(host="ml-host", username="ml-user", password="ml-pass")
    conn = Connection(config, transport=httpx.MockTransport(server))

    response = conn.get("/v1/ping")
    conn.shutdown()

    assert response.status_code == 200
    assert len(server.requests) == 2
    authorization = server.requests[1].headers["Authorization"]
    assert authorization.startswith("Digest ")
    assert 'username="ml-user"' in authorization


def test_digest_auth_is_reused_until_credentials_change(server):
    server.add("GET", "/v1/ping")
    config = Configuration(username="a", password="b")
    conn = Connection(config, transport=httpx.MockTransport(server))

    first = conn._auth()
    assert conn._auth() is first

    config.password = "changed"
    assert conn._auth() is not first
    conn.shutdown()


def test_unknown_auth_type(server):
    config = Configuration(username="a", password="b", auth_type="kerberos")
    conn = Connection(config, transport=httpx.MockTransport(server))

    with pytest.raises(InvalidArgumentError, match="kerberos"):
        conn.get("/v1/ping")
    conn.shutdown()

    assert server.requests == []


def test_transport_failure_raises_connection_error(connection, server):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    server.add_handler("GET", "/v1/documents", handler)

    with pytest.raises(ConnectionError, match="GET http://ml-host:8010/v1/documents") as excinfo:
        connection.get("/v1/documents")

    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)


def test_timeout_raises_connection_error(connection, server):
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    server.add_handler("GET", "/v1/documents", handler)

    with pytest.raises(ConnectionError, match="timed out"):
        connection.get("/v1/documents")


def test_other_failures_raise_generic_error(connection, server):
    def handler(request):
        raise RuntimeError("unexpected")

    server.add_handler("GET", "/v1/documents", handler)

    with pytest.raises(MarkLogicError, match="Request failed: RuntimeError - unexpected") as excinfo:
        connection.get("/v1/documents")

    assert not isinstance(excinfo.value, ConnectionError)


def test_shutdown_closes_http_client(config):
    conn = Connection(config)

    conn.shutdown()

    assert conn.http_client.is_closed


def test_context_manager_shuts_down(config):
    with Connection(config) as conn:
        assert not conn.http_client.is_closed

    assert conn.http_client.is_closed
