"""Persistent HTTP connection to a MarkLogic app server."""

import logging
from enum import Enum
from typing import Any

import httpx

from .configuration import AuthType, Configuration, get_configuration
from .exceptions import ConnectionError, InvalidArgumentError, MarkLogicError
from .version import __version__

logger = logging.getLogger(__name__)

USER_AGENT = f"marklogic-client-python/{__version__}"

SUPPORTED_METHODS = ("GET", "POST", "PUT", "DELETE", "HEAD")


class Connection:
    """One reusable HTTP client bound to a single configuration.

    Args:
        config: Server settings. Falls back to the process-wide default
            from ``get_configuration()`` when omitted.
        timeout: Request timeout in seconds, passed to ``httpx.Client``.
        transport: Optional ``httpx`` transport, e.g. ``httpx.MockTransport``.

    A connection is meant for one caller at a time. Call ``shutdown()``
    (or use it as a context manager) to release the underlying pool.

    Example:
        >>> with Connection(Configuration(host="ml.local")) as conn:
        ...     response = conn.get("/v1/ping")
    """

    def __init__(
        self,
        config: Configuration | None = None,
        *,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.config = config if config is not None else get_configuration()
        self._client = httpx.Client(timeout=timeout, transport=transport)
        self._digest_auth: httpx.DigestAuth | None = None
        self._digest_credentials: tuple[str, str] | None = None

    @property
    def http_client(self) -> httpx.Client:
        return self._client

    def shutdown(self) -> None:
        """Close the HTTP client and its pooled connections."""
        self._client.close()

    close = shutdown

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, *args: Any) -> None:
        self.shutdown()

    def request(
        self,
        method: str,
        path: str,
        headers: dict[str, str] | None = None,
        body: Any = None,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Send a request and return the raw response, whatever its status.

        Args:
            method: One of GET, POST, PUT, DELETE or HEAD (any case).
            path: Request path, e.g. ``"/v1/documents"``.
            headers: Headers overriding the defaults.
            body: Request body (str, bytes or an iterable of bytes).
            params: Query parameters.

        Raises:
            InvalidArgumentError: Unsupported method or auth type.
            ConnectionError: The transport failed (connect, reset, timeout).
            MarkLogicError: Any other failure while sending.
        """
        verb = str(method).upper()
        if verb not in SUPPORTED_METHODS:
            raise InvalidArgumentError(f"Unsupported HTTP method: {method}")

        url = f"{self.config.base_url}{path}"
        auth = self._auth()

        try:
            request = self._client.build_request(
                verb,
                url,
                params=self._encode_params(params),
                headers=self._build_headers(headers),
                content=body,
            )
            response = self._client.send(request, auth=auth)
        except httpx.TransportError as e:
            raise ConnectionError(f"Connection error: {e} for {verb} {url}") from e
        except Exception as e:
            raise MarkLogicError(
                f"Request failed: {type(e).__name__} - {e} for {verb} {url}"
            ) from e

        logger.debug("%s %s -> %s", verb, response.request.url, response.status_code)
        return response

    def get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        return self.request("GET", path, headers, None, params)

    def post(
        self,
        path: str,
        body: Any = None,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        return self.request("POST", path, headers, body, params)

    def put(
        self,
        path: str,
        body: Any = None,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        return self.request("PUT", path, headers, body, params)

    def delete(
        self,
        path: str,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        return self.request("DELETE", path, headers, None, params)

    def head(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        return self.request("HEAD", path, headers, None, params)

    def _build_headers(self, headers: dict[str, str] | None) -> httpx.Headers:
        merged = httpx.Headers(
            {
                "User-Agent": USER_AGENT,
                "Content-Type": "application/json",
                "Accept": "application/json",
            }
        )
        if headers:
            merged.update(headers)
        return merged

    def _encode_params(self, params: dict[str, Any] | None) -> dict[str, Any] | None:
        if not params:
            return None
        return {
            key: value.value if isinstance(value, Enum) else value
            for key, value in params.items()
        }

    def _auth(self) -> httpx.Auth | None:
        """Resolve the auth flow for the configured credentials.

        Digest auth is kept on the connection so the server's challenge
        (nonce) is reused across requests.
        """
        config = self.config
        if not config.has_credentials:
            return None

        try:
            auth_type = AuthType(config.auth_type)
        except ValueError:
            raise InvalidArgumentError(f"Unsupported auth_type: {config.auth_type}") from None

        if auth_type is AuthType.BASIC:
            return httpx.BasicAuth(config.username, config.password)

        credentials = (config.username, config.password)
        if self._digest_auth is None or self._digest_credentials != credentials:
            self._digest_auth = httpx.DigestAuth(*credentials)
            self._digest_credentials = credentials
        return self._digest_auth
