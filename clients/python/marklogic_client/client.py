"""MarkLogic REST API client."""

import json
import logging
from collections.abc import Iterable, Mapping
from typing import Any
from urllib.parse import urlencode

import httpx

from .connection import Connection
from .exceptions import APIError, AuthenticationError
from .types import CodeType, Format, Permission, as_content

logger = logging.getLogger(__name__)

DOCUMENTS_PATH = "/v1/documents"
SEARCH_PATH = "/v1/search"
EVAL_PATH = "/v1/eval"


class MarkLogicClient:
    """Client for the MarkLogic REST API.

    Args:
        connection: Connection to issue requests on. A new one built
            from the process-wide configuration is used when omitted.

    Every method returns the raw ``httpx.Response`` for 2xx statuses and
    raises ``AuthenticationError`` (401) or ``APIError`` otherwise.

    Example:
        >>> client = MarkLogicClient(Connection(Configuration(host="ml.local")))
        >>> client.write_document("/docs/1.json", {"title": "Hello"})
        >>> client.read_document("/docs/1.json", format="json").json()
        {'title': 'Hello'}
    """

    def __init__(self, connection: Connection | None = None):
        self.connection = connection if connection is not None else Connection()

    def close(self) -> None:
        """Shut down the underlying connection."""
        self.connection.shutdown()

    def __enter__(self) -> "MarkLogicClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def write_document(
        self,
        uri: str,
        document: Any,
        *,
        collections: Iterable[str] | str | None = None,
        permissions: Iterable[Permission | Mapping[str, Any]] | None = None,
        format: Format | str | None = None,  # noqa: A002
        txid: str | None = None,
    ) -> httpx.Response:
        """Create or replace a document.

        Args:
            uri: Document URI.
            document: A content kind (``JSONContent``, ``XMLContent``, ...)
                or a raw value. Raw mappings/lists are JSON unless
                ``format`` says otherwise; other raw values are XML.
            collections: Collections to add the document to.
            permissions: ``Permission`` objects or mappings with
                ``role_name`` and ``capabilities``.
            format: Document format; also sent as the ``format`` parameter.
            txid: Multi-statement transaction ID.

        Returns:
            The server response.

        Raises:
            InvalidArgumentError: A permission is malformed or the format is unknown.
        """
        params: dict[str, Any] = {"uri": uri}
        if collections:
            if isinstance(collections, str):
                collections = [collections]
            params["collection"] = ",".join(collections)
        for perm in permissions or []:
            name, capabilities = Permission.from_value(perm).to_param()
            params[name] = capabilities
        doc_format = Format.coerce(format) if format is not None else None
        if doc_format is not None:
            params["format"] = doc_format.value
        if txid:
            params["txid"] = txid

        content = as_content(document, doc_format)
        headers = {"Content-Type": content.format.content_type}

        response = self.connection.put(DOCUMENTS_PATH, content.to_body(), headers, params)
        return self._handle_response(response)

    def read_document(
        self,
        uri: str,
        *,
        format: Format | str | None = None,  # noqa: A002
        txid: str | None = None,
    ) -> httpx.Response:
        """Read a document.

        Args:
            uri: Document URI.
            format: Format to return the document in; server default if omitted.
            txid: Multi-statement transaction ID.
        """
        params: dict[str, Any] = {"uri": uri}
        if format is not None:
            params["format"] = Format.coerce(format).value
        if txid:
            params["txid"] = txid

        response = self.connection.get(DOCUMENTS_PATH, params)
        return self._handle_response(response)

    def delete_document(self, uri: str, *, txid: str | None = None) -> httpx.Response:
        """Delete a document."""
        params: dict[str, Any] = {"uri": uri}
        if txid:
            params["txid"] = txid

        response = self.connection.delete(DOCUMENTS_PATH, {}, params)
        return self._handle_response(response)

    def search(
        self,
        query: str,
        *,
        options: Mapping[str, Any] | None = None,
        txid: str | None = None,
    ) -> httpx.Response:
        """Run a string query against ``/v1/search``.

        Args:
            query: Search string, sent as ``q``.
            options: Extra query parameters (``format``, ``start``,
                ``pageLength``, ``options``, ...).
            txid: Multi-statement transaction ID.

        Returns:
            The server response; XML when ``options["format"]`` is xml,
            JSON otherwise.
        """
        options = dict(options or {})
        params: dict[str, Any] = {"q": query, **options}
        if txid:
            params["txid"] = txid

        accept_format = Format.coerce(options.get("format") or Format.JSON)
        accept = "application/xml" if accept_format is Format.XML else "application/json"

        response = self.connection.get(SEARCH_PATH, params, {"Accept": accept})
        return self._handle_response(response)

    def eval_code(
        self,
        code: str,
        *,
        type: CodeType | str = CodeType.XQUERY,  # noqa: A002
        vars: Mapping[str, Any] | None = None,  # noqa: A002
        database: str | None = None,
        txid: str | None = None,
    ) -> httpx.Response:
        """Evaluate XQuery or server-side JavaScript.

        Args:
            code: Source to evaluate.
            type: ``"xquery"`` (default) or ``"javascript"``.
            vars: External variables, sent as a JSON string.
            database: Database to evaluate against.
            txid: Multi-statement transaction ID.

        Returns:
            The raw response. The body is usually ``multipart/mixed`` and
            is not decoded here.
        """
        form: dict[str, str] = {CodeType.coerce(type).value: code}
        if vars:
            form["vars"] = json.dumps(vars)
        if database:
            form["database"] = database
        if txid:
            form["txid"] = txid

        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Accept": "multipart/mixed",
        }
        response = self.connection.post(EVAL_PATH, urlencode(form), headers)
        return self._handle_response(response)

    def _handle_response(self, response: httpx.Response) -> httpx.Response:
        """Pass 2xx responses through; raise for everything else."""
        status = response.status_code
        if 200 <= status < 300:
            return response

        logger.warning("MarkLogic returned HTTP %s: %s", status, response.text[:200])
        if status == 401:
            raise AuthenticationError("Authentication failed", status, response.text)
        if status == 404:
            raise APIError("Resource not found or API endpoint not found", status, response.text)
        raise APIError("MarkLogic API Error", status, response.text)
