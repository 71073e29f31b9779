"""Type definitions for MarkLogic client."""

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from .exceptions import InvalidArgumentError


class Format(str, Enum):
    """Document formats understood by the REST API."""

    JSON = "json"
    XML = "xml"
    TEXT = "text"
    BINARY = "binary"

    @property
    def content_type(self) -> str:
        return _CONTENT_TYPES[self]

    @classmethod
    def coerce(cls, value: "Format | str") -> "Format":
        """Accept a member or its string value."""
        try:
            return cls(value)
        except ValueError:
            raise InvalidArgumentError(f"Unsupported document format: {value!r}") from None


_CONTENT_TYPES = {
    Format.JSON: "application/json",
    Format.XML: "application/xml",
    Format.TEXT: "text/plain",
    Format.BINARY: "application/octet-stream",
}


class CodeType(str, Enum):
    """Languages accepted by the ``/v1/eval`` endpoint."""

    XQUERY = "xquery"
    JAVASCRIPT = "javascript"

    @classmethod
    def coerce(cls, value: "CodeType | str") -> "CodeType":
        """Accept a member or its string value."""
        try:
            return cls(value)
        except ValueError:
            raise InvalidArgumentError(f"Unsupported code type: {value!r}") from None


@dataclass
class Permission:
    """A role and the capabilities it is granted on a document."""

    role_name: str
    capabilities: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        capabilities = self.capabilities
        if isinstance(capabilities, str):
            self.capabilities = [capabilities]
        elif isinstance(capabilities, bytes) or not isinstance(capabilities, Iterable):
            raise InvalidArgumentError(
                f"Malformed permission for role {self.role_name!r}: "
                f"capabilities must be a string or a list of strings, got {capabilities!r}"
            )
        else:
            self.capabilities = list(capabilities)

    @classmethod
    def from_value(cls, value: "Permission | Mapping[str, Any]") -> "Permission":
        """Create Permission from a Permission or a mapping.

        The mapping must carry ``role_name`` and ``capabilities``;
        ``capabilities`` may be a single string.
        """
        if isinstance(value, Permission):
            return value
        if not isinstance(value, Mapping) or "role_name" not in value or "capabilities" not in value:
            raise InvalidArgumentError(
                f"Malformed permission {value!r}: expected role_name and capabilities"
            )
        return cls(role_name=str(value["role_name"]), capabilities=value["capabilities"])

    def to_param(self) -> tuple[str, str]:
        """Return the ``perm:<role>`` query parameter for this permission."""
        return f"perm:{self.role_name}", ",".join(str(c) for c in self.capabilities)


@dataclass
class JSONContent:
    """A JSON document. Mappings and lists are serialized, strings sent as-is."""

    value: Any
    format = Format.JSON

    def to_body(self) -> str | bytes:
        if isinstance(self.value, (str, bytes)):
            return self.value
        return json.dumps(self.value)


@dataclass
class XMLContent:
    """An XML document as text."""

    text: str | bytes
    format = Format.XML

    def to_body(self) -> str | bytes:
        return self.text


@dataclass
class TextContent:
    """A plain text document."""

    text: str | bytes
    format = Format.TEXT

    def to_body(self) -> str | bytes:
        return self.text


@dataclass
class BinaryContent:
    """A binary document."""

    data: bytes
    format = Format.BINARY

    def to_body(self) -> bytes:
        return self.data


Content = Union[JSONContent, XMLContent, TextContent, BinaryContent]

_CONTENT_KINDS: dict[Format, type] = {
    Format.JSON: JSONContent,
    Format.XML: XMLContent,
    Format.TEXT: TextContent,
    Format.BINARY: BinaryContent,
}


def as_content(document: Any, format: Format | str | None = None) -> Content:  # noqa: A002
    """Wrap a raw document in its content kind.

    Explicit content kinds pass through. Otherwise ``format`` decides;
    without it a mapping or list is JSON and anything else is XML.
    """
    if isinstance(document, (JSONContent, XMLContent, TextContent, BinaryContent)):
        return document
    if format is not None:
        return _CONTENT_KINDS[Format.coerce(format)](document)
    if isinstance(document, (Mapping, list)):
        return JSONContent(document)
    return XMLContent(document)


@dataclass
class SearchResultItem:
    """A single match from ``/v1/search``."""

    uri: str | None
    format: str | None = None
    content: Any = None
    index: int | None = None
    score: float | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SearchResultItem":
        """Create SearchResultItem from dictionary."""
        return cls(
            uri=data.get("uri"),
            format=data.get("format"),
            content=data.get("content"),
            index=data.get("index"),
            score=data.get("score"),
        )

    @property
    def has_json_content(self) -> bool:
        """True when the match carries an inline JSON object."""
        return self.format == Format.JSON.value and isinstance(self.content, dict)


@dataclass
class SearchResults:
    """Parsed JSON search response."""

    results: list[SearchResultItem]
    total: int = 0
    start: int = 1
    page_length: int = 0

    @classmethod
    def from_response(cls, response: dict[str, Any]) -> "SearchResults":
        """Create SearchResults from a search response body."""
        results = [SearchResultItem.from_dict(r) for r in response.get("results") or []]
        return cls(
            results=results,
            total=response.get("total", len(results)),
            start=response.get("start", 1),
            page_length=response.get("page-length", len(results)),
        )
