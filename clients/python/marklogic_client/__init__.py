"""MarkLogic Python Client.

A Python client for the MarkLogic REST API, with an ORM-style model layer.

Usage:
    from marklogic_client import Configuration, Connection, MarkLogicClient

    config = Configuration(host="localhost", port=8000, username="admin", password="admin")
    client = MarkLogicClient(Connection(config))

    # Write and read a document
    client.write_document("/docs/1.json", {"title": "Hello"})
    doc = client.read_document("/docs/1.json", format="json").json()

    # Search
    results = client.search("hello", options={"pageLength": 10}).json()

    # Evaluate code
    client.eval_code("1 + 1", type="javascript")

    client.close()
"""

from .client import MarkLogicClient
from .configuration import (
    AuthType,
    Configuration,
    configure,
    get_configuration,
    reset_configuration,
)
from .connection import Connection
from .exceptions import (
    APIError,
    AuthenticationError,
    ConnectionError,
    InvalidArgumentError,
    MarkLogicError,
    RecordNotFound,
    UnknownAttributeError,
)
from .model import Attribute, Model
from .types import (
    BinaryContent,
    CodeType,
    Format,
    JSONContent,
    Permission,
    SearchResultItem,
    SearchResults,
    TextContent,
    XMLContent,
)
from .version import __version__

__all__ = [
    "MarkLogicClient",
    "Connection",
    "Configuration",
    "AuthType",
    "configure",
    "get_configuration",
    "reset_configuration",
    "MarkLogicError",
    "ConnectionError",
    "AuthenticationError",
    "APIError",
    "InvalidArgumentError",
    "UnknownAttributeError",
    "RecordNotFound",
    "Attribute",
    "Model",
    "Format",
    "CodeType",
    "Permission",
    "JSONContent",
    "XMLContent",
    "TextContent",
    "BinaryContent",
    "SearchResultItem",
    "SearchResults",
    "__version__",
]
