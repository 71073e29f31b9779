"""Connection settings for the MarkLogic client.

A ``Configuration`` is a plain mutable record. Pass one explicitly to
``Connection``; the process-wide default returned by
``get_configuration()`` is only used when a connection is created
without one.

Usage:
    from marklogic_client import configure

    configure(host="ml.example.com", username="admin", password="admin")

    # or, with a callback
    def setup(config):
        config.port = 8010
        config.auth_type = "basic"

    configure(setup)
"""

from collections.abc import Callable
from dataclasses import dataclass, fields
from enum import Enum
from functools import lru_cache
from typing import Any

from .exceptions import InvalidArgumentError


class AuthType(str, Enum):
    """HTTP authentication schemes supported by MarkLogic app servers."""

    BASIC = "basic"
    DIGEST = "digest"


@dataclass
class Configuration:
    """Host, port and credentials for one MarkLogic app server.

    No validation happens here; a bad host or port only shows up when a
    connection is attempted.
    """

    host: str = "localhost"
    port: int = 8000
    username: str | None = None
    password: str | None = None
    auth_type: AuthType | str = AuthType.DIGEST

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @property
    def has_credentials(self) -> bool:
        return self.username is not None and self.password is not None


@lru_cache(maxsize=1)
def get_configuration() -> Configuration:
    """Return the process-wide default configuration, creating it on first use."""

    return Configuration()


def configure(
    callback: Callable[[Configuration], Any] | None = None,
    **overrides: Any,
) -> Configuration:
    """Apply overrides to the process-wide configuration.

    Args:
        callback: Called with the mutable default configuration.
        **overrides: Field values to set, e.g. ``host="ml.local"``.

    Returns:
        The updated default configuration.

    Raises:
        InvalidArgumentError: If an override names an unknown field.
    """
    config = get_configuration()

    known = {f.name for f in fields(Configuration)}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise InvalidArgumentError(f"Unknown configuration option(s): {', '.join(unknown)}")

    for name, value in overrides.items():
        setattr(config, name, value)
    if callback is not None:
        callback(config)
    return config


def reset_configuration() -> None:
    """Forget the process-wide configuration; the next access rebuilds defaults."""
    get_configuration.cache_clear()
