"""MarkLogic client exceptions."""


class MarkLogicError(Exception):
    """Base exception for MarkLogic client errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response_body = response_body


class ConnectionError(MarkLogicError):
    """Transport failure talking to the MarkLogic server."""

    pass


class AuthenticationError(MarkLogicError):
    """The server rejected the credentials (HTTP 401)."""

    pass


class APIError(MarkLogicError):
    """The REST API answered with a non-2xx status.

    The string form includes the HTTP status and response body when
    they are known.
    """

    def __str__(self) -> str:
        text = self.message
        if self.status_code is not None:
            text += f" (HTTP {self.status_code})"
        if self.response_body:
            text += f"\nResponse: {self.response_body}"
        return text


class InvalidArgumentError(MarkLogicError, ValueError):
    """A caller passed a value the client cannot send."""

    pass


class UnknownAttributeError(InvalidArgumentError):
    """Assignment to an attribute the model does not declare."""

    pass


class RecordNotFound(MarkLogicError):
    """No document exists at the requested URI."""

    pass
