import httpx

__all__ = [
    "BadServerResponseError",
    "BadURLError",
    "ConfigError",
    "MockConfigurationError",
    "NetManagerError",
    "NoHandlerConfiguredError",
    "RequestFailedError",
    "ResumeDataError",
    "TransportError",
]


class NetManagerError(Exception):
    """Base exception for all netmanager errors that are not transport failures."""

    def __init__(self, message: str, exit_code: int = 1) -> None:
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code


class ConfigError(NetManagerError):
    """Raised when settings cannot be loaded."""


class MockConfigurationError(NetManagerError, ValueError):
    """Raised when a mock response cannot be built from the given inputs."""


class TransportError(httpx.TransportError):
    """
    Base class for failures synthesized by netmanager itself.

    Subclasses ``httpx.TransportError`` so callers can handle them together
    with connection failures raised by httpx.
    """

    code = "unknown"

    def __init__(self, message: str, *, request: httpx.Request | None = None) -> None:
        super().__init__(message, request=request)


class BadURLError(TransportError):
    """Raised when a request has no resolvable address."""

    code = "bad_url"


class BadServerResponseError(TransportError):
    """Raised when a response carries no body to deliver."""

    code = "bad_server_response"


class NoHandlerConfiguredError(TransportError):
    """Raised when a mock server receives a request before a handler is set."""

    code = "no_handler_configured"


class ResumeDataError(TransportError):
    """Raised when resume data is malformed, stale or rejected by the server."""

    code = "cannot_resume"


class RequestFailedError(NetManagerError):
    """Raised by the CLI when a request cannot be completed."""
