"""Async convenience wrapper around httpx with a mock transport for tests."""

__version__ = "0.1.0"

from netmanager.client import (  # noqa: E402
    AsyncBytes,
    AsyncInterceptingTransport,
    MockProtocol,
    MockServer,
    NetworkManager,
    ProtocolHandler,
    TaskDelegate,
)
from netmanager.models import MockResponse, ResumeData, Settings  # noqa: E402

__all__ = [
    "AsyncBytes",
    "AsyncInterceptingTransport",
    "MockProtocol",
    "MockResponse",
    "MockServer",
    "NetworkManager",
    "ProtocolHandler",
    "ResumeData",
    "Settings",
    "TaskDelegate",
    "__version__",
]
