"""
Mock transport for unit tests.

A ``MockServer`` holds the response handler for one test session. Build a
client on top of it and hand that client to ``NetworkManager``::

    server = MockServer()
    manager = NetworkManager(client=server.client())
    server.set_handler(b'{"ok": true}', headers={"Content-Type": "application/json"})

Only use this in tests: ``MockProtocol`` claims every request it sees.
"""

import asyncio
from collections.abc import Callable, Mapping
from typing import Any, NoReturn

import httpx
from loguru import logger
from pydantic import ValidationError

from netmanager.client.transport import AsyncInterceptingTransport
from netmanager.constants import (
    CACHE_STORAGE_EXTENSION,
    CACHE_STORAGE_NOT_ALLOWED,
    DEFAULT_HTTP_VERSION,
    UnhandledPolicy,
)
from netmanager.exceptions import (
    BadServerResponseError,
    BadURLError,
    MockConfigurationError,
    NoHandlerConfiguredError,
)
from netmanager.models.mock import MockResponse

__all__ = ["MockHandler", "MockProtocol", "MockServer"]

MockHandler = Callable[[httpx.Request], MockResponse]


class MockServer:
    """
    Session-scoped slot for the handler that answers intercepted requests.

    At most one handler is active; registering a new one replaces the old.
    """

    def __init__(
        self, unhandled: UnhandledPolicy = "raise", stall_timeout: float | None = None
    ) -> None:
        """
        Initialize the server without a handler.

        Args:
            unhandled: What to do with requests that arrive before a handler is set.
                "raise" fails them with NoHandlerConfiguredError; "stall" leaves
                them pending until cancelled or until stall_timeout expires.
            stall_timeout: Seconds a stalled request waits before failing.
                None waits until the request is cancelled.
        """
        if unhandled not in ("raise", "stall"):
            raise MockConfigurationError(f"Unknown unhandled-request policy: {unhandled!r}")
        self.unhandled = unhandled
        self.stall_timeout = stall_timeout
        self.requests: list[httpx.Request] = []
        self._handler: MockHandler | None = None

    @property
    def handler(self) -> MockHandler | None:
        return self._handler

    def set_handler(
        self,
        data: bytes | None = None,
        status_code: int = 200,
        http_version: str | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        """
        Answer every following request with a fixed response.

        Args:
            data: Response body. None makes every request fail with a bad server response.
            status_code: HTTP status code of the response.
            http_version: HTTP version string such as "HTTP/2"; defaults to HTTP/1.1.
            headers: Response header fields.

        Raises:
            MockConfigurationError: If a response cannot be built from the inputs.
        """
        try:
            config = MockResponse(
                status_code=status_code,
                http_version=http_version,
                headers=dict(headers or {}),
                data=data,
            )
        except ValidationError as e:
            raise MockConfigurationError(f"Invalid mock response: {e}") from e

        def handler(request: httpx.Request) -> MockResponse:
            if not request.url.host:
                raise BadURLError(
                    f"Request has no resolvable address: {request.url}", request=request
                )
            return config

        self._handler = handler
        logger.debug(f"Mock handler set: status={status_code}, body={data is not None}")

    def set_request_handler(self, handler: MockHandler) -> None:
        """Answer every following request with whatever ``handler`` returns or raises."""
        self._handler = handler

    def clear(self) -> None:
        self._handler = None

    def transport(
        self, fallback: httpx.AsyncBaseTransport | None = None
    ) -> AsyncInterceptingTransport:
        return AsyncInterceptingTransport([MockProtocol(self)], fallback=fallback)

    def client(self, **kwargs: Any) -> httpx.AsyncClient:
        """Build an ``httpx.AsyncClient`` whose requests are all answered by this server."""
        return httpx.AsyncClient(transport=self.transport(), **kwargs)


class MockProtocol:
    """Protocol handler that answers every request from a ``MockServer``."""

    def __init__(self, server: MockServer) -> None:
        self.server = server

    def can_handle(self, request: httpx.Request) -> bool:
        return True

    def canonicalize(self, request: httpx.Request) -> httpx.Request:
        return request

    async def start(self, request: httpx.Request) -> httpx.Response:
        # Drain streamed bodies so handlers and tests can inspect request.content
        await request.aread()
        self.server.requests.append(request)

        handler = self.server.handler
        if handler is None:
            await self._unhandled(request)

        config = handler(request)

        if config.data is None:
            logger.debug(f"Mock response for {request.url} has no body")
            raise BadServerResponseError(
                f"Server returned status {config.status_code} without a body", request=request
            )

        http_version = config.http_version or DEFAULT_HTTP_VERSION
        return httpx.Response(
            config.status_code,
            headers=config.headers,
            content=config.data,
            request=request,
            extensions={
                "http_version": http_version.encode("ascii"),
                CACHE_STORAGE_EXTENSION: CACHE_STORAGE_NOT_ALLOWED,
            },
        )

    def stop(self, request: httpx.Request) -> None:
        pass

    async def _unhandled(self, request: httpx.Request) -> NoReturn:
        if self.server.unhandled == "stall":
            logger.warning(f"No mock handler configured, stalling {request.method} {request.url}")
            try:
                await asyncio.wait_for(asyncio.Event().wait(), timeout=self.server.stall_timeout)
            except asyncio.TimeoutError:
                pass
        raise NoHandlerConfiguredError(
            f"No mock handler configured for {request.method} {request.url}", request=request
        )
