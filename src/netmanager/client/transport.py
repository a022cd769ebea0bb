import types
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

import httpx
from loguru import logger

__all__ = ["AsyncInterceptingTransport", "ProtocolHandler"]


@runtime_checkable
class ProtocolHandler(Protocol):
    """
    Something that can answer requests in place of the network.

    A handler claims requests via ``can_handle``; claimed requests are
    canonicalized, started, and always stopped afterwards.
    """

    def can_handle(self, request: httpx.Request) -> bool: ...

    def canonicalize(self, request: httpx.Request) -> httpx.Request: ...

    async def start(self, request: httpx.Request) -> httpx.Response: ...

    def stop(self, request: httpx.Request) -> None: ...


class AsyncInterceptingTransport(httpx.AsyncBaseTransport):
    """
    Asynchronous transport that offers each request to a list of protocol handlers
    before sending it over the network.
    """

    def __init__(
        self,
        protocols: Sequence[ProtocolHandler] = (),
        fallback: httpx.AsyncBaseTransport | None = None,
        verify: bool = True,
        cert: tuple | None = None,
        http1: bool = True,
        http2: bool = False,
        limits: httpx.Limits | None = None,
        trust_env: bool = True,
    ) -> None:
        self.protocols = list(protocols)

        if fallback is None:
            if limits is None:
                limits = httpx.Limits(max_keepalive_connections=20, max_connections=100)

            # Unclaimed requests go to a real connection pool
            fallback = httpx.AsyncHTTPTransport(
                verify=verify,
                cert=cert,
                http1=http1,
                http2=http2,
                limits=limits,
                trust_env=trust_env,
            )
        self._pool = fallback

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        for protocol in self.protocols:
            if not protocol.can_handle(request):
                continue

            request = protocol.canonicalize(request)
            logger.debug(f"{type(protocol).__name__} claimed {request.method} {request.url}")
            try:
                return await protocol.start(request)
            finally:
                protocol.stop(request)

        return await self._pool.handle_async_request(request)

    async def aclose(self) -> None:
        await self._pool.aclose()

    async def __aenter__(self) -> "AsyncInterceptingTransport":
        await self._pool.__aenter__()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None = None,
        exc_value: BaseException | None = None,
        traceback: types.TracebackType | None = None,
    ) -> None:
        await self._pool.__aexit__(exc_type, exc_value, traceback)
