import types
from collections.abc import AsyncIterator, Callable

import httpx

__all__ = ["AsyncBytes"]


class AsyncBytes:
    """
    Single-pass async iterator over a streamed response body.

    Iterating a second time raises ``httpx.StreamConsumed``. The connection is
    released when iteration ends, on ``aclose()``, or when the consuming task
    is cancelled. Prefer ``async with`` if you may stop iterating early.
    """

    def __init__(
        self,
        response: httpx.Response,
        on_close: Callable[[BaseException | None], None] | None = None,
    ) -> None:
        self.response = response
        self._on_close = on_close
        self._started = False
        self._closed = False

    def __aiter__(self) -> AsyncIterator[bytes]:
        self._claim()
        return self._iterate(self.response.aiter_bytes())

    def aiter_lines(self) -> AsyncIterator[str]:
        self._claim()
        return self._iterate(self.response.aiter_lines())

    @property
    def is_closed(self) -> bool:
        return self._closed

    def _claim(self) -> None:
        if self._started or self._closed:
            raise httpx.StreamConsumed()
        self._started = True

    async def _iterate(self, chunks: AsyncIterator) -> AsyncIterator:
        error: BaseException | None = None
        try:
            async for chunk in chunks:
                yield chunk
        except GeneratorExit:
            raise
        except BaseException as e:
            error = e
            raise
        finally:
            await self._close(error)

    async def _close(self, error: BaseException | None) -> None:
        if self._closed:
            return
        self._closed = True
        await self.response.aclose()
        if self._on_close is not None:
            self._on_close(error)

    async def aclose(self) -> None:
        await self._close(None)

    async def __aenter__(self) -> "AsyncBytes":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None = None,
        exc_value: BaseException | None = None,
        traceback: types.TracebackType | None = None,
    ) -> None:
        await self._close(exc_value)
