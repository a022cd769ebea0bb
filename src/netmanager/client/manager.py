import asyncio
import os
import re
import tempfile
import types
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import httpx
from loguru import logger

from netmanager.client.delegate import TaskDelegate
from netmanager.client.streams import AsyncBytes
from netmanager.constants import DOWNLOAD_PREFIX, DOWNLOAD_SUFFIX
from netmanager.exceptions import ResumeDataError
from netmanager.models.config import Settings
from netmanager.models.resume import ResumeData

__all__ = ["NetworkManager", "RequestLike"]

RequestLike = httpx.Request | httpx.URL | str

_CONTENT_RANGE = re.compile(r"^bytes (\d+)-\d+/(?:\d+|\*)$")


class NetworkManager:
    """
    A small, lightweight wrapper for async fetching on ``httpx.AsyncClient``.

    By default it builds and owns a client configured from ``Settings``. For
    tests, pass a client built by ``MockServer.client()`` instead.

    Every operation accepts either an ``httpx.Request`` or a bare URL (sent
    as GET, or POST for uploads) and an optional ``TaskDelegate``. Errors
    raised by httpx propagate unchanged; nothing is retried.
    """

    def __init__(
        self, client: httpx.AsyncClient | None = None, settings: Settings | None = None
    ) -> None:
        """
        Initialize the manager.

        Args:
            client: Client to send requests with. Built from settings when omitted.
            settings: Runtime settings. Loaded from the environment when omitted.
        """
        self.settings = settings or Settings()
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(**self.settings.client_kwargs())

    async def fetch(
        self, request: RequestLike, delegate: TaskDelegate | None = None
    ) -> tuple[bytes, httpx.Response]:
        """
        Send a request and wait for the whole body.

        Args:
            request: The request to send, or a URL to GET.
            delegate: Receives life cycle and authentication callbacks.

        Returns:
            The response body and the response.
        """
        request = self._build_request(request)
        observer = delegate or TaskDelegate()
        async with self._task(request, observer):
            response = await self.client.send(request, auth=self._auth(observer))
            observer.did_receive_response(response)
            return response.content, response

    async def fetch_stream(
        self, request: RequestLike, delegate: TaskDelegate | None = None
    ) -> tuple[AsyncBytes, httpx.Response]:
        """
        Send a request and return as soon as the response headers arrive.

        The body is delivered by the returned ``AsyncBytes``, which can be
        iterated once. The delegate's ``did_complete`` fires when the stream
        is closed.

        Args:
            request: The request to send, or a URL to GET.
            delegate: Receives life cycle and authentication callbacks.

        Returns:
            A byte stream over the body and the response.
        """
        request = self._build_request(request)
        observer = delegate or TaskDelegate()
        observer.did_create_task(request)
        logger.debug(f"{request.method} {request.url} (stream)")
        try:
            response = await self.client.send(request, auth=self._auth(observer), stream=True)
        except BaseException as e:
            observer.did_complete(request, e)
            raise
        try:
            observer.did_receive_response(response)
        except BaseException as e:
            await response.aclose()
            observer.did_complete(request, e)
            raise

        def on_close(error: BaseException | None) -> None:
            observer.did_complete(request, error)

        return AsyncBytes(response, on_close=on_close), response

    async def download(
        self, request: RequestLike, delegate: TaskDelegate | None = None
    ) -> tuple[Path, httpx.Response]:
        """
        Send a request and save the body to a temporary file.

        The caller owns the file once this returns. On failure the file is
        removed, unless the transfer can be resumed, in which case it is kept
        and ``delegate.did_produce_resume_data`` receives the resume data.

        Args:
            request: The request to send, or a URL to GET.
            delegate: Receives life cycle and authentication callbacks.

        Returns:
            The location of the downloaded file and the response.
        """
        request = self._build_request(request)
        observer = delegate or TaskDelegate()
        async with self._task(request, observer):
            path = self._create_download_file()
            try:
                response = await self.client.send(request, auth=self._auth(observer), stream=True)
            except BaseException:
                path.unlink(missing_ok=True)
                raise
            await self._save_body(request, response, path, observer)
            return path, response

    async def resume_download(
        self, resume_data: bytes, delegate: TaskDelegate | None = None
    ) -> tuple[Path, httpx.Response]:
        """
        Continue a download that was interrupted earlier.

        Args:
            resume_data: Resume data passed to ``TaskDelegate.did_produce_resume_data``.
            delegate: Receives life cycle and authentication callbacks.

        Returns:
            The location of the downloaded file and the response.

        Raises:
            ResumeDataError: If the resume data is invalid, its partial file is
                gone, or the server refuses to continue the transfer.
        """
        token = ResumeData.from_bytes(resume_data)
        path = token.partial_path
        if not path.is_file():
            raise ResumeDataError(f"Partial download no longer exists: {path}")

        offset = path.stat().st_size
        headers = {**token.headers, "Range": f"bytes={offset}-"}
        if token.validator:
            headers["If-Range"] = token.validator
        request = self.client.build_request(token.method, token.url, headers=headers)

        observer = delegate or TaskDelegate()
        async with self._task(request, observer):
            response = await self.client.send(request, auth=self._auth(observer), stream=True)

            if response.status_code == 206:
                start = _content_range_start(response)
                if start is not None and start != offset:
                    await response.aclose()
                    path.unlink(missing_ok=True)
                    raise ResumeDataError(
                        f"Server resumed at byte {start}, expected {offset}", request=request
                    )
            elif response.status_code == 200:
                logger.info(f"Server ignored range for {request.url}, restarting download")
                offset = 0
            else:
                await response.aclose()
                path.unlink(missing_ok=True)
                raise ResumeDataError(
                    f"Server refused to resume download (status {response.status_code})",
                    request=request,
                )

            await self._save_body(request, response, path, observer, offset=offset)
            return path, response

    async def upload(
        self, request: RequestLike, body: bytes, delegate: TaskDelegate | None = None
    ) -> tuple[bytes, httpx.Response]:
        """
        Upload an in-memory body.

        Args:
            request: Request whose method, URL and headers are used, or a URL to POST to.
            body: The request body.
            delegate: Receives life cycle and authentication callbacks.

        Returns:
            The response body and the response.
        """
        request = self._build_upload_request(request, body)
        observer = delegate or TaskDelegate()
        async with self._task(request, observer):
            response = await self.client.send(request, auth=self._auth(observer))
            observer.did_send_body_data(len(body), len(body), len(body))
            observer.did_receive_response(response)
            return response.content, response

    async def upload_file(
        self, request: RequestLike, path: str | Path, delegate: TaskDelegate | None = None
    ) -> tuple[bytes, httpx.Response]:
        """
        Upload the contents of a file, streamed in chunks.

        Args:
            request: Request whose method, URL and headers are used, or a URL to POST to.
            path: The file to upload.
            delegate: Receives life cycle and authentication callbacks.

        Returns:
            The response body and the response.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        path = Path(path)
        size = path.stat().st_size
        observer = delegate or TaskDelegate()
        request = self._build_upload_request(
            request, self._read_file(path, size, observer), {"Content-Length": str(size)}
        )
        async with self._task(request, observer):
            response = await self.client.send(request, auth=self._auth(observer))
            observer.did_receive_response(response)
            return response.content, response

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> "NetworkManager":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None = None,
        exc_value: BaseException | None = None,
        traceback: types.TracebackType | None = None,
    ) -> None:
        await self.aclose()

    @asynccontextmanager
    async def _task(self, request: httpx.Request, observer: TaskDelegate) -> AsyncIterator[None]:
        observer.did_create_task(request)
        logger.debug(f"{request.method} {request.url}")
        try:
            yield
        except BaseException as e:
            logger.debug(f"{request.method} {request.url} failed: {e!r}")
            observer.did_complete(request, e)
            raise
        observer.did_complete(request, None)

    def _build_request(self, request: RequestLike) -> httpx.Request:
        if isinstance(request, httpx.Request):
            return request
        return self.client.build_request("GET", request)

    def _build_upload_request(
        self,
        request: RequestLike,
        content: bytes | AsyncIterator[bytes],
        extra_headers: dict[str, str] | None = None,
    ) -> httpx.Request:
        if isinstance(request, httpx.Request):
            method, url = request.method, request.url
            headers = httpx.Headers(request.headers)
            # Length and framing describe the original body, not the upload
            for name in ("Content-Length", "Transfer-Encoding"):
                if name in headers:
                    del headers[name]
        else:
            method, url = "POST", request
            headers = httpx.Headers()
        headers.update(extra_headers or {})
        return self.client.build_request(method, url, headers=headers, content=content)

    @staticmethod
    def _auth(observer: TaskDelegate) -> Any:
        return observer.auth if observer.auth is not None else httpx.USE_CLIENT_DEFAULT

    def _create_download_file(self) -> Path:
        directory = self.settings.download_dir
        if directory is not None:
            directory.mkdir(parents=True, exist_ok=True)
        fd, name = tempfile.mkstemp(prefix=DOWNLOAD_PREFIX, suffix=DOWNLOAD_SUFFIX, dir=directory)
        os.close(fd)
        return Path(name)

    async def _read_file(
        self, path: Path, size: int, observer: TaskDelegate
    ) -> AsyncIterator[bytes]:
        sent = 0
        with path.open("rb") as fh:
            while chunk := fh.read(self.settings.chunk_size):
                sent += len(chunk)
                observer.did_send_body_data(len(chunk), sent, size)
                yield chunk

    async def _save_body(
        self,
        request: httpx.Request,
        response: httpx.Response,
        path: Path,
        observer: TaskDelegate,
        offset: int = 0,
    ) -> None:
        """Stream the body into ``path`` from ``offset`` on, then close the response."""
        written = offset
        try:
            observer.did_receive_response(response)
            expected = _expected_length(response, offset)
            with path.open("ab" if offset else "wb") as fh:
                async for chunk in response.aiter_bytes():
                    fh.write(chunk)
                    written += len(chunk)
                    observer.did_write_data(len(chunk), written, expected)
        except (httpx.TransportError, asyncio.CancelledError):
            self._interrupted(request, response, path, written, observer)
            raise
        except BaseException:
            path.unlink(missing_ok=True)
            raise
        finally:
            await response.aclose()

        logger.debug(f"Saved {written} bytes from {request.url} to {path}")

    def _interrupted(
        self,
        request: httpx.Request,
        response: httpx.Response,
        path: Path,
        written: int,
        observer: TaskDelegate,
    ) -> None:
        if written > 0 and _is_resumable(response):
            logger.warning(f"Download of {request.url} interrupted after {written} bytes")
            token = ResumeData.from_transfer(request, response, path, written)
            observer.did_produce_resume_data(token.to_bytes())
        else:
            logger.warning(f"Download of {request.url} interrupted, discarding partial file")
            path.unlink(missing_ok=True)


def _is_resumable(response: httpx.Response) -> bool:
    if response.status_code not in (200, 206):
        return False
    # Byte offsets only line up with what was written for unencoded bodies
    if response.headers.get("Content-Encoding", "identity").lower() != "identity":
        return False
    headers = response.headers
    return (
        headers.get("Accept-Ranges", "").lower() == "bytes"
        or "ETag" in headers
        or "Last-Modified" in headers
    )


def _expected_length(response: httpx.Response, offset: int) -> int | None:
    length = response.headers.get("Content-Length")
    if not length or not length.isdigit() or "Content-Encoding" in response.headers:
        return None
    return offset + int(length)


def _content_range_start(response: httpx.Response) -> int | None:
    match = _CONTENT_RANGE.match(response.headers.get("Content-Range", ""))
    return int(match.group(1)) if match else None
