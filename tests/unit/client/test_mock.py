import asyncio

import httpx
import pytest

from netmanager.client import MockProtocol, MockServer, NetworkManager, ProtocolHandler
from netmanager.exceptions import (
    BadServerResponseError,
    BadURLError,
    MockConfigurationError,
    NoHandlerConfiguredError,
    TransportError,
)
from netmanager.models import MockResponse

URL = "https://reddit.com/r/programming.json"


class HandlerFailure(Exception):
    pass


# --- Registered handlers ---


@pytest.mark.asyncio
async def test_handler_without_body_fails_with_bad_server_response(manager, mock_server):
    mock_server.set_handler(None, status_code=504)

    with pytest.raises(BadServerResponseError) as exc_info:
        await manager.fetch(URL)

    assert exc_info.value.code == "bad_server_response"
    assert isinstance(exc_info.value, httpx.TransportError)
    assert exc_info.value.request.url == URL


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code", [200, 204, 404, 500])
async def test_missing_body_fails_regardless_of_status(manager, mock_server, status_code):
    mock_server.set_handler(status_code=status_code)

    with pytest.raises(BadServerResponseError):
        await manager.fetch(URL)


@pytest.mark.asyncio
async def test_handler_with_json_body(manager, mock_server):
    mock_server.set_handler(
        b'{"ok":true}', status_code=200, headers={"Content-Type": "application/json"}
    )

    body, response = await manager.fetch(URL)

    assert body == b'{"ok":true}'
    assert response.status_code == 200
    assert response.headers["Content-Type"] == "application/json"
    assert response.json() == {"ok": True}
    assert response.url == URL


@pytest.mark.asyncio
async def test_response_metadata_is_bound_to_request(manager, mock_server):
    mock_server.set_handler(b"payload", status_code=201, http_version="HTTP/2")

    _, response = await manager.fetch("https://example.com/items?page=2")

    assert response.status_code == 201
    assert response.http_version == "HTTP/2"
    assert response.url == "https://example.com/items?page=2"
    assert response.extensions["cache_storage"] == "not_allowed"


@pytest.mark.asyncio
async def test_default_http_version(manager, mock_server):
    mock_server.set_handler(b"payload")

    _, response = await manager.fetch(URL)

    assert response.http_version == "HTTP/1.1"


@pytest.mark.asyncio
async def test_empty_body_is_delivered(manager, mock_server):
    mock_server.set_handler(b"", status_code=204)

    body, response = await manager.fetch(URL)

    assert body == b""
    assert response.status_code == 204


@pytest.mark.asyncio
async def test_new_registration_replaces_previous(manager, mock_server):
    mock_server.set_handler(b"first", status_code=200)
    first_body, first_response = await manager.fetch(URL)

    mock_server.set_handler(b"second", status_code=202)
    second_body, second_response = await manager.fetch(URL)

    assert (first_body, first_response.status_code) == (b"first", 200)
    assert (second_body, second_response.status_code) == (b"second", 202)


@pytest.mark.asyncio
async def test_requests_are_recorded(manager, mock_server):
    mock_server.set_handler(b"ok")

    await manager.fetch(URL)
    await manager.fetch("https://example.com/other")

    assert [str(r.url) for r in mock_server.requests] == [URL, "https://example.com/other"]


@pytest.mark.asyncio
async def test_request_handler_errors_propagate_verbatim(manager, mock_server):
    error = HandlerFailure("boom")

    def handler(request: httpx.Request) -> MockResponse:
        raise error

    mock_server.set_request_handler(handler)

    with pytest.raises(HandlerFailure) as exc_info:
        await manager.fetch(URL)

    assert exc_info.value is error


@pytest.mark.asyncio
async def test_request_handler_can_inspect_request(manager, mock_server):
    def handler(request: httpx.Request) -> MockResponse:
        return MockResponse(status_code=200, data=request.url.path.encode())

    mock_server.set_request_handler(handler)

    body, _ = await manager.fetch("https://example.com/echo/me")

    assert body == b"/echo/me"


# --- Registration errors ---


@pytest.mark.parametrize(
    "kwargs",
    [
        {"status_code": 42},
        {"status_code": 600},
        {"http_version": "HTTP/one"},
        {"headers": {"Bad Header": "value"}},
        {"headers": {"X-Test": "line\r\nbreak"}},
        {"headers": {"X-Test": "snowman ☃"}},
    ],
)
def test_invalid_handler_configuration_is_recoverable(mock_server, kwargs):
    mock_server.set_handler(b"previous")
    previous = mock_server.handler

    with pytest.raises(MockConfigurationError) as exc_info:
        mock_server.set_handler(b"data", **kwargs)

    assert isinstance(exc_info.value, ValueError)
    assert mock_server.handler is previous


def test_text_body_is_rejected(mock_server):
    with pytest.raises(MockConfigurationError, match="data"):
        mock_server.set_handler("text")  # type: ignore[arg-type]

    assert mock_server.handler is None


def test_unknown_unhandled_policy():
    with pytest.raises(MockConfigurationError, match="policy"):
        MockServer(unhandled="ignore")  # type: ignore[arg-type]


# --- Unregistered handler ---


@pytest.mark.asyncio
async def test_no_handler_fails_fast_by_default(manager, mock_server):
    with pytest.raises(NoHandlerConfiguredError):
        await manager.fetch(URL)


@pytest.mark.asyncio
async def test_cleared_handler_fails_fast(manager, mock_server):
    mock_server.set_handler(b"ok")
    mock_server.clear()

    with pytest.raises(NoHandlerConfiguredError):
        await manager.fetch(URL)


@pytest.mark.asyncio
async def test_stall_policy_times_out(settings):
    server = MockServer(unhandled="stall", stall_timeout=0.01)
    async with server.client() as client:
        manager = NetworkManager(client=client, settings=settings)

        with pytest.raises(NoHandlerConfiguredError):
            await manager.fetch(URL)


@pytest.mark.asyncio
async def test_stall_policy_waits_until_cancelled(settings):
    server = MockServer(unhandled="stall")
    async with server.client() as client:
        manager = NetworkManager(client=client, settings=settings)

        task = asyncio.create_task(manager.fetch(URL))
        await asyncio.sleep(0.05)
        assert not task.done()

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task


# --- Protocol contract ---


def test_protocol_claims_every_request(mock_server):
    protocol = MockProtocol(mock_server)
    request = httpx.Request("DELETE", "ftp://anything.example/x")

    assert isinstance(protocol, ProtocolHandler)
    assert protocol.can_handle(request) is True
    assert protocol.canonicalize(request) is request
    assert protocol.stop(request) is None


@pytest.mark.asyncio
async def test_request_without_host_is_a_bad_url(mock_server):
    mock_server.set_handler(b"ok")
    protocol = MockProtocol(mock_server)

    with pytest.raises(BadURLError) as exc_info:
        await protocol.start(httpx.Request("GET", "/relative/path"))

    assert isinstance(exc_info.value, TransportError)
    assert exc_info.value.code == "bad_url"
