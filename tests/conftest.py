import httpx
import pytest
import pytest_asyncio

from netmanager.client import MockServer, NetworkManager, TaskDelegate
from netmanager.models.config import Settings


class RecordingDelegate(TaskDelegate):
    """Delegate that records every callback it receives."""

    def __init__(self, auth: httpx.Auth | None = None) -> None:
        self.auth = auth
        self.events: list[tuple] = []
        self.resume_data: bytes | None = None

    def did_create_task(self, request):
        self.events.append(("create", request.method, str(request.url)))

    def did_receive_response(self, response):
        self.events.append(("response", response.status_code))

    def did_send_body_data(self, bytes_sent, total_bytes_sent, total_bytes_expected):
        self.events.append(("sent", bytes_sent, total_bytes_sent, total_bytes_expected))

    def did_write_data(self, bytes_written, total_bytes_written, total_bytes_expected):
        self.events.append(("written", bytes_written, total_bytes_written, total_bytes_expected))

    def did_produce_resume_data(self, resume_data):
        self.resume_data = resume_data
        self.events.append(("resume_data",))

    def did_complete(self, request, error):
        self.events.append(("complete", error))

    def names(self) -> list[str]:
        return [event[0] for event in self.events]


@pytest.fixture
def settings(tmp_path):
    """Settings isolated from the environment, downloading into a temp directory."""
    return Settings(_env_file=None, download_dir=tmp_path / "downloads")  # type: ignore[call-arg]


@pytest.fixture
def mock_server():
    return MockServer()


@pytest_asyncio.fixture
async def manager(mock_server, settings):
    """NetworkManager whose requests are all answered by mock_server."""
    client = mock_server.client()
    yield NetworkManager(client=client, settings=settings)
    await client.aclose()


@pytest.fixture
def delegate():
    return RecordingDelegate()
