import os

import pytest

from netmanager.client import NetworkManager
from netmanager.models.config import Settings

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(
        not os.getenv("NETMANAGER_INTEGRATION"),
        reason="set NETMANAGER_INTEGRATION=1 to run tests against httpbin.org",
    ),
]


@pytest.fixture
def integration_settings(tmp_path):
    return Settings(_env_file=None, download_dir=tmp_path, timeout=15)  # type: ignore[call-arg]


@pytest.mark.asyncio
async def test_fetch_real_endpoint(integration_settings):
    """Verify a GET against a real server."""
    async with NetworkManager(settings=integration_settings) as manager:
        body, response = await manager.fetch("https://httpbin.org/get")

    assert response.status_code == 200
    assert b'"url": "https://httpbin.org/get"' in body


@pytest.mark.asyncio
async def test_upload_real_endpoint(integration_settings):
    """Verify POST uploads reach the server."""
    async with NetworkManager(settings=integration_settings) as manager:
        _, response = await manager.upload("https://httpbin.org/post", b"payload")

    assert response.status_code == 200
    assert response.json()["data"] == "payload"


@pytest.mark.asyncio
async def test_download_real_endpoint(integration_settings):
    """Verify downloads land in the configured directory."""
    async with NetworkManager(settings=integration_settings) as manager:
        path, response = await manager.download("https://httpbin.org/bytes/1024")

    assert response.status_code == 200
    assert path.stat().st_size == 1024
