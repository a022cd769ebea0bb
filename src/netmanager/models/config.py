from pathlib import Path
from typing import Any

import httpx
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from netmanager import __version__
from netmanager.constants import DEFAULT_CHUNK_SIZE, DEFAULT_TIMEOUT

__all__ = ["Settings"]


class Settings(BaseSettings):
    """Runtime configuration, read from ``NETMANAGER_*`` variables or a ``.env`` file."""

    model_config = SettingsConfigDict(
        env_prefix="NETMANAGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    timeout: float = Field(DEFAULT_TIMEOUT, gt=0)
    follow_redirects: bool = True
    http2: bool = False
    user_agent: str = f"netmanager/{__version__}"
    download_dir: Path | None = None
    # Read size for file uploads; response bodies are written as they arrive
    chunk_size: int = Field(DEFAULT_CHUNK_SIZE, gt=0)
    max_connections: int = Field(100, gt=0)
    max_keepalive_connections: int = Field(20, ge=0)

    def client_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for building an ``httpx.AsyncClient`` from these settings."""
        return {
            "timeout": self.timeout,
            "follow_redirects": self.follow_redirects,
            "http2": self.http2,
            "headers": {"User-Agent": self.user_agent},
            "limits": httpx.Limits(
                max_keepalive_connections=self.max_keepalive_connections,
                max_connections=self.max_connections,
            ),
        }
