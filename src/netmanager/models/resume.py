from pathlib import Path

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from netmanager.exceptions import ResumeDataError

__all__ = ["ResumeData"]

# Headers that describe a single transfer and must not be replayed.
_TRANSFER_HEADERS = frozenset({"host", "content-length", "range", "if-range", "transfer-encoding"})


class ResumeData(BaseModel):
    """State needed to continue an interrupted download. Serialized as opaque bytes."""

    model_config = ConfigDict(frozen=True)

    url: str
    method: str = "GET"
    headers: dict[str, str] = Field(default_factory=dict)
    partial_path: Path
    bytes_received: int = Field(ge=0)
    etag: str | None = None
    last_modified: str | None = None

    @classmethod
    def from_transfer(
        cls, request: httpx.Request, response: httpx.Response, path: Path, bytes_received: int
    ) -> "ResumeData":
        """Capture the request and validators of an interrupted transfer."""
        headers = {
            name: value
            for name, value in request.headers.items()
            if name.lower() not in _TRANSFER_HEADERS
        }
        return cls(
            url=str(request.url),
            method=request.method,
            headers=headers,
            partial_path=path,
            bytes_received=bytes_received,
            etag=response.headers.get("ETag"),
            last_modified=response.headers.get("Last-Modified"),
        )

    @property
    def validator(self) -> str | None:
        """Value for ``If-Range``, preferring the strong ``ETag``."""
        return self.etag or self.last_modified

    def to_bytes(self) -> bytes:
        return self.model_dump_json().encode("utf-8")

    @classmethod
    def from_bytes(cls, data: bytes) -> "ResumeData":
        """
        Decode resume data produced by ``to_bytes``.

        Raises:
            ResumeDataError: If the data is not a valid token.
        """
        try:
            return cls.model_validate_json(data)
        except ValidationError as e:
            raise ResumeDataError(f"Invalid resume data ({e.error_count()} error(s))") from e
