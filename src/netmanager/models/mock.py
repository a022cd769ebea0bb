"""Canned responses served by the mock transport."""

import re

from pydantic import BaseModel, ConfigDict, Field, StrictBytes, field_validator

__all__ = ["MockResponse"]

_TOKEN = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")
_HTTP_VERSION = re.compile(r"^HTTP/\d(\.\d)?$")


class MockResponse(BaseModel):
    """
    Response metadata and optional body returned by a mock request handler.

    A ``data`` of ``None`` means the server sent no body at all, which the
    mock transport reports as a bad server response. ``b""`` is a valid,
    empty body.
    """

    model_config = ConfigDict(frozen=True)

    status_code: int = Field(200, ge=100, le=599)
    http_version: str | None = None
    headers: dict[str, str] = Field(default_factory=dict)
    data: StrictBytes | None = None

    @field_validator("http_version")
    @classmethod
    def _check_http_version(cls, value: str | None) -> str | None:
        if value is not None and not _HTTP_VERSION.match(value):
            raise ValueError(f"Invalid HTTP version: {value!r}")
        return value

    @field_validator("headers")
    @classmethod
    def _check_headers(cls, value: dict[str, str]) -> dict[str, str]:
        for name, field_value in value.items():
            if not _TOKEN.match(name):
                raise ValueError(f"Invalid header name: {name!r}")
            if any(char in field_value for char in "\r\n\0"):
                raise ValueError(f"Invalid value for header {name!r}")
            try:
                field_value.encode("latin-1")
            except UnicodeEncodeError as e:
                raise ValueError(f"Header {name!r} is not latin-1 encodable") from e
        return value
