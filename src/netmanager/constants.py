from typing import Literal

__all__ = [
    "CACHE_STORAGE_EXTENSION",
    "CACHE_STORAGE_NOT_ALLOWED",
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_HTTP_VERSION",
    "DEFAULT_TIMEOUT",
    "DOWNLOAD_PREFIX",
    "DOWNLOAD_SUFFIX",
    "UnhandledPolicy",
]

DEFAULT_TIMEOUT = 30.0
DEFAULT_CHUNK_SIZE = 64 * 1024
DEFAULT_HTTP_VERSION = "HTTP/1.1"

DOWNLOAD_PREFIX = "netmanager-"
DOWNLOAD_SUFFIX = ".download"

# Response extension set on every intercepted response.
CACHE_STORAGE_EXTENSION = "cache_storage"
CACHE_STORAGE_NOT_ALLOWED = "not_allowed"

UnhandledPolicy = Literal["raise", "stall"]
