"""Typed application context and factory for CLI commands."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

from pydantic import ValidationError
from rich.console import Console

from netmanager.cli.console import console as _console
from netmanager.cli.console import err_console as _err_console
from netmanager.cli.utils import handle_validation_error
from netmanager.client import NetworkManager
from netmanager.exceptions import ConfigError
from netmanager.models.config import Settings

__all__ = ["AppContext", "get_app_context"]


@dataclass(frozen=True)
class AppContext:
    """Typed container for shared CLI dependencies."""

    settings: Settings
    manager: NetworkManager
    console: Console = field(default_factory=lambda: _console)
    err_console: Console = field(default_factory=lambda: _err_console)


@asynccontextmanager
async def get_app_context(timeout: float | None = None) -> AsyncIterator[AppContext]:
    """Async context manager for dependency initialization.

    Ensures the HTTP client is created within the running event loop and
    closed when the command finishes. Raises ConfigError on invalid settings.
    """
    try:
        settings = Settings()
    except ValidationError as e:
        handle_validation_error(e)
        raise ConfigError("Configuration validation failed.") from e

    if timeout is not None:
        settings = settings.model_copy(update={"timeout": timeout})

    async with NetworkManager(settings=settings) as manager:
        yield AppContext(
            settings=settings,
            manager=manager,
            console=_console,
            err_console=_err_console,
        )
