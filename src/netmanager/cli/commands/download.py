import asyncio
import shutil
from pathlib import Path
from typing import Annotated

import httpx
import typer
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TaskID,
    TransferSpeedColumn,
)

from netmanager.cli.console import print_success, print_warning
from netmanager.cli.context import get_app_context
from netmanager.cli.utils import format_status_line
from netmanager.client import TaskDelegate
from netmanager.exceptions import RequestFailedError


class ProgressDelegate(TaskDelegate):
    """Drives a rich progress bar from download callbacks."""

    def __init__(self, progress: Progress, task_id: TaskID) -> None:
        self.progress = progress
        self.task_id = task_id
        self.resume_data: bytes | None = None

    def did_write_data(
        self, bytes_written: int, total_bytes_written: int, total_bytes_expected: int | None
    ) -> None:
        self.progress.update(
            self.task_id, completed=total_bytes_written, total=total_bytes_expected
        )

    def did_produce_resume_data(self, resume_data: bytes) -> None:
        self.resume_data = resume_data


async def _download_async(url: str, output: Path | None, timeout: float | None) -> None:
    async with get_app_context(timeout=timeout) as ctx:
        progress = Progress(
            "[progress.description]{task.description}",
            BarColumn(),
            DownloadColumn(),
            TransferSpeedColumn(),
            console=ctx.console,
            transient=True,
        )
        with progress:
            delegate = ProgressDelegate(progress, progress.add_task("Downloading", total=None))
            try:
                path, response = await ctx.manager.download(url, delegate=delegate)
            except httpx.HTTPError as e:
                if delegate.resume_data is not None:
                    print_warning("Transfer was interrupted; a partial file was kept.")
                raise RequestFailedError(f"Download of {url} failed: {e}") from e

        ctx.console.print(format_status_line(response))
        if output is not None:
            path = Path(shutil.move(path, output))
        print_success(f"Saved {path.stat().st_size} bytes to {path}")


def download(
    url: Annotated[str, typer.Argument(help="URL to download")],
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Where to move the downloaded file")
    ] = None,
    timeout: Annotated[float | None, typer.Option("--timeout", help="Request timeout")] = None,
) -> None:
    """
    Download a URL to a file.
    """
    asyncio.run(_download_async(url, output, timeout))
