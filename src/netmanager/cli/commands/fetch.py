import asyncio
from typing import Annotated

import httpx
import typer

from netmanager.cli.context import get_app_context
from netmanager.cli.utils import format_status_line, parse_headers
from netmanager.exceptions import RequestFailedError


async def _fetch_async(
    url: str,
    method: str,
    headers: dict[str, str],
    data: str | None,
    include: bool,
    timeout: float | None,
) -> None:
    async with get_app_context(timeout=timeout) as ctx:
        request = ctx.manager.client.build_request(method, url, headers=headers)
        try:
            if data is None:
                body, response = await ctx.manager.fetch(request)
            else:
                body, response = await ctx.manager.upload(request, data.encode("utf-8"))
        except httpx.HTTPError as e:
            raise RequestFailedError(f"Request to {url} failed: {e}") from e

        ctx.console.print(format_status_line(response))
        if include:
            for name, value in response.headers.multi_items():
                ctx.console.print(f"[cyan]{name}[/cyan]: {value}")
            ctx.console.print()

        try:
            text = body.decode(response.encoding or "utf-8")
        except (LookupError, UnicodeDecodeError):
            ctx.console.print(f"[dim]<{len(body)} bytes of binary data>[/dim]")
            return
        ctx.console.print(text, markup=False, highlight=False)


def fetch(
    url: Annotated[str, typer.Argument(help="URL to request")],
    method: Annotated[
        str | None, typer.Option("--method", "-X", help="HTTP method (GET, or POST with --data)")
    ] = None,
    header: Annotated[
        list[str] | None, typer.Option("--header", "-H", help="Request header as 'Name: value'")
    ] = None,
    data: Annotated[
        str | None, typer.Option("--data", "-d", help="Request body, sent as an upload")
    ] = None,
    include: Annotated[
        bool, typer.Option("--include", "-i", help="Show response headers")
    ] = False,
    timeout: Annotated[float | None, typer.Option("--timeout", help="Request timeout")] = None,
) -> None:
    """
    Send a request and print the response body.
    """
    headers = parse_headers(header)
    method = (method or ("POST" if data is not None else "GET")).upper()
    asyncio.run(_fetch_async(url, method, headers, data, include, timeout))
