import httpx
import typer
from pydantic import ValidationError
from rich.console import Console

__all__ = ["format_status_line", "handle_validation_error", "parse_headers"]


def handle_validation_error(e: ValidationError) -> None:
    console = Console(stderr=True)
    console.print("[bold red]Configuration Error:[/bold red]")
    for error in e.errors():
        field_name = ".".join(str(loc) for loc in error["loc"]) or "Global Config"
        message = error["msg"]
        input_value = error.get("input")
        console.print(
            f"  Field [bold]{field_name}[/bold]: {message} "
            f"(Invalid Value: [red]{input_value!r}[/red])"
        )


def parse_headers(values: list[str] | None) -> dict[str, str]:
    """Turn ``Name: value`` option values into a header mapping."""
    headers: dict[str, str] = {}
    for value in values or []:
        name, sep, field_value = value.partition(":")
        if not sep or not name.strip():
            raise typer.BadParameter(f"Invalid header {value!r}, expected 'Name: value'")
        headers[name.strip()] = field_value.strip()
    return headers


def format_status_line(response: httpx.Response) -> str:
    style = "green" if response.is_success else "red"
    return (
        f"{response.http_version} [{style}]{response.status_code} "
        f"{response.reason_phrase}[/{style}]"
    )
