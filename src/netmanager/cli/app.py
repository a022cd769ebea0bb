"""CLI application using Typer."""

import sys

import typer

from netmanager.cli.commands.download import download
from netmanager.cli.commands.fetch import fetch
from netmanager.cli.console import print_error
from netmanager.exceptions import NetManagerError

__all__ = ["app", "main"]

app = typer.Typer(
    name="netmanager",
    help="Fetch and download URLs through netmanager.",
    add_completion=True,
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """
    netmanager CLI entry point.
    """
    from netmanager.logging import configure_logging

    configure_logging("DEBUG" if verbose else "INFO")


app.command(name="fetch")(fetch)
app.command(name="download")(download)


def main() -> None:
    """Main entry point for CLI."""
    try:
        app()
    except NetManagerError as e:
        print_error(e.message)
        sys.exit(e.exit_code)
    except Exception as e:
        # Unexpected error
        print_error(f"An unexpected error occurred: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
