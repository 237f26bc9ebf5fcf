"""Main Typer application — imports and registers all CLI commands.

Entry point: ``formulary`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.logging import RichHandler

from formulary import __version__
from formulary.cli.commands._common import load_settings
from formulary.cli.commands.info import info_cmd
from formulary.cli.commands.install import install_cmd
from formulary.cli.commands.list_cmd import list_cmd
from formulary.cli.commands.uninstall import uninstall_cmd
from formulary.cli.commands.verify_cmd import verify_cmd

app = typer.Typer(
    name="formulary",
    help="Formulary: verified download-and-install of pre-built binaries.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="install", help="Install a formula.")(install_cmd)
app.command(name="info", help="Show formula details.")(info_cmd)
app.command(name="list", help="List formulas and install status.")(list_cmd)
app.command(name="verify", help="Re-run an installed formula's version check.")(verify_cmd)
app.command(name="uninstall", help="Remove an installed formula.")(uninstall_cmd)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"formulary {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the formulary version and exit.",
    ),
) -> None:
    """Configure logging before any subcommand runs."""
    level = "DEBUG" if verbose else load_settings().log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
