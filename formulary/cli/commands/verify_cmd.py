"""``formulary verify NAME`` — re-run the installed binary's version check."""

from __future__ import annotations

import typer
from rich.console import Console

from formulary.cli.commands._common import load_settings
from formulary.core.pipeline import InstallPipeline
from formulary.errors import FormularyError

console = Console()


def verify_cmd(
    name: str = typer.Argument(..., help="Installed formula to check."),
) -> None:
    """Run the installed binary with its version flag and check the output."""
    try:
        output = InstallPipeline(settings=load_settings()).verify(name)
    except FormularyError as exc:
        console.print(f"[bold red]Verification failed:[/bold red] {exc}")
        raise typer.Exit(code=1)
    console.print(f"[bold green]OK[/bold green] {output.strip()}")
