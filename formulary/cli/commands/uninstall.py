"""``formulary uninstall NAME`` — remove an installed binary and its receipt."""

from __future__ import annotations

import typer
from rich.console import Console

from formulary.cli.commands._common import load_settings
from formulary.core.pipeline import InstallPipeline
from formulary.errors import FormularyError

console = Console()


def uninstall_cmd(
    name: str = typer.Argument(..., help="Installed formula to remove."),
) -> None:
    """Remove an installed formula."""
    try:
        receipt = InstallPipeline(settings=load_settings()).uninstall(name)
    except FormularyError as exc:
        console.print(f"[bold red]Uninstall failed:[/bold red] {exc}")
        raise typer.Exit(code=1)
    console.print(
        f"[bold green]Removed[/bold green] {receipt.name} {receipt.version} "
        f"({receipt.binary_path})"
    )
