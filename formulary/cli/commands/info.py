"""``formulary info NAME`` — show a descriptor and its artifacts."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from formulary.cli.commands._common import resolve_descriptor
from formulary.errors import FormularyError

console = Console()


def info_cmd(
    name: str = typer.Argument(None, help="Formula name."),
    descriptor_path: Path = typer.Option(
        None, "--descriptor", "-d", help="Read a descriptor JSON file."
    ),
) -> None:
    """Show formula metadata and the per-platform artifacts."""
    try:
        descriptor = resolve_descriptor(name, descriptor_path)
    except FormularyError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=1)

    console.print(f"[bold cyan]{descriptor.name}[/bold cyan] {descriptor.version}")
    if descriptor.description:
        console.print(descriptor.description)
    console.print(f"[dim]Homepage:[/dim] {descriptor.homepage or '-'}")
    console.print(f"[dim]License:[/dim]  {descriptor.license or '-'}")
    console.print(f"[dim]Binary:[/dim]   {descriptor.binary}")

    table = Table(title="Artifacts")
    table.add_column("Platform", style="cyan")
    table.add_column("Arch", style="cyan")
    table.add_column("SHA-256", style="green", overflow="fold")
    table.add_column("URL", overflow="fold")
    for artifact in descriptor.artifacts:
        table.add_row(
            artifact.platform.value, artifact.arch.value, artifact.sha256, artifact.url
        )
    console.print(table)
