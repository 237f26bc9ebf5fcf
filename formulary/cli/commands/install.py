"""``formulary install NAME`` — select, fetch, verify and install a binary."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel

from formulary.cli.commands._common import load_settings, resolve_descriptor
from formulary.core.pipeline import InstallPipeline
from formulary.errors import FormularyError

console = Console()


def install_cmd(
    name: str = typer.Argument(None, help="Formula to install."),
    descriptor_path: Path = typer.Option(
        None,
        "--descriptor",
        "-d",
        help="Install from a descriptor JSON file instead of a bundled formula.",
    ),
    bin_dir: Path = typer.Option(
        None,
        "--bin-dir",
        "-b",
        help="Destination directory (default: FORMULARY_BIN_DIR or ~/.local/bin).",
    ),
    platform: str = typer.Option(None, "--platform", help="Override detected platform."),
    arch: str = typer.Option(None, "--arch", help="Override detected architecture."),
    verify: bool = typer.Option(
        True,
        "--verify/--no-verify",
        help="Run the installed binary's version check.",
    ),
) -> None:
    """Install a formula.

    Steps: select artifact, download, check SHA-256, extract, install the
    binary, then run it with its version flag.
    """
    settings = load_settings()
    try:
        descriptor = resolve_descriptor(name, descriptor_path)
        pipeline = InstallPipeline(settings=settings, bin_dir=bin_dir)
        with console.status(f"Installing {descriptor.name} {descriptor.version}..."):
            receipt = pipeline.install(descriptor, platform, arch, verify=verify)
    except FormularyError as exc:
        console.print(f"[bold red]Install failed:[/bold red] {exc}")
        raise typer.Exit(code=1)

    console.print(
        Panel(
            "\n".join([
                f"[bold green]{receipt.name} {receipt.version} installed[/bold green]",
                "",
                f"[bold]Path:[/bold]     {receipt.binary_path}",
                f"[bold]Platform:[/bold] {receipt.platform.value}/{receipt.arch.value}",
                f"[bold]SHA-256:[/bold]  {receipt.sha256}",
                f"[bold]Verified:[/bold] {'yes' if receipt.verified else 'skipped'}",
            ]),
            title="[bold]Install[/bold]",
            border_style="green",
            padding=(1, 2),
        )
    )
