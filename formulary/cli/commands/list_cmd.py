"""``formulary list`` — bundled formulas and what is installed."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from formulary.cli.commands._common import load_settings
from formulary.core.receipts import ReceiptStore
from formulary.formulas import list_formulas

console = Console()


def list_cmd() -> None:
    """List bundled formulas with their install status."""
    settings = load_settings()
    installed = {r.name: r for r in ReceiptStore(settings.receipts_dir).list_receipts()}

    table = Table(title="Formulas")
    table.add_column("Name", style="cyan")
    table.add_column("Version", style="green")
    table.add_column("Installed")
    table.add_column("Description")

    names: set[str] = set()
    for descriptor in list_formulas():
        names.add(descriptor.name)
        receipt = installed.get(descriptor.name)
        status = f"[green]{receipt.version}[/green]" if receipt else "[dim]no[/dim]"
        table.add_row(descriptor.name, descriptor.version, status, descriptor.description)

    # installed from a descriptor file, not bundled
    for name, receipt in sorted(installed.items()):
        if name not in names:
            table.add_row(
                name,
                receipt.version,
                f"[green]{receipt.version}[/green]",
                "[dim]external[/dim]",
            )

    console.print(table)
