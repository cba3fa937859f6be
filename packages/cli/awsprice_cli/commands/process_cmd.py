"""Rebuild the local price index from the downloaded catalogs."""

from __future__ import annotations

import typer
from awsprice.catalog.process import ProcessSummary, process_catalogs
from rich.console import Console
from rich.table import Table

from awsprice_cli.utils import get_config, handle_error

console = Console()


def print_summary(summary: ProcessSummary) -> None:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Family")
    table.add_column("Published")
    table.add_column("Offers", justify="right")
    table.add_column("Skipped", justify="right")
    table.add_column("Excluded", justify="right")

    for r in summary.results:
        skipped = str(len(r.skipped)) if r.skipped else "[green]0[/green]"
        table.add_row(r.family, r.publication_date or "-", str(r.offers_stored), skipped, str(r.excluded))

    console.print(table)
    console.print(f"[green]Done.[/green] {summary.total_stored} offers stored in {summary.index_path}")


def process(ctx: typer.Context) -> None:
    """Rebuild local pricing db."""
    try:
        config = get_config(ctx)
        with console.status("Processing pricing catalogs..."):
            summary = process_catalogs(config)
        print_summary(summary)
    except typer.Exit:
        raise
    except Exception as e:
        handle_error(ctx, e)
