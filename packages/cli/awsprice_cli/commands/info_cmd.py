"""Show what the local price index was built from."""

from __future__ import annotations

import typer
from awsprice.catalog.store import IndexStore
from rich.console import Console
from rich.table import Table

from awsprice_cli.utils import get_config, handle_error

console = Console()


def info(ctx: typer.Context) -> None:
    """Show details of the local pricing db."""
    try:
        config = get_config(ctx)
        details = IndexStore.from_config(config).info()

        table = Table(title="Price Index", show_header=False)
        table.add_column("Key", style="cyan")
        table.add_column("Value")
        table.add_row("cache_dir", str(config.cache_dir))
        table.add_row("default_region", config.default_region)
        for key, value in details.items():
            table.add_row(key, str(value))
        console.print(table)
    except typer.Exit:
        raise
    except Exception as e:
        handle_error(ctx, e)
