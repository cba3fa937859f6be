"""Download the AWS pricing catalogs into the local cache."""

from __future__ import annotations

from typing import Annotated

import typer
from awsprice.fetch import CatalogFetcher
from rich.console import Console

from awsprice_cli.utils import get_config, handle_error

console = Console()


def fetch(
    ctx: typer.Context,
    force: Annotated[bool, typer.Option("--force", "-f", help="Re-download files already in the cache")] = False,
) -> None:
    """Fetch new pricing data."""
    try:
        config = get_config(ctx)
        with console.status("Downloading pricing catalogs..."):
            paths = CatalogFetcher(config).fetch(force=force)
        for family, path in paths.items():
            console.print(f"[green]{family}[/green] {path}", highlight=False)
    except typer.Exit:
        raise
    except Exception as e:
        handle_error(ctx, e)
