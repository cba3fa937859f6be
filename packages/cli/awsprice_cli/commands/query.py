"""Price lookup: the command behind `awsprice <name>`."""

from __future__ import annotations

from typing import Annotated

import typer
from awsprice.catalog.index import PriceIndex
from awsprice.catalog.process import process_catalogs
from awsprice.catalog.store import IndexStore
from awsprice.config import PriceConfig
from awsprice.errors import IndexNotFound, OfferNotFound
from awsprice.fetch import CatalogFetcher
from awsprice.resolver import resolve
from rich.console import Console

from awsprice_cli.utils import get_config, handle_error

_err_console = Console(stderr=True)


def load_index(config: PriceConfig) -> PriceIndex:
    """Load the price index, building it once from fresh catalogs if there is none.

    A corrupt index is not rebuilt here; that is left to an explicit
    `awsprice process`.
    """
    store = IndexStore.from_config(config)
    try:
        return store.load(config.region_table(), config.default_region)
    except IndexNotFound:
        _err_console.print("[yellow]No local price index yet; fetching and processing catalogs...[/yellow]")
        CatalogFetcher(config).fetch()
        process_catalogs(config, store)
    return store.load(config.region_table(), config.default_region)


def query(
    ctx: typer.Context,
    token: Annotated[str, typer.Argument(help="Instance type or fragment, e.g. m4.xlarge or db.r5")],
    region: Annotated[str | None, typer.Option("--region", "-r", help="Region name or code")] = None,
    engine: Annotated[str | None, typer.Option("--engine", "-e", help="Database engine (default MySQL)")] = None,
    deployment: Annotated[
        str | None, typer.Option("--deployment", "-d", help="Deployment option (default Multi-AZ)")
    ] = None,
) -> None:
    """Look up the on-demand price for an instance type."""
    attributes = {
        name: value for name, value in (("region", region), ("engine", engine), ("deployment", deployment)) if value
    }
    try:
        config = get_config(ctx)
        index = load_index(config)
        output = resolve(index, token, attributes)
    except OfferNotFound:
        typer.echo(f"Unable to find a price for '{token}'")
        raise typer.Exit(1)
    except typer.Exit:
        raise
    except Exception as e:
        handle_error(ctx, e)
    else:
        typer.echo(output.rstrip("\n"))
