from __future__ import annotations

from pathlib import Path

import click
import typer
from typer.core import TyperGroup

from awsprice_cli import __version__
from awsprice_cli.commands.fetch_cmd import fetch
from awsprice_cli.commands.info_cmd import info
from awsprice_cli.commands.process_cmd import process
from awsprice_cli.commands.query import query
from awsprice_cli.utils import configure_logging

_USAGE = "Call with fetch, process, or with a pricing string"

_HELP_TEXT = """\
fetch: fetch new pricing data
process: rebuild local pricing db
info: show details of the local pricing db
help: you're looking at it
Anything else: a pricing string to interpret"""


class QueryFallbackGroup(TyperGroup):
    """Command group that treats an unknown first argument as a price query."""

    def resolve_command(self, ctx: click.Context, args: list[str]):
        if args and not args[0].startswith("-") and args[0] not in self.commands:
            args = ["query", *args]
        return super().resolve_command(ctx, args)


def _version_callback(value: bool) -> None:
    if value:
        print(f"awsprice {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="awsprice",
    cls=QueryFallbackGroup,
    help="On-demand AWS prices from a local cache of the public pricing catalogs",
    add_completion=False,
)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", "-V", help="Show version", callback=_version_callback, is_eager=True
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    config_path: Path | None = typer.Option(None, "--config", help="Path to a YAML config file"),
    cache_dir: Path | None = typer.Option(None, "--cache-dir", help="Override the cache directory"),
) -> None:
    configure_logging(verbose)
    if ctx.invoked_subcommand is None:
        typer.echo(_USAGE)
        raise typer.Exit(1)
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_path"] = config_path
    ctx.obj["cache_dir"] = cache_dir


def help_command() -> None:
    """You're looking at it."""
    typer.echo(_HELP_TEXT)


app.command()(fetch)
app.command()(process)
app.command()(info)
app.command(name="help")(help_command)
app.command()(query)
