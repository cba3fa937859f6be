from __future__ import annotations

import logging

import typer
from awsprice.config import PriceConfig, load_config
from awsprice.errors import ConfigError, CorruptData, FetchError, MalformedCatalog
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

_err_console = Console(stderr=True)


def configure_logging(verbose: bool) -> None:
    """Route awsprice log records to stderr through Rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=_err_console, show_path=False, markup=False)],
        force=True,
    )


def get_config(ctx: typer.Context) -> PriceConfig:
    """Load the PriceConfig once per invocation and cache it on the context."""
    obj = ctx.find_root().obj
    if obj is None:
        obj = ctx.find_root().ensure_object(dict)
    if "config" not in obj:
        obj["config"] = load_config(obj.get("config_path"), cache_dir=obj.get("cache_dir"))
    return obj["config"]


def handle_error(ctx: typer.Context, e: Exception) -> None:
    """Print a clean error message and exit 1."""
    obj = ctx.find_root().obj or {}
    verbose = obj.get("verbose", False)

    if isinstance(e, CorruptData):
        msg = f"Price index is corrupt: {e}. Run 'awsprice process' to rebuild it."
    elif isinstance(e, MalformedCatalog):
        msg = f"Invalid pricing catalog: {e}"
    elif isinstance(e, FetchError):
        msg = f"Download failed: {e}"
    elif isinstance(e, ConfigError):
        msg = f"Config: {e}"
    elif isinstance(e, FileNotFoundError):
        msg = f"File not found: {e}"
    elif isinstance(e, ValueError):
        msg = str(e)
    else:
        msg = f"Error: {e}"

    _err_console.print(f"[red]Error:[/red] {escape(msg)}", highlight=False)

    if verbose:
        _err_console.print_exception()

    raise typer.Exit(1)
