"""Offer rendering: one-line prices and per-family tables."""

from __future__ import annotations

import io
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from awsprice.catalog.families import get_family_config
from awsprice.models import Family, Offer

_THREE_PLACES = Decimal("0.001")
_TWO_PLACES = Decimal("0.01")
_TABLE_WIDTH = 200


def _round(value: Decimal, places: Decimal) -> Decimal:
    # ROUND_HALF_UP on Decimal rounds half away from zero
    return value.quantize(places, rounding=ROUND_HALF_UP)


def hourly(offer: Offer) -> str:
    return f"${_round(offer.hourly_price, _THREE_PLACES)}"


def monthly(offer: Offer) -> str:
    # Rounded from the unrounded hourly price, never from the 3-place figure
    return f"${_round(offer.monthly_price, _TWO_PLACES)}"


def format_one(offer: Offer) -> str:
    return f"{hourly(offer)} /hr, {monthly(offer)} /mo"


def _family_table(family: Family, offers: list[Offer]) -> Table:
    config = get_family_config(family)
    table = Table(box=box.ASCII, show_edge=True, header_style=None, pad_edge=True)
    for column in config.columns:
        table.add_column(column)
    table.add_column("$/hr", justify="right")
    table.add_column("$/mo", justify="right")
    for offer in offers:
        table.add_row(*(Text(cell) for cell in config.describe(offer)), hourly(offer), monthly(offer))
    return table


def format_many(offers: Iterable[Offer]) -> str:
    """Render offers as one table per family, each sorted by hourly price.

    Families appear in order of first occurrence; the sort is stable.
    """
    groups: dict[Family, list[Offer]] = {}
    for offer in offers:
        groups.setdefault(offer.family, []).append(offer)
    if not groups:
        return ""

    buffer = io.StringIO()
    console = Console(file=buffer, width=_TABLE_WIDTH, color_system=None, force_terminal=False, emoji=False)
    for family, family_offers in groups.items():
        console.print(_family_table(family, sorted(family_offers, key=lambda o: o.hourly_price)))
    return buffer.getvalue()
