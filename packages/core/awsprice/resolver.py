"""Query resolution: turn a free-form token into a rendered price."""

from __future__ import annotations

from typing import Mapping

from awsprice.catalog.index import PriceIndex
from awsprice.errors import OfferNotFound
from awsprice.formatter import format_many, format_one


def resolve(index: PriceIndex, token: str, attributes: Mapping[str, str] | None = None) -> str:
    """Exact match first, then substring search.

    ``attributes`` (region, engine, deployment) narrow both phases; anything
    omitted falls back to the index's defaults. One search hit renders like
    an exact match; several render as per-family tables.
    """
    attributes = dict(attributes or {})
    try:
        return format_one(index.get(token, attributes))
    except OfferNotFound as exc:
        offers = index.search(token, attributes)
        if not offers:
            raise OfferNotFound(f"Unable to find a price for {token!r}") from exc
    if len(offers) == 1:
        return format_one(offers[0])
    return format_many(offers)
