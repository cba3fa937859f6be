"""Catalog extraction: distil a raw pricing catalog into priced offers."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Mapping

from awsprice.catalog.document import CatalogDocument, TermItem
from awsprice.catalog.families import FamilyConfig
from awsprice.errors import InvalidKey, InvalidRegion
from awsprice.models import Offer, ProductAttributes
from awsprice.region import Region, RegionTable

logger = logging.getLogger(__name__)


class PriceUnavailable(Exception):
    """No price dimension of a term yielded a usable USD price."""


@dataclass
class SkippedProduct:
    sku: str
    name: str
    reason: str


@dataclass
class ExtractionResult:
    offers: list[Offer] = field(default_factory=list)
    skipped: list[SkippedProduct] = field(default_factory=list)
    excluded: int = 0

    def skip(self, sku: str, name: str, reason: str) -> None:
        logger.warning("Skipping %s (SKU=%s): %s", name or "<unnamed>", sku, reason)
        self.skipped.append(SkippedProduct(sku=sku, name=name, reason=reason))


def _parse_usd(value) -> Decimal | None:
    if value is None:
        return None
    try:
        price = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    if not price.is_finite() or price < 0:
        return None
    return price


def first_usd_price(terms: Mapping[str, TermItem]) -> Decimal:
    """Return the first parseable USD price across the given terms.

    Terms and dimensions are scanned in document order; the first dimension
    with a valid USD entry wins.
    """
    for term in terms.values():
        for dimension in term.price_dimensions.values():
            price = _parse_usd(dimension.price_per_unit.get("USD"))
            if price is not None:
                return price
    raise PriceUnavailable(f"no parseable USD price in {len(terms)} term(s)")


def extract(
    document: CatalogDocument,
    config: FamilyConfig,
    regions: RegionTable,
    default_region: Region,
) -> ExtractionResult:
    """Walk every product in ``document`` and emit one Offer per qualifying SKU.

    A product that fails (no on-demand terms, no usable price, unknown
    region, empty key attribute) is recorded in ``skipped`` and the walk continues.
    """
    result = ExtractionResult()
    on_demand = document.terms.on_demand

    for sku_key, product in document.products.items():
        raw = product.attributes
        if not config.include(raw):
            result.excluded += 1
            continue

        sku = product.sku or sku_key
        attrs = ProductAttributes.from_catalog(raw)
        name = attrs.instance_type

        terms = on_demand.get(sku)
        if not terms:
            result.skip(sku, name, "no on-demand terms")
            continue

        try:
            price = first_usd_price(terms)
        except PriceUnavailable as exc:
            result.skip(sku, name, str(exc))
            continue

        try:
            key = config.make_key(name, config.key_attributes(attrs), regions, default_region)
        except (InvalidRegion, InvalidKey) as exc:
            result.skip(sku, name, str(exc))
            continue

        result.offers.append(Offer(key=key, attributes=attrs, price=price))

    logger.info(
        "Extracted %d %s offers (%d skipped, %d excluded by filter)",
        len(result.offers),
        config.family,
        len(result.skipped),
        result.excluded,
    )
    return result
