"""PriceIndex: the in-memory keyed store of offers, one map per family."""

from __future__ import annotations

from typing import Iterator, Mapping

from awsprice.catalog.families import FamilyConfig, get_family_config
from awsprice.errors import InvalidKey, InvalidRegion, OfferNotFound
from awsprice.models import Family, Offer, OfferKey
from awsprice.region import Region, RegionTable, default_region_table


class PriceIndex:
    """All known offers, keyed per family by OfferKey.

    ``lookup`` maps a product name (``m4.xlarge``, ``db.r5.large``) to the
    family that owns it so a bare name can be turned back into a full key.
    An index is built in one pass and replaced wholesale on rebuild.
    """

    def __init__(self, regions: RegionTable | None = None, default_region: Region | str | None = None):
        self.regions = regions or default_region_table()
        self.default_region = self.regions.normalize(default_region or "us-east-1")
        self.lookup: dict[str, Family] = {}
        self.offers: dict[Family, dict[OfferKey, Offer]] = {family: {} for family in Family}
        # Free-form build information (publication dates, build time); persisted alongside offers
        self.metadata: dict[str, str] = {}

    @classmethod
    def from_config(cls, config) -> PriceIndex:
        return cls(regions=config.region_table(), default_region=config.default_region)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def store(self, key: OfferKey, offer: Offer) -> None:
        """Insert or overwrite the offer under ``key``.

        Only keys that ``get`` can rebuild are accepted: the region must be
        the canonical location name and the extra attributes must match the
        family's.
        """
        if not key.name:
            raise InvalidKey("Offer key has an empty name")
        if key.family != offer.family or key.name != offer.name:
            raise InvalidKey(f"Key {key.as_tuple()} does not describe offer {offer.key.as_tuple()}")
        try:
            region = self.regions.normalize(key.region)
        except InvalidRegion:
            raise InvalidKey(f"Key {key.as_tuple()} has unknown region {key.region!r}") from None
        if key.region != region.name:
            raise InvalidKey(f"Key {key.as_tuple()} must use the location name {region.name!r}")
        get_family_config(key.family).check_key(key)

        self.lookup[key.name] = key.family
        self.offers[key.family][key] = offer

    def add(self, offer: Offer) -> None:
        self.store(offer.key, offer)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def family_of(self, name: str) -> Family:
        try:
            return self.lookup[name]
        except KeyError:
            raise OfferNotFound(f"No known resources named {name}") from None

    def key_for(self, name: str, attributes: Mapping[str, str] | None = None) -> OfferKey:
        """Reconstruct the OfferKey for a name, applying family defaults."""
        config: FamilyConfig = get_family_config(self.family_of(name))
        return config.make_key(name, attributes, self.regions, self.default_region)

    def get(self, name: str, attributes: Mapping[str, str] | None = None) -> Offer:
        key = self.key_for(name, attributes)
        try:
            return self.offers[key.family][key]
        except KeyError:
            raise OfferNotFound(f"No matching records found for {name} with {dict(attributes or {})}") from None

    def search(self, substring: str, attributes: Mapping[str, str] | None = None) -> list[Offer]:
        """Every offer whose name contains ``substring``, resolved with ``attributes``.

        Names that have no offer for the requested attributes are left out.
        An unknown region in ``attributes`` raises InvalidRegion.
        """
        if attributes and "region" in attributes:
            self.regions.normalize(attributes["region"])

        results: list[Offer] = []
        for name in self.lookup:
            if substring not in name:
                continue
            try:
                results.append(self.get(name, attributes))
            except OfferNotFound:
                continue
        return results

    def __iter__(self) -> Iterator[Offer]:
        for family_offers in self.offers.values():
            yield from family_offers.values()

    def __len__(self) -> int:
        return sum(len(family_offers) for family_offers in self.offers.values())

    def count(self, family: Family) -> int:
        return len(self.offers[family])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PriceIndex):
            return NotImplemented
        return self.lookup == other.lookup and self.offers == other.offers

    def __repr__(self) -> str:
        counts = ", ".join(f"{family.value}={len(offers)}" for family, offers in self.offers.items())
        return f"PriceIndex({counts})"


__all__ = ["PriceIndex"]
