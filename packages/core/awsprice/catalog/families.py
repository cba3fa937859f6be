"""Per-family extraction and display rules.

Every product family goes through the same pipeline; what differs is captured
here as data: which catalog file it comes from, which products qualify, how
an OfferKey is derived, which key attributes default to what, and which
columns describe an offer in a table.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from awsprice.errors import InvalidKey
from awsprice.models import Family, Offer, OfferKey, ProductAttributes
from awsprice.region import Region, RegionTable

_GOVCLOUD = "AWS GovCloud (US)"
# OfferKey fields beyond family, name and region
_EXTRA_KEY_ATTRIBUTES = ("engine", "deployment")


@dataclass(frozen=True)
class ProductFilter:
    """Inclusion policy over a product's raw catalog attributes.

    ``require``: attribute must be present and equal to the value.
    ``exclude``: product is dropped when the attribute holds one of the values.
    ``present``: attribute must be present and non-empty.
    """

    require: Mapping[str, str] = field(default_factory=dict)
    exclude: Mapping[str, frozenset[str]] = field(default_factory=dict)
    present: tuple[str, ...] = ()

    def matches(self, attributes: Mapping[str, Any]) -> bool:
        for name, value in self.require.items():
            if attributes.get(name) != value:
                return False
        for name, values in self.exclude.items():
            if attributes.get(name) in values:
                return False
        return all(attributes.get(name) for name in self.present)


def _ec2_key_attributes(attrs: ProductAttributes) -> dict[str, str]:
    return {"region": attrs.location}


def _rds_key_attributes(attrs: ProductAttributes) -> dict[str, str]:
    return {
        "region": attrs.location,
        "engine": attrs.database_engine,
        "deployment": attrs.deployment_option,
    }


def _ec2_describe(offer: Offer) -> list[str]:
    a = offer.attributes
    return [a.instance_type or offer.name, a.vcpu, a.memory]


def _rds_describe(offer: Offer) -> list[str]:
    a = offer.attributes
    return [a.instance_type or offer.name, a.vcpu, a.memory, a.database_engine, a.deployment_option]


@dataclass(frozen=True)
class FamilyConfig:
    family: Family
    offer_code: str
    product_filter: ProductFilter
    key_attributes: Callable[[ProductAttributes], dict[str, str]]
    describe: Callable[[Offer], list[str]]
    columns: tuple[str, ...]
    # Key attributes other than region, with the value used when a lookup omits them
    defaults: Mapping[str, str] = field(default_factory=dict)

    @property
    def catalog_filename(self) -> str:
        return f"{self.offer_code}.json"

    def include(self, attributes: Mapping[str, Any]) -> bool:
        return self.product_filter.matches(attributes)

    def make_key(
        self,
        name: str,
        attributes: Mapping[str, str] | None,
        regions: RegionTable,
        default_region: Region,
    ) -> OfferKey:
        """Build the OfferKey for ``name``, filling omitted attributes with defaults.

        Raises InvalidRegion when a supplied region is not recognised and
        InvalidKey when a supplied key attribute is empty.
        """
        attributes = attributes or {}
        region = regions.normalize(attributes["region"]) if "region" in attributes else default_region
        extra = {attr: attributes.get(attr, default) for attr, default in self.defaults.items()}
        key = OfferKey(family=self.family, name=name, region=region.name, **extra)
        self.check_key(key)
        return key

    def check_key(self, key: OfferKey) -> None:
        """Raise InvalidKey unless ``key`` carries exactly this family's extra attributes."""
        for attr in _EXTRA_KEY_ATTRIBUTES:
            value = getattr(key, attr)
            if attr in self.defaults and not value:
                raise InvalidKey(f"{self.family} key for {key.name!r} has an empty {attr}")
            if attr not in self.defaults and value:
                raise InvalidKey(f"{self.family} keys carry no {attr}, got {value!r} for {key.name!r}")


EC2_CONFIG = FamilyConfig(
    family=Family.EC2,
    offer_code="AmazonEC2",
    product_filter=ProductFilter(
        require={"servicecode": "AmazonEC2", "tenancy": "Shared", "operatingSystem": "Linux"},
        exclude={
            "location": frozenset({_GOVCLOUD}),
            "preInstalledSw": frozenset({"SQL Std", "SQL Web", "SQL Ent"}),
            "capacitystatus": frozenset({"AllocatedCapacityReservation", "UnusedCapacityReservation"}),
        },
        present=("instanceType",),
    ),
    key_attributes=_ec2_key_attributes,
    describe=_ec2_describe,
    columns=("type", "vCPU", "Mem"),
)

RDS_CONFIG = FamilyConfig(
    family=Family.RDS,
    offer_code="AmazonRDS",
    product_filter=ProductFilter(
        exclude={
            "location": frozenset({_GOVCLOUD}),
            "servicecode": frozenset({"AWSDataTransfer"}),
            "licenseModel": frozenset({"Bring your own license"}),
        },
        present=("instanceType",),
    ),
    key_attributes=_rds_key_attributes,
    describe=_rds_describe,
    columns=("type", "vCPU", "Mem", "Engine", "Deployment"),
    defaults={"engine": "MySQL", "deployment": "Multi-AZ"},
)

FAMILY_CONFIGS: dict[Family, FamilyConfig] = {
    Family.EC2: EC2_CONFIG,
    Family.RDS: RDS_CONFIG,
}


def get_family_config(family: Family | str) -> FamilyConfig:
    try:
        return FAMILY_CONFIGS[Family(family)]
    except (KeyError, ValueError):
        raise ValueError(f"Unknown product family: {family}") from None
