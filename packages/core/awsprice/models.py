"""Offer data model: what the price index stores and the formatter renders."""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

# (365 * 24) / 12, rounded to the figure AWS itself uses
HOURS_PER_MONTH = 730


class Family(str, Enum):
    """Top-level product category with its own attribute schema."""

    EC2 = "ec2"
    RDS = "rds"

    def __str__(self) -> str:
        return self.value


# ProductAttributes field -> attribute name in the pricing catalog
CATALOG_ATTRIBUTE_NAMES: dict[str, str] = {
    "service_code": "servicecode",
    "location": "location",
    "location_type": "locationType",
    "instance_type": "instanceType",
    "current_generation": "currentGeneration",
    "instance_family": "instanceFamily",
    "vcpu": "vcpu",
    "memory": "memory",
    "operating_system": "operatingSystem",
    "tenancy": "tenancy",
    "database_engine": "databaseEngine",
    "deployment_option": "deploymentOption",
}


class ProductAttributes(BaseModel):
    """Descriptive attributes carried with a price for display."""

    model_config = ConfigDict(frozen=True)

    service_code: str = ""
    location: str = ""
    location_type: str = ""
    instance_type: str = ""
    current_generation: str = ""
    instance_family: str = ""
    vcpu: str = ""
    memory: str = ""
    operating_system: str = ""
    tenancy: str = ""
    database_engine: str = ""
    deployment_option: str = ""

    @classmethod
    def from_catalog(cls, attributes: Mapping[str, Any]) -> ProductAttributes:
        """Pick the known fields out of a raw catalog attribute bag."""
        values = {}
        for field_name, catalog_name in CATALOG_ATTRIBUTE_NAMES.items():
            value = attributes.get(catalog_name)
            if value is not None:
                values[field_name] = str(value)
        return cls(**values)


class OfferKey(BaseModel):
    """Identifies one offer within its family.

    ``region`` is the canonical location name. ``engine`` and ``deployment``
    are only meaningful for database families and stay empty otherwise.
    """

    model_config = ConfigDict(frozen=True)

    family: Family
    name: str
    region: str
    engine: str = ""
    deployment: str = ""

    def as_tuple(self) -> tuple[str, str, str, str, str]:
        return (self.family.value, self.name, self.region, self.engine, self.deployment)


class Offer(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: OfferKey
    attributes: ProductAttributes = Field(default_factory=ProductAttributes)
    price: Decimal

    @field_validator("price")
    @classmethod
    def validate_price(cls, v: Decimal) -> Decimal:
        if not v.is_finite() or v < 0:
            raise ValueError(f"Hourly price must be a non-negative number, got {v}")
        return v

    @property
    def family(self) -> Family:
        return self.key.family

    @property
    def name(self) -> str:
        return self.key.name

    @property
    def hourly_price(self) -> Decimal:
        return self.price

    @property
    def monthly_price(self) -> Decimal:
        return self.price * HOURS_PER_MONTH
