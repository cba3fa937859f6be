"""Shared fixtures for core tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from awsprice.catalog.index import PriceIndex
from awsprice.config import PriceConfig
from awsprice.models import Family
from factories import catalog, ec2_product, make_offer, rds_product


@pytest.fixture
def ec2_catalog() -> dict:
    return catalog(
        [
            ec2_product("SKU1", "m4.xlarge"),
            ec2_product("SKU2", "m4.large", vcpu="2", memory="8 GiB"),
            ec2_product("SKU3", "m4.xlarge", location="US West (Oregon)"),
            ec2_product("SKU4", "m4.xlarge", tenancy="Dedicated"),
            ec2_product("SKU5", "m4.xlarge", location="AWS GovCloud (US)"),
            ec2_product("SKU6", "c4.large", operatingSystem="Windows"),
        ],
        {
            "SKU1": ("0.2000000000",),
            "SKU2": ("0.1000000000",),
            "SKU3": ("0.2150000000",),
            "SKU4": ("0.2200000000",),
            "SKU5": ("0.2520000000",),
            "SKU6": ("0.1930000000",),
        },
    )


@pytest.fixture
def rds_catalog() -> dict:
    return catalog(
        [
            rds_product("RDS1", "db.m4.large"),
            rds_product("RDS2", "db.m4.large", deployment="Single-AZ"),
            rds_product("RDS3", "db.m4.large", engine="PostgreSQL"),
            rds_product("RDS4", "db.t2.micro", vcpu="1", memory="1 GiB"),
            rds_product("RDS5", "db.m4.large", servicecode="AWSDataTransfer"),
        ],
        {
            "RDS1": ("0.3500000000",),
            "RDS2": ("0.1750000000",),
            "RDS3": ("0.3650000000",),
            "RDS4": ("0.0340000000",),
            "RDS5": ("0.0200000000",),
        },
        offer_code="AmazonRDS",
    )


@pytest.fixture
def config(tmp_path: Path) -> PriceConfig:
    return PriceConfig(cache_dir=tmp_path / "cache")


@pytest.fixture
def cached_catalogs(config: PriceConfig, ec2_catalog: dict, rds_catalog: dict) -> PriceConfig:
    """A config whose cache directory already holds both catalog files."""
    config.ensure_cache_dir()
    config.catalog_path("AmazonEC2").write_text(json.dumps(ec2_catalog))
    config.catalog_path("AmazonRDS").write_text(json.dumps(rds_catalog))
    return config


@pytest.fixture
def populated_index() -> PriceIndex:
    index = PriceIndex()
    for offer in (
        make_offer("m4.xlarge", "0.2", vcpu="4", memory="16 GiB"),
        make_offer("m4.large", "0.1", vcpu="2", memory="8 GiB"),
        make_offer("m4.xlarge", "0.215", region="US West (Oregon)", vcpu="4", memory="16 GiB"),
        make_offer("db.m4.large", "0.35", family=Family.RDS, vcpu="2", memory="8 GiB"),
        make_offer("db.m4.large", "0.365", family=Family.RDS, engine="PostgreSQL", vcpu="2", memory="8 GiB"),
    ):
        index.add(offer)
    return index
