"""Tests for catalog parsing and offer extraction."""

from __future__ import annotations

import json
from decimal import Decimal

import pytest
from awsprice.catalog.document import parse_catalog, parse_offer_index, read_catalog
from awsprice.catalog.extract import PriceUnavailable, extract, first_usd_price
from awsprice.catalog.families import EC2_CONFIG, RDS_CONFIG, ProductFilter, get_family_config
from awsprice.errors import MalformedCatalog
from awsprice.models import Family
from awsprice.region import RegionTable
from factories import catalog, ec2_product, on_demand_term, rds_product


@pytest.fixture
def regions():
    return RegionTable()


@pytest.fixture
def default_region(regions):
    return regions.normalize("us-east-1")


def _extract(doc: dict, config, regions, default_region):
    return extract(parse_catalog(json.dumps(doc)), config, regions, default_region)


class TestParseCatalog:
    def test_parses_nested_shape(self, ec2_catalog):
        doc = parse_catalog(json.dumps(ec2_catalog))
        assert doc.publication_date == "2017-03-01T00:00:00Z"
        assert set(doc.products) == {"SKU1", "SKU2", "SKU3", "SKU4", "SKU5", "SKU6"}
        term = doc.terms.on_demand["SKU1"]["SKU1.JRTCKXETXF"]
        dim = next(iter(term.price_dimensions.values()))
        assert dim.price_per_unit["USD"] == "0.2000000000"
        assert dim.unit == "Hrs"

    def test_invalid_json(self):
        with pytest.raises(MalformedCatalog, match="not valid JSON"):
            parse_catalog(b"{not json")

    def test_missing_products(self):
        with pytest.raises(MalformedCatalog):
            parse_catalog(json.dumps({"terms": {"OnDemand": {}}}))

    def test_wrong_shape(self):
        with pytest.raises(MalformedCatalog):
            parse_catalog(json.dumps({"products": [], "terms": {"OnDemand": {}}}))

    def test_top_level_not_object(self):
        with pytest.raises(MalformedCatalog):
            parse_catalog("[1, 2, 3]")

    def test_read_missing_file(self, tmp_path):
        with pytest.raises(MalformedCatalog, match="not found"):
            read_catalog(tmp_path / "AmazonEC2.json")

    def test_offer_index(self):
        raw = json.dumps(
            {
                "formatVersion": "v1.0",
                "offers": {
                    "AmazonEC2": {
                        "offerCode": "AmazonEC2",
                        "versionIndexUrl": "/offers/v1.0/aws/AmazonEC2/index.json",
                        "currentVersionUrl": "/offers/v1.0/aws/AmazonEC2/current/index.json",
                    }
                },
            }
        )
        index = parse_offer_index(raw)
        assert index.offers["AmazonEC2"].current_version_url.endswith("current/index.json")


class TestFirstUsdPrice:
    def _terms(self, *prices):
        doc = catalog([ec2_product("S", "m4.large")], {"S": prices})
        return parse_catalog(json.dumps(doc)).terms.on_demand["S"]

    def test_single_dimension(self):
        assert first_usd_price(self._terms("0.1000000000")) == Decimal("0.1")

    def test_first_parseable_wins(self):
        assert first_usd_price(self._terms("n/a", "0.0500000000", "0.0700000000")) == Decimal("0.05")

    def test_missing_usd_skipped(self):
        assert first_usd_price(self._terms(None, "0.3")) == Decimal("0.3")

    def test_zero_is_a_price(self):
        assert first_usd_price(self._terms("0.0000000000")) == Decimal("0")

    def test_negative_rejected(self):
        with pytest.raises(PriceUnavailable):
            first_usd_price(self._terms("-1.0"))

    def test_nothing_parses(self):
        with pytest.raises(PriceUnavailable):
            first_usd_price(self._terms("", "NaN", "abc"))

    def test_exact_decimal_kept(self):
        assert first_usd_price(self._terms("0.1234567891")) == Decimal("0.1234567891")


class TestProductFilter:
    def test_require(self):
        f = ProductFilter(require={"tenancy": "Shared"})
        assert f.matches({"tenancy": "Shared"})
        assert not f.matches({"tenancy": "Dedicated"})
        assert not f.matches({})

    def test_exclude(self):
        f = ProductFilter(exclude={"location": frozenset({"AWS GovCloud (US)"})})
        assert f.matches({"location": "EU (Ireland)"})
        assert f.matches({})
        assert not f.matches({"location": "AWS GovCloud (US)"})

    def test_present(self):
        f = ProductFilter(present=("instanceType",))
        assert f.matches({"instanceType": "m4.large"})
        assert not f.matches({"instanceType": ""})
        assert not f.matches({})

    def test_family_lookup(self):
        assert get_family_config("ec2") is EC2_CONFIG
        assert get_family_config(Family.RDS) is RDS_CONFIG
        with pytest.raises(ValueError, match="Unknown product family"):
            get_family_config("s3")


class TestExtractEC2:
    def test_filters_and_prices(self, ec2_catalog, regions, default_region):
        result = _extract(ec2_catalog, EC2_CONFIG, regions, default_region)
        keys = {(o.name, o.key.region): o.price for o in result.offers}
        assert keys == {
            ("m4.xlarge", "US East (N. Virginia)"): Decimal("0.2"),
            ("m4.large", "US East (N. Virginia)"): Decimal("0.1"),
            ("m4.xlarge", "US West (Oregon)"): Decimal("0.215"),
        }
        # dedicated, govcloud, windows
        assert result.excluded == 3
        assert result.skipped == []

    def test_attributes_carried(self, ec2_catalog, regions, default_region):
        result = _extract(ec2_catalog, EC2_CONFIG, regions, default_region)
        offer = next(o for o in result.offers if o.name == "m4.large")
        assert offer.family is Family.EC2
        assert offer.attributes.vcpu == "2"
        assert offer.attributes.memory == "8 GiB"
        assert offer.attributes.tenancy == "Shared"
        assert offer.key.engine == ""

    def test_missing_terms_skipped(self, regions, default_region):
        doc = catalog([ec2_product("A", "m4.large"), ec2_product("B", "m4.xlarge")], {"A": ("0.1",)})
        result = _extract(doc, EC2_CONFIG, regions, default_region)
        assert [o.name for o in result.offers] == ["m4.large"]
        assert len(result.skipped) == 1
        assert result.skipped[0].sku == "B"
        assert result.skipped[0].reason == "no on-demand terms"

    def test_unparseable_price_skipped(self, regions, default_region):
        doc = catalog([ec2_product("A", "m4.large"), ec2_product("B", "m4.xlarge")], {"A": ("0.1",), "B": ("?",)})
        result = _extract(doc, EC2_CONFIG, regions, default_region)
        assert [o.name for o in result.offers] == ["m4.large"]
        assert result.skipped[0].name == "m4.xlarge"

    def test_unknown_region_skipped(self, regions, default_region):
        doc = catalog(
            [ec2_product("A", "m4.large"), ec2_product("B", "m4.large", location="Middle Earth (Shire)")],
            {"A": ("0.1",), "B": ("0.2",)},
        )
        result = _extract(doc, EC2_CONFIG, regions, default_region)
        assert len(result.offers) == 1
        assert "Middle Earth" in result.skipped[0].reason

    def test_empty_location_is_not_defaulted(self, regions, default_region):
        doc = catalog([ec2_product("A", "m4.large", location="")], {"A": ("0.1",)})
        result = _extract(doc, EC2_CONFIG, regions, default_region)
        assert result.offers == []
        assert len(result.skipped) == 1

    def test_skip_is_logged(self, regions, default_region, caplog):
        doc = catalog([ec2_product("B", "m4.xlarge")], {})
        with caplog.at_level("WARNING", logger="awsprice.catalog.extract"):
            _extract(doc, EC2_CONFIG, regions, default_region)
        assert "m4.xlarge" in caplog.text
        assert "SKU=B" in caplog.text

    def test_term_sku_from_products_key(self, regions, default_region):
        product = ec2_product("A", "m4.large")
        product["sku"] = ""
        doc = catalog([], {"A": ("0.1",)})
        doc["products"] = {"A": product}
        result = _extract(doc, EC2_CONFIG, regions, default_region)
        assert len(result.offers) == 1

    def test_extraction_is_repeatable(self, ec2_catalog, regions, default_region):
        first = _extract(ec2_catalog, EC2_CONFIG, regions, default_region)
        second = _extract(ec2_catalog, EC2_CONFIG, regions, default_region)
        assert {o.key: o.price for o in first.offers} == {o.key: o.price for o in second.offers}


class TestExtractRDS:
    def test_key_includes_engine_and_deployment(self, rds_catalog, regions, default_region):
        result = _extract(rds_catalog, RDS_CONFIG, regions, default_region)
        keys = {(o.name, o.key.engine, o.key.deployment): o.price for o in result.offers}
        assert keys == {
            ("db.m4.large", "MySQL", "Multi-AZ"): Decimal("0.35"),
            ("db.m4.large", "MySQL", "Single-AZ"): Decimal("0.175"),
            ("db.m4.large", "PostgreSQL", "Multi-AZ"): Decimal("0.365"),
            ("db.t2.micro", "MySQL", "Multi-AZ"): Decimal("0.034"),
        }
        # data transfer SKU
        assert result.excluded == 1

    def test_rds_attributes(self, rds_catalog, regions, default_region):
        result = _extract(rds_catalog, RDS_CONFIG, regions, default_region)
        offer = next(o for o in result.offers if o.key.engine == "PostgreSQL")
        assert offer.family is Family.RDS
        assert offer.attributes.database_engine == "PostgreSQL"
        assert offer.attributes.deployment_option == "Multi-AZ"

    def test_extra_term_unused(self, regions, default_region, rds_catalog):
        rds_catalog["terms"]["OnDemand"]["ORPHAN"] = on_demand_term("ORPHAN", "9.9")
        result = _extract(rds_catalog, RDS_CONFIG, regions, default_region)
        assert all(o.price != Decimal("9.9") for o in result.offers)

    def test_missing_engine_skipped(self, regions, default_region):
        doc = catalog(
            [rds_product("R1", "db.m4.large"), rds_product("R2", "db.r3.large", engine="")],
            {"R1": ("0.35",), "R2": ("0.5",)},
            offer_code="AmazonRDS",
        )
        result = _extract(doc, RDS_CONFIG, regions, default_region)
        assert [o.name for o in result.offers] == ["db.m4.large"]
        assert result.skipped[0].sku == "R2"
        assert "engine" in result.skipped[0].reason
