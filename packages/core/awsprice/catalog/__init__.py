"""Pricing catalog package: raw catalog extraction, the price index, and its on-disk store."""

from awsprice.catalog.document import CatalogDocument, parse_catalog, read_catalog
from awsprice.catalog.extract import ExtractionResult, SkippedProduct, extract, first_usd_price
from awsprice.catalog.families import FAMILY_CONFIGS, FamilyConfig, ProductFilter, get_family_config
from awsprice.catalog.index import PriceIndex
from awsprice.catalog.process import ProcessResult, ProcessSummary, build_index, process_catalogs
from awsprice.catalog.store import INDEX_FILENAME, SCHEMA_VERSION, IndexStore

__all__ = [
    "CatalogDocument",
    "ExtractionResult",
    "FAMILY_CONFIGS",
    "FamilyConfig",
    "INDEX_FILENAME",
    "IndexStore",
    "PriceIndex",
    "ProcessResult",
    "ProcessSummary",
    "ProductFilter",
    "SCHEMA_VERSION",
    "SkippedProduct",
    "build_index",
    "extract",
    "first_usd_price",
    "get_family_config",
    "parse_catalog",
    "process_catalogs",
    "read_catalog",
]
