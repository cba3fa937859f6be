"""awsprice: on-demand AWS prices from a local cache of the public pricing catalogs."""

from awsprice.errors import (
    AwsPriceError,
    ConfigError,
    CorruptData,
    FetchError,
    IndexNotFound,
    InvalidKey,
    InvalidRegion,
    MalformedCatalog,
    NotFound,
    OfferNotFound,
    SchemaVersionMismatch,
)
from awsprice.models import HOURS_PER_MONTH, Family, Offer, OfferKey, ProductAttributes
from awsprice.region import Region, RegionTable, normalize_region

__version__ = "0.3.0"

__all__ = [
    "AwsPriceError",
    "CatalogFetcher",
    "ConfigError",
    "CorruptData",
    "Family",
    "FetchError",
    "HOURS_PER_MONTH",
    "IndexNotFound",
    "IndexStore",
    "InvalidKey",
    "InvalidRegion",
    "MalformedCatalog",
    "NotFound",
    "Offer",
    "OfferKey",
    "OfferNotFound",
    "PriceConfig",
    "PriceIndex",
    "ProductAttributes",
    "Region",
    "RegionTable",
    "SchemaVersionMismatch",
    "format_many",
    "format_one",
    "load_config",
    "normalize_region",
    "process_catalogs",
    "resolve",
]


def __getattr__(name: str):
    # Lazy imports so `import awsprice` stays cheap for the CLI's fast path
    if name == "PriceIndex":
        from awsprice.catalog.index import PriceIndex

        return PriceIndex
    if name == "IndexStore":
        from awsprice.catalog.store import IndexStore

        return IndexStore
    if name == "process_catalogs":
        from awsprice.catalog.process import process_catalogs

        return process_catalogs
    if name == "CatalogFetcher":
        from awsprice.fetch import CatalogFetcher

        return CatalogFetcher
    if name == "PriceConfig":
        from awsprice.config import PriceConfig

        return PriceConfig
    if name == "load_config":
        from awsprice.config import load_config

        return load_config
    if name == "resolve":
        from awsprice.resolver import resolve

        return resolve
    if name == "format_one":
        from awsprice.formatter import format_one

        return format_one
    if name == "format_many":
        from awsprice.formatter import format_many

        return format_many
    raise AttributeError(f"module 'awsprice' has no attribute {name!r}")
