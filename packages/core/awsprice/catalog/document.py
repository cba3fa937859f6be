"""Raw AWS bulk-pricing documents, validated into typed models.

Only the parts the extractor needs are modelled; everything else in the
published JSON is ignored.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from awsprice.errors import MalformedCatalog


class PriceDimension(BaseModel):
    model_config = ConfigDict(extra="ignore")

    rate_code: str = Field(default="", alias="rateCode")
    description: str = ""
    unit: str = ""
    price_per_unit: dict[str, Any] = Field(default_factory=dict, alias="pricePerUnit")


class TermItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    offer_term_code: str = Field(default="", alias="offerTermCode")
    sku: str = ""
    price_dimensions: dict[str, PriceDimension] = Field(default_factory=dict, alias="priceDimensions")


class CatalogTerms(BaseModel):
    model_config = ConfigDict(extra="ignore")

    # SKU -> term code -> term. Reserved terms are not read.
    on_demand: dict[str, dict[str, TermItem]] = Field(default_factory=dict, alias="OnDemand")


class CatalogProduct(BaseModel):
    model_config = ConfigDict(extra="ignore")

    sku: str = ""
    product_family: str = Field(default="", alias="productFamily")
    attributes: dict[str, Any] = Field(default_factory=dict)


class CatalogDocument(BaseModel):
    """Root of one per-service offer file (e.g. AmazonEC2.json)."""

    model_config = ConfigDict(extra="ignore")

    format_version: str = Field(default="", alias="formatVersion")
    disclaimer: str = ""
    offer_code: str = Field(default="", alias="offerCode")
    publication_date: str = Field(default="", alias="publicationDate")
    products: dict[str, CatalogProduct]
    terms: CatalogTerms


class OfferFile(BaseModel):
    model_config = ConfigDict(extra="ignore")

    offer_code: str = Field(alias="offerCode")
    version_index_url: str = Field(default="", alias="versionIndexUrl")
    current_version_url: str = Field(alias="currentVersionUrl")


class OfferIndexDocument(BaseModel):
    """Root of the service listing at /offers/v1.0/aws/index.json."""

    model_config = ConfigDict(extra="ignore")

    format_version: str = Field(default="", alias="formatVersion")
    publication_date: str = Field(default="", alias="publicationDate")
    offers: dict[str, OfferFile]


def _load_json(raw: bytes | str, source: str):
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise MalformedCatalog(f"{source} is not valid JSON: {exc}") from exc


def parse_catalog(raw: bytes | str, source: str = "catalog") -> CatalogDocument:
    data = _load_json(raw, source)
    try:
        return CatalogDocument.model_validate(data)
    except ValidationError as exc:
        raise MalformedCatalog(f"{source} does not look like a pricing catalog: {exc}") from exc


def read_catalog(path: str | Path) -> CatalogDocument:
    path = Path(path)
    try:
        raw = path.read_bytes()
    except FileNotFoundError as exc:
        raise MalformedCatalog(f"Catalog file not found: {path}. Run 'awsprice fetch' first.") from exc
    return parse_catalog(raw, source=path.name)


def parse_offer_index(raw: bytes | str, source: str = "offer index") -> OfferIndexDocument:
    data = _load_json(raw, source)
    try:
        return OfferIndexDocument.model_validate(data)
    except ValidationError as exc:
        raise MalformedCatalog(f"{source} does not look like an offer index: {exc}") from exc
