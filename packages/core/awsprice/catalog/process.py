"""Catalog processing pipeline: downloaded catalogs in, persisted index out."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

from awsprice.catalog.document import read_catalog
from awsprice.catalog.extract import ExtractionResult, SkippedProduct, extract
from awsprice.catalog.families import get_family_config
from awsprice.catalog.index import PriceIndex
from awsprice.catalog.store import IndexStore

if TYPE_CHECKING:
    from awsprice.config import PriceConfig

logger = logging.getLogger(__name__)


@dataclass
class ProcessResult:
    family: str
    offers_stored: int = 0
    excluded: int = 0
    publication_date: str = ""
    skipped: list[SkippedProduct] = field(default_factory=list)


@dataclass
class ProcessSummary:
    results: list[ProcessResult] = field(default_factory=list)
    index_path: Path | None = None

    @property
    def total_stored(self) -> int:
        return sum(r.offers_stored for r in self.results)

    @property
    def total_skipped(self) -> int:
        return sum(len(r.skipped) for r in self.results)


def build_index(config: PriceConfig) -> tuple[PriceIndex, ProcessSummary]:
    """Extract every configured family into a fresh index without saving it.

    MalformedCatalog from any family propagates; nothing is written.
    """
    index = PriceIndex.from_config(config)
    summary = ProcessSummary()
    regions = config.region_table()
    default_region = config.default_region_value()

    for family in config.families:
        family_config = get_family_config(family)
        path = config.catalog_path(family_config.offer_code)
        logger.info("Processing %s catalog %s", family, path)
        document = read_catalog(path)

        extraction: ExtractionResult = extract(document, family_config, regions, default_region)
        for offer in extraction.offers:
            index.add(offer)

        summary.results.append(
            ProcessResult(
                family=family.value,
                offers_stored=index.count(family),
                excluded=extraction.excluded,
                publication_date=document.publication_date,
                skipped=extraction.skipped,
            )
        )
        if document.publication_date:
            index.metadata[f"publication_date:{family.value}"] = document.publication_date

    index.metadata["built_at"] = datetime.now(timezone.utc).isoformat()
    return index, summary


def process_catalogs(config: PriceConfig, store: IndexStore | None = None) -> ProcessSummary:
    """Rebuild the persisted price index from the cached catalog files.

    The previous index is only replaced once every family has been
    extracted successfully.
    """
    index, summary = build_index(config)
    store = store or IndexStore.from_config(config)
    summary.index_path = store.save(index)
    logger.info(
        "Stored %d offers (%d skipped) in %s",
        summary.total_stored,
        summary.total_skipped,
        summary.index_path,
    )
    return summary
