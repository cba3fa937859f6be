"""Catalog download: pulls the AWS bulk pricing offer files into the cache directory.

The offer index (/offers/v1.0/aws/index.json) lists one current-version URL
per service; each configured family's file is downloaded next to it.
"""

from __future__ import annotations

import logging
import os
import shutil
import ssl
import urllib.error
import urllib.request
from pathlib import Path
from typing import TYPE_CHECKING

import certifi

from awsprice.catalog.document import OfferIndexDocument, parse_offer_index
from awsprice.catalog.families import get_family_config
from awsprice.errors import FetchError
from awsprice.models import Family

if TYPE_CHECKING:
    from awsprice.config import PriceConfig

logger = logging.getLogger(__name__)

OFFER_INDEX_PATH = "/offers/v1.0/aws/index.json"
OFFER_INDEX_FILENAME = "offer.json"
_CHUNK_SIZE = 1 << 20


def _ssl_context() -> ssl.SSLContext:
    """SSL context backed by the certifi CA bundle."""
    return ssl.create_default_context(cafile=certifi.where())


def urlopen_safe(req: urllib.request.Request, timeout: int = 30):
    """Open a catalog URL, verifying HTTPS against the certifi bundle."""
    return urllib.request.urlopen(req, timeout=timeout, context=_ssl_context())


class CatalogFetcher:
    """Downloads pricing catalogs for the families in a PriceConfig."""

    def __init__(self, config: PriceConfig):
        self.config = config

    def fetch(self, force: bool = False) -> dict[Family, Path]:
        """Download the offer index and every configured family's catalog.

        Returns the local catalog path per family.
        """
        offer_index = self._offer_index(force)
        return {family: self._download_family(offer_index, family, force) for family in self.config.families}

    def fetch_family(self, family: Family, force: bool = False) -> bytes:
        """Download one family's catalog and return its raw bytes."""
        offer_index = self._offer_index(force)
        return self._download_family(offer_index, family, force).read_bytes()

    def _offer_index(self, force: bool) -> OfferIndexDocument:
        self.config.ensure_cache_dir()
        index_path = self.download(OFFER_INDEX_PATH, OFFER_INDEX_FILENAME, force=force)
        return parse_offer_index(index_path.read_bytes(), source=index_path.name)

    def _download_family(self, offer_index: OfferIndexDocument, family: Family, force: bool) -> Path:
        family_config = get_family_config(family)
        offer = offer_index.offers.get(family_config.offer_code)
        if offer is None:
            raise FetchError(f"Offer index has no entry for {family_config.offer_code}")
        return self.download(offer.current_version_url, family_config.catalog_filename, force=force)

    def download(self, relative_url: str, filename: str, force: bool = False) -> Path:
        """Fetch ``relative_url`` into the cache directory as ``filename``.

        An existing file is reused unless ``force`` is set. If the download
        fails but an earlier copy exists, the earlier copy is kept and used.
        """
        target = self.config.cache_dir / filename
        if target.exists() and not force:
            logger.info("Using cached %s", target)
            return target

        url = self.config.pricing_base_url.rstrip("/") + relative_url
        partial = target.with_name(target.name + ".part")
        logger.info("Downloading %s...", url)
        req = urllib.request.Request(url, headers={"User-Agent": self.config.user_agent, "Accept": "*/*"})
        try:
            with urlopen_safe(req, timeout=self.config.timeout) as resp, partial.open("wb") as out:
                shutil.copyfileobj(resp, out, _CHUNK_SIZE)
            os.replace(partial, target)
        except (urllib.error.URLError, OSError) as exc:
            partial.unlink(missing_ok=True)
            if target.exists():
                logger.warning("Issue downloading %s: %s; keeping existing %s", url, exc, target)
                return target
            raise FetchError(f"Failed to download {url}: {exc}") from exc

        logger.info("Downloaded to %s", target)
        return target
