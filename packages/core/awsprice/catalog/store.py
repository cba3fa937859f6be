"""Price index persistence: one versioned SQLite file in the cache directory."""

from __future__ import annotations

import json
import logging
import os
import sqlite3
import tempfile
from contextlib import contextmanager
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from awsprice.catalog.index import PriceIndex
from awsprice.errors import AwsPriceError, CorruptData, IndexNotFound, SchemaVersionMismatch
from awsprice.models import Family, Offer, OfferKey, ProductAttributes
from awsprice.region import Region, RegionTable

logger = logging.getLogger(__name__)

# Bump on any change to SCHEMA or to how rows map onto Offer fields.
SCHEMA_VERSION = 3
INDEX_PREFIX = "_SummaryDB"
INDEX_FILENAME = f"{INDEX_PREFIX}.v{SCHEMA_VERSION}.sqlite"

SCHEMA = """
CREATE TABLE IF NOT EXISTS offers (
    family TEXT NOT NULL,
    name TEXT NOT NULL,
    region TEXT NOT NULL,
    engine TEXT NOT NULL DEFAULT '',
    deployment TEXT NOT NULL DEFAULT '',
    price TEXT NOT NULL,
    attributes TEXT NOT NULL DEFAULT '{}',
    PRIMARY KEY (family, name, region, engine, deployment)
);

CREATE TABLE IF NOT EXISTS lookup (
    name TEXT PRIMARY KEY,
    family TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS index_metadata (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_offers_name ON offers(name);
"""


class IndexStore:
    """Saves and loads a whole PriceIndex.

    Saves go to a temporary file next to the index and are renamed into
    place, so a reader never sees a half-written index. Only one process
    should use a cache directory at a time.
    """

    def __init__(self, cache_dir: str | Path):
        self.cache_dir = Path(cache_dir)
        self.path = self.cache_dir / INDEX_FILENAME

    @classmethod
    def from_config(cls, config) -> IndexStore:
        return cls(config.cache_dir)

    def exists(self) -> bool:
        return self.path.exists()

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------

    def save(self, index: PriceIndex) -> Path:
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f"{INDEX_PREFIX}.", suffix=".tmp", dir=self.cache_dir)
        os.close(fd)
        tmp_path = Path(tmp_name)
        try:
            conn = sqlite3.connect(str(tmp_path))
            try:
                self._write(conn, index)
                conn.commit()
            except sqlite3.Error as exc:
                raise OSError(f"Could not write price index {tmp_path}: {exc}") from exc
            finally:
                conn.close()
            os.replace(tmp_path, self.path)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise

        logger.info("Saved %d offers to %s", len(index), self.path)
        self.remove_stale()
        return self.path

    def _write(self, conn: sqlite3.Connection, index: PriceIndex) -> None:
        conn.executescript(SCHEMA)
        conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")
        conn.executemany(
            "INSERT OR REPLACE INTO offers (family, name, region, engine, deployment, price, attributes) "
            "VALUES (?, ?, ?, ?, ?, ?, ?)",
            (
                (
                    *key.as_tuple(),
                    str(offer.price),
                    json.dumps(offer.attributes.model_dump(), sort_keys=True),
                )
                for family_offers in index.offers.values()
                for key, offer in family_offers.items()
            ),
        )
        conn.executemany(
            "INSERT OR REPLACE INTO lookup (name, family) VALUES (?, ?)",
            ((name, family.value) for name, family in index.lookup.items()),
        )
        metadata = dict(index.metadata)
        metadata["schema_version"] = str(SCHEMA_VERSION)
        metadata.setdefault("built_at", datetime.now(timezone.utc).isoformat())
        for family in Family:
            metadata[f"offers:{family.value}"] = str(index.count(family))
        conn.executemany(
            "INSERT OR REPLACE INTO index_metadata (key, value) VALUES (?, ?)",
            metadata.items(),
        )

    def remove_stale(self) -> list[Path]:
        """Delete index files written under other schema versions."""
        removed = []
        for path in self.cache_dir.glob(f"{INDEX_PREFIX}*"):
            if path == self.path or path.suffix == ".tmp":
                continue
            try:
                path.unlink()
            except OSError as exc:
                logger.warning("Could not remove stale index %s: %s", path, exc)
                continue
            logger.info("Removed stale index %s", path)
            removed.append(path)
        return removed

    # ------------------------------------------------------------------
    # Load
    # ------------------------------------------------------------------

    @contextmanager
    def _connect_readonly(self):
        if not self.path.exists():
            raise IndexNotFound(self.path)
        try:
            conn = sqlite3.connect(f"{self.path.resolve().as_uri()}?mode=ro", uri=True)
        except sqlite3.Error as exc:
            raise CorruptData(f"Cannot open price index {self.path}: {exc}") from exc
        try:
            yield conn
        finally:
            conn.close()

    def _check_version(self, conn: sqlite3.Connection) -> None:
        found = conn.execute("PRAGMA user_version").fetchone()[0]
        if found != SCHEMA_VERSION:
            raise SchemaVersionMismatch(found, SCHEMA_VERSION)

    def load(self, regions: RegionTable | None = None, default_region: Region | str | None = None) -> PriceIndex:
        """Read the whole index back.

        Raises IndexNotFound when there is no file, CorruptData (or its
        SchemaVersionMismatch subclass) when the file cannot be trusted.
        """
        index = PriceIndex(regions=regions, default_region=default_region)
        with self._connect_readonly() as conn:
            try:
                self._check_version(conn)
                offer_rows = conn.execute(
                    "SELECT family, name, region, engine, deployment, price, attributes FROM offers"
                ).fetchall()
                lookup_rows = conn.execute("SELECT name, family FROM lookup").fetchall()
                metadata_rows = conn.execute("SELECT key, value FROM index_metadata").fetchall()
            except sqlite3.DatabaseError as exc:
                raise CorruptData(f"Unreadable price index {self.path}: {exc}") from exc

        try:
            for family, name, region, engine, deployment, price, attributes in offer_rows:
                key = OfferKey(family=family, name=name, region=region, engine=engine, deployment=deployment)
                offer = Offer(
                    key=key,
                    attributes=ProductAttributes(**json.loads(attributes)),
                    price=Decimal(price),
                )
                index.store(key, offer)
            # Restore name ownership exactly as saved
            index.lookup = {name: Family(family) for name, family in lookup_rows}
        except (ValueError, TypeError, InvalidOperation, ValidationError, AwsPriceError) as exc:
            raise CorruptData(f"Invalid record in price index {self.path}: {exc}") from exc

        index.metadata = {k: v for k, v in metadata_rows}
        if index.metadata.get("schema_version") != str(SCHEMA_VERSION):
            raise CorruptData(f"Price index {self.path} has inconsistent schema metadata")
        return index

    def info(self) -> dict[str, Any]:
        """Build metadata of the persisted index, without loading offers."""
        with self._connect_readonly() as conn:
            try:
                self._check_version(conn)
                rows = conn.execute("SELECT key, value FROM index_metadata ORDER BY key").fetchall()
            except sqlite3.DatabaseError as exc:
                raise CorruptData(f"Unreadable price index {self.path}: {exc}") from exc
        info: dict[str, Any] = {"path": str(self.path)}
        info.update(dict(rows))
        return info
