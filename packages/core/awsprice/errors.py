"""Error taxonomy shared by every awsprice layer."""

from __future__ import annotations


class AwsPriceError(Exception):
    """Base class for all awsprice failures."""


class InvalidRegion(AwsPriceError, ValueError):
    def __init__(self, token: str):
        self.token = token
        super().__init__(f"Invalid region: {token!r}")


class InvalidKey(AwsPriceError, ValueError):
    """An OfferKey that cannot index the offer it was stored with."""


class NotFound(AwsPriceError, LookupError):
    """Nothing matched: either an index lookup miss or no persisted index."""


class OfferNotFound(NotFound):
    pass


class IndexNotFound(NotFound):
    def __init__(self, path):
        self.path = path
        super().__init__(f"No price index at {path}")


class CorruptData(AwsPriceError):
    """The persisted index exists but cannot be trusted."""


class SchemaVersionMismatch(CorruptData):
    def __init__(self, found: int, expected: int):
        self.found = found
        self.expected = expected
        super().__init__(f"Price index schema version {found} does not match current version {expected}")


class MalformedCatalog(AwsPriceError):
    """A raw pricing catalog does not have the expected nested shape."""


class FetchError(AwsPriceError):
    """Downloading a pricing catalog failed."""


class ConfigError(AwsPriceError, ValueError):
    pass


__all__ = [
    "AwsPriceError",
    "ConfigError",
    "CorruptData",
    "FetchError",
    "IndexNotFound",
    "InvalidKey",
    "InvalidRegion",
    "MalformedCatalog",
    "NotFound",
    "OfferNotFound",
    "SchemaVersionMismatch",
]
