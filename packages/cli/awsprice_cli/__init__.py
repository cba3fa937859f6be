"""Command-line interface for awsprice."""

from awsprice import __version__

__all__ = ["__version__"]
