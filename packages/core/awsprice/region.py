"""Region normalization between pricing-catalog location names and region codes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from awsprice.errors import InvalidRegion

# Location name used in the pricing catalogs -> AWS region code
LOCATION_TO_CODE: dict[str, str] = {
    "Asia Pacific (Mumbai)": "ap-south-1",
    "Asia Pacific (Seoul)": "ap-northeast-2",
    "Asia Pacific (Singapore)": "ap-southeast-1",
    "Asia Pacific (Sydney)": "ap-southeast-2",
    "Asia Pacific (Tokyo)": "ap-northeast-1",
    "Canada (Central)": "ca-central-1",
    "EU (Frankfurt)": "eu-central-1",
    "EU (Ireland)": "eu-west-1",
    "EU (London)": "eu-west-2",
    "South America (Sao Paulo)": "sa-east-1",
    "US East (N. Virginia)": "us-east-1",
    "US East (Ohio)": "us-east-2",
    "US West (N. California)": "us-west-1",
    "US West (Oregon)": "us-west-2",
}


@dataclass(frozen=True)
class Region:
    """A known AWS region. The canonical form is the catalog location name."""

    name: str
    code: str = field(compare=False)

    def __str__(self) -> str:
        return self.name


class RegionTable:
    """Fixed bidirectional name/code table.

    Lookups are exact and case-sensitive. The table is built once and never
    mutated; pass it wherever regions are normalized.
    """

    def __init__(self, location_to_code: Mapping[str, str] | None = None):
        self._by_name: dict[str, str] = dict(location_to_code if location_to_code is not None else LOCATION_TO_CODE)
        self._by_code: dict[str, str] = {code: name for name, code in self._by_name.items()}

    def normalize(self, token: str | Region) -> Region:
        if isinstance(token, Region):
            token = token.name
        if token in self._by_name:
            return Region(name=token, code=self._by_name[token])
        if token in self._by_code:
            return Region(name=self._by_code[token], code=token)
        raise InvalidRegion(token)

    def is_known(self, token: str) -> bool:
        return token in self._by_name or token in self._by_code

    def codes(self) -> list[str]:
        return sorted(self._by_code)

    def __len__(self) -> int:
        return len(self._by_name)

    def __contains__(self, token: object) -> bool:
        return isinstance(token, str) and self.is_known(token)


_DEFAULT_TABLE = RegionTable()


def default_region_table() -> RegionTable:
    return _DEFAULT_TABLE


def normalize_region(token: str | Region, table: RegionTable | None = None) -> Region:
    """Normalize a region name or code, raising InvalidRegion if unknown."""
    return (table or _DEFAULT_TABLE).normalize(token)
