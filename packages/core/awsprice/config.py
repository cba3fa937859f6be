"""Runtime configuration: cache location, default region, download settings.

A PriceConfig is built once per invocation (from an optional YAML file plus
environment overrides) and passed to whatever needs it.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from awsprice.errors import ConfigError
from awsprice.models import Family
from awsprice.region import Region, RegionTable, default_region_table

_DEFAULT_CACHE_DIR = Path.home() / ".awsprice_cache"
_CONFIG_FILENAME = "config.yaml"

# env var -> config field
_ENV_OVERRIDES = {
    "AWSPRICE_CACHE_DIR": "cache_dir",
    "AWSPRICE_REGION": "default_region",
}


class PriceConfig(BaseModel):
    cache_dir: Path = Field(default_factory=lambda: _DEFAULT_CACHE_DIR)
    default_region: str = "us-east-1"
    families: list[Family] = Field(default_factory=lambda: list(Family))
    pricing_base_url: str = "https://pricing.us-east-1.amazonaws.com"
    user_agent: str = "AWS Price Grammar Bot"
    timeout: int = 30

    @field_validator("cache_dir")
    @classmethod
    def expand_cache_dir(cls, v: Path) -> Path:
        return v.expanduser()

    @field_validator("default_region")
    @classmethod
    def validate_default_region(cls, v: str) -> str:
        if not default_region_table().is_known(v):
            raise ValueError(f"Unknown default region {v!r}")
        return v

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v

    def region_table(self) -> RegionTable:
        return default_region_table()

    def default_region_value(self) -> Region:
        return self.region_table().normalize(self.default_region)

    def ensure_cache_dir(self) -> Path:
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        return self.cache_dir

    def catalog_path(self, offer_code: str) -> Path:
        return self.cache_dir / f"{offer_code}.json"


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def load_config(path: str | Path | None = None, **overrides: Any) -> PriceConfig:
    """Build a PriceConfig from file, environment and explicit overrides.

    Precedence, lowest first: defaults, YAML file, environment, ``overrides``.
    The file defaults to ``$AWSPRICE_CONFIG`` or ``<cache_dir>/config.yaml``;
    a missing default file is not an error, a missing explicit one is.
    """
    values: dict[str, Any] = {}

    explicit = path or os.environ.get("AWSPRICE_CONFIG")
    if explicit:
        config_path = Path(explicit).expanduser()
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")
        values.update(_read_yaml(config_path))
    else:
        cache_dir = overrides.get("cache_dir") or os.environ.get("AWSPRICE_CACHE_DIR") or _DEFAULT_CACHE_DIR
        config_path = Path(cache_dir).expanduser() / _CONFIG_FILENAME
        if config_path.exists():
            values.update(_read_yaml(config_path))

    for env_name, field_name in _ENV_OVERRIDES.items():
        if os.environ.get(env_name):
            values[field_name] = os.environ[env_name]

    values.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return PriceConfig(**values)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
