"""Store settings and their TOML loader.

Settings are read from the ``[layer_store]`` table of a TOML file, e.g.::

    [layer_store]
    relative_path = "/WEB-INF/classes"
    default_location_env = "GEOWEBCACHE_CACHE_DIR"

When the table is absent the top-level table is used instead, so a dedicated
settings file may hold the keys directly.
"""

import logging
from pathlib import Path, PurePath
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import ConfigError

# Conditional TOML import: stdlib tomllib (3.11+) or fallback tomli (<3.11)
try:
    import tomllib  # Python 3.11+
except ImportError:
    import tomli as tomllib  # type: ignore

logger = logging.getLogger(__name__)

CONFIGURATION_FILE_NAME = "geowebcache.xml"

CONFIGURATION_REL_PATHS = ("/WEB-INF/classes", "/../resources")

SETTINGS_TABLE = "layer_store"


class StoreSettings(BaseModel):
    """Where to look for the layer configuration document."""

    absolute_path: Optional[str] = Field(
        None, description="Configuration directory, used as-is when set"
    )
    relative_path: Optional[str] = Field(
        None, description="Configuration directory relative to the host base directory"
    )
    file_name: str = Field(default=CONFIGURATION_FILE_NAME)
    standard_paths: List[str] = Field(
        default_factory=lambda: list(CONFIGURATION_REL_PATHS),
        description="Fallback directories under the base directory, probed in order",
    )
    default_location_env: List[str] = Field(
        default_factory=lambda: ["GEOWEBCACHE_CACHE_DIR"],
        description="Environment variables naming a default configuration directory",
    )

    model_config = ConfigDict(extra="forbid")

    @field_validator("absolute_path")
    @classmethod
    def validate_absolute_path(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            return None
        if not Path(v).is_absolute():
            raise ValueError(f"absolute_path must be absolute: {v}")
        return v

    @field_validator("relative_path")
    @classmethod
    def validate_relative_path(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return v.strip() or None

    @field_validator("file_name")
    @classmethod
    def validate_file_name(cls, v: str) -> str:
        v = v.strip()
        if not v or PurePath(v).name != v:
            raise ValueError(f"file_name must be a bare file name: {v!r}")
        return v

    @field_validator("default_location_env", mode="before")
    @classmethod
    def coerce_env_names(cls, v: Any) -> Any:
        # A single variable name is accepted as shorthand for a one-item list.
        if isinstance(v, str):
            return [v] if v.strip() else []
        return v


class SettingsLoader:
    """Load and validate store settings."""

    @staticmethod
    def from_mapping(data: Dict[str, Any], source: str = "<mapping>") -> StoreSettings:
        table = data.get(SETTINGS_TABLE, data)
        if not isinstance(table, dict):
            raise ConfigError(f"[{SETTINGS_TABLE}] must be a table: {source}")
        try:
            return StoreSettings(**table)
        except Exception as e:
            raise ConfigError(f"Invalid store settings in {source}: {e}")

    @staticmethod
    def load(path: Path) -> StoreSettings:
        """Load settings from a TOML file, raising ConfigError on any failure."""
        if not path.exists():
            raise ConfigError(f"Settings file not found: {path}")
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except Exception as e:
            raise ConfigError(f"Failed to parse TOML from {path}: {e}")

        settings = SettingsLoader.from_mapping(data, source=str(path))
        logger.debug("Loaded store settings from %s", path)
        return settings

    @staticmethod
    def load_optional(path: Optional[Path]) -> StoreSettings:
        """Load settings if the file exists, otherwise return defaults."""
        if path is None or not path.exists():
            return StoreSettings()
        return SettingsLoader.load(path)
