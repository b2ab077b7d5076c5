from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional

from geolayer_core import LayerConfigStore, SettingsLoader, StoreSettings

# Global options captured by the app callback
_global_config_file: Optional[Path] = None
_global_base_dir: Optional[Path] = None


def set_global_options(config_file: Optional[Path], base_dir: Optional[Path]) -> None:
    """Remember the global --config-file/--base-dir values for subcommands."""
    global _global_config_file, _global_base_dir
    _global_config_file = config_file.resolve() if config_file else None
    _global_base_dir = base_dir.resolve() if base_dir else None


def get_global_config_file() -> Optional[Path]:
    """Get the settings file path if set."""
    return _global_config_file


def configure_stdio() -> None:
    """Make CLI output robust across Windows console encodings.

    Some Windows terminals use a non-UTF8 encoding (e.g., cp1252). Printing
    glyphs like ✓/❌ would raise UnicodeEncodeError there, so replace
    unencodable characters instead of crashing.
    """

    if os.name != "nt":
        return

    for stream in (sys.stdout, sys.stderr):
        try:
            stream.reconfigure(errors="replace")
        except AttributeError:
            continue


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)


def load_settings() -> StoreSettings:
    return SettingsLoader.load_optional(_global_config_file)


def resolve_base_dir() -> Path:
    """Base directory for relative lookups: --base-dir, else the working directory."""
    return _global_base_dir or Path.cwd()


def build_store() -> LayerConfigStore:
    return LayerConfigStore.from_settings(load_settings(), resolve_base_dir())
