"""Resolution of the directory that holds the layer configuration document.

Strategies, first success wins:
1) absolute path from settings (used as-is)
2) relative path from settings, joined onto the host base directory
3) default location provider (e.g. environment variables), only if the
   configuration file it points at exists and is readable
4) standard relative paths under the base directory, first readable wins

A chosen directory is never checked against the remaining strategies.
"""

import logging
import os
from pathlib import Path
from typing import Mapping, Optional, Protocol, Sequence, Union

from .errors import LocationUndetermined
from .models import ConfigLocation
from .settings import StoreSettings

logger = logging.getLogger(__name__)


class LocationProviderError(Exception):
    """A default location provider has no location to offer."""

    pass


class DefaultLocationProvider(Protocol):
    """Supplies a default path for a named configuration file."""

    def default_path(self, file_name: str) -> Path:
        """Return the full path where ``file_name`` would live by default.

        Raises:
            LocationProviderError: If no default location is available
        """
        ...


class EnvironmentDefaultLocation:
    """Default location taken from the first set environment variable."""

    def __init__(
        self,
        env_vars: Sequence[str] = ("GEOWEBCACHE_CACHE_DIR",),
        environ: Optional[Mapping[str, str]] = None,
    ):
        self.env_vars = tuple(env_vars)
        self._environ = environ

    def default_path(self, file_name: str) -> Path:
        environ = os.environ if self._environ is None else self._environ
        for var in self.env_vars:
            value = environ.get(var, "").strip()
            if value:
                logger.debug("Default location from $%s: %s", var, value)
                return Path(value) / file_name
        raise LocationProviderError(
            f"None of {', '.join(self.env_vars) or '<no variables>'} is set"
        )


def _is_readable_file(path: Path) -> bool:
    return path.is_file() and os.access(path, os.R_OK)


def _join_base(base_dir: Path, rel_path: str) -> Path:
    # Relative settings are written with "/" and usually start with one
    # ("/WEB-INF/classes"); strip it so the join stays under base_dir.
    parts = [p for p in rel_path.replace("\\", "/").split("/") if p]
    return Path(os.path.abspath(base_dir.joinpath(*parts)))


class ConfigLocator:
    """Find and memoize the configuration directory for one store instance."""

    def __init__(
        self,
        settings: StoreSettings,
        base_dir: Union[str, Path],
        default_location: Optional[DefaultLocationProvider] = None,
    ):
        """
        Args:
            settings: Store settings with the explicit path choices
            base_dir: Base directory supplied by the hosting environment
            default_location: Optional provider consulted when no explicit path is set
        """
        self.settings = settings
        self.base_dir = Path(base_dir)
        self.default_location = default_location
        self._location: Optional[ConfigLocation] = None

    @property
    def location(self) -> Optional[ConfigLocation]:
        """The memoized location, or None if resolution has not succeeded yet."""
        return self._location

    def resolve(self) -> ConfigLocation:
        """
        Return the configuration location, resolving it on first use.

        Returns:
            ConfigLocation

        Raises:
            LocationUndetermined: If no strategy produced a directory
        """
        if self._location is None:
            directory = self._determine_directory()
            if directory is None:
                logger.error("Failed to find %s", self.settings.file_name)
                raise LocationUndetermined()

            logger.info("Configuration directory set to: %s", directory)
            if not directory.is_dir() or not os.access(directory, os.R_OK):
                logger.error("%s cannot be read or does not exist!", directory)
            self._location = ConfigLocation(directory=directory, file_name=self.settings.file_name)
        return self._location

    def _determine_directory(self) -> Optional[Path]:
        settings = self.settings

        if settings.absolute_path is not None:
            logger.debug("Using configured absolute path %s", settings.absolute_path)
            return Path(settings.absolute_path)

        if settings.relative_path is not None:
            directory = _join_base(self.base_dir, settings.relative_path)
            logger.debug("Using configured relative path %s", directory)
            return directory

        directory = self._from_default_location()
        if directory is not None:
            return directory

        return self._from_standard_paths()

    def _from_default_location(self) -> Optional[Path]:
        if self.default_location is None:
            return None
        try:
            candidate = Path(self.default_location.default_path(self.settings.file_name))
        except LocationProviderError as e:
            logger.debug("Default location unavailable: %s", e)
            return None

        if _is_readable_file(candidate):
            directory = Path(os.path.abspath(candidate)).parent
            logger.info("Using default location %s", directory)
            return directory
        logger.debug("Default location %s has no readable %s", candidate.parent, candidate.name)
        return None

    def _from_standard_paths(self) -> Optional[Path]:
        for rel_path in self.settings.standard_paths:
            directory = _join_base(self.base_dir, rel_path)
            if _is_readable_file(directory / self.settings.file_name):
                logger.info("No configuration directory was specified, using %s", directory)
                return directory
        return None
