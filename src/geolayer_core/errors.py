"""Exception taxonomy for geolayer-core."""

from pathlib import Path
from typing import Optional


class LayerStoreError(Exception):
    """Base exception for all layer store errors."""

    pass


# Settings errors


class ConfigError(LayerStoreError):
    """Failed to load or validate store settings."""

    pass


# Configuration document errors


class ConfigUnavailable(LayerStoreError):
    """The layer configuration document cannot be located or read."""

    pass


class LocationUndetermined(ConfigUnavailable):
    """No resolution strategy produced a configuration directory."""

    def __init__(self, details: str = "Unable to determine configuration directory.") -> None:
        self.details = details
        super().__init__(details)


class DocumentUnreadable(ConfigUnavailable):
    """I/O failure while opening or reading the configuration document."""

    def __init__(self, path: Path, details: str) -> None:
        self.path = path
        self.details = details
        super().__init__(f"Cannot read {path}: {details}")


class DocumentMalformed(ConfigUnavailable):
    """The configuration document is not well-formed or holds an undecodable layer."""

    def __init__(self, path: Optional[Path], details: str) -> None:
        self.path = path
        self.details = details
        super().__init__(f"Malformed configuration in {path}: {details}")


class WriteFailed(LayerStoreError):
    """Serializing or writing the configuration document failed."""

    def __init__(self, path: Path, details: str) -> None:
        self.path = path
        self.details = details
        super().__init__(f"Failed to write {path}: {details}")


# Record errors


class RecordNotFound(LayerStoreError):
    """No layer with the given name exists in the document."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Layer not found: {name}")


class RecordDecodeError(LayerStoreError):
    """A recognized fragment could not be mapped onto a layer record."""

    def __init__(self, kind: str, details: str) -> None:
        self.kind = kind
        self.details = details
        super().__init__(f"Cannot decode <{kind}>: {details}")
