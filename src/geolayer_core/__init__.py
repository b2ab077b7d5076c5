"""GeoLayer Core - XML-backed tile layer configuration store."""

from .__version__ import __version__, __version_info__

from .models import SRS, BoundingBox, ConfigLocation, Grid, LayerRecord
from .settings import CONFIGURATION_FILE_NAME, SettingsLoader, StoreSettings
from .locator import (
    ConfigLocator,
    DefaultLocationProvider,
    EnvironmentDefaultLocation,
    LocationProviderError,
)
from .document import ConfigDocument, XmlDocumentStore
from .codec import RecordCodec
from .store import LayerConfigStore
from .errors import (
    ConfigError,
    ConfigUnavailable,
    DocumentMalformed,
    DocumentUnreadable,
    LayerStoreError,
    LocationUndetermined,
    RecordDecodeError,
    RecordNotFound,
    WriteFailed,
)

__all__ = [
    # Version
    "__version__",
    "__version_info__",
    # Models
    "SRS",
    "BoundingBox",
    "ConfigLocation",
    "Grid",
    "LayerRecord",
    # Settings
    "CONFIGURATION_FILE_NAME",
    "SettingsLoader",
    "StoreSettings",
    # Location
    "ConfigLocator",
    "DefaultLocationProvider",
    "EnvironmentDefaultLocation",
    "LocationProviderError",
    # Document / codec / store
    "ConfigDocument",
    "XmlDocumentStore",
    "RecordCodec",
    "LayerConfigStore",
    # Errors
    "ConfigError",
    "ConfigUnavailable",
    "DocumentMalformed",
    "DocumentUnreadable",
    "LayerStoreError",
    "LocationUndetermined",
    "RecordDecodeError",
    "RecordNotFound",
    "WriteFailed",
]
