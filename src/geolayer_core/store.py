"""Layer configuration store backed by a single XML document.

Every operation runs a full cycle against the file: resolve the location
(memoized), load the document, read or mutate it, and for mutations write the
whole document back. Nothing is cached between calls and nothing is locked,
so concurrent writers race and the last save wins.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Union

from .codec import RecordCodec
from .document import ConfigDocument, XmlDocumentStore
from .errors import DocumentMalformed, RecordDecodeError, RecordNotFound
from .locator import ConfigLocator, DefaultLocationProvider, EnvironmentDefaultLocation
from .models import ConfigLocation, LayerRecord
from .settings import StoreSettings

logger = logging.getLogger(__name__)


class LayerConfigStore:
    """Create, read, modify and delete layer records in the XML configuration."""

    def __init__(
        self,
        locator: ConfigLocator,
        documents: Optional[XmlDocumentStore] = None,
        codec: Optional[RecordCodec] = None,
    ):
        """
        Initialize the store.

        Args:
            locator: Resolves (and memoizes) the configuration directory
            documents: Loads and saves the XML document
            codec: Maps fragments to layer records and back
        """
        self.locator = locator
        self.documents = documents or XmlDocumentStore()
        self.codec = codec or RecordCodec()

    @classmethod
    def from_settings(
        cls,
        settings: StoreSettings,
        base_dir: Union[str, Path],
        default_location: Optional[DefaultLocationProvider] = None,
    ) -> "LayerConfigStore":
        """Build a store for one configuration root.

        When no provider is passed and ``settings.default_location_env`` names
        any variables, an EnvironmentDefaultLocation is used.
        """
        if default_location is None and settings.default_location_env:
            default_location = EnvironmentDefaultLocation(settings.default_location_env)
        return cls(ConfigLocator(settings, base_dir, default_location))

    @property
    def config_file(self) -> Path:
        return self.locator.resolve().file_path

    def identifier(self) -> str:
        """
        Absolute path of the configuration directory.

        Raises:
            LocationUndetermined: If the directory cannot be resolved
        """
        return str(self.locator.resolve().directory)

    def list_all(self) -> Dict[str, LayerRecord]:
        """
        Load every layer from the configuration document.

        Returns:
            Mapping of layer name to record, re-read from disk on each call

        Raises:
            LocationUndetermined: If the document cannot be located
            DocumentUnreadable: If the document cannot be read
            DocumentMalformed: If the document or one of its layers is invalid
        """
        location, document = self._load()
        return self._decode(location, document)

    def get(self, name: str) -> LayerRecord:
        """
        Load a single layer by name.

        Raises:
            RecordNotFound: If no layer has that name
        """
        layers = self.list_all()
        if name not in layers:
            raise RecordNotFound(name)
        return layers[name]

    def create(self, record: LayerRecord) -> None:
        """
        Append ``record`` to the configuration document.

        Existing layers with the same name are not checked; the appended
        fragment shadows them on the next read.

        Raises:
            ConfigUnavailable: If the document cannot be located or loaded
            WriteFailed: If the document cannot be saved
        """
        location, document = self._load()
        self.codec.encode_into(document, record)
        self.documents.save(location, document)
        logger.info("Created layer %s in %s", record.name, location.file_path)

    def delete(self, name: str) -> bool:
        """
        Remove the first layer named ``name``.

        Returns:
            True if a layer was removed, False if none matched (nothing is written)

        Raises:
            ConfigUnavailable: If the document cannot be located or loaded
            WriteFailed: If the document cannot be saved
        """
        location, document = self._load()
        fragment = self.codec.find_fragment(document, name)
        if fragment is None:
            logger.debug("No layer named %s in %s", name, location.file_path)
            return False

        self.codec.remove_fragment(document, fragment)
        self.documents.save(location, document)
        logger.info("Deleted layer %s from %s", name, location.file_path)
        return True

    def modify(self, old_name: str, record: LayerRecord) -> bool:
        """
        Replace layer ``old_name`` with ``record`` (delete, then create).

        The two steps are separate writes. If the create step fails, the
        delete has already been saved and the old layer is gone.

        Returns:
            True if both steps succeeded, False if ``old_name`` did not exist

        Raises:
            ConfigUnavailable: If the document cannot be located or loaded
            WriteFailed: If either write fails
        """
        if not self.delete(old_name):
            return False
        self.create(record)
        return True

    def _load(self) -> tuple[ConfigLocation, ConfigDocument]:
        location = self.locator.resolve()
        return location, self.documents.load(location)

    def _decode(self, location: ConfigLocation, document: ConfigDocument) -> Dict[str, LayerRecord]:
        try:
            return self.codec.decode_all(document)
        except RecordDecodeError as e:
            logger.error("Invalid layer in %s: %s", location.file_path, e)
            raise DocumentMalformed(location.file_path, str(e))
