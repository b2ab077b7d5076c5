"""Loading and saving the XML configuration document."""

import copy
import io
import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from .errors import DocumentMalformed, DocumentUnreadable, WriteFailed
from .models import ConfigLocation

logger = logging.getLogger(__name__)

# ElementTree reserves ns0, ns1, ... for prefixes it generates itself.
_GENERATED_PREFIX = re.compile(r"ns\d+$")


def split_tag(tag: str) -> tuple[Optional[str], str]:
    """Split a Clark-notation tag into (namespace, local name)."""
    if tag.startswith("{"):
        uri, _, local = tag[1:].partition("}")
        return uri, local
    return None, tag


@dataclass
class ConfigDocument:
    """Parsed configuration document.

    ``namespaces`` maps each prefix to the first URI declared for it, with the
    default namespace under ``""``.
    """

    tree: ET.ElementTree
    namespaces: Dict[str, str] = field(default_factory=dict)

    @property
    def root(self) -> ET.Element:
        return self.tree.getroot()

    @property
    def default_namespace(self) -> Optional[str]:
        """Namespace of the root element when it is declared as the default one."""
        uri, _ = split_tag(self.root.tag)
        if uri is not None and self.namespaces.get("") == uri:
            return uri
        return None

    @classmethod
    def empty(cls, root_tag: str = "gwcConfiguration") -> "ConfigDocument":
        return cls(tree=ET.ElementTree(ET.Element(root_tag)))


class XmlDocumentStore:
    """Read and write the configuration document as a whole."""

    def load(self, location: ConfigLocation) -> ConfigDocument:
        """
        Parse the configuration document at ``location``.

        Returns:
            ConfigDocument

        Raises:
            DocumentUnreadable: If the file cannot be opened or read
            DocumentMalformed: If the content is not well-formed XML
        """
        path = location.file_path
        try:
            data = path.read_bytes()
        except OSError as e:
            logger.error("Exception occurred while creating document from file %s", path)
            raise DocumentUnreadable(path, str(e))

        try:
            namespaces = self._collect_namespaces(data)
            parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True, insert_pis=True))
            tree = ET.parse(io.BytesIO(data), parser=parser)
        except ET.ParseError as e:
            logger.error("Malformed configuration document %s: %s", path, e)
            raise DocumentMalformed(path, str(e))

        logger.debug("Loaded %s (%d top-level elements)", path, len(tree.getroot()))
        return ConfigDocument(tree=tree, namespaces=namespaces)

    def save(self, location: ConfigLocation, document: ConfigDocument) -> None:
        """
        Serialize the whole document over the file at ``location``.

        The previous content is overwritten in place; there is no temporary
        file, so a failure mid-write leaves whatever the writer produced.

        Raises:
            WriteFailed: If serialization or writing fails
        """
        path = location.file_path
        for prefix, uri in document.namespaces.items():
            if prefix and not _GENERATED_PREFIX.match(prefix):
                ET.register_namespace(prefix, uri)

        # Serialize fully before touching the file so serializer errors leave it intact.
        buffer = io.BytesIO()
        try:
            self._writable_tree(document).write(buffer, encoding="utf-8", xml_declaration=True)
        except (ValueError, TypeError) as e:
            logger.error("Cannot serialize configuration document for %s: %s", path, e)
            raise WriteFailed(path, str(e))

        # ElementTree writes control characters unescaped; never save what load would reject.
        try:
            ET.fromstring(buffer.getvalue())
        except ET.ParseError as e:
            logger.error("Serialized configuration document for %s is not well-formed: %s", path, e)
            raise WriteFailed(path, f"serialized document is not well-formed: {e}")

        try:
            with open(path, "wb") as f:
                f.write(buffer.getvalue())
        except OSError as e:
            logger.error("Failed to write configuration document %s: %s", path, e)
            raise WriteFailed(path, str(e))
        logger.debug("Wrote %s", path)

    @staticmethod
    def _writable_tree(document: ConfigDocument) -> ET.ElementTree:
        """Tree to serialize, with the default namespace written as ``xmlns``.

        ElementTree would otherwise invent an ``ns0`` prefix for it. Elements in
        the default namespace are unqualified on a copy, so the caller's tree is
        left as loaded.
        """
        uri = document.default_namespace
        if uri is None:
            return document.tree

        root = copy.deepcopy(document.root)
        qualifier = "{" + uri + "}"
        for elem in root.iter():
            if isinstance(elem.tag, str) and elem.tag.startswith(qualifier):
                elem.tag = elem.tag[len(qualifier):]
        root.set("xmlns", uri)
        return ET.ElementTree(root)

    @staticmethod
    def _collect_namespaces(data: bytes) -> Dict[str, str]:
        namespaces: Dict[str, str] = {}
        for _, (prefix, uri) in ET.iterparse(io.BytesIO(data), events=("start-ns",)):
            namespaces.setdefault(prefix or "", uri)
        return namespaces
