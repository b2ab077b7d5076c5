"""Mapping between XML fragments and layer records.

The vocabulary is fixed: one record kind (``wmslayer``) whose children are
named by ``LAYER_ALIASES``. Tags are matched on their local name, case
insensitively, so a namespaced document decodes the same as a plain one.

Example fragment::

    <wmslayer>
      <name>topp:states</name>
      <WMSurl><string>http://localhost:8080/geoserver/wms</string></WMSurl>
      <mimeFormats><string>image/png</string></mimeFormats>
      <grids>
        <grid>
          <SRS><number>4326</number></SRS>
          <dataBounds><coords><double>-180.0</double>...</coords></dataBounds>
          <gridBounds><coords><double>-180.0</double>...</coords></gridBounds>
          <zoomStart>0</zoomStart>
          <zoomStop>25</zoomStop>
        </grid>
      </grids>
      <metaWidthHeight><int>3</int><int>3</int></metaWidthHeight>
      <tiled>false</tiled>
    </wmslayer>
"""

import logging
import xml.etree.ElementTree as ET
from typing import Any, Callable, Dict, List, NamedTuple, Optional

from .document import ConfigDocument, split_tag
from .errors import RecordDecodeError
from .models import SRS, BoundingBox, Grid, LayerRecord

logger = logging.getLogger(__name__)

WMS_LAYER_KIND = "wmslayer"

NAME_TAG = "name"


def _local(elem: ET.Element) -> str:
    return split_tag(elem.tag)[1].lower()


def _children(elem: ET.Element) -> List[ET.Element]:
    # Comments and processing instructions carry a callable tag.
    return [c for c in elem if isinstance(c.tag, str)]


def _child(elem: ET.Element, tag: str) -> Optional[ET.Element]:
    tag = tag.lower()
    for c in _children(elem):
        if _local(c) == tag:
            return c
    return None


def _text(elem: ET.Element) -> str:
    return (elem.text or "").strip()


class _Builder:
    """Creates sub-elements in the namespace of the document root."""

    def __init__(self, namespace: Optional[str]):
        self.namespace = namespace

    def qname(self, tag: str) -> str:
        return f"{{{self.namespace}}}{tag}" if self.namespace else tag

    def sub(self, parent: ET.Element, tag: str, text: Optional[str] = None) -> ET.Element:
        elem = ET.SubElement(parent, self.qname(tag))
        if text is not None:
            elem.text = text
        return elem


# Value codecs: decode(element) -> python value, encode(builder, parent, tag, value)


def _decode_str(elem: ET.Element) -> str:
    # Whitespace is data; only scalar and name lookups strip.
    return elem.text or ""


def _encode_str(b: _Builder, parent: ET.Element, tag: str, value: Any) -> None:
    b.sub(parent, tag, str(value))


def _decode_int(elem: ET.Element) -> int:
    return int(_text(elem))


def _decode_float(elem: ET.Element) -> float:
    return float(_text(elem))


def _encode_float(b: _Builder, parent: ET.Element, tag: str, value: float) -> None:
    b.sub(parent, tag, repr(float(value)))


def _decode_bool(elem: ET.Element) -> bool:
    text = _text(elem).lower()
    if text not in ("true", "false"):
        raise ValueError(f"<{_local(elem)}> expects true or false, got {text!r}")
    return text == "true"


def _encode_bool(b: _Builder, parent: ET.Element, tag: str, value: bool) -> None:
    b.sub(parent, tag, "true" if value else "false")


def _list_codec(item_tag: str, decode_item: Callable, encode_item: Callable):
    def decode(elem: ET.Element) -> list:
        return [decode_item(c) for c in _children(elem) if _local(c) == item_tag.lower()]

    def encode(b: _Builder, parent: ET.Element, tag: str, values: list) -> None:
        container = b.sub(parent, tag)
        for value in values:
            encode_item(b, container, item_tag, value)

    return decode, encode


def _decode_srs(elem: ET.Element) -> SRS:
    number = _child(elem, "number")
    if number is None:
        raise ValueError("<SRS> is missing <number>")
    return SRS(number=_decode_int(number))


def _encode_srs(b: _Builder, parent: ET.Element, tag: str, value: SRS) -> None:
    srs = b.sub(parent, tag)
    b.sub(srs, "number", str(value.number))


_decode_doubles, _encode_doubles = _list_codec("double", _decode_float, _encode_float)


def _decode_bbox(elem: ET.Element) -> BoundingBox:
    coords = _child(elem, "coords")
    if coords is None:
        raise ValueError(f"<{_local(elem)}> is missing <coords>")
    return BoundingBox.from_coords(_decode_doubles(coords))


def _encode_bbox(b: _Builder, parent: ET.Element, tag: str, value: BoundingBox) -> None:
    bbox = b.sub(parent, tag)
    _encode_doubles(b, bbox, "coords", value.coords())


class FieldAlias(NamedTuple):
    """One entry of an alias table: model attribute <-> XML tag."""

    attr: str
    tag: str
    decode: Callable[[ET.Element], Any]
    encode: Callable[[_Builder, ET.Element, str, Any], None]


GRID_ALIASES = (
    FieldAlias("srs", "SRS", _decode_srs, _encode_srs),
    FieldAlias("data_bounds", "dataBounds", _decode_bbox, _encode_bbox),
    FieldAlias("grid_bounds", "gridBounds", _decode_bbox, _encode_bbox),
    FieldAlias("zoom_start", "zoomStart", _decode_int, _encode_str),
    FieldAlias("zoom_stop", "zoomStop", _decode_int, _encode_str),
)


def _decode_fields(elem: ET.Element, aliases: tuple) -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for alias in aliases:
        child = _child(elem, alias.tag)
        if child is not None:
            values[alias.attr] = alias.decode(child)
    return values


def _encode_fields(b: _Builder, elem: ET.Element, obj: Any, aliases: tuple) -> None:
    for alias in aliases:
        value = getattr(obj, alias.attr)
        if value is None or value == []:
            continue
        alias.encode(b, elem, alias.tag, value)


def _decode_grid(elem: ET.Element) -> Grid:
    return Grid(**_decode_fields(elem, GRID_ALIASES))


def _encode_grid(b: _Builder, parent: ET.Element, tag: str, value: Grid) -> None:
    grid = b.sub(parent, tag)
    _encode_fields(b, grid, value, GRID_ALIASES)


LAYER_ALIASES = (
    FieldAlias("name", NAME_TAG, _decode_str, _encode_str),
    FieldAlias("wms_url", "WMSurl", *_list_codec("string", _decode_str, _encode_str)),
    FieldAlias("wms_layers", "wmsLayers", _decode_str, _encode_str),
    FieldAlias("wms_styles", "wmsStyles", _decode_str, _encode_str),
    FieldAlias("mime_formats", "mimeFormats", *_list_codec("string", _decode_str, _encode_str)),
    FieldAlias("grids", "grids", *_list_codec("grid", _decode_grid, _encode_grid)),
    FieldAlias("meta_width_height", "metaWidthHeight", *_list_codec("int", _decode_int, _encode_str)),
    FieldAlias("error_mime", "errormime", _decode_str, _encode_str),
    FieldAlias("version", "version", _decode_str, _encode_str),
    FieldAlias("tiled", "tiled", _decode_bool, _encode_bool),
    FieldAlias("transparent", "transparent", _decode_bool, _encode_bool),
    FieldAlias("bgcolor", "bgcolor", _decode_str, _encode_str),
    FieldAlias("palette", "palette", _decode_str, _encode_str),
    FieldAlias("vendor_parameters", "vendorParameters", _decode_str, _encode_str),
    FieldAlias("debug_headers", "debugheaders", _decode_bool, _encode_bool),
)


def decode_wms_layer(elem: ET.Element) -> LayerRecord:
    try:
        return LayerRecord(**_decode_fields(elem, LAYER_ALIASES))
    except ValueError as e:
        # pydantic.ValidationError is a ValueError too.
        raise RecordDecodeError(WMS_LAYER_KIND, str(e))


# Closed dispatch table; any other tag is skipped.
RECORD_DECODERS: Dict[str, Callable[[ET.Element], LayerRecord]] = {
    WMS_LAYER_KIND: decode_wms_layer,
}


class RecordCodec:
    """Decode all layers from a document and append new ones to it."""

    def __init__(self, indent: str = "  "):
        self.indent = indent

    def decode_all(self, document: ConfigDocument) -> Dict[str, LayerRecord]:
        """
        Decode every recognized fragment under the root, in document order.

        Later fragments replace earlier ones with the same name.

        Raises:
            RecordDecodeError: If a recognized fragment cannot be decoded
        """
        layers: Dict[str, LayerRecord] = {}
        for elem in _children(document.root):
            decoder = RECORD_DECODERS.get(_local(elem))
            if decoder is None:
                continue
            record = decoder(elem)
            if record.name in layers:
                logger.debug("Duplicate layer %s; later definition wins", record.name)
            layers[record.name] = record
        return layers

    def encode(self, record: LayerRecord, namespace: Optional[str] = None) -> ET.Element:
        """Build a detached ``wmslayer`` fragment for ``record``."""
        b = _Builder(namespace)
        elem = ET.Element(b.qname(WMS_LAYER_KIND))
        _encode_fields(b, elem, record, LAYER_ALIASES)
        return elem

    def encode_into(self, document: ConfigDocument, record: LayerRecord) -> ConfigDocument:
        """Append a fragment for ``record`` as the last child of the root."""
        root = document.root
        namespace, _ = split_tag(root.tag)
        self._append(root, self.encode(record, namespace))
        return document

    def find_fragment(self, document: ConfigDocument, name: str) -> Optional[ET.Element]:
        """First recognized fragment whose ``name`` child equals ``name``."""
        name = name.strip()
        for elem in _children(document.root):
            if _local(elem) not in RECORD_DECODERS:
                continue
            name_elem = _child(elem, NAME_TAG)
            if name_elem is not None and _text(name_elem) == name:
                return elem
        return None

    def remove_fragment(self, document: ConfigDocument, fragment: ET.Element) -> None:
        """Detach ``fragment`` from the root, keeping the closing indentation."""
        root = document.root
        siblings = list(root)
        index = siblings.index(fragment)
        if index == len(siblings) - 1 and index > 0:
            siblings[index - 1].tail = fragment.tail
        root.remove(fragment)

    def _append(self, root: ET.Element, fragment: ET.Element) -> None:
        # Only pretty-print into documents that are already laid out with
        # whitespace; compact documents stay compact.
        if len(root):
            last = root[-1]
            pretty = root.text is not None and not root.text.strip()
            if pretty:
                ET.indent(fragment, space=self.indent, level=1)
                fragment.tail = last.tail
                last.tail = root.text
        elif root.text is None or not root.text.strip():
            ET.indent(fragment, space=self.indent, level=1)
            root.text = "\n" + self.indent
            fragment.tail = "\n"
        root.append(fragment)
