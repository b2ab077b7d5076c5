"""Pydantic models for layer records and the resolved config location."""

import re
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Characters outside the XML 1.0 Char production.
_XML_ILLEGAL = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def xml_text(value: str) -> str:
    """Return ``value`` as an XML parser would hand it back.

    Line endings are normalized to ``\\n``; characters XML 1.0 cannot carry
    raise ``ValueError``.
    """
    match = _XML_ILLEGAL.search(value)
    if match:
        raise ValueError(f"character {match.group()!r} (U+{ord(match.group()):04X}) is not allowed in XML")
    return value.replace("\r\n", "\n").replace("\r", "\n")


class SRS(BaseModel):
    """Spatial reference system identified by its EPSG code."""

    number: int = Field(..., description="EPSG code, e.g. 4326")

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"EPSG:{self.number}"


class BoundingBox(BaseModel):
    """Axis-aligned extent in the units of the owning grid's SRS."""

    minx: float
    miny: float
    maxx: float
    maxy: float

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_coords(cls, coords: List[float]) -> "BoundingBox":
        if len(coords) != 4:
            raise ValueError(f"bounding box needs 4 coordinates, got {len(coords)}")
        minx, miny, maxx, maxy = coords
        return cls(minx=minx, miny=miny, maxx=maxx, maxy=maxy)

    def coords(self) -> List[float]:
        return [self.minx, self.miny, self.maxx, self.maxy]


class Grid(BaseModel):
    """Tiling grid for one SRS."""

    srs: SRS
    data_bounds: BoundingBox = Field(..., description="Extent covered by data")
    grid_bounds: BoundingBox = Field(..., description="Extent of the tile grid")
    zoom_start: int = Field(default=0, ge=0)
    zoom_stop: int = Field(default=25, ge=0)


class LayerRecord(BaseModel):
    """A WMS-backed tile layer definition (the ``wmslayer`` record kind)."""

    name: str = Field(..., description="Unique layer name, e.g. topp:states")
    wms_url: List[str] = Field(default_factory=list, description="Backend WMS endpoints")
    wms_layers: Optional[str] = None
    wms_styles: Optional[str] = None
    mime_formats: List[str] = Field(default_factory=list)
    grids: List[Grid] = Field(default_factory=list)
    meta_width_height: Optional[List[int]] = Field(None, description="Metatile size [width, height]")
    error_mime: Optional[str] = None
    version: Optional[str] = None
    tiled: bool = False
    transparent: bool = True
    bgcolor: Optional[str] = None
    palette: Optional[str] = None
    vendor_parameters: Optional[str] = None
    debug_headers: bool = False

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Layer name cannot be empty")
        return xml_text(v.strip())

    @field_validator("wms_layers", "wms_styles", "error_mime", "version", "bgcolor", "palette", "vendor_parameters")
    @classmethod
    def validate_text(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else xml_text(v)

    @field_validator("wms_url", "mime_formats")
    @classmethod
    def validate_text_list(cls, v: List[str]) -> List[str]:
        return [xml_text(item) for item in v]

    @field_validator("meta_width_height")
    @classmethod
    def validate_meta_width_height(cls, v: Optional[List[int]]) -> Optional[List[int]]:
        # The document has no way to tell an empty list from a missing one.
        return v or None


class ConfigLocation(BaseModel):
    """Resolved directory holding the configuration document."""

    directory: Path = Field(..., description="Absolute configuration directory")
    file_name: str = Field(default="geowebcache.xml")

    model_config = ConfigDict(frozen=True)

    @property
    def file_path(self) -> Path:
        return self.directory / self.file_name
