from pathlib import Path
from typing import Iterable, Optional

import pytest
from hypothesis import settings

from geolayer_core import LayerConfigStore, StoreSettings
from geolayer_core.models import SRS, BoundingBox, Grid, LayerRecord

# Prevent Hypothesis from writing a local example database (e.g. `.hypothesis/`) during tests.
settings.register_profile("geolayer-tests", database=None)
settings.load_profile("geolayer-tests")


WORLD = BoundingBox(minx=-180.0, miny=-90.0, maxx=180.0, maxy=90.0)


def make_layer(name: str = "topp:states", **overrides) -> LayerRecord:
    """Build a fully populated layer record for tests."""
    fields = {
        "name": name,
        "wms_url": ["http://localhost:8080/geoserver/wms"],
        "wms_layers": name,
        "mime_formats": ["image/png", "image/jpeg"],
        "grids": [
            Grid(srs=SRS(number=4326), data_bounds=WORLD, grid_bounds=WORLD, zoom_start=0, zoom_stop=20)
        ],
        "meta_width_height": [3, 3],
        "error_mime": "application/vnd.ogc.se_inimage",
        "version": "1.1.1",
        "tiled": False,
        "transparent": True,
    }
    fields.update(overrides)
    return LayerRecord(**fields)


def layer_xml(name: str, version: str = "1.1.1", indent: str = "  ") -> str:
    """Minimal hand-written <wmslayer> fragment."""
    return (
        f"{indent}<wmslayer>\n"
        f"{indent}  <name>{name}</name>\n"
        f"{indent}  <mimeFormats><string>image/png</string></mimeFormats>\n"
        f"{indent}  <version>{version}</version>\n"
        f"{indent}</wmslayer>\n"
    )


def write_layer_config(
    directory: Path,
    fragments: Iterable[str] = (),
    *,
    root: str = "gwcConfiguration",
    root_attrs: str = "",
    file_name: str = "geowebcache.xml",
) -> Path:
    """Write a geowebcache.xml holding the given raw fragments."""
    directory.mkdir(parents=True, exist_ok=True)
    attrs = f" {root_attrs}" if root_attrs else ""
    body = "".join(fragments)
    path = directory / file_name
    path.write_text(
        f'<?xml version="1.0" encoding="UTF-8"?>\n<{root}{attrs}>\n{body}</{root}>\n',
        encoding="utf-8",
    )
    return path


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    """Directory holding an empty configuration document."""
    directory = tmp_path / "conf"
    write_layer_config(directory)
    return directory


@pytest.fixture
def store(config_dir: Path):
    settings_ = StoreSettings(absolute_path=str(config_dir), default_location_env=[])
    return LayerConfigStore.from_settings(settings_, config_dir.parent)


@pytest.fixture
def no_default_location(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GEOWEBCACHE_CACHE_DIR", raising=False)


def read_config(directory: Path, file_name: Optional[str] = None) -> str:
    return (directory / (file_name or "geowebcache.xml")).read_text(encoding="utf-8")
