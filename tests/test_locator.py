"""Tests for configuration directory resolution."""

import logging
from pathlib import Path

import pytest

from geolayer_core import (
    ConfigLocator,
    EnvironmentDefaultLocation,
    LayerConfigStore,
    LocationProviderError,
    LocationUndetermined,
    StoreSettings,
)

from conftest import write_layer_config


class FixedLocation:
    def __init__(self, path: Path):
        self.path = path
        self.calls = 0

    def default_path(self, file_name: str) -> Path:
        self.calls += 1
        return self.path / file_name


class NoLocation:
    def default_path(self, file_name: str) -> Path:
        raise LocationProviderError("no cache configured")


def _webapp(tmp_path: Path) -> Path:
    base_dir = tmp_path / "webapp"
    base_dir.mkdir()
    return base_dir


def test_absolute_path_used_without_existence_check(tmp_path: Path):
    missing = tmp_path / "does-not-exist"
    locator = ConfigLocator(StoreSettings(absolute_path=str(missing)), _webapp(tmp_path))

    location = locator.resolve()
    assert location.directory == missing
    assert location.file_path == missing / "geowebcache.xml"


def test_absolute_path_wins_over_relative(tmp_path: Path):
    base_dir = _webapp(tmp_path)
    settings = StoreSettings(absolute_path=str(tmp_path / "abs"), relative_path="/rel")

    assert ConfigLocator(settings, base_dir).resolve().directory == tmp_path / "abs"


def test_relative_path_joined_onto_base_dir(tmp_path: Path):
    base_dir = _webapp(tmp_path)
    locator = ConfigLocator(StoreSettings(relative_path="/WEB-INF/conf"), base_dir)

    assert locator.resolve().directory == base_dir / "WEB-INF" / "conf"


def test_relative_path_accepts_backslashes(tmp_path: Path):
    base_dir = _webapp(tmp_path)
    locator = ConfigLocator(StoreSettings(relative_path="\\WEB-INF\\conf"), base_dir)

    assert locator.resolve().directory == base_dir / "WEB-INF" / "conf"


def test_explicit_path_skips_default_provider(tmp_path: Path):
    provider = FixedLocation(tmp_path)
    locator = ConfigLocator(StoreSettings(relative_path="/conf"), _webapp(tmp_path), provider)

    locator.resolve()
    assert provider.calls == 0


def test_default_provider_used_when_file_is_readable(tmp_path: Path):
    cache_dir = tmp_path / "cache"
    write_layer_config(cache_dir)
    base_dir = _webapp(tmp_path)
    write_layer_config(base_dir / "WEB-INF" / "classes")

    locator = ConfigLocator(StoreSettings(), base_dir, FixedLocation(cache_dir))
    assert locator.resolve().directory == cache_dir


def test_default_provider_without_file_falls_through(tmp_path: Path):
    base_dir = _webapp(tmp_path)
    write_layer_config(base_dir / "WEB-INF" / "classes")
    empty_cache = tmp_path / "cache"
    empty_cache.mkdir()

    locator = ConfigLocator(StoreSettings(), base_dir, FixedLocation(empty_cache))
    assert locator.resolve().directory == base_dir / "WEB-INF" / "classes"


def test_default_provider_error_is_ignored(tmp_path: Path):
    base_dir = _webapp(tmp_path)
    write_layer_config(base_dir / "WEB-INF" / "classes")

    locator = ConfigLocator(StoreSettings(), base_dir, NoLocation())
    assert locator.resolve().directory == base_dir / "WEB-INF" / "classes"


def test_first_standard_path_wins(tmp_path: Path):
    base_dir = _webapp(tmp_path)
    write_layer_config(base_dir / "WEB-INF" / "classes")
    write_layer_config(tmp_path / "resources")

    assert ConfigLocator(StoreSettings(), base_dir).resolve().directory == base_dir / "WEB-INF" / "classes"


def test_parent_standard_path_is_normalized(tmp_path: Path):
    base_dir = _webapp(tmp_path)
    write_layer_config(tmp_path / "resources")

    assert ConfigLocator(StoreSettings(), base_dir).resolve().directory == tmp_path / "resources"


def test_standard_path_needs_the_file_not_just_the_directory(tmp_path: Path):
    base_dir = _webapp(tmp_path)
    (base_dir / "WEB-INF" / "classes").mkdir(parents=True)
    write_layer_config(tmp_path / "resources")

    assert ConfigLocator(StoreSettings(), base_dir).resolve().directory == tmp_path / "resources"


def test_custom_file_name_and_standard_paths(tmp_path: Path):
    base_dir = _webapp(tmp_path)
    write_layer_config(base_dir / "etc", file_name="layers.xml")
    settings = StoreSettings(file_name="layers.xml", standard_paths=["/etc"])

    location = ConfigLocator(settings, base_dir).resolve()
    assert location.file_path == base_dir / "etc" / "layers.xml"


def test_nothing_found_raises_and_is_retried(tmp_path: Path):
    base_dir = _webapp(tmp_path)
    locator = ConfigLocator(StoreSettings(), base_dir, NoLocation())

    with pytest.raises(LocationUndetermined):
        locator.resolve()
    assert locator.location is None

    write_layer_config(base_dir / "WEB-INF" / "classes")
    assert locator.resolve().directory == base_dir / "WEB-INF" / "classes"


def test_resolution_is_memoized(tmp_path: Path):
    base_dir = _webapp(tmp_path)
    config = write_layer_config(base_dir / "WEB-INF" / "classes")
    locator = ConfigLocator(StoreSettings(), base_dir)

    first = locator.resolve()
    config.unlink()
    write_layer_config(tmp_path / "resources")

    assert locator.resolve() is first
    assert locator.location is first


def test_resolution_steps_are_logged(tmp_path: Path, caplog: pytest.LogCaptureFixture):
    base_dir = _webapp(tmp_path)
    write_layer_config(base_dir / "WEB-INF" / "classes")

    with caplog.at_level(logging.INFO, logger="geolayer_core.locator"):
        ConfigLocator(StoreSettings(), base_dir).resolve()

    assert "No configuration directory was specified" in caplog.text
    assert "Configuration directory set to" in caplog.text


def test_unreadable_configured_directory_is_logged_not_rejected(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
):
    missing = tmp_path / "missing"
    with caplog.at_level(logging.ERROR, logger="geolayer_core.locator"):
        location = ConfigLocator(StoreSettings(absolute_path=str(missing)), tmp_path).resolve()

    assert location.directory == missing
    assert "cannot be read or does not exist" in caplog.text


def test_environment_default_location_reads_first_set_variable(tmp_path: Path):
    provider = EnvironmentDefaultLocation(
        ["GWC_PRIMARY", "GWC_SECONDARY"],
        environ={"GWC_PRIMARY": "  ", "GWC_SECONDARY": str(tmp_path)},
    )
    assert provider.default_path("geowebcache.xml") == tmp_path / "geowebcache.xml"


def test_environment_default_location_unset_raises():
    provider = EnvironmentDefaultLocation(["GWC_PRIMARY"], environ={})
    with pytest.raises(LocationProviderError):
        provider.default_path("geowebcache.xml")


def test_store_identifier_falls_back_to_standard_path(tmp_path: Path, no_default_location):
    base_dir = _webapp(tmp_path)
    write_layer_config(base_dir / "WEB-INF" / "classes")

    store = LayerConfigStore.from_settings(StoreSettings(), base_dir)
    assert store.identifier() == str(base_dir / "WEB-INF" / "classes")


def test_store_uses_environment_variable(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    cache_dir = tmp_path / "cache"
    write_layer_config(cache_dir)
    monkeypatch.setenv("GEOWEBCACHE_CACHE_DIR", str(cache_dir))

    store = LayerConfigStore.from_settings(StoreSettings(), _webapp(tmp_path))
    assert store.identifier() == str(cache_dir)


def test_store_identifier_fails_when_unresolvable(tmp_path: Path, no_default_location):
    store = LayerConfigStore.from_settings(StoreSettings(), _webapp(tmp_path))
    with pytest.raises(LocationUndetermined):
        store.identifier()
