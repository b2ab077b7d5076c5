from __future__ import annotations

import json
from typing import NoReturn

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from geolayer_core import LayerRecord, LayerStoreError, RecordNotFound

from ..util import build_store

app = typer.Typer(help="Layer configuration operations")
console = Console()


def _fail(exc: Exception) -> NoReturn:
    typer.echo(f"❌ {exc}", err=True)
    raise typer.Exit(1)


@app.command("list")
def list_layers(
    output_format: str = typer.Option("table", "--format", help="Output format: table|json"),
):
    """List all configured layers."""
    store = build_store()
    try:
        layers = store.list_all()
    except LayerStoreError as exc:
        _fail(exc)

    if output_format == "json":
        payload = {name: layer.model_dump(mode="json") for name, layer in sorted(layers.items())}
        typer.echo(json.dumps(payload, ensure_ascii=True, indent=2))
        return

    table = Table(title=f"Layers in {store.config_file}")
    table.add_column("Name")
    table.add_column("Formats")
    table.add_column("SRS")
    table.add_column("WMS URL")
    for name, layer in sorted(layers.items()):
        table.add_row(
            name,
            ", ".join(layer.mime_formats),
            ", ".join(str(grid.srs) for grid in layer.grids),
            ", ".join(layer.wms_url),
        )
    console.print(table)


@app.command("show")
def show_layer(name: str = typer.Argument(..., help="Layer name")):
    """Print one layer as JSON."""
    store = build_store()
    try:
        layer = store.get(name)
    except LayerStoreError as exc:
        _fail(exc)
    typer.echo(json.dumps(layer.model_dump(mode="json"), ensure_ascii=True, indent=2))


@app.command("delete")
def delete_layer(name: str = typer.Argument(..., help="Layer name")):
    """Remove a layer from the configuration document."""
    store = build_store()
    try:
        removed = store.delete(name)
    except LayerStoreError as exc:
        _fail(exc)
    if not removed:
        _fail(RecordNotFound(name))
    typer.echo(f"✓ Deleted layer {name}")


@app.command("rename")
def rename_layer(
    old_name: str = typer.Argument(..., help="Current layer name"),
    new_name: str = typer.Argument(..., help="New layer name"),
):
    """Rename a layer, keeping all its other settings.

    The settings come from the definition `layers show` prints, which is the
    last one when the name is duplicated, while the first duplicate is the one
    removed. The old name then stays defined and a warning is printed.
    """
    store = build_store()
    try:
        layer = store.get(old_name)
        renamed = LayerRecord.model_validate({**layer.model_dump(), "name": new_name})
    except LayerStoreError as exc:
        _fail(exc)
    except ValidationError as exc:
        _fail(ValueError(f"Invalid layer name {new_name!r}: {exc.errors()[0]['msg']}"))

    try:
        modified = store.modify(old_name, renamed)
        remaining = store.list_all()
    except LayerStoreError as exc:
        _fail(exc)
    if not modified:
        _fail(RecordNotFound(old_name))
    typer.echo(f"✓ Renamed layer {old_name} -> {renamed.name}")
    if renamed.name != old_name and old_name in remaining:
        typer.echo(f"⚠ Layer {old_name} is still defined by a duplicate entry", err=True)


@app.command("location")
def show_location():
    """Print the resolved configuration directory."""
    store = build_store()
    try:
        typer.echo(store.identifier())
    except LayerStoreError as exc:
        _fail(exc)
