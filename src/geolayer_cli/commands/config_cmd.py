from __future__ import annotations

import json
from typing import Any

import tomli_w
import typer

from geolayer_core import ConfigError

from ..util import get_global_config_file, load_settings

app = typer.Typer(help="Store settings inspection")


def _strip_nulls(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _strip_nulls(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [_strip_nulls(v) for v in value if v is not None]
    return value


@app.command("show")
def config_show(
    output_format: str = typer.Option("toml", "--format", help="Output format: toml|json"),
):
    """Print the effective store settings."""
    try:
        settings = load_settings()
    except ConfigError as exc:
        typer.echo(f"❌ {exc}", err=True)
        raise typer.Exit(1)

    # TOML has no null, so unset options are dropped in both formats.
    payload = {"layer_store": _strip_nulls(settings.model_dump())}
    if output_format == "json":
        source = get_global_config_file()
        payload["source"] = str(source) if source else None
        typer.echo(json.dumps(payload, indent=2))
    else:
        typer.echo(tomli_w.dumps(payload), nl=False)
