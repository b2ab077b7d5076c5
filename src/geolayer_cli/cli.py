from __future__ import annotations

from pathlib import Path
from typing import Optional
import typer

from .util import configure_logging, configure_stdio, set_global_options

app = typer.Typer(help="geolayer: tile layer configuration admin CLI")


@app.callback()
def _init(
    config_file: Optional[Path] = typer.Option(
        None,
        "--config-file",
        help="Path to store settings (TOML with a [layer_store] table)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    base_dir: Optional[Path] = typer.Option(
        None,
        "--base-dir",
        help="Base directory for relative and standard lookups (default: cwd)",
        file_okay=False,
        dir_okay=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log resolution and I/O steps"),
):
    configure_stdio()
    configure_logging(verbose)
    set_global_options(config_file, base_dir)


from .commands import layers as layers_cmd  # noqa: E402
from .commands import config_cmd as config_cmd  # noqa: E402

app.add_typer(layers_cmd.app, name="layers", help="Layer configuration operations")
app.add_typer(config_cmd.app, name="config", help="Store settings inspection")


def main():
    app()
