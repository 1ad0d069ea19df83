"""Locate and validate the logsh configuration."""

from __future__ import annotations

from pathlib import Path

import typer

from logsh.cli.common import console, exit_error, render_error
from logsh.config.paths import resolve_path
from logsh.config.store import ConfigStore
from logsh.exceptions import LogshError

from .connection import connection_app

config_app = typer.Typer(help="Configure the logsh CLI.", no_args_is_help=True)
config_app.add_typer(connection_app, name="connection")


@config_app.command("path")
def path_command(
    exists: bool = typer.Option(False, "--exists", help="Exit with error if no logsh config exists."),
    validate: bool = typer.Option(False, "--validate", help="Exit with error if an existing logsh config is invalid."),
    config_path: str | None = typer.Option(None, "--config-path", help="Specify a configuration path."),
) -> None:
    """Print the configuration file path."""
    if config_path is not None:
        if not config_path.strip():
            exit_error("Invalid --config-path specified: path is empty")
        path = Path(config_path).expanduser()
    else:
        try:
            path = resolve_path()
        except LogshError as exc:
            render_error(exc)

    if exists and not path.exists():
        exit_error(f"logsh configuration does not exist at path: {path}")

    if validate and path.exists():
        try:
            ConfigStore(path).load()
        except LogshError as exc:
            exit_error(f"Invalid configuration at {path}: {exc.message}")

    console.print(str(path), highlight=False, soft_wrap=True)


__all__ = ["config_app"]
