"""Root ``logsh`` command."""

from __future__ import annotations

import typer

from logsh import logger as logsh_logger
from logsh import meta
from logsh.cli.commands import config_app, subscription_app, whoami_command
from logsh.cli.common import console

app = typer.Typer(
    name=meta.__app_name__,
    help=meta.__description__,
    no_args_is_help=True,
    pretty_exceptions_show_locals=False,
)
app.add_typer(config_app, name="config")
app.add_typer(subscription_app, name="subscription")
app.command("whoami")(whoami_command)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"{meta.__app_name__} {meta.__version__}", highlight=False)
        raise typer.Exit()


@app.callback()
def main_callback(
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="Increase log verbosity (-v, -vv, -vvv)."),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    """logsh: connect to logship servers."""
    logsh_logger.install(verbose)


__all__ = ["app"]
