"""Show the current user and connection."""

from __future__ import annotations

import typer

from logsh import connect
from logsh.cli.common import console, get_context, render_error
from logsh.exceptions import LogshError, NoDefaultConnectionError


def whoami_command(
    ctx: typer.Context,
    name: str | None = typer.Option(None, "--connection", "-c", help="Connection name."),
) -> None:
    """Show current user and connection information."""
    try:
        conn_name, connection, user = connect.current_user(get_context(ctx), name)
    except NoDefaultConnectionError as exc:
        console.print("Status: [red]No connections configured. Configuration Required.[/]")
        render_error(exc)
    except LogshError as exc:
        console.print("Status: [red]Not Connected[/]")
        render_error(exc)

    subscription = connection.resolve_subscription() or "None"
    console.print("Status: [green]Connected[/]")
    console.print(
        f"Logged into connection [blue]{conn_name}[/] as user [blue]{user.user_name}[/] "
        f"with subscription: [blue]{subscription}[/]"
    )


__all__ = ["whoami_command"]
