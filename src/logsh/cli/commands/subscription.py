"""Manage the subscriptions of a connection."""

from __future__ import annotations

import typer
from rich.table import Table

from logsh import connect
from logsh.cli.common import console, get_context, render_error
from logsh.exceptions import LogshError

subscription_app = typer.Typer(help="Subscription management.", no_args_is_help=True)

CONNECTION_OPTION = typer.Option(None, "--connection", "-c", help="Connection name.")


@subscription_app.command("list")
def list_command(ctx: typer.Context, name: str | None = CONNECTION_OPTION) -> None:
    """List the subscriptions of a connection."""
    context = get_context(ctx)
    try:
        conn_name, subscriptions = connect.refresh_subscriptions(context, name)
        default_id = context.load().connections[conn_name].default_subscription
    except LogshError as exc:
        render_error(exc)

    table = Table(title=f"Subscriptions ({conn_name})")
    table.add_column("Name", style="bold")
    table.add_column("ID")
    table.add_column("Default")
    for sub in subscriptions:
        table.add_row(sub.account_name, sub.account_id, "Yes" if sub.account_id == default_id else "no")
    console.print(table)


@subscription_app.command("default")
def default_command(
    ctx: typer.Context,
    subscription: str = typer.Argument(..., help="Subscription name or id."),
    name: str | None = CONNECTION_OPTION,
) -> None:
    """Set the default subscription of a connection."""
    try:
        account_id = connect.set_default_subscription(get_context(ctx), subscription, name)
    except LogshError as exc:
        render_error(exc)

    console.print(f"Default subscription set to [blue]{account_id}[/].")


@subscription_app.command("current")
def current_command(ctx: typer.Context, name: str | None = CONNECTION_OPTION) -> None:
    """Print the default subscription id of a connection."""
    try:
        _, account_id = connect.default_subscription(get_context(ctx), name)
    except LogshError as exc:
        render_error(exc)

    console.print(account_id, highlight=False)


__all__ = ["subscription_app"]
