"""Manage logsh connections."""

from __future__ import annotations

from enum import Enum

import typer
from rich.prompt import Prompt
from rich.table import Table

from logsh import connect
from logsh.auth.credentials import CredentialSource, EnvCredential, PromptCredential, StaticCredential
from logsh.auth.models import OAuthFlow
from logsh.auth.requests import JwtAuthRequest, OAuthAuthRequest
from logsh.cli.common import console, error_console, exit_error, get_context, render_error
from logsh.exceptions import BasicAuthError, LogshError

connection_app = typer.Typer(help="Configure logsh connections.", no_args_is_help=True)
add_app = typer.Typer(help="Add or update a connection.", no_args_is_help=True)
connection_app.add_typer(add_app, name="add")

NAME_ARGUMENT = typer.Argument(..., help="Connection name.")
SERVER_ARGUMENT = typer.Argument(None, help="Server endpoint (defaults to the existing connection's server).")
DEFAULT_OPTION = typer.Option(True, "--default/--no-default", help="Set the connection as default.")
PASSWORD_ENV_OPTION = typer.Option(
    None, "--password-env", help="Read the password from this environment variable (e.g. LOGSH_PASSWORD)."
)


class FlowChoice(str, Enum):
    """OAuth flows selectable from the command line."""

    DEVICE = "device"


# ─────────────────────────────────────────────────────────────────────────────
# add
# ─────────────────────────────────────────────────────────────────────────────


@add_app.command("basic")
def add_basic(
    ctx: typer.Context,
    name: str = NAME_ARGUMENT,
    server: str | None = SERVER_ARGUMENT,
    username: str | None = typer.Option(None, "--username", "-u", help="Username."),
    password: str | None = typer.Option(None, "--password", "-p", help="Password."),
    password_env: str | None = PASSWORD_ENV_OPTION,
    default: bool = DEFAULT_OPTION,
) -> None:
    """Add a username and password connection."""
    if not username:
        try:
            username = Prompt.ask("[cyan]Please enter your logship[/] [bold cyan]username[/]", console=error_console)
        except (EOFError, KeyboardInterrupt) as exc:
            render_error(BasicAuthError(f"IO Error: {str(exc) or type(exc).__name__}"))
        username = username.strip()
    if not username:
        exit_error("A username is required.")

    if password is not None:
        source: CredentialSource = StaticCredential(password)
    elif password_env:
        source = EnvCredential(password_env)
    else:
        source = PromptCredential(username, console=error_console)
    request = JwtAuthRequest(username=username, password=source)

    try:
        connect.add_connection(get_context(ctx), name, server, request, make_default=default)
    except LogshError as exc:
        render_error(exc)

    console.print(f'Connection [bold]"{name}"[/] added for user [blue]{username}[/].')


@add_app.command("oauth")
def add_oauth(
    ctx: typer.Context,
    name: str = NAME_ARGUMENT,
    server: str | None = SERVER_ARGUMENT,
    default: bool = DEFAULT_OPTION,
    flow: FlowChoice = typer.Option(FlowChoice.DEVICE, "--flow", help="OAuth flow."),
) -> None:
    """Add an OAuth connection using the server's advertised settings."""
    request = OAuthAuthRequest(flow=OAuthFlow.DEVICE)

    try:
        connection = connect.add_connection(get_context(ctx), name, server, request, make_default=default)
    except LogshError as exc:
        render_error(exc)

    console.print(f'Connection [bold]"{name}"[/] added for user [blue]{connection.username}[/] ({flow.value} flow).')


# ─────────────────────────────────────────────────────────────────────────────
# login / list / remove / default
# ─────────────────────────────────────────────────────────────────────────────


@connection_app.command("login")
def login_command(
    ctx: typer.Context,
    name: str | None = typer.Argument(None, help="Connection name (defaults to the default connection)."),
    password_env: str | None = PASSWORD_ENV_OPTION,
) -> None:
    """Authenticate an existing connection again."""
    try:
        connection = connect.login(get_context(ctx), name, EnvCredential(password_env) if password_env else None)
    except LogshError as exc:
        render_error(exc)

    console.print(f"Logged in to [blue]{connection.server}[/] as [blue]{connection.username}[/].")


@connection_app.command("list")
def list_command(ctx: typer.Context) -> None:
    """List connections."""
    try:
        config = get_context(ctx).load()
    except LogshError as exc:
        render_error(exc)

    if not config.connections:
        console.print("[yellow]No connections configured.[/]")
        return

    table = Table(title="Connections")
    table.add_column("Name", style="bold")
    table.add_column("Server", style="blue")
    table.add_column("Default")
    table.add_column("Logged in User", justify="right", style="bright_black")

    for conn_name in sorted(config.connections):
        conn = config.connections[conn_name]
        is_default = conn_name == config.default_connection
        table.add_row(conn_name, conn.server, "[green]true[/]" if is_default else "[red]false[/]", conn.username)

    console.print(table)


@connection_app.command("remove")
def remove_command(ctx: typer.Context, name: str = NAME_ARGUMENT) -> None:
    """Remove a connection."""
    try:
        removed = connect.remove_connection(get_context(ctx), name)
    except LogshError as exc:
        render_error(exc)

    if removed is None:
        console.print(f'No connection with name: [yellow]"{name}"[/].')
    else:
        console.print(f'Removed connection [bold]"{name}"[/].')


@connection_app.command("default")
def default_command(ctx: typer.Context, name: str = NAME_ARGUMENT) -> None:
    """Set the default connection."""
    try:
        connect.set_default_connection(get_context(ctx), name)
    except LogshError as exc:
        render_error(exc)

    console.print(f'Default connection set to [bold]"{name}"[/].')


__all__ = ["connection_app"]
