"""Shared helpers for logsh CLI commands."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, NoReturn

import typer
from rich.console import Console

from logsh.context import AppContext
from logsh.exceptions import (
    AuthError,
    ConnectionNotFoundError,
    ConnectNetworkError,
    LogshError,
    NoAuthenticationError,
    NoDefaultConnectionError,
    NoDefaultSubscriptionError,
    TokenExpiredError,
)

if TYPE_CHECKING:
    from logsh.auth.oauth import DeviceAuthorization

logger = logging.getLogger(__name__)

console = Console()
error_console = Console(stderr=True)

LOGIN_HINT = "logsh config connection login"
LIST_HINT = "logsh config connection list"
ADD_HINT = "logsh config connection add --help"
SUBSCRIPTION_HINT = "logsh subscription list"


def exit_error(message: str, hint: str | None = None) -> NoReturn:
    """Print an error (and an optional hint) to stderr and exit with code 1."""
    error_console.print(f"[red]Error:[/] {message}")
    if hint:
        error_console.print(f"[bright_black]{hint}[/]")
    raise typer.Exit(code=1)


def hint_for(exc: LogshError) -> str | None:
    """Return the follow-up command suggested for an error, if any.

    Examples:
        >>> hint_for(NoDefaultConnectionError())
        '# Execute logsh config connection add --help for help with adding connections.'
    """
    if isinstance(exc, (TokenExpiredError, NoAuthenticationError)):
        return f"Login with {LOGIN_HINT}."
    if isinstance(exc, ConnectNetworkError) and exc.status_code == 401:
        return f"Login with {LOGIN_HINT}."
    if isinstance(exc, ConnectionNotFoundError):
        return f"# Execute {LIST_HINT} to view available connections."
    if isinstance(exc, NoDefaultSubscriptionError):
        return f"# Execute {SUBSCRIPTION_HINT} to refresh the known subscriptions."
    if isinstance(exc, (NoDefaultConnectionError, ConnectNetworkError, AuthError)):
        return f"# Execute {ADD_HINT} for help with adding connections."
    return None


def render_error(exc: LogshError) -> NoReturn:
    """Report a logsh error with a hint and exit with code 1."""
    logger.debug("Command failed", exc_info=exc)
    if isinstance(exc, ConnectNetworkError) and exc.status_code == 401:
        exit_error("User Unauthorized", hint_for(exc))
    exit_error(exc.message, hint_for(exc))


def print_device_prompt(authorization: DeviceAuthorization) -> None:
    """Show the device authorization instructions on the console."""
    error_console.print(
        f"[cyan]Open[/] [bold]{authorization.verification_uri}[/] "
        f"[cyan]and enter the code[/] [bold yellow]{authorization.user_code}[/]"
    )
    if authorization.verification_uri_complete:
        error_console.print(f"[bright_black]Or open {authorization.verification_uri_complete}[/]")


def build_context() -> AppContext:
    """Create the application context for one CLI invocation."""
    return AppContext.create(prompt=print_device_prompt)


def get_context(ctx: typer.Context) -> AppContext:
    """Return the invocation's context, creating it on first use.

    The context is closed when the CLI invocation ends.
    """
    root = ctx.find_root()
    if not isinstance(root.obj, AppContext):
        try:
            root.obj = build_context()
        except LogshError as exc:
            render_error(exc)
        root.call_on_close(root.obj.close)
    return root.obj


__all__ = [
    "ADD_HINT",
    "LIST_HINT",
    "LOGIN_HINT",
    "SUBSCRIPTION_HINT",
    "build_context",
    "console",
    "error_console",
    "exit_error",
    "get_context",
    "hint_for",
    "print_device_prompt",
    "render_error",
]
