"""Credential sources for the password exchange.

A credential source is consulted only when an exchange actually runs, so an
interactive prompt never appears for a connection that does not need it.

Examples:
    >>> from logsh.auth.credentials import StaticCredential
    >>> StaticCredential("secret").fetch()
    'secret'
"""

from __future__ import annotations

import logging
import os
from typing import Protocol, runtime_checkable

from rich.console import Console
from rich.prompt import Prompt

from logsh.exceptions import BasicAuthError

logger = logging.getLogger(__name__)


@runtime_checkable
class CredentialSource(Protocol):
    """Protocol for deferred, fallible password producers."""

    def fetch(self) -> str:
        """Return the secret.

        Raises:
            BasicAuthError: If the secret cannot be produced.
        """
        ...


class StaticCredential:
    """Credential source holding a literal secret."""

    def __init__(self, value: str) -> None:
        self._value = value

    def fetch(self) -> str:
        """Return the stored secret."""
        return self._value

    def __repr__(self) -> str:
        return "StaticCredential(value='***')"


class EnvCredential:
    """Credential source reading a secret from an environment variable.

    Args:
        var: Environment variable name.
    """

    def __init__(self, var: str) -> None:
        self.var = var

    def fetch(self) -> str:
        """Return the variable's value.

        Raises:
            BasicAuthError: If the variable is unset or empty.
        """
        value = os.environ.get(self.var)
        if not value:
            raise BasicAuthError(f"Environment variable '{self.var}' is not set", details={"var": self.var})
        return value


class PromptCredential:
    """Credential source prompting the operator for a hidden password.

    Args:
        username: Username shown in the prompt.
        console: Console used for the prompt (defaults to stderr).
    """

    def __init__(self, username: str, console: Console | None = None) -> None:
        self.username = username
        self._console = console or Console(stderr=True)

    def fetch(self) -> str:
        """Prompt for the password.

        Raises:
            BasicAuthError: If the prompt is cancelled or stdin is unavailable.
        """
        logger.debug("Prompting for password of user %s", self.username)
        try:
            return Prompt.ask(
                f"[cyan]Please enter[/] [bold bright_blue]{self.username}[/][cyan]'s password[/]",
                password=True,
                console=self._console,
            )
        except (EOFError, KeyboardInterrupt, OSError) as exc:
            raise BasicAuthError(f"IO Error: {str(exc) or type(exc).__name__}") from exc


__all__ = [
    "CredentialSource",
    "EnvCredential",
    "PromptCredential",
    "StaticCredential",
]
