"""logsh CLI command groups."""

from logsh.cli.commands.config import config_app
from logsh.cli.commands.subscription import subscription_app
from logsh.cli.commands.whoami import whoami_command

__all__ = [
    "config_app",
    "subscription_app",
    "whoami_command",
]
