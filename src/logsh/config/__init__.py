"""Connection configuration store for logsh.

Examples:
    >>> from logsh.config import Configuration, Connection
    >>> config = Configuration()
    >>> config.upsert_connection("prod", Connection.new("https://logship.example"))
    >>> sorted(config.connections)
    ['prod']
"""

from logsh.config.models import Configuration, Connection
from logsh.config.paths import CONFIG_PATH_ENV, resolve_path
from logsh.config.store import ConfigStore, default_connection, require_connection

__all__ = [
    "CONFIG_PATH_ENV",
    "ConfigStore",
    "Configuration",
    "Connection",
    "default_connection",
    "require_connection",
    "resolve_path",
]
