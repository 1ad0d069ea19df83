"""Persistence of the connection set.

The configuration is one JSON document. Saves write a sibling temporary file
and atomically replace the target, so a crash never leaves a truncated file.
There is no cross-process locking: two processes saving concurrently resolve
as last-write-wins.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from logsh.config.models import Configuration, Connection
from logsh.exceptions import (
    ConfigDeserializeError,
    ConfigReadError,
    ConfigSerializeError,
    ConfigWriteError,
    ConnectionNotFoundError,
    NoDefaultConnectionError,
)

logger = logging.getLogger(__name__)


class ConfigStore:
    """Load and save the configuration file.

    Args:
        path: Configuration file path.

    Examples:
        >>> store = ConfigStore("/tmp/does-not-exist/config.json")
        >>> store.load().connections
        {}
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)

    def load(self) -> Configuration:
        """Read the configuration.

        Returns:
            Parsed configuration, or an empty one when the file does not exist.

        Raises:
            ConfigReadError: If the file exists but cannot be read.
            ConfigDeserializeError: If the content is not a valid configuration.
        """
        if not self.path.is_file():
            logger.debug("No configuration at %s, starting empty", self.path)
            return Configuration()

        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigReadError(f"Unable to read configuration: {exc}", details={"path": str(self.path)}) from exc

        if not raw.strip():
            return Configuration()

        try:
            return Configuration.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError) as exc:
            raise ConfigDeserializeError(
                f"Invalid configuration file {self.path}: {exc}", details={"path": str(self.path)}
            ) from exc

    def save(self, config: Configuration) -> Configuration:
        """Write the configuration atomically.

        Args:
            config: Configuration to persist.

        Returns:
            The configuration that was written.

        Raises:
            ConfigSerializeError: If the configuration cannot be encoded.
            ConfigWriteError: If the file cannot be written.
        """
        try:
            payload = json.dumps(config.to_dict(), indent=2) + "\n"
        except (TypeError, ValueError) as exc:
            raise ConfigSerializeError(f"Unable to serialize configuration: {exc}") from exc

        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent)
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise ConfigWriteError(
                f"Unable to write configuration: {exc}", details={"path": str(self.path)}
            ) from exc

        logger.debug("Saved %d connection(s) to %s", len(config.connections), self.path)
        return config


def default_connection(config: Configuration) -> tuple[str, Connection] | None:
    """Return the default connection.

    The recorded default is used when it names an existing connection.
    Otherwise the connection with the smallest name is returned and a warning
    is logged.

    Args:
        config: Configuration to inspect.

    Returns:
        ``(name, connection)``, or ``None`` when there are no connections.
    """
    name = config.default_connection
    if name and name in config.connections:
        return name, config.connections[name]

    if not config.connections:
        return None

    fallback = min(config.connections)
    if name:
        logger.warning("Default connection %r does not exist, using %r", name, fallback)
    else:
        logger.warning("No default connection set, using %r", fallback)
    return fallback, config.connections[fallback]


def require_connection(config: Configuration, name: str | None = None) -> tuple[str, Connection]:
    """Look up a connection by name, or the default one.

    Args:
        config: Configuration to inspect.
        name: Connection name; the default connection when ``None``.

    Returns:
        ``(name, connection)``.

    Raises:
        ConnectionNotFoundError: If ``name`` does not exist.
        NoDefaultConnectionError: If no name is given and there are no connections.
    """
    if name is not None:
        try:
            return name, config.connections[name]
        except KeyError:
            raise ConnectionNotFoundError(name) from None

    found = default_connection(config)
    if found is None:
        raise NoDefaultConnectionError()
    return found


__all__ = [
    "ConfigStore",
    "default_connection",
    "require_connection",
]
