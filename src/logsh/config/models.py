"""Connection and configuration models.

A ``Configuration`` owns a name-keyed map of ``Connection`` entries and the
name of the default one. Both serialize to the JSON document persisted by
``logsh.config.store``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from logsh.auth.models import AuthData, JwtAuth, OAuthAuth, auth_from_dict, auth_to_dict
from logsh.exceptions import ConnectionNotFoundError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Connection:
    """A named target server with its identity and credential.

    Attributes:
        server: Server base URL.
        user_id: Server-side user id, known after the first successful whoami.
        username: Username, empty until known.
        default_subscription: Id of the subscription used by default.
        subscriptions: Subscription name to id.
        auth: Active credential, if any.

    Examples:
        >>> conn = Connection.new(" https://logship.example ")
        >>> conn.server, conn.auth is None
        ('https://logship.example', True)
    """

    server: str
    user_id: str | None = None
    username: str = ""
    default_subscription: str | None = None
    subscriptions: dict[str, str] = field(default_factory=dict)
    auth: AuthData | None = None

    @classmethod
    def new(cls, server: str) -> Connection:
        """Create an unauthenticated connection to ``server``."""
        return cls(server=server.strip())

    @property
    def is_jwt_auth(self) -> bool:
        """Whether the active credential came from the password exchange."""
        return isinstance(self.auth, JwtAuth)

    @property
    def is_oauth_auth(self) -> bool:
        """Whether the active credential is an OAuth grant."""
        return isinstance(self.auth, OAuthAuth)

    def resolve_subscription(self) -> str | None:
        """Return the id of the subscription to use by default.

        The recorded default wins when it is a known subscription id (or when
        no subscriptions are known yet). Otherwise the subscription with the
        smallest name is used and a warning is logged.

        Returns:
            Subscription id, or ``None`` when nothing is known.
        """
        known_ids = set(self.subscriptions.values())
        if self.default_subscription and (not known_ids or self.default_subscription in known_ids):
            return self.default_subscription

        if not self.subscriptions:
            return None

        first = min(self.subscriptions)
        if self.default_subscription:
            logger.warning(
                "Default subscription %s is not available on %s, using %s",
                self.default_subscription,
                self.server,
                first,
            )
        return self.subscriptions[first]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the persisted JSON shape."""
        return {
            "server": self.server,
            "user": self.user_id,
            "username": self.username,
            "default_subscription": self.default_subscription,
            "subscriptions": dict(self.subscriptions),
            "auth": auth_to_dict(self.auth) if self.auth is not None else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Connection:
        """Parse the persisted JSON shape.

        Raises:
            KeyError: If ``server`` is missing.
            ValueError: If the ``auth`` value is malformed.
            TypeError: If a field has the wrong type.
        """
        if not isinstance(data, dict):
            raise TypeError("connection must be an object")
        auth = data.get("auth")
        subscriptions = data.get("subscriptions") or {}
        if not isinstance(subscriptions, dict):
            raise TypeError("subscriptions must be an object")
        return cls(
            server=data["server"],
            user_id=data.get("user"),
            username=data.get("username") or "",
            default_subscription=data.get("default_subscription"),
            subscriptions={str(k): str(v) for k, v in subscriptions.items()},
            auth=auth_from_dict(auth) if auth is not None else None,
        )


@dataclass(slots=True)
class Configuration:
    """The persisted set of connections.

    Attributes:
        connections: Connection name to connection, in insertion order.
        default_connection: Name of the default connection, empty when unset.

    Examples:
        >>> config = Configuration()
        >>> config.upsert_connection("prod", Connection.new("https://logship.example"))
        >>> config.default_connection
        'prod'
    """

    connections: dict[str, Connection] = field(default_factory=dict)
    default_connection: str = ""

    def upsert_connection(self, name: str, connection: Connection, make_default: bool = False) -> None:
        """Insert or replace a connection.

        The connection becomes the default when ``make_default`` is true or
        when it is the first connection added.

        Args:
            name: Connection name.
            connection: Connection to store.
            make_default: Whether to make it the default.
        """
        was_empty = not self.connections
        self.connections[name] = connection
        if make_default or was_empty:
            self.default_connection = name

    def remove_connection(self, name: str) -> Connection | None:
        """Remove a connection, clearing the default pointer if it named it.

        Returns:
            The removed connection, or ``None`` if no such name existed.
        """
        removed = self.connections.pop(name, None)
        if removed is not None and self.default_connection == name:
            self.default_connection = ""
        return removed

    def set_default(self, name: str) -> None:
        """Make an existing connection the default.

        Raises:
            ConnectionNotFoundError: If no connection has that name.
        """
        if name not in self.connections:
            raise ConnectionNotFoundError(name)
        self.default_connection = name

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the persisted JSON shape."""
        return {
            "default_connection": self.default_connection,
            "connections": {name: conn.to_dict() for name, conn in self.connections.items()},
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Configuration:
        """Parse the persisted JSON shape.

        Raises:
            KeyError: If a required connection field is missing.
            ValueError: If a credential is malformed.
            TypeError: If the document has the wrong shape.
        """
        if not isinstance(data, dict):
            raise TypeError("configuration must be a JSON object")
        connections = data.get("connections") or {}
        if not isinstance(connections, dict):
            raise TypeError("connections must be an object")
        return cls(
            connections={str(name): Connection.from_dict(conn) for name, conn in connections.items()},
            default_connection=data.get("default_connection") or "",
        )


__all__ = [
    "Configuration",
    "Connection",
]
