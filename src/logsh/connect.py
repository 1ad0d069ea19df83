"""Connection lifecycle: add, log in, inspect and remove connections.

Every operation loads the configuration through the context, works on one
connection and saves the result. Remote identity comes from two endpoints:

- ``GET {server}/whoami``: the authenticated user
- ``GET {server}/users/{id}/accounts``: the user's subscriptions

Examples:
    Add a password-authenticated connection and fetch a token later:

    >>> from logsh.auth import JwtAuthRequest, StaticCredential
    >>> from logsh.context import AppContext
    >>> ctx = AppContext.create()  # doctest: +SKIP
    >>> request = JwtAuthRequest("alice", StaticCredential("secret"))
    >>> add_connection(ctx, "prod", "https://logship.example", request)  # doctest: +SKIP
    >>> get_bearer_token(ctx)  # doctest: +SKIP
    'eyJ...'
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import httpx

from logsh.auth.credentials import PromptCredential
from logsh.auth.models import OAuthAuth, OAuthFlow
from logsh.auth.requests import AuthRequest, JwtAuthRequest, OAuthAuthRequest
from logsh.auth.validity import bearer_token, ensure_valid
from logsh.config.models import Connection
from logsh.config.store import require_connection
from logsh.exceptions import (
    ConnectError,
    ConnectNetworkError,
    NoAuthenticationError,
    NoDefaultSubscriptionError,
    SubscriptionNotFoundError,
    TokenExpiredError,
    TokenRequestError,
)
from logsh.http import base_url, describe_http_error

if TYPE_CHECKING:
    from logsh.auth.credentials import CredentialSource
    from logsh.auth.session import AuthSession
    from logsh.context import AppContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class UserModel:
    """Authenticated user reported by ``/whoami``."""

    user_id: str
    user_name: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UserModel:
        return cls(user_id=str(data["userId"]), user_name=str(data["userName"]))


@dataclass(frozen=True, slots=True)
class SubscriptionModel:
    """Subscription (account) the user can access."""

    account_id: str
    account_name: str
    permissions: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SubscriptionModel:
        return cls(
            account_id=str(data["accountId"]),
            account_name=str(data["accountName"]),
            permissions=tuple(data.get("permissions") or ()),
        )


# ─────────────────────────────────────────────────────────────────────────────
# Remote identity
# ─────────────────────────────────────────────────────────────────────────────


def _get_json(session: AuthSession, connection: Connection, path: str) -> Any:
    """GET a server path with the connection's bearer token."""
    url = f"{base_url(connection.server)}{path}"
    headers = {"Authorization": f"Bearer {bearer_token(connection)}"}
    try:
        response = session.client.get(url, headers=headers)
        response.raise_for_status()
        return response.json()
    except httpx.HTTPError as exc:
        message, status_code, failed_url = describe_http_error(exc)
        raise ConnectNetworkError(message, status_code=status_code, url=failed_url) from exc
    except ValueError as exc:
        raise ConnectNetworkError(f"Unable to parse response: {exc}", url=url) from exc


def who_am_i(session: AuthSession, connection: Connection) -> UserModel:
    """Return the user the connection's credential belongs to.

    Raises:
        NoAuthenticationError: If the connection has no credential.
        ConnectNetworkError: On network failure, non-2xx status or a malformed body.
    """
    logger.debug("Executing who am I query")
    body = _get_json(session, connection, "/whoami")
    try:
        return UserModel.from_dict(body)
    except (KeyError, TypeError) as exc:
        raise ConnectNetworkError(f"Unexpected whoami response: {exc}") from exc


def list_subscriptions(session: AuthSession, connection: Connection, user_id: str) -> list[SubscriptionModel]:
    """Return the user's subscriptions sorted by name.

    Raises:
        NoAuthenticationError: If the connection has no credential.
        ConnectNetworkError: On network failure, non-2xx status or a malformed body.
    """
    logger.debug("Executing accounts query")
    body = _get_json(session, connection, f"/users/{user_id}/accounts")
    try:
        subscriptions = [SubscriptionModel.from_dict(item) for item in body]
    except (KeyError, TypeError) as exc:
        raise ConnectNetworkError(f"Unexpected accounts response: {exc}") from exc
    return sorted(subscriptions, key=lambda s: s.account_name)


def connect(session: AuthSession, connection: Connection, request: AuthRequest | None = None) -> Connection:
    """Validate or renew the credential, then refresh identity and subscriptions.

    Args:
        session: Authentication session.
        connection: Connection to update in place.
        request: Optional explicit (re-)authentication.

    Returns:
        The updated connection.

    Raises:
        AuthError: If the credential is missing, expired or cannot be obtained.
        ConnectNetworkError: If whoami or the subscription listing fails.
    """
    ensure_valid(connection, request, session, now=session.now())

    user = who_am_i(session, connection)
    subscriptions = list_subscriptions(session, connection, user.user_id)

    connection.user_id = user.user_id
    connection.username = user.user_name
    connection.subscriptions = {s.account_name: s.account_id for s in subscriptions}

    known_ids = set(connection.subscriptions.values())
    if connection.default_subscription not in known_ids:
        connection.default_subscription = subscriptions[0].account_id if subscriptions else None

    logger.info("Connected to %s as %s", connection.server, connection.username)
    return connection


# ─────────────────────────────────────────────────────────────────────────────
# Configuration operations
# ─────────────────────────────────────────────────────────────────────────────


def add_connection(
    context: AppContext,
    name: str,
    server: str | None,
    request: AuthRequest,
    make_default: bool = True,
) -> Connection:
    """Authenticate against a server and store the connection under ``name``.

    An existing connection with the same name is replaced. Nothing is saved
    if authentication or the identity refresh fails.

    Args:
        context: Application context.
        name: Connection name.
        server: Server URL; reuses the existing connection's server when ``None``.
        request: Authentication to run.
        make_default: Whether the connection becomes the default.

    Returns:
        The stored connection.

    Raises:
        ConnectError: If no server is given for a new connection.
        AuthError: If authentication fails.
        ConnectNetworkError: If whoami or the subscription listing fails.
        ConfigError: If the configuration cannot be loaded or saved.
    """
    config = context.load()
    if server is None:
        existing = config.connections.get(name)
        if existing is None:
            raise ConnectError(
                'Missing required argument "server" for new connection.', details={"name": name}
            )
        server = existing.server

    connection = connect(context.session, Connection.new(server), request)

    if name in config.connections:
        logger.info('Connection "%s" replacing existing connection.', name)
    config.upsert_connection(name, connection, make_default=make_default)
    context.save(config)
    logger.info('Saved connection "%s" (default: %s)', name, config.default_connection == name)
    return connection


def login(
    context: AppContext,
    name: str | None = None,
    password: CredentialSource | None = None,
) -> Connection:
    """Re-authenticate a stored connection with its existing strategy.

    Password connections ask for the stored user's password again. OAuth
    connections use the refresh grant when a refresh token is stored and fall
    back to the device flow when it is missing or rejected.

    Args:
        context: Application context.
        name: Connection name; the default connection when ``None``.
        password: Password source for password connections (prompts when ``None``).

    Returns:
        The updated connection.

    Raises:
        ConnectionNotFoundError: If ``name`` does not exist.
        NoDefaultConnectionError: If no name is given and there are no connections.
        NoAuthenticationError: If the connection never had a credential.
        AuthError: If authentication fails.
    """
    config = context.load()
    name, connection = require_connection(config, name)

    if connection.is_jwt_auth:
        source = password or PromptCredential(connection.username)
        connect(context.session, connection, JwtAuthRequest(connection.username, source))
    elif isinstance(connection.auth, OAuthAuth):
        _login_oauth(context.session, connection)
    else:
        raise NoAuthenticationError()

    config.upsert_connection(name, connection)
    context.save(config)
    logger.info('Logged in to connection "%s"', name)
    return connection


def _login_oauth(session: AuthSession, connection: Connection) -> None:
    """Refresh an OAuth grant, falling back to a new device authorization."""
    if isinstance(connection.auth, OAuthAuth) and connection.auth.data.token.refresh_token:
        try:
            connect(session, connection, OAuthAuthRequest(flow=OAuthFlow.REFRESH))
            return
        except (TokenRequestError, TokenExpiredError) as exc:
            logger.info("Refresh token rejected (%s), starting device authorization", exc.message)
    connect(session, connection, OAuthAuthRequest(flow=OAuthFlow.DEVICE))


def remove_connection(context: AppContext, name: str) -> Connection | None:
    """Remove a connection.

    Returns:
        The removed connection, or ``None`` when no connection had that name
        (the configuration is left untouched).
    """
    config = context.load()
    removed = config.remove_connection(name)
    if removed is None:
        logger.info('No connection with name: "%s".', name)
        return None
    context.save(config)
    logger.info("Removed connection with name: %s", name)
    return removed


def set_default_connection(context: AppContext, name: str) -> None:
    """Make ``name`` the default connection.

    Raises:
        ConnectionNotFoundError: If no connection has that name.
    """
    config = context.load()
    config.set_default(name)
    context.save(config)
    logger.info("Default connection set to %s", name)


def refresh_subscriptions(context: AppContext, name: str | None = None) -> tuple[str, list[SubscriptionModel]]:
    """Fetch a connection's subscriptions from the server and store them.

    Returns:
        ``(connection_name, subscriptions)``.

    Raises:
        AuthError: If the stored credential is missing or expired.
        ConnectNetworkError: If the server request fails.
    """
    config = context.load()
    name, connection = require_connection(config, name)
    ensure_valid(connection, now=context.session.now())

    user_id = connection.user_id or who_am_i(context.session, connection).user_id
    subscriptions = list_subscriptions(context.session, connection, user_id)

    connection.user_id = user_id
    connection.subscriptions = {s.account_name: s.account_id for s in subscriptions}
    connection.default_subscription = connection.resolve_subscription()
    context.save(config)
    return name, subscriptions


def set_default_subscription(context: AppContext, subscription: str, name: str | None = None) -> str:
    """Make a known subscription the connection's default.

    Args:
        context: Application context.
        subscription: Subscription name or id.
        name: Connection name; the default connection when ``None``.

    Returns:
        The id of the new default subscription.

    Raises:
        SubscriptionNotFoundError: If the subscription is not known for the connection.
    """
    config = context.load()
    name, connection = require_connection(config, name)

    if subscription in connection.subscriptions:
        account_id = connection.subscriptions[subscription]
    elif subscription in connection.subscriptions.values():
        account_id = subscription
    else:
        raise SubscriptionNotFoundError(subscription, name)

    connection.default_subscription = account_id
    context.save(config)
    logger.info("Default subscription for %s set to %s", name, account_id)
    return account_id


def default_subscription(context: AppContext, name: str | None = None) -> tuple[str, str]:
    """Return the subscription id that commands of a connection run against.

    Returns:
        ``(connection_name, subscription_id)``.

    Raises:
        NoDefaultSubscriptionError: If the connection knows no subscription.
    """
    config = context.load()
    name, connection = require_connection(config, name)
    subscription = connection.resolve_subscription()
    if subscription is None:
        raise NoDefaultSubscriptionError(name)
    return name, subscription


def current_user(context: AppContext, name: str | None = None) -> tuple[str, Connection, UserModel]:
    """Check the stored credential and ask the server who it belongs to.

    Returns:
        ``(connection_name, connection, user)``.
    """
    config = context.load()
    name, connection = require_connection(config, name)
    ensure_valid(connection, now=context.session.now())
    return name, connection, who_am_i(context.session, connection)


def get_bearer_token(context: AppContext, name: str | None = None) -> str:
    """Return a valid bearer token for a stored connection.

    No authentication runs here: an expired credential must be renewed with
    ``login``.

    Args:
        context: Application context.
        name: Connection name; the default connection when ``None``.

    Returns:
        The bearer secret.

    Raises:
        ConnectionNotFoundError: If ``name`` does not exist.
        NoDefaultConnectionError: If no name is given and there are no connections.
        NoAuthenticationError: If the connection has no credential.
        TokenExpiredError: If the credential has expired.
    """
    config = context.load()
    _, connection = require_connection(config, name)
    ensure_valid(connection)
    return bearer_token(connection)


__all__ = [
    "SubscriptionModel",
    "UserModel",
    "add_connection",
    "connect",
    "current_user",
    "default_subscription",
    "get_bearer_token",
    "list_subscriptions",
    "login",
    "refresh_subscriptions",
    "remove_connection",
    "set_default_connection",
    "set_default_subscription",
    "who_am_i",
]
