"""Token validity checks and re-authentication.

A stored credential is usable until its expiry instant, inclusive:
``is_expired`` is true only when ``now > expiry``. Expired credentials are
never refreshed silently here; an explicit ``AuthRequest`` (a login) is
needed to replace them.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from logsh.auth.models import AuthData, JwtAuth, OAuthAuth
from logsh.auth.requests import authenticate
from logsh.exceptions import NoAuthenticationError, TokenExpiredError
from logsh.utils.timestamps import now_utc

if TYPE_CHECKING:
    from logsh.auth.requests import AuthRequest
    from logsh.auth.session import AuthSession
    from logsh.config.models import Connection

logger = logging.getLogger(__name__)


def expiry(auth: AuthData) -> datetime | None:
    """Return when a credential stops being valid.

    Args:
        auth: Stored credential.

    Returns:
        The JWT ``expires`` value, or ``received + expires_in`` for OAuth;
        ``None`` when no lifetime is known.

    Raises:
        TypeError: If ``auth`` is not a known variant.
    """
    if isinstance(auth, JwtAuth):
        return auth.expires
    if isinstance(auth, OAuthAuth):
        expires_in = auth.data.token.expires_in
        if expires_in is None:
            return None
        return auth.data.received + timedelta(seconds=expires_in)
    raise TypeError(f"Unknown auth data variant: {type(auth).__name__}")


def is_expired(auth: AuthData, now: datetime | None = None) -> bool:
    """Return True when ``now`` is strictly past the credential's expiry.

    Args:
        auth: Stored credential.
        now: Reference time (defaults to the current UTC time).

    Returns:
        Whether the credential has expired. Credentials without a known
        lifetime never expire client-side.
    """
    expires_at = expiry(auth)
    if expires_at is None:
        return False
    return (now or now_utc()) > expires_at


def ensure_valid(
    connection: Connection,
    request: AuthRequest | None = None,
    session: AuthSession | None = None,
    now: datetime | None = None,
) -> None:
    """Make sure a connection holds a usable credential.

    With a ``request``, authentication always runs and its result replaces
    the stored credential. Without one, the stored credential is checked.

    Args:
        connection: Connection to validate (mutated when ``request`` is given).
        request: Optional explicit re-authentication.
        session: Authentication session, required with ``request``.
        now: Reference time for expiry checks.

    Raises:
        NoAuthenticationError: If there is no credential and no request.
        TokenExpiredError: If the stored credential has expired.
        AuthError: If the explicit authentication fails.
        ValueError: If ``request`` is given without ``session``.
    """
    if request is not None:
        if session is None:
            raise ValueError("an AuthSession is required to run an authentication request")
        logger.debug("Refreshing authentication for %s", connection.server)
        connection.auth = authenticate(request, connection, session)
        return

    if connection.auth is None:
        raise NoAuthenticationError()

    if is_expired(connection.auth, now):
        kind = "JWT" if isinstance(connection.auth, JwtAuth) else "OAuth"
        logger.warning("%s token for %s is expired.", kind, connection.server)
        raise TokenExpiredError()


def bearer_token(connection: Connection) -> str:
    """Return the secret to send as ``Authorization: Bearer <token>``.

    Raises:
        NoAuthenticationError: If the connection has no credential.
    """
    auth = connection.auth
    if isinstance(auth, JwtAuth):
        return auth.token
    if isinstance(auth, OAuthAuth):
        return auth.data.token.access_token
    raise NoAuthenticationError()


__all__ = [
    "bearer_token",
    "ensure_valid",
    "expiry",
    "is_expired",
]
