"""Authentication strategies.

An ``AuthRequest`` is one of two variants:

- ``JwtAuthRequest``: username plus a deferred password source
- ``OAuthAuthRequest``: OAuth client parameters and the flow to run

``authenticate`` dispatches on the variant and returns a fresh ``AuthData``.
It never mutates the connection; the caller merges the result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Union

from logsh.auth import jwt, oauth
from logsh.auth.models import AuthData, OAuthAuth, OAuthFlow
from logsh.exceptions import TokenExpiredError

if TYPE_CHECKING:
    from logsh.auth.credentials import CredentialSource
    from logsh.auth.session import AuthSession
    from logsh.config.models import Connection

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class JwtAuthRequest:
    """Password exchange request.

    Attributes:
        username: Account username.
        password: Deferred password source, consulted only when the exchange runs.
    """

    username: str
    password: CredentialSource


@dataclass(frozen=True, slots=True)
class OAuthAuthRequest:
    """OAuth request.

    When ``client_id`` is empty the server's discovery document supplies every
    endpoint and the scopes, overriding the values given here.

    Attributes:
        client_id: OAuth client identifier.
        device_endpoint: Device authorization endpoint URL.
        scopes: Scopes to request.
        authorize_endpoint: Authorization endpoint URL.
        token_endpoint: Token endpoint URL.
        flow: Grant to run.
    """

    client_id: str = ""
    device_endpoint: str | None = None
    scopes: tuple[str, ...] = ()
    authorize_endpoint: str = ""
    token_endpoint: str = ""
    flow: OAuthFlow = OAuthFlow.DEVICE


AuthRequest = Union[JwtAuthRequest, OAuthAuthRequest]


def authenticate(request: AuthRequest, connection: Connection, session: AuthSession) -> AuthData:
    """Run an authentication request against a connection's server.

    Args:
        request: Strategy to run.
        connection: Target connection (read only).
        session: Authentication session.

    Returns:
        A new credential for the connection.

    Raises:
        AuthError: If authentication fails.
        TypeError: If ``request`` is not a known variant.
    """
    if isinstance(request, JwtAuthRequest):
        logger.debug("Authenticating %s with username %s", connection.server, request.username)
        return jwt.fetch_token(session, connection.server, request.username, request.password)

    if isinstance(request, OAuthAuthRequest):
        return _authenticate_oauth(request, connection, session)

    raise TypeError(f"Unknown auth request variant: {type(request).__name__}")


def _authenticate_oauth(request: OAuthAuthRequest, connection: Connection, session: AuthSession) -> OAuthAuth:
    """Run the OAuth flow named by the request."""
    if request.flow is OAuthFlow.CODE:
        oauth.reject_code_flow()

    if request.flow is OAuthFlow.REFRESH:
        stored = connection.auth
        if not isinstance(stored, OAuthAuth):
            raise TokenExpiredError("No stored OAuth grant to refresh; log in again.")
        logger.debug("Refreshing OAuth grant for %s", connection.server)
        return oauth.refresh_grant(session, stored.data)

    if not request.client_id.strip():
        logger.debug("Refreshing OAuth info from server.")
        advertised = oauth.discover(session, connection.server)
        request = replace(
            request,
            client_id=advertised.client_id,
            authorize_endpoint=advertised.authorize_endpoint,
            token_endpoint=advertised.token_endpoint,
            device_endpoint=advertised.device_endpoint,
            scopes=advertised.scopes,
        )

    return oauth.device_flow(
        session,
        client_id=request.client_id,
        authorize_endpoint=request.authorize_endpoint,
        token_endpoint=request.token_endpoint,
        device_endpoint=request.device_endpoint,
        scopes=request.scopes,
    )


__all__ = [
    "AuthRequest",
    "JwtAuthRequest",
    "OAuthAuthRequest",
    "authenticate",
]
