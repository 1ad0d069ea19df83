"""Password exchange for logsh bearer tokens.

``POST {server}/auth/token`` with ``{"username", "password"}`` returns an
opaque token. The server does not always advertise an expiry, so the client
assigns a bounded validity window of ``JWT_VALIDITY``.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import TYPE_CHECKING

import httpx

from logsh.auth.models import JwtAuth
from logsh.exceptions import AuthNetworkError
from logsh.http import base_url, describe_http_error
from logsh.utils.timestamps import parse_rfc3339

if TYPE_CHECKING:
    from logsh.auth.credentials import CredentialSource
    from logsh.auth.session import AuthSession

logger = logging.getLogger(__name__)

# Client-side validity for tokens the server issues without an expiry
JWT_VALIDITY = timedelta(hours=24)


def fetch_token(
    session: AuthSession,
    server: str,
    username: str,
    password: CredentialSource,
) -> JwtAuth:
    """Exchange a username and password for a bearer token.

    The password source is consulted before any request is made.

    Args:
        session: Authentication session (HTTP client and clock).
        server: Server base URL.
        username: Account username.
        password: Deferred password source.

    Returns:
        ``JwtAuth`` with the token and its expiry.

    Raises:
        BasicAuthError: If the password source fails.
        AuthNetworkError: On network failure, non-2xx status or a malformed body.
    """
    secret = password.fetch()
    url = f"{base_url(server)}/auth/token"
    logger.debug("Requesting token for user %s from %s", username, url)

    try:
        response = session.client.post(url, json={"username": username, "password": secret})
        response.raise_for_status()
        body = response.json()
    except httpx.HTTPError as exc:
        message, status_code, failed_url = describe_http_error(exc)
        raise AuthNetworkError(message, status_code=status_code, url=failed_url) from exc
    except ValueError as exc:
        raise AuthNetworkError(f"Unable to parse token response: {exc}", url=url) from exc

    token = body.get("token") if isinstance(body, dict) else None
    if not isinstance(token, str) or not token:
        raise AuthNetworkError("Token response did not include a token", url=url)

    expires_raw = body.get("expires")
    if expires_raw:
        try:
            expires = parse_rfc3339(expires_raw)
        except ValueError:
            logger.warning("Ignoring unparseable token expiry %r", expires_raw)
            expires = session.now() + JWT_VALIDITY
    else:
        expires = session.now() + JWT_VALIDITY

    logger.info("Received token for user %s, valid until %s", username, expires.isoformat())
    return JwtAuth(token=token, expires=expires)


__all__ = [
    "JWT_VALIDITY",
    "fetch_token",
]
