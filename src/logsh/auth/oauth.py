"""OAuth2 device authorization flow and refresh grant.

The device flow runs as a small state machine:

1. Discover: ``GET {server}/auth/oauth`` (``204`` means OAuth is unavailable)
2. Device-Authorize: ``POST`` to the device endpoint with client id and scopes
3. Prompt: hand the verification URI and user code to the operator
4. Poll: ``POST`` to the token endpoint every ``interval`` seconds until the
   grant succeeds, is denied, or the device code expires
5. Granted: package the token as ``OAuthAuth``

Examples:
    >>> from logsh.auth.oauth import validate_endpoint
    >>> validate_endpoint("https://login.example.com/token")
    'https://login.example.com/token'
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import httpx

from logsh.auth.models import OAuthAuth, OAuthData, OAuthFlow, OAuthToken
from logsh.exceptions import (
    AccessDeniedError,
    AuthNetworkError,
    DeviceAuthorizationError,
    DeviceCodeExpiredError,
    DeviceFlowTimeoutError,
    EndpointParseError,
    MissingEndpointError,
    TokenExpiredError,
    TokenRequestError,
    UnsupportedFlowError,
)
from logsh.http import base_url, describe_http_error

if TYPE_CHECKING:
    from collections.abc import Iterable

    from logsh.auth.session import AuthSession

logger = logging.getLogger(__name__)

DEVICE_CODE_GRANT = "urn:ietf:params:oauth:grant-type:device_code"
REFRESH_TOKEN_GRANT = "refresh_token"

# Poll interval when the server does not send one (RFC 8628 section 3.2)
DEFAULT_POLL_INTERVAL = 5
# Interval increase required after a slow_down response (RFC 8628 section 3.5)
SLOW_DOWN_INCREMENT = 5


@dataclass(frozen=True, slots=True)
class OAuthServerConfig:
    """OAuth parameters advertised by a logsh server.

    Attributes:
        client_id: OAuth client identifier.
        authorize_endpoint: Authorization endpoint URL.
        device_endpoint: Device authorization endpoint URL.
        token_endpoint: Token endpoint URL.
        scopes: Scopes to request.
    """

    client_id: str
    authorize_endpoint: str
    device_endpoint: str | None
    token_endpoint: str
    scopes: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OAuthServerConfig:
        """Parse the camelCase discovery document.

        Raises:
            KeyError: If ``clientId`` or ``tokenEndpoint`` is missing.
        """
        return cls(
            client_id=data["clientId"],
            authorize_endpoint=data.get("authorizeEndpoint") or "",
            device_endpoint=data.get("deviceEndpoint"),
            token_endpoint=data["tokenEndpoint"],
            scopes=tuple(data.get("scopes") or ()),
        )


@dataclass(frozen=True, slots=True)
class DeviceAuthorization:
    """Device authorization response.

    Attributes:
        device_code: Code used when polling the token endpoint.
        user_code: Code the operator enters in the browser.
        verification_uri: Page where the operator enters the code.
        verification_uri_complete: Page with the code pre-filled, if provided.
        interval: Minimum seconds between polls.
        expires_in: Lifetime of the device code in seconds.
    """

    device_code: str
    user_code: str
    verification_uri: str
    expires_in: int
    interval: int = DEFAULT_POLL_INTERVAL
    verification_uri_complete: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DeviceAuthorization:
        """Parse a device authorization response.

        Raises:
            KeyError: If a required field is missing.
            ValueError: If a numeric field is malformed.
        """
        return cls(
            device_code=data["device_code"],
            user_code=data["user_code"],
            verification_uri=data.get("verification_uri") or data["verification_url"],
            expires_in=int(data["expires_in"]),
            interval=int(data.get("interval") or DEFAULT_POLL_INTERVAL),
            verification_uri_complete=data.get("verification_uri_complete"),
        )

    def __repr__(self) -> str:
        """Return a representation that never exposes the device code."""
        return (
            f"DeviceAuthorization(user_code={self.user_code!r}, verification_uri={self.verification_uri!r}, "
            f"expires_in={self.expires_in!r}, interval={self.interval!r})"
        )


# ─────────────────────────────────────────────────────────────────────────────
# Endpoint helpers
# ─────────────────────────────────────────────────────────────────────────────


def validate_endpoint(endpoint: str | None, name: str = "endpoint") -> str:
    """Check that an endpoint is an absolute http(s) URL.

    Args:
        endpoint: URL to check.
        name: Endpoint label used when it is missing.

    Returns:
        The stripped URL.

    Raises:
        MissingEndpointError: If the endpoint is missing or blank.
        EndpointParseError: If the endpoint is not an absolute http(s) URL.
    """
    if endpoint is None or not endpoint.strip():
        raise MissingEndpointError(name)

    value = endpoint.strip()
    try:
        url = httpx.URL(value)
    except httpx.InvalidURL as exc:
        raise EndpointParseError(value) from exc

    if url.scheme not in ("http", "https") or not url.host:
        raise EndpointParseError(value)
    return value


def discover(session: AuthSession, server: str) -> OAuthServerConfig:
    """Fetch the OAuth parameters advertised by the server.

    Args:
        session: Authentication session.
        server: Server base URL.

    Returns:
        Server OAuth configuration.

    Raises:
        MissingEndpointError: If the server answers ``204 No Content``.
        AuthNetworkError: On network failure, non-2xx status or malformed body.
    """
    url = f"{base_url(server)}/auth/oauth"
    logger.debug("Requesting OAuth config from %s", url)

    try:
        response = session.client.get(url)
        response.raise_for_status()
    except httpx.HTTPError as exc:
        message, status_code, failed_url = describe_http_error(exc)
        raise AuthNetworkError(message, status_code=status_code, url=failed_url) from exc

    if response.status_code == httpx.codes.NO_CONTENT:
        raise MissingEndpointError("oauth is not configured for this server")

    try:
        return OAuthServerConfig.from_dict(response.json())
    except (ValueError, KeyError, TypeError) as exc:
        raise AuthNetworkError(f"Unable to parse OAuth configuration: {exc}", url=url) from exc


# ─────────────────────────────────────────────────────────────────────────────
# Device flow
# ─────────────────────────────────────────────────────────────────────────────


def request_device_authorization(
    session: AuthSession,
    device_endpoint: str,
    client_id: str,
    scopes: Iterable[str],
) -> DeviceAuthorization:
    """Start a device authorization.

    Args:
        session: Authentication session.
        device_endpoint: Device authorization endpoint URL.
        client_id: OAuth client identifier.
        scopes: Scopes to request.

    Returns:
        Device authorization details.

    Raises:
        DeviceAuthorizationError: If the server rejects the request or answers
            with an unusable body.
    """
    form = {"client_id": client_id}
    scope = " ".join(sorted(set(scopes)))
    if scope:
        form["scope"] = scope

    logger.debug("Requesting device authorization from %s", device_endpoint)
    try:
        response = session.client.post(device_endpoint, data=form)
    except httpx.HTTPError as exc:
        raise DeviceAuthorizationError(f"Device authorization request failed: {exc}") from exc

    payload = _json_or_none(response)
    if response.is_error:
        error = (payload or {}).get("error", f"HTTP {response.status_code}")
        description = (payload or {}).get("error_description") or ""
        raise DeviceAuthorizationError(
            f"Device authorization rejected: {error} {description}".strip(),
            details={"status_code": response.status_code, "error": error},
        )

    try:
        return DeviceAuthorization.from_dict(payload or {})
    except (KeyError, ValueError, TypeError) as exc:
        raise DeviceAuthorizationError(f"Device authorization response is missing fields: {exc}") from exc


def poll_device_token(
    session: AuthSession,
    token_endpoint: str,
    client_id: str,
    authorization: DeviceAuthorization,
) -> OAuthToken:
    """Poll the token endpoint until the device authorization completes.

    Polling stops when the server grants a token, denies the request, reports
    the device code expired, or ``authorization.expires_in`` seconds elapse.

    Args:
        session: Authentication session (sleep and monotonic clock are used).
        token_endpoint: Token endpoint URL.
        client_id: OAuth client identifier.
        authorization: Response from ``request_device_authorization``.

    Returns:
        Granted token.

    Raises:
        AccessDeniedError: If the operator declined.
        DeviceCodeExpiredError: If the server reports the code as expired.
        DeviceFlowTimeoutError: If the authorization window elapses.
        TokenRequestError: For any other token endpoint error.
    """
    deadline = session.monotonic() + max(1, authorization.expires_in)
    interval = max(1, authorization.interval)
    form = {
        "grant_type": DEVICE_CODE_GRANT,
        "client_id": client_id,
        "device_code": authorization.device_code,
    }

    while session.monotonic() < deadline:
        try:
            response = session.client.post(token_endpoint, data=form)
        except httpx.HTTPError as exc:
            raise TokenRequestError(f"Token request failed: {exc}") from exc

        payload = _json_or_none(response)
        if response.is_success and payload is not None and "access_token" in payload:
            logger.debug("Device authorization granted")
            return _parse_token(payload)

        error = (payload or {}).get("error")
        if error == "authorization_pending":
            logger.debug("Authorization pending, next poll in %ss", interval)
        elif error == "slow_down":
            interval += SLOW_DOWN_INCREMENT
            logger.debug("Server asked to slow down, next poll in %ss", interval)
        elif error == "access_denied":
            raise AccessDeniedError()
        elif error == "expired_token":
            raise DeviceCodeExpiredError()
        else:
            raise _token_error(response, payload)

        remaining = deadline - session.monotonic()
        if remaining <= 0:
            break
        session.sleep(min(interval, remaining))

    logger.warning("Device authorization was not completed within %ss", authorization.expires_in)
    raise DeviceFlowTimeoutError(authorization.expires_in)


def device_flow(
    session: AuthSession,
    *,
    client_id: str,
    authorize_endpoint: str,
    token_endpoint: str,
    device_endpoint: str | None,
    scopes: Iterable[str],
) -> OAuthAuth:
    """Run the complete device flow and package the grant.

    Args:
        session: Authentication session.
        client_id: OAuth client identifier.
        authorize_endpoint: Authorization endpoint URL (stored for later grants).
        token_endpoint: Token endpoint URL.
        device_endpoint: Device authorization endpoint URL.
        scopes: Scopes to request.

    Returns:
        ``OAuthAuth`` with ``flow=OAuthFlow.DEVICE``.

    Raises:
        OAuthError: On any protocol failure.
    """
    logger.debug("Initializing OAuth device code flow")
    device_endpoint = validate_endpoint(device_endpoint, "Device Authorization URL")
    token_endpoint = validate_endpoint(token_endpoint, "Token URL")
    if authorize_endpoint:
        validate_endpoint(authorize_endpoint, "Authorization URL")

    scope_set = tuple(sorted(set(scopes)))
    authorization = request_device_authorization(session, device_endpoint, client_id, scope_set)
    session.prompt(authorization)
    token = poll_device_token(session, token_endpoint, client_id, authorization)

    return OAuthAuth(
        data=OAuthData(
            received=session.now(),
            client_id=client_id,
            authorize_endpoint=authorize_endpoint,
            token_endpoint=token_endpoint,
            device_endpoint=device_endpoint,
            scopes=scope_set,
            token=token,
            flow=OAuthFlow.DEVICE,
        )
    )


# ─────────────────────────────────────────────────────────────────────────────
# Refresh grant
# ─────────────────────────────────────────────────────────────────────────────


def refresh_grant(session: AuthSession, previous: OAuthData) -> OAuthAuth:
    """Exchange the stored refresh token for a new access token.

    The previous refresh token is kept when the server does not rotate it.

    Args:
        session: Authentication session.
        previous: Stored OAuth grant holding the refresh token.

    Returns:
        ``OAuthAuth`` with ``flow=OAuthFlow.REFRESH``.

    Raises:
        TokenExpiredError: If the stored grant has no refresh token.
        TokenRequestError: If the token endpoint rejects the refresh token.
    """
    refresh_token = previous.token.refresh_token
    if not refresh_token:
        raise TokenExpiredError("The stored OAuth grant has no refresh token; log in again.")

    token_endpoint = validate_endpoint(previous.token_endpoint, "Token URL")
    form = {
        "grant_type": REFRESH_TOKEN_GRANT,
        "client_id": previous.client_id,
        "refresh_token": refresh_token,
    }
    if previous.scopes:
        form["scope"] = " ".join(previous.scopes)

    logger.debug("Refreshing OAuth token at %s", token_endpoint)
    try:
        response = session.client.post(token_endpoint, data=form)
    except httpx.HTTPError as exc:
        raise TokenRequestError(f"Token request failed: {exc}") from exc

    payload = _json_or_none(response)
    if not response.is_success or payload is None or "access_token" not in payload:
        raise _token_error(response, payload)

    if not payload.get("refresh_token"):
        payload = {**payload, "refresh_token": refresh_token}

    return OAuthAuth(
        data=OAuthData(
            received=session.now(),
            client_id=previous.client_id,
            authorize_endpoint=previous.authorize_endpoint,
            token_endpoint=token_endpoint,
            device_endpoint=previous.device_endpoint,
            scopes=previous.scopes,
            token=_parse_token(payload),
            flow=OAuthFlow.REFRESH,
        )
    )


def reject_code_flow() -> None:
    """Reject the authorization code flow.

    Raises:
        UnsupportedFlowError: Always.
    """
    logger.error("OAuth authorization code flow is not supported")
    raise UnsupportedFlowError(OAuthFlow.CODE.value)


# ─────────────────────────────────────────────────────────────────────────────
# Private helpers
# ─────────────────────────────────────────────────────────────────────────────


def _json_or_none(response: httpx.Response) -> dict[str, Any] | None:
    """Return the JSON object body, or None if the body is not a JSON object."""
    try:
        payload = response.json()
    except ValueError:
        return None
    return payload if isinstance(payload, dict) else None


def _token_error(response: httpx.Response, payload: dict[str, Any] | None) -> TokenRequestError:
    """Build a TokenRequestError from a failed token endpoint response."""
    error = (payload or {}).get("error")
    description = (payload or {}).get("error_description")
    if error:
        message = f"{error}: {description}" if description else str(error)
    else:
        message = f"Token endpoint returned HTTP {response.status_code}"
    return TokenRequestError(f"Request Token Error: {message}", error_code=error)


def _parse_token(payload: dict[str, Any]) -> OAuthToken:
    """Parse a successful token response.

    Raises:
        TokenRequestError: If the response fields have unusable values.
    """
    try:
        return OAuthToken.from_dict(payload)
    except (ValueError, TypeError) as exc:
        raise TokenRequestError(f"Malformed token response: {exc}") from exc


__all__ = [
    "DEFAULT_POLL_INTERVAL",
    "DEVICE_CODE_GRANT",
    "DeviceAuthorization",
    "OAuthServerConfig",
    "REFRESH_TOKEN_GRANT",
    "SLOW_DOWN_INCREMENT",
    "device_flow",
    "discover",
    "poll_device_token",
    "refresh_grant",
    "reject_code_flow",
    "request_device_authorization",
    "validate_endpoint",
]
