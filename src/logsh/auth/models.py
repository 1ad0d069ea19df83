"""Authentication data models for logsh connections.

This module defines the credential values stored on a connection:

- OAuthFlow: Enum for the OAuth grant that produced a credential
- OAuthToken: Token endpoint response (access token, refresh token, lifetime)
- OAuthData: Full OAuth grant with the endpoints needed to renew it
- JwtAuth: Opaque bearer token from the password exchange
- OAuthAuth: OAuth grant wrapper
- AuthData: Closed union of ``JwtAuth`` and ``OAuthAuth``

The persisted JSON form of ``AuthData`` is externally tagged, e.g.
``{"Jwt": {...}}`` or ``{"OAuth": {...}}``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Union

from logsh.utils.timestamps import parse_rfc3339, to_rfc3339

_TOKEN_FIELDS = ("access_token", "token_type", "expires_in", "refresh_token", "scope")


class OAuthFlow(str, Enum):
    """OAuth grant used to obtain a credential.

    Attributes:
        DEVICE: Device authorization grant (RFC 8628).
        CODE: Authorization code grant (not supported by this client).
        REFRESH: Refresh token grant.
    """

    DEVICE = "Device"
    CODE = "Code"
    REFRESH = "Refresh"


@dataclass(frozen=True, slots=True)
class OAuthToken:
    """Token endpoint response.

    Attributes:
        access_token: Bearer secret.
        token_type: Token type reported by the server.
        expires_in: Lifetime in seconds, if reported.
        refresh_token: Refresh token, if issued.
        scope: Granted scope string, if reported.
        extra: Any additional response fields, kept for round-tripping.

    Examples:
        >>> token = OAuthToken.from_dict({"access_token": "abc", "expires_in": 3600})
        >>> token.access_token, token.expires_in
        ('abc', 3600)
    """

    access_token: str
    token_type: str = "Bearer"
    expires_in: int | None = None
    refresh_token: str | None = None
    scope: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OAuthToken:
        """Build a token from a token endpoint response or persisted dict.

        Args:
            data: Mapping with at least ``access_token``.

        Returns:
            Parsed token.

        Raises:
            ValueError: If ``access_token`` is missing or ``expires_in`` is not numeric.
            TypeError: If ``data`` is not an object.
        """
        if not isinstance(data, dict):
            raise TypeError("token must be an object")
        access_token = data.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise ValueError("token response is missing 'access_token'")

        expires_in = data.get("expires_in")
        if expires_in is not None:
            expires_in = int(expires_in)

        return cls(
            access_token=access_token,
            token_type=str(data.get("token_type") or "Bearer"),
            expires_in=expires_in,
            refresh_token=data.get("refresh_token"),
            scope=data.get("scope"),
            extra={k: v for k, v in data.items() if k not in _TOKEN_FIELDS},
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize the token, omitting fields the server did not report."""
        result: dict[str, Any] = {"access_token": self.access_token, "token_type": self.token_type}
        if self.expires_in is not None:
            result["expires_in"] = self.expires_in
        if self.refresh_token is not None:
            result["refresh_token"] = self.refresh_token
        if self.scope is not None:
            result["scope"] = self.scope
        result.update(self.extra)
        return result

    def __repr__(self) -> str:
        """Return a representation that never exposes secrets."""
        return (
            f"OAuthToken(token_type={self.token_type!r}, expires_in={self.expires_in!r}, "
            f"has_refresh_token={self.refresh_token is not None})"
        )


@dataclass(frozen=True, slots=True)
class OAuthData:
    """OAuth grant stored on a connection.

    Attributes:
        received: When the grant was issued (UTC).
        client_id: OAuth client identifier.
        authorize_endpoint: Authorization endpoint URL.
        token_endpoint: Token endpoint URL.
        device_endpoint: Device authorization endpoint URL, if any.
        scopes: Requested scopes (sorted, unique).
        token: Token endpoint response.
        flow: Grant that produced the token.
    """

    received: datetime
    client_id: str
    authorize_endpoint: str
    token_endpoint: str
    device_endpoint: str | None
    scopes: tuple[str, ...]
    token: OAuthToken
    flow: OAuthFlow = OAuthFlow.DEVICE

    def __post_init__(self) -> None:
        """Normalize scopes into a sorted set."""
        object.__setattr__(self, "scopes", tuple(sorted(set(self.scopes))))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OAuthData:
        """Build OAuth data from its persisted form."""
        return cls(
            received=parse_rfc3339(data["received"]),
            client_id=data["client_id"],
            authorize_endpoint=data.get("authorize_endpoint", ""),
            token_endpoint=data["token_endpoint"],
            device_endpoint=data.get("device_endpoint"),
            scopes=tuple(data.get("scopes") or ()),
            token=OAuthToken.from_dict(data["token"]),
            flow=OAuthFlow(data.get("flow", OAuthFlow.DEVICE.value)),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize OAuth data to its persisted form."""
        return {
            "received": to_rfc3339(self.received),
            "client_id": self.client_id,
            "authorize_endpoint": self.authorize_endpoint,
            "token_endpoint": self.token_endpoint,
            "device_endpoint": self.device_endpoint,
            "scopes": list(self.scopes),
            "token": self.token.to_dict(),
            "flow": self.flow.value,
        }


@dataclass(frozen=True, slots=True)
class JwtAuth:
    """Bearer token obtained from the password exchange.

    Attributes:
        token: Opaque bearer token.
        expires: Client-assigned or server-advertised expiry (UTC).
    """

    token: str
    expires: datetime | None = None

    def __repr__(self) -> str:
        """Return a representation that never exposes the token."""
        return f"JwtAuth(expires={self.expires!r})"


@dataclass(frozen=True, slots=True)
class OAuthAuth:
    """OAuth credential.

    Attributes:
        data: The full OAuth grant.
    """

    data: OAuthData


AuthData = Union[JwtAuth, OAuthAuth]


def auth_to_dict(auth: AuthData) -> dict[str, Any]:
    """Serialize an ``AuthData`` value to its externally tagged JSON form.

    Args:
        auth: Credential to serialize.

    Returns:
        ``{"Jwt": {...}}`` or ``{"OAuth": {...}}``.

    Raises:
        TypeError: If ``auth`` is not a known variant.
    """
    if isinstance(auth, JwtAuth):
        return {"Jwt": {"token": auth.token, "expires": to_rfc3339(auth.expires) if auth.expires else None}}
    if isinstance(auth, OAuthAuth):
        return {"OAuth": auth.data.to_dict()}
    raise TypeError(f"Unknown auth data variant: {type(auth).__name__}")


def auth_from_dict(data: dict[str, Any]) -> AuthData:
    """Parse an externally tagged ``AuthData`` value.

    Args:
        data: Mapping with exactly one of ``Jwt`` or ``OAuth``.

    Returns:
        Parsed credential.

    Raises:
        ValueError: If the mapping does not hold exactly one known tag.
    """
    if not isinstance(data, dict) or len(data) != 1:
        raise ValueError("auth must be an object with exactly one variant")

    (tag, payload), = data.items()
    if not isinstance(payload, dict):
        raise TypeError(f"auth variant {tag!r} must hold an object")
    if tag == "Jwt":
        expires = payload.get("expires")
        return JwtAuth(token=payload["token"], expires=parse_rfc3339(expires) if expires else None)
    if tag == "OAuth":
        return OAuthAuth(data=OAuthData.from_dict(payload))
    raise ValueError(f"Unknown auth variant: {tag!r}")


__all__ = [
    "AuthData",
    "JwtAuth",
    "OAuthAuth",
    "OAuthData",
    "OAuthFlow",
    "OAuthToken",
    "auth_from_dict",
    "auth_to_dict",
]
