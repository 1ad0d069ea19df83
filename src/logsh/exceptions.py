"""Exceptions raised by logsh.

Exception hierarchy::

    LogshError
        ConfigError
            NoHomeError
            InvalidConfigPathError
            ConfigReadError
            ConfigWriteError
            ConfigSerializeError
            ConfigDeserializeError
            NoDefaultConnectionError
            NoDefaultSubscriptionError
        AuthError
            TokenExpiredError
            NoAuthenticationError
            AuthNetworkError
            BasicAuthError
            OAuthError
                EndpointParseError
                MissingEndpointError
                DeviceAuthorizationError
                TokenRequestError
                    AccessDeniedError
                    DeviceCodeExpiredError
                DeviceFlowTimeoutError
                UnsupportedFlowError
        ConnectError
            ConnectionNotFoundError
            ConnectNetworkError
            SubscriptionNotFoundError
"""

from __future__ import annotations

from typing import Any


class LogshError(Exception):
    """Base exception for all logsh errors.

    Attributes:
        message: Human-readable error message.
        details: Additional error context as key-value pairs.

    Examples:
        >>> raise LogshError("Something went wrong", details={"server": "https://logship.example"})
        Traceback (most recent call last):
        ...
        logsh.exceptions.LogshError: Something went wrong
    """

    def __init__(
        self,
        message: str,
        *,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize LogshError.

        Args:
            message: Human-readable error message.
            details: Additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ─────────────────────────────────────────────────────────────────────────────
# Configuration errors
# ─────────────────────────────────────────────────────────────────────────────


class ConfigError(LogshError):
    """Base exception for configuration store failures."""


class NoHomeError(ConfigError):
    """Raised when the user's home directory cannot be determined."""

    def __init__(self) -> None:
        """Initialize NoHomeError."""
        super().__init__("Unable to determine home directory")


class InvalidConfigPathError(ConfigError):
    """Raised when an explicitly configured path cannot be used.

    Attributes:
        path: The rejected configuration path.
    """

    def __init__(self, path: str, reason: str = "path does not exist") -> None:
        """Initialize InvalidConfigPathError.

        Args:
            path: The rejected configuration path.
            reason: Why the path was rejected.
        """
        super().__init__(
            f"Unable to use specified configuration path '{path}': {reason}",
            details={"path": path, "reason": reason},
        )
        self.path = path


class ConfigReadError(ConfigError):
    """Raised when the configuration file cannot be read."""


class ConfigWriteError(ConfigError):
    """Raised when the configuration file cannot be written."""


class ConfigSerializeError(ConfigError):
    """Raised when the configuration cannot be serialized to JSON."""


class ConfigDeserializeError(ConfigError):
    """Raised when the configuration file holds malformed content."""


class NoDefaultConnectionError(ConfigError):
    """Raised when a default connection is required but none is configured."""

    def __init__(self) -> None:
        """Initialize NoDefaultConnectionError."""
        super().__init__("No default connection found.")


class NoDefaultSubscriptionError(ConfigError):
    """Raised when a default subscription is required but none is known."""

    def __init__(self, connection_name: str | None = None) -> None:
        """Initialize NoDefaultSubscriptionError.

        Args:
            connection_name: Connection that has no subscription.
        """
        super().__init__(
            "No default subscription found.",
            details={"connection": connection_name},
        )


# ─────────────────────────────────────────────────────────────────────────────
# Authentication errors
# ─────────────────────────────────────────────────────────────────────────────


class AuthError(LogshError):
    """Base exception for authentication failures."""


class TokenExpiredError(AuthError):
    """Raised when a stored credential expired and cannot be silently refreshed."""

    def __init__(self, message: str | None = None) -> None:
        """Initialize TokenExpiredError.

        Args:
            message: Optional override of the default message.
        """
        super().__init__(
            message or "The specified authentication has timed out and cannot be automatically refreshed."
        )


class NoAuthenticationError(AuthError):
    """Raised when a connection has no credential and no new request was supplied."""

    def __init__(self) -> None:
        """Initialize NoAuthenticationError."""
        super().__init__("Authentication is not configured for this connection.")


class AuthNetworkError(AuthError):
    """Raised when an authentication request fails on the network or with a non-2xx status.

    Attributes:
        status_code: HTTP status code (if a response was received).
    """

    def __init__(self, message: str, *, status_code: int | None = None, url: str | None = None) -> None:
        """Initialize AuthNetworkError.

        Args:
            message: Human-readable error message.
            status_code: HTTP status code (if available).
            url: Request URL (if available).
        """
        super().__init__(message, details={"status_code": status_code, "url": url})
        self.status_code = status_code


class BasicAuthError(AuthError):
    """Raised when a credential source fails to produce a password."""


class OAuthError(AuthError):
    """Base exception for OAuth protocol failures."""


class EndpointParseError(OAuthError):
    """Raised when an OAuth endpoint is not a usable absolute URL.

    Attributes:
        endpoint: The rejected endpoint value.
    """

    def __init__(self, endpoint: str) -> None:
        """Initialize EndpointParseError.

        Args:
            endpoint: The rejected endpoint value.
        """
        super().__init__(f"URL Parse Error: invalid endpoint {endpoint!r}", details={"endpoint": endpoint})
        self.endpoint = endpoint


class MissingEndpointError(OAuthError):
    """Raised when a required OAuth endpoint is missing or OAuth is unavailable.

    Attributes:
        endpoint_name: Name of the missing endpoint.
    """

    def __init__(self, endpoint_name: str) -> None:
        """Initialize MissingEndpointError.

        Args:
            endpoint_name: Name of the missing endpoint.
        """
        super().__init__(f"Missing or empty endpoint: {endpoint_name}", details={"endpoint": endpoint_name})
        self.endpoint_name = endpoint_name


class DeviceAuthorizationError(OAuthError):
    """Raised when the device authorization request is rejected."""


class TokenRequestError(OAuthError):
    """Raised when the token endpoint rejects a grant.

    Attributes:
        error_code: OAuth ``error`` value from the response.
    """

    def __init__(self, message: str, *, error_code: str | None = None) -> None:
        """Initialize TokenRequestError.

        Args:
            message: Human-readable error message.
            error_code: OAuth ``error`` value from the response.
        """
        super().__init__(message, details={"error": error_code})
        self.error_code = error_code


class AccessDeniedError(TokenRequestError):
    """Raised when the operator declined the device authorization."""

    def __init__(self) -> None:
        """Initialize AccessDeniedError."""
        super().__init__("The authorization request was denied.", error_code="access_denied")


class DeviceCodeExpiredError(TokenRequestError):
    """Raised when the server reports the device code as expired."""

    def __init__(self) -> None:
        """Initialize DeviceCodeExpiredError."""
        super().__init__("The device code expired before authorization completed.", error_code="expired_token")


class DeviceFlowTimeoutError(OAuthError):
    """Raised when the device authorization window elapses while polling.

    Attributes:
        expires_in: Authorization window in seconds.
    """

    def __init__(self, expires_in: int) -> None:
        """Initialize DeviceFlowTimeoutError.

        Args:
            expires_in: Authorization window in seconds.
        """
        super().__init__(
            f"Timed out waiting for device authorization after {expires_in}s",
            details={"expires_in": expires_in},
        )
        self.expires_in = expires_in


class UnsupportedFlowError(OAuthError):
    """Raised for OAuth flows this client does not support."""

    def __init__(self, flow: str) -> None:
        """Initialize UnsupportedFlowError.

        Args:
            flow: Name of the unsupported flow.
        """
        super().__init__(f"OAuth flow '{flow}' is not supported", details={"flow": flow})
        self.flow = flow


# ─────────────────────────────────────────────────────────────────────────────
# Connection errors
# ─────────────────────────────────────────────────────────────────────────────


class ConnectError(LogshError):
    """Base exception for connection-level failures."""


class ConnectionNotFoundError(ConnectError):
    """Raised when a named connection does not exist.

    Attributes:
        name: The connection name that was not found.
    """

    def __init__(self, name: str) -> None:
        """Initialize ConnectionNotFoundError.

        Args:
            name: The connection name that was not found.
        """
        super().__init__(f'No connection exists with name "{name}".', details={"name": name})
        self.name = name


class ConnectNetworkError(ConnectError):
    """Raised when a connection request (whoami, accounts) fails.

    Attributes:
        status_code: HTTP status code (if a response was received).
    """

    def __init__(self, message: str, *, status_code: int | None = None, url: str | None = None) -> None:
        """Initialize ConnectNetworkError.

        Args:
            message: Human-readable error message.
            status_code: HTTP status code (if available).
            url: Request URL (if available).
        """
        super().__init__(message, details={"status_code": status_code, "url": url})
        self.status_code = status_code


class SubscriptionNotFoundError(ConnectError):
    """Raised when a subscription name or id is not known for a connection.

    Attributes:
        subscription: The requested subscription name or id.
    """

    def __init__(self, subscription: str, connection_name: str | None = None) -> None:
        """Initialize SubscriptionNotFoundError.

        Args:
            subscription: The requested subscription name or id.
            connection_name: Connection that was searched.
        """
        super().__init__(
            f"Subscription not found: {subscription}",
            details={"subscription": subscription, "connection": connection_name},
        )
        self.subscription = subscription


__all__ = [
    "AccessDeniedError",
    "AuthError",
    "AuthNetworkError",
    "BasicAuthError",
    "ConfigDeserializeError",
    "ConfigError",
    "ConfigReadError",
    "ConfigSerializeError",
    "ConfigWriteError",
    "ConnectError",
    "ConnectNetworkError",
    "ConnectionNotFoundError",
    "DeviceAuthorizationError",
    "DeviceCodeExpiredError",
    "DeviceFlowTimeoutError",
    "EndpointParseError",
    "InvalidConfigPathError",
    "LogshError",
    "MissingEndpointError",
    "NoAuthenticationError",
    "NoDefaultConnectionError",
    "NoDefaultSubscriptionError",
    "NoHomeError",
    "OAuthError",
    "SubscriptionNotFoundError",
    "TokenExpiredError",
    "TokenRequestError",
    "UnsupportedFlowError",
]
