"""Authentication for logsh connections.

Two strategies produce a credential for a connection:

- Password exchange (``JwtAuthRequest``): username and password for an opaque
  bearer token valid for a client-assigned window
- OAuth2 (``OAuthAuthRequest``): device authorization grant, with the refresh
  token grant available to renew a stored OAuth credential

Examples:
    >>> from logsh.auth import JwtAuthRequest, StaticCredential
    >>> request = JwtAuthRequest("alice", StaticCredential("secret"))
    >>> request.username
    'alice'
"""

from logsh.auth.credentials import CredentialSource, EnvCredential, PromptCredential, StaticCredential
from logsh.auth.models import (
    AuthData,
    JwtAuth,
    OAuthAuth,
    OAuthData,
    OAuthFlow,
    OAuthToken,
    auth_from_dict,
    auth_to_dict,
)
from logsh.auth.requests import AuthRequest, JwtAuthRequest, OAuthAuthRequest, authenticate
from logsh.auth.session import AuthSession
from logsh.auth.validity import bearer_token, ensure_valid, expiry, is_expired

__all__ = [
    "AuthData",
    "AuthRequest",
    "AuthSession",
    "CredentialSource",
    "EnvCredential",
    "JwtAuth",
    "JwtAuthRequest",
    "OAuthAuth",
    "OAuthAuthRequest",
    "OAuthData",
    "OAuthFlow",
    "OAuthToken",
    "PromptCredential",
    "StaticCredential",
    "auth_from_dict",
    "auth_to_dict",
    "authenticate",
    "bearer_token",
    "ensure_valid",
    "expiry",
    "is_expired",
]
