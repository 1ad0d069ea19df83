"""HTTP client construction shared by every logsh request.

All requests carry a ``logsh/<version>`` user agent and an ``x-ls-hostname``
header identifying the calling machine.
"""

from __future__ import annotations

import logging
import socket
from typing import Any

import httpx

from logsh import meta

logger = logging.getLogger(__name__)

USER_AGENT = f"{meta.__app_name__}/{meta.__version__}"
HOSTNAME_HEADER = "x-ls-hostname"

# Seconds before a request to the server is abandoned
HTTP_TIMEOUT = 30.0


def default_headers() -> dict[str, str]:
    """Return the headers attached to every request.

    The hostname header is skipped when the hostname cannot be encoded as a
    header value.
    """
    headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
    host = socket.gethostname()
    try:
        host.encode("ascii")
    except UnicodeEncodeError:
        logger.debug("Hostname %r is not a valid header value; omitting %s", host, HOSTNAME_HEADER)
    else:
        if host:
            headers[HOSTNAME_HEADER] = host
    return headers


def build_client(*, timeout: float = HTTP_TIMEOUT, **kwargs: Any) -> httpx.Client:
    """Build the ``httpx.Client`` used for server and OAuth requests.

    Args:
        timeout: Request timeout in seconds.
        **kwargs: Extra ``httpx.Client`` arguments (e.g. ``transport`` in tests).

    Returns:
        Configured client. The caller owns it and must close it.
    """
    headers = default_headers()
    headers.update(kwargs.pop("headers", {}) or {})
    return httpx.Client(timeout=timeout, headers=headers, **kwargs)


def base_url(server: str) -> str:
    """Return the server URL without trailing slashes.

    Examples:
        >>> base_url("https://logship.example/ ")
        'https://logship.example'
    """
    return server.strip().rstrip("/")


def describe_http_error(exc: httpx.HTTPError) -> tuple[str, int | None, str | None]:
    """Summarize an httpx error for exception messages.

    Args:
        exc: Error raised by httpx.

    Returns:
        Tuple of (message, status_code_or_None, url_or_None).
    """
    if isinstance(exc, httpx.HTTPStatusError):
        response = exc.response
        return (
            f"HTTP {response.status_code} from {response.request.url}",
            response.status_code,
            str(response.request.url),
        )
    url: str | None = None
    try:
        url = str(exc.request.url)
    except RuntimeError:
        url = None
    return f"An error occurred with the request: {exc}", None, url


__all__ = [
    "HOSTNAME_HEADER",
    "HTTP_TIMEOUT",
    "USER_AGENT",
    "base_url",
    "build_client",
    "default_headers",
    "describe_http_error",
]
