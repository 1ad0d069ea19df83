"""Collaborators used while authenticating.

``AuthSession`` bundles the HTTP client with the clocks, sleep function and
operator prompt used by the OAuth device flow, so tests can drive the flow
without real time passing.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

from logsh.utils.timestamps import now_utc

if TYPE_CHECKING:
    import httpx

    from logsh.auth.oauth import DeviceAuthorization

logger = logging.getLogger(__name__)


def log_device_prompt(authorization: DeviceAuthorization) -> None:
    """Default prompt: report the verification URI and user code through logging."""
    logger.warning(
        "Open this URL in your browser: %s and enter the code: %s",
        authorization.verification_uri,
        authorization.user_code,
    )


@dataclass(slots=True)
class AuthSession:
    """HTTP client plus time and prompt hooks for authentication.

    Attributes:
        client: HTTP client used for every request.
        prompt: Called with the device authorization before polling starts.
        sleep: Blocks for the given number of seconds between polls.
        monotonic: Monotonic clock used for the device code deadline.
        now: Wall clock used to timestamp credentials.
    """

    client: httpx.Client
    prompt: Callable[[DeviceAuthorization], None] = log_device_prompt
    sleep: Callable[[float], None] = time.sleep
    monotonic: Callable[[], float] = time.monotonic
    now: Callable[[], datetime] = field(default=now_utc)


__all__ = [
    "AuthSession",
    "log_device_prompt",
]
