"""Per-invocation application context.

The context carries the resolved configuration path and owns the HTTP
client used for every request of one invocation.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from logsh.auth.session import AuthSession, log_device_prompt
from logsh.config.paths import resolve_path
from logsh.config.store import ConfigStore
from logsh.http import build_client

if TYPE_CHECKING:
    import httpx

    from logsh.auth.oauth import DeviceAuthorization
    from logsh.config.models import Configuration

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Configuration path and shared resources for one invocation.

    Attributes:
        config_path: Resolved configuration file path.
        client_factory: Builds the HTTP client on first use.
        prompt: Shows the device authorization to the operator.
        session_options: Extra ``AuthSession`` fields (clock and sleep overrides).

    Examples:
        >>> ctx = AppContext(Path("/tmp/logsh-config.json"))
        >>> ctx.store.path.name
        'logsh-config.json'
    """

    config_path: Path
    client_factory: Callable[[], httpx.Client] = build_client
    prompt: Callable[[DeviceAuthorization], None] = log_device_prompt
    session_options: dict[str, Any] = field(default_factory=dict)
    _client: httpx.Client | None = field(default=None, init=False, repr=False)
    _session: AuthSession | None = field(default=None, init=False, repr=False)

    @classmethod
    def create(
        cls,
        environ: Mapping[str, str] | None = None,
        home: Path | None = None,
        **kwargs: Any,
    ) -> AppContext:
        """Resolve the configuration path once and build a context.

        Raises:
            ConfigError: If the configuration path cannot be resolved.
        """
        path = resolve_path(environ=environ, home=home)
        logger.debug("Configuration path: %s", path)
        return cls(config_path=path, **kwargs)

    @property
    def store(self) -> ConfigStore:
        """Configuration store bound to ``config_path``."""
        return ConfigStore(self.config_path)

    def load(self) -> Configuration:
        """Load the configuration."""
        return self.store.load()

    def save(self, config: Configuration) -> Configuration:
        """Save the configuration."""
        return self.store.save(config)

    @property
    def client(self) -> httpx.Client:
        """HTTP client, built on first use."""
        if self._client is None:
            self._client = self.client_factory()
        return self._client

    @property
    def session(self) -> AuthSession:
        """Authentication session wrapping ``client``."""
        if self._session is None:
            self._session = AuthSession(client=self.client, prompt=self.prompt, **self.session_options)
        return self._session

    def close(self) -> None:
        """Close the HTTP client if one was built."""
        if self._client is not None:
            self._client.close()
        self._client = None
        self._session = None

    def __enter__(self) -> AppContext:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


__all__ = [
    "AppContext",
]
