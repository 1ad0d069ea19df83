"""Shared pytest fixtures for logsh test suite."""

from __future__ import annotations

# Disable Rich colors and force wide terminal BEFORE any imports
# Rich checks these at import time
import os

os.environ["NO_COLOR"] = "1"
os.environ["TERM"] = "dumb"
os.environ["FORCE_COLOR"] = "0"
os.environ["COLUMNS"] = "200"  # Prevent text wrapping in CLI output

import logging
from collections.abc import Generator
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import httpx
import pytest

from logsh.auth.session import AuthSession
from logsh.context import AppContext
from logsh.http import build_client

# pylint: disable=redefined-outer-name

SERVER = "https://logship.test"
USER_ID = "6f1c1a52-6a4e-4c59-9d8e-0d5b8f6d2a11"
FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

ACCOUNTS = [
    {"permissions": ["Read"], "accountId": "bbbbbbbb-0000-0000-0000-000000000002", "accountName": "beta"},
    {"permissions": ["Read", "Write"], "accountId": "aaaaaaaa-0000-0000-0000-000000000001", "accountName": "alpha"},
]

OAUTH_CONFIG = {
    "clientId": "logsh-cli",
    "authorizeEndpoint": "https://login.logship.test/authorize",
    "deviceEndpoint": "https://login.logship.test/device",
    "tokenEndpoint": "https://login.logship.test/token",
    "scopes": ["openid", "offline_access", "openid"],
}


class FakeClock:
    """Monotonic clock advanced only by ``sleep``."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class MockServer:
    """Route table for ``httpx.MockTransport``.

    Each route holds a queue of canned responses; the last one repeats.
    Unknown routes answer 404.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], list[dict[str, Any]]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, url: str, status: int = 200, json: Any = None, **kwargs: Any) -> MockServer:
        """Queue a response for ``method url``."""
        response = {"status_code": status, **kwargs}
        if json is not None:
            response["json"] = json
        self.routes.setdefault((method.upper(), url), []).append(response)
        return self

    def calls(self, method: str, url: str) -> list[httpx.Request]:
        """Return the requests received for ``method url``."""
        return [r for r in self.requests if r.method == method.upper() and _route_url(r) == url]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get((request.method, _route_url(request)))
        if not queue:
            return httpx.Response(404, json={"error": "not_found"})
        canned = queue.pop(0) if len(queue) > 1 else queue[0]
        return httpx.Response(**canned)


def _route_url(request: httpx.Request) -> str:
    return str(request.url).split("?", 1)[0]


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Drop LOGSH_CONFIG_PATH and reset the ``logsh`` logger between tests."""
    monkeypatch.delenv("LOGSH_CONFIG_PATH", raising=False)
    monkeypatch.delenv("LOGSH_PASSWORD", raising=False)
    yield
    root = logging.getLogger("logsh")
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(logging.NOTSET)


@pytest.fixture
def clock() -> FakeClock:
    """Return a fake monotonic clock."""
    return FakeClock()


@pytest.fixture
def server() -> MockServer:
    """Return an empty mock server."""
    return MockServer()


@pytest.fixture
def prompts() -> list[Any]:
    """Collect device authorizations shown to the operator."""
    return []


@pytest.fixture
def session(server: MockServer, clock: FakeClock, prompts: list[Any]) -> Generator[AuthSession, None, None]:
    """Return an AuthSession wired to the mock server and fake clock."""
    client = build_client(transport=httpx.MockTransport(server))
    yield AuthSession(
        client=client,
        prompt=prompts.append,
        sleep=clock.sleep,
        monotonic=clock.monotonic,
        now=lambda: FIXED_NOW,
    )
    client.close()


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    """Return a configuration path inside the pytest temp directory."""
    return tmp_path / "config.json"


@pytest.fixture
def app_context(
    config_path: Path,
    server: MockServer,
    clock: FakeClock,
    prompts: list[Any],
) -> Generator[AppContext, None, None]:
    """Return an AppContext bound to a temp config file and the mock server."""
    ctx = AppContext(
        config_path=config_path,
        client_factory=lambda: build_client(transport=httpx.MockTransport(server)),
        prompt=prompts.append,
        session_options={"sleep": clock.sleep, "monotonic": clock.monotonic, "now": lambda: FIXED_NOW},
    )
    yield ctx
    ctx.close()


def add_identity_routes(server: MockServer, base: str = SERVER, user_name: str = "alice") -> MockServer:
    """Register whoami and accounts responses for ``base``."""
    server.add("GET", f"{base}/whoami", json={"userId": USER_ID, "userName": user_name})
    server.add("GET", f"{base}/users/{USER_ID}/accounts", json=ACCOUNTS)
    return server
