"""Tests for the logsh CLI."""

from __future__ import annotations

import importlib
import json
from datetime import timedelta
from pathlib import Path

import pytest
from conftest import FIXED_NOW, OAUTH_CONFIG, SERVER, USER_ID, MockServer, add_identity_routes
from typer.testing import CliRunner

from logsh import meta
from logsh.auth.models import JwtAuth
from logsh.cli import app
from logsh.config.models import Configuration, Connection
from logsh.context import AppContext

# Mark all tests in this module as CLI tests
# Run with: pytest -m cli
pytestmark = pytest.mark.cli

runner = CliRunner()

# Import modules for monkeypatching
common_mod = importlib.import_module("logsh.cli.common")
credentials_mod = importlib.import_module("logsh.auth.credentials")

ALPHA_ID = "aaaaaaaa-0000-0000-0000-000000000001"
BETA_ID = "bbbbbbbb-0000-0000-0000-000000000002"


@pytest.fixture
def cli_context(app_context: AppContext, monkeypatch: pytest.MonkeyPatch) -> AppContext:
    """Make CLI commands use the test AppContext."""
    monkeypatch.setattr(common_mod, "build_context", lambda: app_context)
    return app_context


def _stored() -> Connection:
    return Connection(
        server=SERVER,
        user_id=USER_ID,
        username="alice",
        default_subscription=ALPHA_ID,
        subscriptions={"alpha": ALPHA_ID, "beta": BETA_ID},
        auth=JwtAuth(token="stored", expires=FIXED_NOW + timedelta(hours=1)),
    )


def _save(ctx: AppContext, **connections: Connection) -> None:
    config = Configuration()
    for name, conn in connections.items():
        config.upsert_connection(name, conn)
    ctx.save(config)


# ─────────────────────────────────────────────────────────────────────────────
# Root
# ─────────────────────────────────────────────────────────────────────────────


class TestRoot:
    """Tests for the root command."""

    def test_version(self) -> None:
        """--version prints the version."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"logsh {meta.__version__}" in result.output

    def test_help(self) -> None:
        """--help lists the command groups."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "config" in result.output
        assert "whoami" in result.output


# ─────────────────────────────────────────────────────────────────────────────
# config path
# ─────────────────────────────────────────────────────────────────────────────


class TestConfigPath:
    """Tests for logsh config path."""

    def test_explicit_path(self, tmp_path: Path) -> None:
        """--config-path is echoed back."""
        target = tmp_path / "custom.json"
        result = runner.invoke(app, ["config", "path", "--config-path", str(target)])
        assert result.exit_code == 0
        assert str(target) in result.output

    def test_exists_fails_for_missing_file(self, tmp_path: Path) -> None:
        """--exists exits 1 when the file is missing."""
        target = tmp_path / "missing.json"
        result = runner.invoke(app, ["config", "path", "--exists", "--config-path", str(target)])
        assert result.exit_code == 1
        assert "does not exist" in result.output

    def test_validate_rejects_bad_file(self, tmp_path: Path) -> None:
        """--validate exits 1 on malformed content."""
        target = tmp_path / "bad.json"
        target.write_text("{oops", encoding="utf-8")
        result = runner.invoke(app, ["config", "path", "--validate", "--config-path", str(target)])
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output

    def test_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """LOGSH_CONFIG_PATH is honored."""
        target = tmp_path / "env.json"
        target.write_text("{}", encoding="utf-8")
        monkeypatch.setenv("LOGSH_CONFIG_PATH", str(target))

        result = runner.invoke(app, ["config", "path", "--validate"])

        assert result.exit_code == 0
        assert str(target.resolve()) in result.output

    def test_env_override_missing(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """A missing LOGSH_CONFIG_PATH target is an error."""
        monkeypatch.setenv("LOGSH_CONFIG_PATH", str(tmp_path / "missing.json"))
        result = runner.invoke(app, ["config", "path"])
        assert result.exit_code == 1
        assert "Unable to use specified configuration path" in result.output


# ─────────────────────────────────────────────────────────────────────────────
# config connection
# ─────────────────────────────────────────────────────────────────────────────


class TestConnectionCommands:
    """Tests for logsh config connection commands."""

    def test_add_basic(self, cli_context: AppContext, server: MockServer) -> None:
        """add basic authenticates and saves the connection."""
        server.add("POST", f"{SERVER}/auth/token", json={"token": "t1"})
        add_identity_routes(server)

        result = runner.invoke(
            app,
            ["config", "connection", "add", "basic", "prod", SERVER, "-u", "alice", "-p", "pw"],
        )

        assert result.exit_code == 0, result.output
        saved = json.loads(cli_context.config_path.read_text(encoding="utf-8"))
        assert saved["default_connection"] == "prod"
        assert saved["connections"]["prod"]["auth"]["Jwt"]["token"] == "t1"

    def test_add_basic_unauthorized(self, cli_context: AppContext, server: MockServer) -> None:
        """A rejected password exits 1 with a hint."""
        server.add("POST", f"{SERVER}/auth/token", status=401)

        result = runner.invoke(
            app,
            ["config", "connection", "add", "basic", "prod", SERVER, "-u", "alice", "-p", "bad"],
        )

        assert result.exit_code == 1
        assert "HTTP 401" in result.output
        assert not cli_context.config_path.exists()

    def test_add_oauth_disabled(self, cli_context: AppContext, server: MockServer) -> None:
        """OAuth add fails when the server does not offer OAuth."""
        server.add("GET", f"{SERVER}/auth/oauth", status=204)

        result = runner.invoke(app, ["config", "connection", "add", "oauth", "prod", SERVER])

        assert result.exit_code == 1
        assert "oauth is not configured" in result.output
        assert server.calls("POST", OAUTH_CONFIG["deviceEndpoint"]) == []

    def test_add_oauth(self, cli_context: AppContext, server: MockServer) -> None:
        """OAuth add runs discovery and the device flow."""
        server.add("GET", f"{SERVER}/auth/oauth", json=OAUTH_CONFIG)
        server.add(
            "POST",
            OAUTH_CONFIG["deviceEndpoint"],
            json={"device_code": "d", "user_code": "WXYZ", "verification_uri": "https://v.test", "expires_in": 60},
        )
        server.add("POST", OAUTH_CONFIG["tokenEndpoint"], json={"access_token": "at", "expires_in": 3600})
        add_identity_routes(server)

        result = runner.invoke(app, ["config", "connection", "add", "oauth", "prod", SERVER, "--no-default"])

        assert result.exit_code == 0, result.output
        saved = cli_context.load()
        assert saved.connections["prod"].is_oauth_auth
        assert saved.default_connection == "prod"

    def test_list(self, cli_context: AppContext) -> None:
        """list shows every connection."""
        _save(cli_context, prod=_stored(), dev=_stored())

        result = runner.invoke(app, ["config", "connection", "list"])

        assert result.exit_code == 0
        assert "prod" in result.output
        assert "dev" in result.output
        assert "alice" in result.output

    def test_list_empty(self, cli_context: AppContext) -> None:
        """list reports an empty configuration."""
        result = runner.invoke(app, ["config", "connection", "list"])
        assert result.exit_code == 0
        assert "No connections configured" in result.output

    def test_default(self, cli_context: AppContext) -> None:
        """default moves the default connection."""
        _save(cli_context, prod=_stored(), dev=_stored())

        result = runner.invoke(app, ["config", "connection", "default", "dev"])

        assert result.exit_code == 0
        assert cli_context.load().default_connection == "dev"

    def test_default_unknown(self, cli_context: AppContext) -> None:
        """default with an unknown name exits 1 with the listing hint."""
        _save(cli_context, prod=_stored())

        result = runner.invoke(app, ["config", "connection", "default", "ghost"])

        assert result.exit_code == 1
        assert 'No connection exists with name "ghost".' in result.output
        assert common_mod.LIST_HINT in result.output

    def test_remove(self, cli_context: AppContext) -> None:
        """remove deletes the connection."""
        _save(cli_context, prod=_stored(), dev=_stored())

        result = runner.invoke(app, ["config", "connection", "remove", "dev"])

        assert result.exit_code == 0
        assert list(cli_context.load().connections) == ["prod"]

    def test_login_prompts_for_password(
        self,
        cli_context: AppContext,
        server: MockServer,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """login asks for the stored user's password."""
        _save(cli_context, prod=_stored())
        server.add("POST", f"{SERVER}/auth/token", json={"token": "renewed"})
        add_identity_routes(server)
        monkeypatch.setattr(credentials_mod.Prompt, "ask", lambda *args, **kwargs: "pw")

        result = runner.invoke(app, ["config", "connection", "login"])

        assert result.exit_code == 0, result.output
        assert json.loads(server.calls("POST", f"{SERVER}/auth/token")[0].content)["username"] == "alice"

    def test_add_basic_password_from_environment(
        self,
        cli_context: AppContext,
        server: MockServer,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """--password-env reads the password from the named variable."""
        monkeypatch.setenv("LOGSH_PASSWORD", "from-env")
        server.add("POST", f"{SERVER}/auth/token", json={"token": "t1"})
        add_identity_routes(server)

        result = runner.invoke(
            app,
            ["config", "connection", "add", "basic", "prod", SERVER, "-u", "alice", "--password-env", "LOGSH_PASSWORD"],
        )

        assert result.exit_code == 0, result.output
        assert json.loads(server.calls("POST", f"{SERVER}/auth/token")[0].content)["password"] == "from-env"

    def test_login_password_env_unset(self, cli_context: AppContext, server: MockServer) -> None:
        """An unset --password-env variable fails before any request."""
        _save(cli_context, prod=_stored())

        result = runner.invoke(app, ["config", "connection", "login", "--password-env", "LOGSH_PASSWORD"])

        assert result.exit_code == 1
        assert "Environment variable 'LOGSH_PASSWORD' is not set" in result.output
        assert server.requests == []

    def test_login_without_connections(self, cli_context: AppContext) -> None:
        """login with no connections exits 1 with the add hint."""
        result = runner.invoke(app, ["config", "connection", "login"])
        assert result.exit_code == 1
        assert "No default connection found." in result.output
        assert common_mod.ADD_HINT in result.output


# ─────────────────────────────────────────────────────────────────────────────
# whoami / subscription
# ─────────────────────────────────────────────────────────────────────────────


class TestWhoami:
    """Tests for logsh whoami."""

    def test_connected(self, cli_context: AppContext, server: MockServer) -> None:
        """whoami prints the connection, user and subscription."""
        _save(cli_context, prod=_stored())
        add_identity_routes(server)

        result = runner.invoke(app, ["whoami"])

        assert result.exit_code == 0, result.output
        assert "Connected" in result.output
        assert "alice" in result.output
        assert ALPHA_ID in result.output

    def test_unauthorized(self, cli_context: AppContext, server: MockServer) -> None:
        """A 401 from the server suggests logging in again."""
        _save(cli_context, prod=_stored())
        server.add("GET", f"{SERVER}/whoami", status=401)

        result = runner.invoke(app, ["whoami"])

        assert result.exit_code == 1
        assert "User Unauthorized" in result.output
        assert common_mod.LOGIN_HINT in result.output

    def test_not_configured(self, cli_context: AppContext) -> None:
        """whoami without connections exits 1."""
        result = runner.invoke(app, ["whoami"])
        assert result.exit_code == 1
        assert "No connections configured" in result.output


class TestSubscriptionCommands:
    """Tests for logsh subscription commands."""

    def test_list(self, cli_context: AppContext, server: MockServer) -> None:
        """list renders the server's subscriptions."""
        _save(cli_context, prod=_stored())
        add_identity_routes(server)

        result = runner.invoke(app, ["subscription", "list"])

        assert result.exit_code == 0, result.output
        assert "alpha" in result.output
        assert BETA_ID in result.output

    def test_default_by_name(self, cli_context: AppContext) -> None:
        """default accepts a subscription name."""
        _save(cli_context, prod=_stored())

        result = runner.invoke(app, ["subscription", "default", "beta"])

        assert result.exit_code == 0
        assert cli_context.load().connections["prod"].default_subscription == BETA_ID

    def test_default_unknown(self, cli_context: AppContext) -> None:
        """default with an unknown subscription exits 1."""
        _save(cli_context, prod=_stored())

        result = runner.invoke(app, ["subscription", "default", "gamma"])

        assert result.exit_code == 1
        assert "Subscription not found: gamma" in result.output

    def test_current(self, cli_context: AppContext) -> None:
        """current prints the default subscription id."""
        _save(cli_context, prod=_stored())

        result = runner.invoke(app, ["subscription", "current"])

        assert result.exit_code == 0
        assert result.output.strip() == ALPHA_ID

    def test_current_without_subscriptions(self, cli_context: AppContext) -> None:
        """current exits 1 with the listing hint when nothing is known."""
        _save(cli_context, prod=Connection.new(SERVER))

        result = runner.invoke(app, ["subscription", "current"])

        assert result.exit_code == 1
        assert "No default subscription found." in result.output
        assert common_mod.SUBSCRIPTION_HINT in result.output
