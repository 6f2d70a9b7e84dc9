"""Shared test fixtures for clink.

Provides reusable fixtures for isolated config environments, output state,
fake login capabilities, and running CLI commands. These fixtures are
automatically discovered by pytest and available to all test modules
without explicit imports.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from clink.auth.base import AttemptOutcome, SecretProvider, TicketExchanger
from clink.auth.login import LoginSession
from clink.models import ClinkConfig, RequestConfig
from clink.output import OutputFormat, OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams the
    cached references go stale, so a fresh manager is forced on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def config() -> ClinkConfig:
    """Configuration pointing at fake hosts with a short timeout."""
    return ClinkConfig(
        api_base_url="https://drink.example.com",
        sso_base_url="https://sso.example.com/oidc",
        realm="EXAMPLE.COM",
        username="alice",
        request=RequestConfig(timeout=5),
    )


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_CONFIG_HOME and XDG_DATA_HOME at subdirectories of tmp_path
    and clears every CLINK_* variable so tests never see real user settings.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in (
        "CLINK_API_URL",
        "CLINK_SSO_URL",
        "CLINK_REALM",
        "CLINK_KINIT",
        "CLINK_USERNAME",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet, plain, colourless OutputManager for the test."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# Login doubles
# ---------------------------------------------------------------------------


class FakeExchanger(TicketExchanger):
    """Accepts exactly one secret and records every attempt."""

    def __init__(self, accepted: str = "hunter2", message: str = "Password incorrect\n") -> None:
        self.accepted = accepted
        self.message = message
        self.calls: list[tuple[str, str]] = []

    def exchange(self, username: str, secret: str) -> AttemptOutcome:
        self.calls.append((username, secret))
        if secret == self.accepted:
            return AttemptOutcome(succeeded=True, message="")
        return AttemptOutcome(succeeded=False, message=self.message)


class ScriptedProvider(SecretProvider):
    """Tries each scripted secret in turn, stopping at the first success."""

    def __init__(self, secrets: list[str]) -> None:
        self.secrets = list(secrets)
        self.outcomes: list[AttemptOutcome] = []
        self.usernames: list[str] = []

    def provide(self, username: str, session: LoginSession) -> None:
        self.usernames.append(username)
        for secret in self.secrets:
            outcome = session.try_secret(secret)
            self.outcomes.append(outcome)
            if outcome.succeeded:
                return


@pytest.fixture
def exchanger() -> FakeExchanger:
    return FakeExchanger()


@pytest.fixture
def make_provider() -> Callable[[list[str]], ScriptedProvider]:
    return ScriptedProvider


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner(isolated_config: Path):
    """Typer CLI test runner that never reads the real user config."""
    from typer.testing import CliRunner

    return CliRunner()
