"""Shared test fixtures for arauth.

Provides reusable fixtures for isolated config environments, output state,
fake Google credentials and the CLI runner. These fixtures are
automatically discovered by pytest and available to all test modules
without explicit imports.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

import google.auth.exceptions
import pytest
from google.auth import credentials as ga_credentials

from arauth.auth import CredentialProvider
from arauth.models import PasswordCredentials
from arauth.output import OutputFormat, OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Fake credentials
# ---------------------------------------------------------------------------


class FakeCredentials(ga_credentials.Credentials):
    """Credentials whose refresh hands out a fixed token, or fails."""

    def __init__(self, token: str = "abc123", error: Optional[Exception] = None) -> None:
        super().__init__()
        self._next_token = token
        self._error = error
        self.refresh_calls = 0

    def refresh(self, request: object) -> None:
        self.refresh_calls += 1
        if self._error is not None:
            raise self._error
        self.token = self._next_token


class FakeProvider(CredentialProvider):
    """Provider returning a prepared credential object and counting lookups."""

    def __init__(self, credentials: ga_credentials.Credentials) -> None:
        self.credentials = credentials
        self.calls = 0

    def get_credential(self) -> ga_credentials.Credentials:
        self.calls += 1
        return self.credentials


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time, which go stale once CliRunner restores the streams.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Credential fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def make_provider() -> Callable[..., FakeProvider]:
    """Factory for providers: ``make_provider(token="t")`` or ``make_provider(error=exc)``."""

    def _make(token: str = "abc123", error: Optional[Exception] = None) -> FakeProvider:
        return FakeProvider(FakeCredentials(token=token, error=error))

    return _make


@pytest.fixture
def fake_provider(make_provider: Callable[..., FakeProvider]) -> FakeProvider:
    """A provider whose credentials refresh to the token ``abc123``."""
    return make_provider()


@pytest.fixture
def failing_provider(make_provider: Callable[..., FakeProvider]) -> FakeProvider:
    """A provider whose refresh fails with a transport error."""
    return make_provider(
        error=google.auth.exceptions.TransportError("connection refused")
    )


@pytest.fixture
def credential_pair() -> PasswordCredentials:
    """The pair produced from the token ``abc123``."""
    return PasswordCredentials.from_access_token("abc123")


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points the XDG directories at *tmp_path*, clears ``ARAUTH_*``
    environment variables and changes into *tmp_path*.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("arauth.config._is_xdg_platform", lambda: True)

    for var in ["ARAUTH_CREDENTIAL_SOURCE", "ARAUTH_GCLOUD"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager for the test."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
