"""Shared test fixtures for entauth.

Provides isolated XDG directories, settings factories, output state
management, and a Typer CLI runner.  These fixtures are automatically
discovered by pytest and available to all test modules.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from entauth.models import AuthSettings
from entauth.output import OutputFormat, OutputManager, reset_output, set_output


_ENV_VARS = [
    "ENTAUTH_AUTH_TOKEN",
    "ENTAUTH_SCHEDULED",
    "ENTAUTH_LOGIN_TIMEOUT",
    "ENTAUTH_CALLBACK_PORT",
    "ENTAUTH_DOMAIN",
]


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_DATA_HOME at tmp_path so that tests never touch a real
    token store, and clears all ENTAUTH_* environment variables.

    Returns:
        The tmp_path root directory.
    """
    monkeypatch.setattr("entauth.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def settings() -> AuthSettings:
    """Default settings: no override token, not scheduled, short timeout."""
    return AuthSettings(login_timeout=5.0)


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager for tests that don't care about output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True, no_color=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def verbose_output() -> OutputManager:
    """Install a verbose, colourless OutputManager so debug lines reach stderr."""
    output = OutputManager(format=OutputFormat.PLAIN, verbose=True, no_color=True)
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
