"""Shared test fixtures for twcred.

Provides reusable fixtures for isolating configuration, resetting output
state, faking the token endpoint, and running CLI commands. These
fixtures are automatically discovered by pytest and available to all test
modules without explicit imports.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Optional

import pytest

from twcred.exceptions import NetworkError
from twcred.models import ClientCredentials
from twcred.oauth.transport import TransportResponse
from twcred.output import reset_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale.
    Resetting forces a fresh manager to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path
    so that tests never touch real user config, clears all TWCRED_*
    environment variables, and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("twcred.config._is_xdg_platform", lambda: True)

    for var in [
        "TWCRED_CLIENT_ID",
        "TWCRED_CLIENT_SECRET",
        "TWCRED_REDIRECT_URL",
        "TWCRED_TIMEOUT",
        "TWCRED_CONFIG",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Token endpoint fakes
# ---------------------------------------------------------------------------


class FakeTransport:
    """In-memory :class:`~twcred.oauth.transport.TokenTransport`.

    Replays queued responses in order and records every call. When
    *error* is set, every call raises it instead.
    """

    def __init__(
        self,
        responses: Optional[list[TransportResponse]] = None,
        error: Optional[Exception] = None,
    ) -> None:
        self.responses = list(responses or [])
        self.error = error
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    def __enter__(self) -> FakeTransport:
        return self

    def __exit__(self, *args: object) -> None:
        self.closed = True

    def post_form(
        self,
        url: str,
        data: dict[str, str],
        basic_auth: Optional[tuple[str, str]] = None,
    ) -> TransportResponse:
        self.calls.append({"url": url, "data": dict(data), "basic_auth": basic_auth})
        if self.error is not None:
            raise self.error
        if not self.responses:
            raise AssertionError("FakeTransport has no response queued")
        return self.responses.pop(0)


def json_response(body: Any, status_code: int = 200) -> TransportResponse:
    """Build a TransportResponse carrying *body* as JSON."""
    return TransportResponse(status_code=status_code, text=json.dumps(body))


@pytest.fixture
def make_transport() -> Callable[..., FakeTransport]:
    """Factory for :class:`FakeTransport` instances.

    Usage::

        transport = make_transport({"access_token": "AT"})
        transport = make_transport(({"error": "invalid_grant"}, 400))
        transport = make_transport(error=NetworkError("down"))
    """

    def _make(*bodies: Any, error: Optional[Exception] = None) -> FakeTransport:
        responses = []
        for body in bodies:
            if isinstance(body, TransportResponse):
                responses.append(body)
            elif isinstance(body, tuple):
                responses.append(json_response(body[0], status_code=body[1]))
            else:
                responses.append(json_response(body))
        return FakeTransport(responses, error=error)

    return _make


@pytest.fixture
def network_down() -> NetworkError:
    """A transport failure to inject into a FakeTransport."""
    return NetworkError("Request to https://api.twitter.com/2/oauth2/token timed out")


@pytest.fixture
def client_credentials() -> ClientCredentials:
    return ClientCredentials(client_id="client-123", client_secret="shh-secret")


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
