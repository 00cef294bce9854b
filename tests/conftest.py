"""Shared test fixtures for bnetexport.

Provides a fake Battle.net provider served through
:class:`httpx.MockTransport`, isolated config environments, output state
management, and a CLI runner. These fixtures are discovered by pytest and
available to all test modules without explicit imports.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Optional

import httpx
import pytest

from bnetexport.models import AUTHENTICATOR_BASE_URL, SSO_URL
from bnetexport.output import OutputFormat, OutputManager, reset_output, set_output

RESTORE_URL = f"{AUTHENTICATOR_BASE_URL}/device"

# "Hello!" followed by 0xdeadbeef; Base32 JBSWY3DPEHPK3PXP
DEVICE_SECRET_HEX = "48656c6c6f21deadbeef"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams the cached
    references go stale, so a fresh manager is created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Fake provider
# ---------------------------------------------------------------------------


Handler = Callable[[httpx.Request], httpx.Response]


def json_response(data: Any, status_code: int = 200) -> httpx.Response:
    """Build a JSON response with an explicit content type."""
    return httpx.Response(
        status_code,
        json=data,
        headers={"content-type": "application/json; charset=utf-8"},
    )


class FakeProvider:
    """Routes requests to the SSO and restore handlers and records them.

    Defaults answer like a healthy provider: a bearer token from SSO and
    :data:`DEVICE_SECRET_HEX` from the restore endpoint.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.sso: Handler = lambda request: json_response(
            {"access_token": "bearer-123", "token_type": "bearer"}
        )
        self.restore: Handler = lambda request: json_response(
            {"deviceSecret": DEVICE_SECRET_HEX, "serial": "US-1234-5678-9012"}
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)
        if url == SSO_URL:
            return self.sso(request)
        if url == RESTORE_URL:
            return self.restore(request)
        return httpx.Response(404, text="no route")

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def request_to(self, url: str) -> Optional[httpx.Request]:
        for request in self.requests:
            if str(request.url) == url:
                return request
        return None


@pytest.fixture
def provider() -> FakeProvider:
    """A healthy fake Battle.net provider."""
    return FakeProvider()


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points the XDG directories at subdirectories of tmp_path, forces the
    XDG code path, clears all BNET_EXPORT_* environment variables, and
    changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("bnetexport.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in [
        "BNET_EXPORT_TIMEOUT",
        "BNET_EXPORT_SSO_URL",
        "BNET_EXPORT_AUTHENTICATOR_URL",
        "BNET_EXPORT_SESSION_TOKEN",
        "BNET_EXPORT_SERIAL",
        "BNET_EXPORT_RESTORE_CODE",
        "NO_COLOR",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
