"""Shared test fixtures for gorgias-cli.

Provides isolated config environments, a controllable clock for the cache,
a stub Gorgias API built on :class:`httpx.MockTransport`, and a Typer
CLI runner. These fixtures are discovered by pytest automatically.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

from gorgias_cli.models import GorgiasConfig
from gorgias_cli.output import reset_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time; CliRunner swaps those streams per invocation.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------


class FakeClock:
    """Manually advanced replacement for :func:`time.monotonic`."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# ---------------------------------------------------------------------------
# Gorgias stub
# ---------------------------------------------------------------------------


class StubAPI:
    """Records requests and answers them from a per-route table.

    Routes are keyed by ``"METHOD /path"`` (path relative to ``/api``).
    A value is either a ``(status, json_body)`` tuple or a callable taking
    the :class:`httpx.Request` and returning an :class:`httpx.Response`.
    """

    def __init__(self) -> None:
        self.routes: dict[str, Any] = {}
        self.requests: list[httpx.Request] = []

    def add(self, route: str, response: Any) -> None:
        self.routes[route] = response

    def calls(self, route: str) -> int:
        method, path = route.split(" ", 1)
        return sum(
            1
            for r in self.requests
            if r.method == method and r.url.path == f"/api{path}"
        )

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path.startswith("/api"):
            path = path[len("/api"):]
        route = self.routes.get(f"{request.method} {path}")
        if route is None:
            return httpx.Response(404, text='{"error": "not found"}')
        if callable(route):
            return route(request)
        status, body = route
        return httpx.Response(status, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def stub_api() -> StubAPI:
    return StubAPI()


@pytest.fixture
def gorgias_config() -> GorgiasConfig:
    return GorgiasConfig(domain="acme", email="agent@acme.com", api_key="s3cret")


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points the XDG directories at ``tmp_path``, clears every ``GORGIAS_*``
    variable and changes the working directory to ``tmp_path``.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("gorgias_cli.config._is_xdg_platform", lambda: True)

    for var in [
        "GORGIAS_CONFIG",
        "GORGIAS_DOMAIN",
        "GORGIAS_EMAIL",
        "GORGIAS_API_KEY",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def write_config(isolated_config: Path) -> Callable[..., Path]:
    """Return a helper that writes a config file into the isolated directory."""

    def _write(data: Any = None, name: str = "config.json") -> Path:
        if data is None:
            data = {
                "gorgias": {
                    "domain": "acme",
                    "email": "agent@acme.com",
                    "apiKey": "s3cret",
                }
            }
        path = isolated_config / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write


# ---------------------------------------------------------------------------
# CLI runner
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
