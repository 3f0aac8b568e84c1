"""Shared fixtures for Chouten CLI tests."""

from pathlib import Path
from typing import Callable

import httpx
import pytest

from chouten_cli.config import ChoutenConfig
from chouten_cli.js_runtime.session import HostSession, bootstrap


def plugin_source(body: str) -> str:
    """Wrap class members in the bundle shape plugins are shipped in."""
    return "var source = { default: class Plugin {\n" + body + "\n} };\n"


def ok_handler(request: httpx.Request) -> httpx.Response:
    """Echo the request line back as a small text response."""
    return httpx.Response(
        200,
        headers=[("content-type", "text/plain")],
        content=f"{request.method} {request.url}".encode(),
    )


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point config loading at an empty directory and clear CHOUTEN_* overrides."""
    import os

    for key in list(os.environ):
        if key.startswith("CHOUTEN_"):
            monkeypatch.delenv(key)

    config_dir = tmp_path / "config"
    monkeypatch.setenv("CHOUTEN_CONFIG_DIR", str(config_dir))
    return config_dir


@pytest.fixture
def write_plugin(tmp_path: Path) -> Callable[[str], Path]:
    """Write plugin class members to a bundle file and return its path."""
    def write(body: str, name: str = "plugin.js") -> Path:
        path = tmp_path / name
        path.write_text(plugin_source(body), encoding="utf-8")
        return path

    return write


@pytest.fixture
def mock_client() -> Callable[..., httpx.Client]:
    """Build an httpx client backed by a MockTransport handler."""
    clients: list[httpx.Client] = []

    def build(handler: Callable[[httpx.Request], httpx.Response] = ok_handler) -> httpx.Client:
        client = httpx.Client(transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield build

    for client in clients:
        client.close()


@pytest.fixture
def session(mock_client) -> HostSession:
    """A bootstrapped session whose requests go to ok_handler."""
    host = bootstrap(ChoutenConfig(), client=mock_client())
    yield host
    host.close()


@pytest.fixture
def make_source() -> Callable[[str], str]:
    """Return the plugin_source helper for in-memory plugins."""
    return plugin_source
