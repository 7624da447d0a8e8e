"""Shared test fixtures for granite-bridge."""

from pathlib import Path
from tempfile import TemporaryDirectory

import pytest
from typer.testing import CliRunner

from granite_bridge.cli.main import app
from tests.fake_tool import client_for, legacy_tool, modern_tool


@pytest.fixture
def runner():
    """Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def cli_runner(runner, tmp_path):
    """Invoke the CLI app with an isolated (absent) config file."""

    def invoke(*args: str, **kwargs):
        config = ["--config", str(tmp_path / "missing-config.toml")]
        return runner.invoke(app, [*config, *args], **kwargs)

    return invoke


@pytest.fixture
def temp_dir():
    """Temporary directory for test files."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep the developer's own overrides out of the tests."""
    for var in (
        "GRANITECTL_PATH",
        "GRANITE_BRIDGE_FORMAT",
        "GRANITE_BRIDGE_TIMEOUT",
        "GRANITE_BRIDGE_SENTRY_DSN",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def database(tmp_path):
    """An existing (empty) database file; granitectl stubs never read it."""
    path = tmp_path / "demo.gdb"
    path.write_bytes(b"")
    return path


@pytest.fixture
def modern_granitectl(tmp_path):
    tool_dir = tmp_path / "modern"
    tool_dir.mkdir()
    return modern_tool(tool_dir)


@pytest.fixture
def legacy_granitectl(tmp_path):
    tool_dir = tmp_path / "legacy"
    tool_dir.mkdir()
    return legacy_tool(tool_dir)


@pytest.fixture
def modern_client(modern_granitectl):
    return client_for(modern_granitectl)


@pytest.fixture
def legacy_client(legacy_granitectl):
    return client_for(legacy_granitectl)
