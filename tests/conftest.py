from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any

import pytest
from rich.console import Console
from typer.testing import CliRunner

ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from hellomcp.capabilities.registry import CapabilityRegistry  # noqa: E402
from hellomcp.mcp.server import McpServer, create_server  # noqa: E402
from tests.mocks.sessions import RecordingSession  # noqa: E402


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def isolate_config(tmp_path: Path, monkeypatch: Any) -> Path:
    """Point config to a temp path so tests don't touch user state."""
    cfg_path = tmp_path / "config.toml"
    for key in list(os.environ):
        if key.startswith("HELLO_MCP_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.delenv("PORT", raising=False)
    monkeypatch.setenv("HELLO_MCP_CONFIG", str(cfg_path))
    return cfg_path


@pytest.fixture(autouse=True)
def capture_console(monkeypatch: Any) -> Console:
    """Use an in-memory Rich console during tests."""
    test_console = Console(record=True, width=200)
    import hellomcp.core.console as core_console
    import hellomcp.main as hello_main

    monkeypatch.setattr(core_console, "console", test_console)
    monkeypatch.setattr(hello_main, "console", test_console)
    return test_console


@pytest.fixture
def registry() -> CapabilityRegistry:
    return CapabilityRegistry()


@pytest.fixture
def server() -> McpServer:
    return create_server()


@pytest.fixture
def session() -> RecordingSession:
    return RecordingSession()
