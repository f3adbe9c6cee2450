"""In-process tests for the line-delimited stdio transport."""

from __future__ import annotations

import asyncio
import io
import json
from typing import Any

import anyio
import pytest

from hellomcp.capabilities.models import InvocationContext, Outcome
from hellomcp.capabilities.registry import CapabilityRegistry
from hellomcp.mcp.server import McpServer
from hellomcp.transports.stdio import serve_stdio


def _request(request_id: int, method: str, **params: Any) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "method": method, "params": params}


async def _run(server: McpServer, *payloads: dict[str, Any] | str) -> list[dict[str, Any]]:
    """Feed one line per payload, serve until EOF and return the decoded output lines."""
    lines = [p if isinstance(p, str) else json.dumps(p) for p in payloads]
    stdin = io.StringIO("".join(f"{line}\n" for line in lines))
    stdout = io.StringIO()

    await asyncio.wait_for(
        serve_stdio(server, anyio.wrap_file(stdin), anyio.wrap_file(stdout)), timeout=10
    )
    return [json.loads(line) for line in stdout.getvalue().splitlines()]


@pytest.mark.asyncio
async def test_one_response_per_request(server: McpServer) -> None:
    messages = await _run(
        server,
        _request(1, "tools/call", name="hello_world", arguments={}),
        {"jsonrpc": "2.0", "method": "notifications/initialized"},
        _request(2, "tools/list"),
    )

    by_id = {message["id"]: message for message in messages}
    assert set(by_id) == {1, 2}
    assert by_id[1]["result"]["content"][0]["text"] == "Hello, World!"
    assert len(by_id[2]["result"]["tools"]) == 4


@pytest.mark.asyncio
async def test_log_events_precede_response(server: McpServer) -> None:
    arguments = {"name": "Chuck", "language": "spanish"}
    messages = await _run(server, _request(5, "tools/call", name="greet_name", arguments=arguments))

    assert [m.get("method", "response") for m in messages] == [
        "notifications/message",
        "notifications/message",
        "response",
    ]
    assert messages[0]["params"] == {
        "level": "info",
        "data": 'greet_name called with name="Chuck", language="spanish"',
    }
    assert messages[-1]["result"]["content"][0]["text"] == "Hola, Chuck!"


@pytest.mark.asyncio
async def test_malformed_line_gets_parse_error_and_stream_continues(server: McpServer) -> None:
    messages = await _run(server, "{oops", _request(2, "ping"))

    assert messages[0] == {
        "jsonrpc": "2.0",
        "id": None,
        "error": {"code": -32700, "message": messages[0]["error"]["message"]},
    }
    assert messages[1] == {"jsonrpc": "2.0", "id": 2, "result": {}}


@pytest.mark.asyncio
async def test_deeply_nested_line_is_answered(server: McpServer) -> None:
    messages = await _run(server, "[" * 200_000 + "]" * 200_000, _request(2, "ping"))

    assert len(messages) == 2
    assert messages[0]["error"]["code"] == -32700
    assert messages[0]["id"] is None
    assert messages[1] == {"jsonrpc": "2.0", "id": 2, "result": {}}


@pytest.mark.asyncio
async def test_invalid_request_keeps_its_id(server: McpServer) -> None:
    messages = await _run(server, '{"jsonrpc":"2.0","id":3,"method":"ping","params":"bad"}')

    assert messages[0]["id"] == 3
    assert messages[0]["error"]["code"] == -32600


@pytest.mark.asyncio
async def test_long_line_is_served_whole(server: McpServer) -> None:
    padding = "x" * (6 * 1024 * 1024)
    messages = await _run(server, _request(1, "ping", padding=padding), _request(2, "ping"))

    assert messages == [
        {"jsonrpc": "2.0", "id": 1, "result": {}},
        {"jsonrpc": "2.0", "id": 2, "result": {}},
    ]


@pytest.mark.asyncio
async def test_blank_lines_are_skipped(server: McpServer) -> None:
    messages = await _run(server, "   ", "", _request(1, "ping"))

    assert messages == [{"jsonrpc": "2.0", "id": 1, "result": {}}]


@pytest.mark.asyncio
async def test_client_responses_are_ignored(server: McpServer) -> None:
    messages = await _run(server, {"jsonrpc": "2.0", "id": 99, "result": {}}, _request(1, "ping"))

    assert messages == [{"jsonrpc": "2.0", "id": 1, "result": {}}]


@pytest.mark.asyncio
async def test_slow_request_does_not_block_the_next() -> None:
    release = asyncio.Event()

    async def slow(arguments: dict[str, Any], context: InvocationContext) -> Outcome:
        await release.wait()
        return Outcome.text("slow")

    async def fast(arguments: dict[str, Any], context: InvocationContext) -> Outcome:
        release.set()
        return Outcome.text("fast")

    registry = CapabilityRegistry()
    registry.register_action("slow", slow)
    registry.register_action("fast", fast)

    messages = await _run(
        McpServer(registry),
        _request(1, "tools/call", name="slow"),
        _request(2, "tools/call", name="fast"),
    )

    assert [m["id"] for m in messages] == [2, 1]
    assert messages[1]["result"]["content"][0]["text"] == "slow"


@pytest.mark.asyncio
async def test_inflight_requests_finish_after_eof() -> None:
    async def sleepy(arguments: dict[str, Any], context: InvocationContext) -> Outcome:
        await asyncio.sleep(0.05)
        return Outcome.text("done")

    registry = CapabilityRegistry()
    registry.register_action("sleepy", sleepy)

    messages = await _run(McpServer(registry), _request(1, "tools/call", name="sleepy"))

    assert messages[0]["result"]["content"][0]["text"] == "done"
