"""Duplex process-pipe transport.

Line framing comes from the MCP SDK: ``mcp.server.stdio.stdio_server()``
reads newline-delimited JSON from stdin, validates every line into a
JSON-RPC envelope and writes envelopes back one per line. This module binds
those two streams to an McpServer. One session spans the whole stream.
Every request runs in its own task, so a slow tool never blocks the next
line; the write stream hands whole messages to a single writer, so lines
never interleave.
"""

from __future__ import annotations

from typing import Any, Protocol

import anyio
from mcp.server.stdio import stdio_server
from mcp.shared.message import SessionMessage
from pydantic import ValidationError

from hellomcp.core.console import get_logger
from hellomcp.mcp.codec import (
    IncomingMessage,
    OutgoingMessage,
    fault_message,
    from_wire,
    is_blank_line,
    malformed_from,
    notification_message,
)
from hellomcp.mcp.protocol import ProtocolFault
from hellomcp.mcp.server import McpServer
from hellomcp.mcp.session import Session

logger = get_logger("transports.stdio")


class MessageSink(Protocol):
    async def send(self, item: SessionMessage) -> None: ...

    async def aclose(self) -> None: ...


class StdioSession(Session):
    """Session bound to a single output stream."""

    def __init__(self, write_stream: MessageSink) -> None:
        super().__init__()
        self._write_stream = write_stream

    async def send(self, message: OutgoingMessage) -> None:
        try:
            await self._write_stream.send(SessionMessage(message))
        except (anyio.ClosedResourceError, anyio.BrokenResourceError) as exc:
            logger.warning("Peer went away before a message was written: %r", exc)
            self.close()

    async def send_notification(self, method: str, params: dict[str, Any]) -> None:
        await self.send(notification_message(method, params))


class StdioTransport:
    """Binds an McpServer to a pair of SDK message streams."""

    def __init__(self, server: McpServer) -> None:
        self._server = server

    async def attach(self, read_stream: Any, write_stream: MessageSink) -> None:
        """Serve messages from ``read_stream`` until it ends, then wait for in-flight requests.

        Items on ``read_stream`` are ``SessionMessage`` envelopes or the
        exception raised while parsing a line.
        """
        session = StdioSession(write_stream)
        try:
            async with anyio.create_task_group() as tg:
                async for item in read_stream:
                    if isinstance(item, Exception):
                        await self._reject(item, session)
                        continue
                    message = from_wire(item.message)
                    if message is None:
                        # Client responses; nothing was ever asked of the peer.
                        continue
                    tg.start_soon(self._serve, message, session)
        finally:
            session.close()
            await write_stream.aclose()
            logger.debug("Stdio stream closed")

    async def _reject(self, exc: Exception, session: StdioSession) -> None:
        if isinstance(exc, ValidationError):
            if is_blank_line(exc):
                return
            fault: ProtocolFault = malformed_from(exc)
        else:
            fault = ProtocolFault.parse_error(str(exc))
        logger.warning("Rejected malformed stdio message: %s", fault.message)
        await session.send(fault_message(None, fault))

    async def _serve(self, message: IncomingMessage, session: StdioSession) -> None:
        try:
            response = await self._server.handle_message(message, session)
        except Exception:
            logger.exception("Request task failed for %s", message.method)
            return
        if response is None or session.closed:
            return
        await session.send(response)


async def serve_stdio(
    server: McpServer,
    stdin: anyio.AsyncFile[str] | None = None,
    stdout: anyio.AsyncFile[str] | None = None,
) -> None:
    """Serve ``server`` over the process's stdin/stdout, or the given text files."""
    async with stdio_server(stdin, stdout) as (read_stream, write_stream):
        logger.info("Serving %s over stdio", server.name)
        await StdioTransport(server).attach(read_stream, write_stream)


__all__ = ["StdioSession", "StdioTransport", "serve_stdio"]
