"""Request/response network transport (stateless Streamable HTTP).

Each POST carries one JSON-RPC message and gets a fresh session; nothing
is shared between requests. By default the response is an event stream
that carries the request's log notifications followed by its result. In
JSON-response mode the reply is a single JSON body and log events have no
session to go to.

Routes:
    - OPTIONS <any>: 204
    - POST <config.path>: MCP endpoint
    - anything else: plain-text liveness message
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from typing import Any

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, Response, StreamingResponse

from hellomcp.core.config import AppConfig, HttpConfig
from hellomcp.core.console import get_logger
from hellomcp.mcp.codec import (
    IncomingMessage,
    MalformedMessage,
    decode_message,
    encode,
    encode_fault,
    encode_notification,
)
from hellomcp.mcp.protocol import Notification, ProtocolFault
from hellomcp.mcp.server import McpServer
from hellomcp.mcp.session import Session

logger = get_logger("transports.http")

JSON_MEDIA_TYPE = "application/json"
SSE_MEDIA_TYPE = "text/event-stream"

# JSON-RPC "server error" range; used for transport-level rejections.
TRANSPORT_ERROR = -32000


class HttpSession(Session):
    """Session for one HTTP exchange; messages queue up for the event stream."""

    def __init__(self) -> None:
        super().__init__()
        self._queue: asyncio.Queue[bytes | None] = asyncio.Queue()

    async def send_notification(self, method: str, params: dict[str, Any]) -> None:
        await self._queue.put(encode_notification(method, params))

    async def put_response(self, data: bytes | None) -> None:
        if data is not None:
            await self._queue.put(data)
        await self._queue.put(None)

    async def messages(self) -> AsyncIterator[bytes]:
        while True:
            item = await self._queue.get()
            if item is None:
                return
            yield item


class RequestResponseAdapter:
    """Single-shot exchanges: one request in, one response body out."""

    def __init__(self, server: McpServer) -> None:
        self.server = server

    async def on_request(self, message: IncomingMessage) -> bytes | None:
        """Serve one decoded message without a session. Returns None for notifications."""
        response = await self.server.handle_message(message, None)
        return None if response is None else encode(response)


def _accepts(accept_header: str, media_type: str) -> bool:
    for part in accept_header.split(","):
        candidate = part.split(";", 1)[0].strip().lower()
        if candidate in (media_type, "*/*"):
            return True
        if candidate.endswith("/*") and media_type.startswith(candidate[:-1]):
            return True
    return False


def _sse_event(data: bytes) -> bytes:
    return b"event: message\ndata: " + data + b"\n\n"


def _transport_error(status_code: int, message: str) -> Response:
    body = encode_fault(None, ProtocolFault(TRANSPORT_ERROR, message))
    return Response(content=body, status_code=status_code, media_type=JSON_MEDIA_TYPE)


def create_app(server: McpServer, config: HttpConfig | None = None) -> FastAPI:
    """Build the FastAPI application serving ``server``."""
    config = config or HttpConfig()
    adapter = RequestResponseAdapter(server)
    background: set[asyncio.Task[None]] = set()

    def _finished(task: asyncio.Task[None]) -> None:
        background.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("HTTP request task failed", exc_info=task.exception())

    app = FastAPI(
        title=server.name,
        version=server.version,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.mcp_server = server

    @app.options("/{path:path}")
    async def preflight(path: str) -> Response:
        return Response(status_code=204)

    @app.post(config.path)
    async def mcp_endpoint(request: Request) -> Response:
        content_type = request.headers.get("content-type", "")
        if content_type.split(";", 1)[0].strip().lower() != JSON_MEDIA_TYPE:
            return _transport_error(
                415, "Unsupported Media Type: Content-Type must be application/json"
            )

        accept = request.headers.get("accept", "")
        wanted = [JSON_MEDIA_TYPE] if config.json_response else [JSON_MEDIA_TYPE, SSE_MEDIA_TYPE]
        if not all(_accepts(accept, media_type) for media_type in wanted):
            return _transport_error(
                406, f"Not Acceptable: Client must accept {' and '.join(wanted)}"
            )

        body = await request.body()
        if len(body) > config.max_body_bytes:
            return _transport_error(413, "Payload Too Large")

        try:
            message = decode_message(body)
        except MalformedMessage as fault:
            logger.warning("Rejected malformed HTTP message: %s", fault.message)
            return Response(
                content=encode_fault(fault.request_id, fault),
                status_code=400,
                media_type=JSON_MEDIA_TYPE,
            )

        if message is None or isinstance(message, Notification):
            if message is not None:
                await adapter.on_request(message)
            return Response(status_code=202)

        if config.json_response:
            payload = await adapter.on_request(message)
            return Response(content=payload, media_type=JSON_MEDIA_TYPE)

        session = HttpSession()

        async def run() -> None:
            response: bytes | None = None
            try:
                reply = await server.handle_message(message, session)
                response = None if reply is None else encode(reply)
            finally:
                await session.put_response(response)

        task = asyncio.create_task(run())
        background.add(task)
        task.add_done_callback(_finished)

        async def stream() -> AsyncIterator[bytes]:
            try:
                async for data in session.messages():
                    yield _sse_event(data)
            finally:
                # A disconnected client stops receiving; the request itself runs on.
                session.close()

        return StreamingResponse(
            stream(),
            media_type=SSE_MEDIA_TYPE,
            headers={"Cache-Control": "no-cache"},
        )

    @app.api_route("/{path:path}", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
    async def liveness(path: str) -> PlainTextResponse:
        return PlainTextResponse(f"{server.name} is running\n")

    return app


def serve_http(server: McpServer, config: AppConfig) -> None:
    """Run the HTTP transport with uvicorn until interrupted."""
    http = config.http
    app = create_app(server, http)
    logger.info("MCP endpoint -> http://%s:%d%s", http.host, http.port, http.path)
    uvicorn.run(
        app,
        host=http.host,
        port=http.port,
        log_config=None,
        log_level=config.log_level.lower(),
    )


__all__ = [
    "HttpSession",
    "RequestResponseAdapter",
    "create_app",
    "serve_http",
]
