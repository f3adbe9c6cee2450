"""Transport-agnostic request dispatch.

Each request moves through Received -> Resolved -> Validated -> Invoked ->
Responded. Unknown names, malformed params and schema violations fault
before the capability runs; exceptions raised by a capability become an
InternalError fault here and never reach the transport.

The dispatcher never sees bytes. Transports decode with hellomcp.mcp.codec,
call dispatch()/notify(), and encode whatever comes back.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from hellomcp.capabilities.models import (
    Action,
    InvocationContext,
    Outcome,
    Resource,
    ResourceContents,
)
from hellomcp.capabilities.registry import CapabilityRegistry
from hellomcp.capabilities.validation import validate_arguments
from hellomcp.core.console import get_logger
from hellomcp.core.result import Err, NotFoundError, Ok, Result
from hellomcp.mcp.notifications import NotificationChannel
from hellomcp.mcp.protocol import (
    LATEST_PROTOCOL_VERSION,
    SUPPORTED_PROTOCOL_VERSIONS,
    LogLevel,
    Method,
    Notification,
    ProtocolFault,
    Request,
)
from hellomcp.mcp.session import Session

logger = get_logger("mcp.dispatch")

DispatchResult = Result[dict[str, Any], ProtocolFault]
_Handler = Callable[[Request, Session | None], Awaitable[dict[str, Any]]]


class Dispatcher:
    """Routes decoded requests to the capabilities in a registry."""

    def __init__(
        self,
        registry: CapabilityRegistry,
        *,
        server_name: str = "hello-mcp",
        server_version: str = "0.0.0",
        instructions: str | None = None,
    ) -> None:
        self._registry = registry
        self._server_name = server_name
        self._server_version = server_version
        self._instructions = instructions
        self._handlers: dict[str, _Handler] = {
            Method.INITIALIZE: self._initialize,
            Method.PING: self._ping,
            Method.LIST_TOOLS: self._list_tools,
            Method.CALL_TOOL: self._call_tool,
            Method.LIST_RESOURCES: self._list_resources,
            Method.READ_RESOURCE: self._read_resource,
            Method.SET_LOG_LEVEL: self._set_log_level,
        }

    @property
    def registry(self) -> CapabilityRegistry:
        return self._registry

    async def dispatch(self, request: Request, session: Session | None = None) -> DispatchResult:
        """Serve one request. Returns Ok(result) or Err(fault); never raises a fault."""
        handler = self._handlers.get(request.method)
        if handler is None:
            logger.debug("Unknown method %s (id=%s)", request.method, request.id)
            return Err(ProtocolFault.method_not_found(request.method))

        try:
            return Ok(await handler(request, session))
        except ProtocolFault as fault:
            logger.debug(
                "Request %s (%s) faulted: %s %s", request.id, request.method, fault.code, fault
            )
            return Err(fault)

    async def notify(self, notification: Notification, session: Session | None = None) -> None:
        """Handle a client notification. Notifications are never answered."""
        if notification.method == Method.INITIALIZED:
            if session is not None:
                session.initialized = True
            logger.debug("Client finished initialization")
        elif notification.method == Method.CANCELLED:
            # Requests run to completion once dispatched.
            logger.debug("Ignoring cancellation for %s", notification.params.get("requestId"))
        else:
            logger.debug("Ignoring notification %s", notification.method)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def _initialize(self, request: Request, session: Session | None) -> dict[str, Any]:
        requested = request.params.get("protocolVersion")
        if not isinstance(requested, str):
            raise ProtocolFault.invalid_params("initialize requires a protocolVersion string")

        version = requested if requested in SUPPORTED_PROTOCOL_VERSIONS else LATEST_PROTOCOL_VERSION
        client_info = request.params.get("clientInfo")
        if not isinstance(client_info, dict):
            client_info = {}
        if session is not None:
            session.protocol_version = version
            session.client_info = client_info

        logger.info(
            "Initialize from %s (protocol %s)", client_info.get("name", "unknown client"), version
        )

        result: dict[str, Any] = {
            "protocolVersion": version,
            "capabilities": {
                "tools": {"listChanged": False},
                "resources": {"subscribe": False, "listChanged": False},
                "logging": {},
            },
            "serverInfo": {"name": self._server_name, "version": self._server_version},
        }
        if self._instructions:
            result["instructions"] = self._instructions
        return result

    async def _ping(self, request: Request, session: Session | None) -> dict[str, Any]:
        return {}

    async def _set_log_level(self, request: Request, session: Session | None) -> dict[str, Any]:
        raw = request.params.get("level")
        try:
            level = LogLevel(raw)
        except ValueError:
            raise ProtocolFault.invalid_params(f"Unknown log level: {raw!r}") from None
        if session is not None:
            session.log_level = level
        return {}

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    async def _list_tools(self, request: Request, session: Session | None) -> dict[str, Any]:
        return {"tools": [action.describe() for action in self._registry.list_actions()]}

    async def _list_resources(self, request: Request, session: Session | None) -> dict[str, Any]:
        return {"resources": [res.describe() for res in self._registry.list_resources()]}

    # ------------------------------------------------------------------
    # Invocation
    # ------------------------------------------------------------------

    async def _call_tool(self, request: Request, session: Session | None) -> dict[str, Any]:
        name = request.params.get("name")
        if not isinstance(name, str) or not name:
            raise ProtocolFault.invalid_params("tools/call requires a tool name")

        try:
            action = self._registry.resolve_action(name)
        except NotFoundError as exc:
            raise ProtocolFault.not_found(exc.message) from exc

        match validate_arguments(action.input_shape, request.params.get("arguments")):
            case Err(error):
                raise ProtocolFault.invalid_params(
                    f"Invalid arguments for tool {name}: {error.message}"
                ) from error
            case Ok(arguments):
                outcome = await self._invoke_action(action, arguments, request, session)
                return outcome.to_wire()

    async def _invoke_action(
        self,
        action: Action,
        arguments: dict[str, Any],
        request: Request,
        session: Session | None,
    ) -> Outcome:
        context = self._context(request, session)
        try:
            outcome = await action.invoke(arguments, context)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.exception("Tool %s raised while handling request %s", action.name, request.id)
            raise ProtocolFault.internal_error(f"Error executing tool {action.name}") from exc

        if not isinstance(outcome, Outcome):
            logger.error(
                "Tool %s returned %s instead of an Outcome", action.name, type(outcome).__name__
            )
            raise ProtocolFault.internal_error(f"Error executing tool {action.name}")
        return outcome

    async def _read_resource(self, request: Request, session: Session | None) -> dict[str, Any]:
        uri = request.params.get("uri")
        if not isinstance(uri, str) or not uri:
            raise ProtocolFault.invalid_params("resources/read requires a uri")

        try:
            resource = self._registry.resolve_resource(uri)
        except NotFoundError as exc:
            raise ProtocolFault.resource_not_found(uri) from exc

        contents = await self._read(resource, request, session)
        return {"contents": [contents.to_wire()]}

    async def _read(
        self, resource: Resource, request: Request, session: Session | None
    ) -> ResourceContents:
        context = self._context(request, session)
        try:
            contents = await resource.read(context)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.exception(
                "Resource %s raised while handling request %s", resource.uri, request.id
            )
            raise ProtocolFault.internal_error(f"Error reading resource {resource.uri}") from exc

        if isinstance(contents, str):
            return ResourceContents(uri=resource.uri, text=contents)
        if not isinstance(contents, ResourceContents):
            logger.error(
                "Resource %s returned %s instead of contents", resource.uri, type(contents).__name__
            )
            raise ProtocolFault.internal_error(f"Error reading resource {resource.uri}")
        return contents

    @staticmethod
    def _context(request: Request, session: Session | None) -> InvocationContext:
        return InvocationContext(request_id=request.id, log=NotificationChannel(session))


__all__ = ["DispatchResult", "Dispatcher"]
