"""MCP host: one registry, one dispatcher, one message entry point.

Creates and configures the server with:
    - Built-in tool and resource registration
    - Greeting data injected into the capabilities that need it
    - handle_message(), the single dispatch -> envelope path both
      transports share
"""

from __future__ import annotations

from collections.abc import Mapping

from hellomcp.capabilities.registry import CapabilityRegistry
from hellomcp.core.config import AppConfig
from hellomcp.core.console import get_logger
from hellomcp.data.greetings import GREETINGS
from hellomcp.mcp.codec import IncomingMessage, OutgoingMessage, response_message
from hellomcp.mcp.dispatch import Dispatcher
from hellomcp.mcp.protocol import Notification
from hellomcp.mcp.resources import register_resources
from hellomcp.mcp.session import Session
from hellomcp.mcp.tools import register_tools

logger = get_logger("mcp.server")


class McpServer:
    """Owns the capability registry and the dispatcher serving it."""

    def __init__(
        self,
        registry: CapabilityRegistry,
        *,
        name: str = "hello-mcp",
        version: str = "0.0.0",
        instructions: str | None = None,
    ) -> None:
        self.name = name
        self.version = version
        self.registry = registry
        self.dispatcher = Dispatcher(
            registry,
            server_name=name,
            server_version=version,
            instructions=instructions,
        )

    async def handle_message(
        self, message: IncomingMessage, session: Session | None
    ) -> OutgoingMessage | None:
        """Serve a decoded message. Returns the response envelope, or None for notifications."""
        if isinstance(message, Notification):
            await self.dispatcher.notify(message, session)
            return None
        outcome = await self.dispatcher.dispatch(message, session)
        return response_message(message.id, outcome)


def create_server(
    config: AppConfig | None = None,
    *,
    greetings: Mapping[str, str] | None = None,
) -> McpServer:
    """Build a server with every built-in capability registered."""
    config = config or AppConfig()
    greetings = GREETINGS if greetings is None else greetings

    registry = CapabilityRegistry()
    register_tools(registry, greetings=greetings)
    register_resources(registry, greetings=greetings)
    logger.info(
        "Registered %d tools and %d resources",
        len(registry.list_actions()),
        len(registry.list_resources()),
    )

    return McpServer(
        registry,
        name=config.server.name,
        version=config.server.version,
        instructions=config.server.instructions,
    )


__all__ = ["McpServer", "create_server"]
