"""MCP protocol layer: dispatch, notifications, sessions and the wire codec.

Modules:
    - protocol: Request/Notification models, ProtocolFault, LogLevel
    - session: Per-connection state owned by transports
    - notifications: Log delivery from capabilities to the peer
    - dispatch: Transport-agnostic request routing
    - codec: JSON-RPC bytes <-> messages
    - server: McpServer host and create_server()
"""

from __future__ import annotations

from hellomcp.mcp.dispatch import Dispatcher
from hellomcp.mcp.notifications import NotificationChannel
from hellomcp.mcp.protocol import LogLevel, Notification, ProtocolFault, Request
from hellomcp.mcp.session import Session

__all__ = [
    "Dispatcher",
    "LogLevel",
    "Notification",
    "NotificationChannel",
    "ProtocolFault",
    "Request",
    "Session",
]
