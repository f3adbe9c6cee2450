"""Per-connection session state.

A Session is owned by a transport adapter and lives as long as the
connection it represents: one HTTP exchange, or the whole stdio stream.
The dispatcher reads and updates its protocol state; the notification
channel delivers log events through send_notification().
"""

from __future__ import annotations

import abc
from typing import Any

from hellomcp.mcp.protocol import LogLevel


class Session(abc.ABC):
    """Base class for transport sessions."""

    def __init__(self) -> None:
        self.log_level: LogLevel = LogLevel.DEBUG
        self.client_info: dict[str, Any] = {}
        self.protocol_version: str | None = None
        self.initialized = False
        self.closed = False

    @abc.abstractmethod
    async def send_notification(self, method: str, params: dict[str, Any]) -> None:
        """Deliver a server-to-client notification on this connection."""

    def close(self) -> None:
        self.closed = True


__all__ = ["Session"]
