"""Protocol-level types shared by the dispatcher, codec and transports.

Defines:
    - Request / Notification: decoded incoming JSON-RPC messages
    - ProtocolFault: a JSON-RPC error raised by the host itself
    - LogLevel: the ordered MCP log severity scale
    - Method names and supported protocol versions
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from mcp.types import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
)
from mcp.types.version import HANDSHAKE_PROTOCOL_VERSIONS, LATEST_HANDSHAKE_VERSION
from pydantic import BaseModel, ConfigDict, Field

from hellomcp.core.result import HelloMcpError

# MCP's code for a resource URI the server does not know.
RESOURCE_NOT_FOUND = -32002

# Versions negotiable through the initialize handshake, oldest first.
SUPPORTED_PROTOCOL_VERSIONS: tuple[str, ...] = tuple(HANDSHAKE_PROTOCOL_VERSIONS)
LATEST_PROTOCOL_VERSION = LATEST_HANDSHAKE_VERSION

RequestId = str | int


class Method:
    """Method names understood by the dispatcher."""

    INITIALIZE = "initialize"
    PING = "ping"
    LIST_TOOLS = "tools/list"
    CALL_TOOL = "tools/call"
    LIST_RESOURCES = "resources/list"
    READ_RESOURCE = "resources/read"
    SET_LOG_LEVEL = "logging/setLevel"

    # Notifications
    INITIALIZED = "notifications/initialized"
    CANCELLED = "notifications/cancelled"
    LOG_MESSAGE = "notifications/message"


class Request(BaseModel):
    """A decoded request that expects a response."""

    model_config = ConfigDict(frozen=True)

    method: str
    id: RequestId
    params: dict[str, Any] = Field(default_factory=dict)


class Notification(BaseModel):
    """A decoded message with no id; never answered."""

    model_config = ConfigDict(frozen=True)

    method: str
    params: dict[str, Any] = Field(default_factory=dict)


class ProtocolFault(HelloMcpError):
    """A JSON-RPC error produced by the host.

    The caller's reasoning layer only learns that the call failed, so faults
    are reserved for malformed requests, unknown names and internal bugs.
    """

    def __init__(
        self,
        code: int,
        message: str,
        *,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, context=context)
        self.code = code

    @classmethod
    def parse_error(cls, message: str = "Parse error") -> ProtocolFault:
        return cls(PARSE_ERROR, message)

    @classmethod
    def invalid_request(cls, message: str = "Invalid request") -> ProtocolFault:
        return cls(INVALID_REQUEST, message)

    @classmethod
    def method_not_found(cls, method: str) -> ProtocolFault:
        return cls(METHOD_NOT_FOUND, f"Method not found: {method}", context={"method": method})

    @classmethod
    def not_found(cls, message: str) -> ProtocolFault:
        return cls(METHOD_NOT_FOUND, message)

    @classmethod
    def resource_not_found(cls, uri: str) -> ProtocolFault:
        return cls(RESOURCE_NOT_FOUND, f"Resource not found: {uri}", context={"uri": uri})

    @classmethod
    def invalid_params(cls, message: str) -> ProtocolFault:
        return cls(INVALID_PARAMS, message)

    @classmethod
    def internal_error(cls, message: str = "Internal error") -> ProtocolFault:
        return cls(INTERNAL_ERROR, message)

    def to_wire(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message}


class LogLevel(str, Enum):
    """MCP log severities, lowest first."""

    DEBUG = "debug"
    INFO = "info"
    NOTICE = "notice"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"
    ALERT = "alert"
    EMERGENCY = "emergency"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, LogLevel):
            return NotImplemented
        return self.severity < other.severity

    def __le__(self, other: object) -> bool:
        if not isinstance(other, LogLevel):
            return NotImplemented
        return self.severity <= other.severity

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, LogLevel):
            return NotImplemented
        return self.severity > other.severity

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, LogLevel):
            return NotImplemented
        return self.severity >= other.severity


_SEVERITY: dict[LogLevel, int] = {level: index for index, level in enumerate(LogLevel)}


class LogEvent(BaseModel):
    """A structured log message sent to the peer."""

    model_config = ConfigDict(frozen=True)

    level: LogLevel
    message: str
    logger: str | None = None

    def to_params(self) -> dict[str, Any]:
        params: dict[str, Any] = {"level": self.level.value, "data": self.message}
        if self.logger:
            params["logger"] = self.logger
        return params


__all__ = [
    "INTERNAL_ERROR",
    "INVALID_PARAMS",
    "INVALID_REQUEST",
    "LATEST_PROTOCOL_VERSION",
    "METHOD_NOT_FOUND",
    "PARSE_ERROR",
    "RESOURCE_NOT_FOUND",
    "SUPPORTED_PROTOCOL_VERSIONS",
    "LogEvent",
    "LogLevel",
    "Method",
    "Notification",
    "ProtocolFault",
    "Request",
    "RequestId",
]
