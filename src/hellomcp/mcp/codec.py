"""JSON-RPC 2.0 framing-independent codec.

Envelopes are parsed and rendered with the MCP SDK's wire models
(``mcp.types.jsonrpc_message_adapter``, ``JSONRPCResponse``, ``JSONRPCError``,
``JSONRPCNotification``); this module maps them to and from the dispatcher's
Request/Notification/ProtocolFault. Framing (lines, HTTP bodies, SSE events)
belongs to the transports.
"""

from __future__ import annotations

from typing import Any

from mcp.types import (
    INVALID_REQUEST,
    JSONRPC_VERSION,
    PARSE_ERROR,
    ErrorData,
    JSONRPCError,
    JSONRPCMessage,
    JSONRPCNotification,
    JSONRPCRequest,
    JSONRPCResponse,
    jsonrpc_message_adapter,
)
from pydantic import ValidationError
from pydantic_core import from_json

from hellomcp.core.result import Err, Ok
from hellomcp.mcp.dispatch import DispatchResult
from hellomcp.mcp.protocol import Notification, ProtocolFault, Request, RequestId

IncomingMessage = Request | Notification
OutgoingMessage = JSONRPCResponse | JSONRPCError | JSONRPCNotification


class MalformedMessage(ProtocolFault):
    """A message that could not be decoded; carries the id when one was readable."""

    def __init__(self, code: int, message: str, *, request_id: RequestId | None = None) -> None:
        super().__init__(code, message)
        self.request_id = request_id


def _peek(raw: bytes | str) -> Any:
    try:
        return from_json(raw)
    except ValueError:
        return None


def _readable_id(payload: Any) -> RequestId | None:
    if not isinstance(payload, dict):
        return None
    value = payload.get("id")
    if isinstance(value, (str, int)) and not isinstance(value, bool):
        return value
    return None


def malformed_from(exc: ValidationError, raw: bytes | str | None = None) -> MalformedMessage:
    """Classify an envelope validation failure as PARSE_ERROR or INVALID_REQUEST."""
    errors = exc.errors(include_url=False)
    if any(error["type"] == "json_invalid" for error in errors):
        detail = errors[0]["msg"] if errors else "invalid JSON"
        return MalformedMessage(PARSE_ERROR, f"Parse error: {detail}")
    if raw is not None:
        payload = _peek(raw)
    else:
        # Union members that miss a field report the whole object as input.
        payload = next((e["input"] for e in errors if isinstance(e.get("input"), dict)), None)
    request_id = _readable_id(payload)
    return MalformedMessage(
        INVALID_REQUEST, "Invalid request: not a JSON-RPC 2.0 message", request_id=request_id
    )


def is_blank_line(exc: ValidationError) -> bool:
    """True when the rejected input was only whitespace."""
    for error in exc.errors(include_url=False):
        value = error.get("input")
        if isinstance(value, (str, bytes)) and not value.strip():
            return True
    return False


def from_wire(message: JSONRPCMessage) -> IncomingMessage | None:
    """Map an SDK envelope to a dispatcher message. Client responses map to None."""
    if isinstance(message, JSONRPCRequest):
        return Request(method=message.method, id=message.id, params=message.params or {})
    if isinstance(message, JSONRPCNotification):
        return Notification(method=message.method, params=message.params or {})
    return None


def decode_message(raw: bytes | str) -> IncomingMessage | None:
    """Decode one JSON-RPC message.

    Returns None for client responses, which this server never solicits.

    Raises:
        MalformedMessage: PARSE_ERROR for invalid JSON, INVALID_REQUEST for
            anything that is JSON but not a usable JSON-RPC message.
    """
    try:
        message = jsonrpc_message_adapter.validate_json(raw)
    except ValidationError as exc:
        raise malformed_from(exc, raw) from exc

    if isinstance(message, JSONRPCNotification):
        payload = _peek(raw)
        if isinstance(payload, dict) and "id" in payload:
            raise MalformedMessage(INVALID_REQUEST, "Request id must be a string or integer")
    return from_wire(message)


# ---------------------------------------------------------------------------
# Outgoing envelopes
# ---------------------------------------------------------------------------


def result_message(request_id: RequestId, result: dict[str, Any]) -> JSONRPCResponse:
    return JSONRPCResponse(jsonrpc=JSONRPC_VERSION, id=request_id, result=result)


def fault_message(request_id: RequestId | None, fault: ProtocolFault) -> JSONRPCError:
    return JSONRPCError(
        jsonrpc=JSONRPC_VERSION,
        id=request_id,
        error=ErrorData(code=fault.code, message=fault.message),
    )


def response_message(request_id: RequestId, outcome: DispatchResult) -> OutgoingMessage:
    match outcome:
        case Ok(result):
            return result_message(request_id, result)
        case Err(fault):
            return fault_message(request_id, fault)
    raise TypeError(f"Unexpected dispatch result {outcome!r}")


def notification_message(method: str, params: dict[str, Any]) -> JSONRPCNotification:
    return JSONRPCNotification(jsonrpc=JSONRPC_VERSION, method=method, params=params)


def encode(message: OutgoingMessage) -> bytes:
    """Render an envelope as compact UTF-8 JSON. A null error id is kept."""
    return message.model_dump_json(by_alias=True, exclude_unset=True).encode("utf-8")


def encode_fault(request_id: RequestId | None, fault: ProtocolFault) -> bytes:
    return encode(fault_message(request_id, fault))


def encode_notification(method: str, params: dict[str, Any]) -> bytes:
    return encode(notification_message(method, params))


__all__ = [
    "IncomingMessage",
    "MalformedMessage",
    "OutgoingMessage",
    "decode_message",
    "encode",
    "encode_fault",
    "encode_notification",
    "fault_message",
    "from_wire",
    "is_blank_line",
    "malformed_from",
    "notification_message",
    "response_message",
    "result_message",
]
