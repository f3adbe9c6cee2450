"""Tests for mcp/codec.py - JSON-RPC message decoding and encoding."""

from __future__ import annotations

import json

import pytest
from mcp.types import jsonrpc_message_adapter
from pydantic import ValidationError

from hellomcp.core.result import Err, Ok
from hellomcp.mcp.codec import (
    MalformedMessage,
    decode_message,
    encode_fault,
    encode,
    encode_notification,
    is_blank_line,
    malformed_from,
    response_message,
)
from hellomcp.mcp.protocol import INVALID_REQUEST, PARSE_ERROR, Notification, ProtocolFault, Request


class TestDecode:
    def test_request(self) -> None:
        message = decode_message(b'{"jsonrpc":"2.0","id":7,"method":"tools/list"}')

        assert message == Request(method="tools/list", id=7, params={})

    def test_string_id_and_params(self) -> None:
        message = decode_message(
            '{"jsonrpc":"2.0","id":"abc","method":"tools/call","params":{"name":"hello_world"}}'
        )

        assert isinstance(message, Request)
        assert message.id == "abc"
        assert message.params == {"name": "hello_world"}

    def test_notification_has_no_id(self) -> None:
        message = decode_message(b'{"jsonrpc":"2.0","method":"notifications/initialized"}')

        assert message == Notification(method="notifications/initialized")

    def test_client_response_is_ignored(self) -> None:
        assert decode_message(b'{"jsonrpc":"2.0","id":1,"result":{}}') is None

    def test_invalid_json(self) -> None:
        with pytest.raises(MalformedMessage) as exc_info:
            decode_message(b"{not json")

        assert exc_info.value.code == PARSE_ERROR
        assert exc_info.value.request_id is None

    @pytest.mark.parametrize(
        "raw",
        [
            b"[]",
            b'"tools/list"',
            b'{"id":1,"method":"tools/list"}',
            b'{"jsonrpc":"1.0","id":1,"method":"tools/list"}',
            b'{"jsonrpc":"2.0","id":1}',
            b'{"jsonrpc":"2.0","id":1,"method":5}',
            b'{"jsonrpc":"2.0","id":1,"method":"tools/call","params":[1]}',
            b'{"jsonrpc":"2.0","id":true,"method":"ping"}',
            b'{"jsonrpc":"2.0","id":null,"method":"ping"}',
        ],
    )
    def test_invalid_request(self, raw: bytes) -> None:
        with pytest.raises(MalformedMessage) as exc_info:
            decode_message(raw)

        assert exc_info.value.code == INVALID_REQUEST

    def test_readable_id_is_kept_on_invalid_request(self) -> None:
        with pytest.raises(MalformedMessage) as exc_info:
            decode_message(b'{"jsonrpc":"2.0","id":9,"method":"x","params":"bad"}')

        assert exc_info.value.request_id == 9

    @pytest.mark.parametrize("depth", [1_000, 200_000])
    def test_deep_nesting_is_a_parse_error(self, depth: int) -> None:
        with pytest.raises(MalformedMessage) as exc_info:
            decode_message(b"[" * depth + b"]" * depth)

        assert exc_info.value.code == PARSE_ERROR

    def test_deeply_nested_params_are_a_parse_error(self) -> None:
        params = b"{\"a\":" * 5_000 + b"1" + b"}" * 5_000
        raw = b'{"jsonrpc":"2.0","id":4,"method":"tools/call","params":' + params + b"}"

        with pytest.raises(MalformedMessage) as exc_info:
            decode_message(raw)

        assert exc_info.value.code == PARSE_ERROR


class TestLineErrors:
    """Classification of errors raised while the stdio reader parses a line."""

    @staticmethod
    def _error(line: str) -> ValidationError:
        with pytest.raises(ValidationError) as exc_info:
            jsonrpc_message_adapter.validate_json(line)
        return exc_info.value

    @pytest.mark.parametrize("line", ["\n", "   \n", "\t\r\n"])
    def test_blank_line(self, line: str) -> None:
        assert is_blank_line(self._error(line))

    def test_garbage_is_not_blank(self) -> None:
        exc = self._error("{oops\n")

        assert not is_blank_line(exc)
        assert malformed_from(exc).code == PARSE_ERROR

    def test_id_is_recovered_without_raw_bytes(self) -> None:
        fault = malformed_from(self._error('{"jsonrpc":"2.0","id":9,"method":"x","params":"bad"}'))

        assert fault.code == INVALID_REQUEST
        assert fault.request_id == 9


class TestEncode:
    def test_success_response(self) -> None:
        data = encode(response_message(3, Ok({"content": []})))

        assert json.loads(data) == {"jsonrpc": "2.0", "id": 3, "result": {"content": []}}

    def test_fault_response(self) -> None:
        fault = ProtocolFault.method_not_found("prompts/list")
        data = encode(response_message("x", Err(fault)))

        assert json.loads(data) == {
            "jsonrpc": "2.0",
            "id": "x",
            "error": {"code": -32601, "message": "Method not found: prompts/list"},
        }

    def test_fault_without_id(self) -> None:
        data = encode_fault(None, ProtocolFault.parse_error())

        assert json.loads(data)["id"] is None

    def test_output_is_single_line_utf8(self) -> None:
        data = encode_notification("notifications/message", {"level": "info", "data": "Olá\nmundo"})

        assert b"\n" not in data
        assert "Olá".encode() in data
