"""Property-based tests for argument validation and decoding using Hypothesis.

These tests verify core invariants:
- validate_arguments never raises (returns Result)
- Values of the declared type are always accepted
- Values of any other JSON type are always rejected
- decode_message either returns a message or raises MalformedMessage,
  however deeply the input nests
"""

from __future__ import annotations

from typing import Any

from hypothesis import given, settings
from hypothesis import strategies as st

from hellomcp.capabilities.validation import FieldSpec, InputShape, validate_arguments
from hellomcp.core.result import Err, Ok
from hellomcp.mcp.codec import MalformedMessage, decode_message
from hellomcp.mcp.protocol import Notification, Request

# === Strategies ===

field_name_strategy = st.text(
    alphabet=st.characters(whitelist_categories=("Ll",), whitelist_characters="_"),
    min_size=1,
    max_size=12,
)

# Integers that survive a round trip through float.
safe_ints = st.integers(min_value=-(2**53), max_value=2**53)

json_values = st.recursive(
    st.none() | st.booleans() | safe_ints | st.floats(allow_nan=False) | st.text(),
    lambda children: st.lists(children, max_size=3)
    | st.dictionaries(st.text(max_size=5), children, max_size=3),
    max_leaves=10,
)

# Arrays and params nested far past any sane depth.
nested_json = st.integers(min_value=1, max_value=50_000).map(
    lambda depth: b"[" * depth + b"]" * depth
) | st.integers(min_value=1, max_value=20_000).map(
    lambda depth: b'{"jsonrpc":"2.0","id":1,"method":"ping","params":'
    + b'{"a":' * depth
    + b"null"
    + b"}" * (depth + 1)
)

typed_values: dict[str, st.SearchStrategy[Any]] = {
    "string": st.text(),
    "integer": safe_ints,
    "number": st.floats(allow_nan=False, allow_infinity=False) | safe_ints,
    "boolean": st.booleans(),
}

_MATCHES = {
    "string": lambda v: isinstance(v, str),
    "integer": lambda v: isinstance(v, int) and not isinstance(v, bool),
    "number": lambda v: isinstance(v, (int, float)) and not isinstance(v, bool),
    "boolean": lambda v: isinstance(v, bool),
}


# === Property Tests ===


@given(
    shape=st.dictionaries(
        field_name_strategy,
        st.sampled_from(sorted(typed_values)).map(lambda t: FieldSpec(type=t)),
        max_size=4,
    ),
    arguments=st.dictionaries(st.text(max_size=8), json_values, max_size=4),
)
@settings(max_examples=100)
def test_validate_arguments_never_raises(
    shape: dict[str, FieldSpec], arguments: dict[str, Any]
) -> None:
    result = validate_arguments(InputShape.from_fields(shape), arguments)

    assert isinstance(result, (Ok, Err))


@given(data=st.data(), field_type=st.sampled_from(sorted(typed_values)))
def test_declared_type_is_accepted(data: st.DataObject, field_type: str) -> None:
    value = data.draw(typed_values[field_type])
    shape = InputShape.from_fields({"value": FieldSpec(type=field_type)})

    result = validate_arguments(shape, {"value": value})

    assert isinstance(result, Ok)
    assert result.value["value"] == value


@given(value=json_values, field_type=st.sampled_from(sorted(typed_values)))
def test_other_types_are_rejected(value: Any, field_type: str) -> None:
    shape = InputShape.from_fields({"value": FieldSpec(type=field_type)})

    result = validate_arguments(shape, {"value": value})

    if _MATCHES[field_type](value):
        assert isinstance(result, Ok)
    else:
        assert isinstance(result, Err)
        assert "'value'" in result.error.message


@given(raw=st.binary(max_size=200) | st.text(max_size=200) | nested_json)
@settings(max_examples=200)
def test_decode_never_raises_unexpectedly(raw: bytes | str) -> None:
    try:
        message = decode_message(raw)
    except MalformedMessage:
        return

    assert message is None or isinstance(message, (Request, Notification))
