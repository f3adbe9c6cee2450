"""Capability records and the values they produce.

Two capability variants share the registry:
    - Action: a named, invokable tool taking validated arguments
    - Resource: a URI-addressed, read-only data source

Actions produce an Outcome (success or recoverable failure); resources
produce ResourceContents. Both are immutable once constructed.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from hellomcp.capabilities.validation import FieldSpec, InputShape, input_schema

if TYPE_CHECKING:
    from hellomcp.mcp.notifications import NotificationChannel


# ---------------------------------------------------------------------------
# Content and outcomes
# ---------------------------------------------------------------------------


class TextContent(BaseModel):
    """A UTF-8 text content item."""

    model_config = ConfigDict(frozen=True)

    type: Literal["text"] = "text"
    text: str


def _as_content(item: TextContent | str) -> TextContent:
    return item if isinstance(item, TextContent) else TextContent(text=item)


class Outcome(BaseModel):
    """Result of invoking an action.

    ``is_error`` marks a recoverable failure: a normal response the calling
    model can read and react to, as opposed to a protocol fault.
    """

    model_config = ConfigDict(frozen=True)

    content: tuple[TextContent, ...] = ()
    is_error: bool = False

    @classmethod
    def success(cls, *items: TextContent | str) -> Outcome:
        return cls(content=tuple(_as_content(item) for item in items))

    @classmethod
    def failure(cls, *items: TextContent | str) -> Outcome:
        return cls(content=tuple(_as_content(item) for item in items), is_error=True)

    @classmethod
    def text(cls, text: str) -> Outcome:
        return cls.success(text)

    @classmethod
    def error(cls, message: str) -> Outcome:
        return cls.failure(message)

    def to_wire(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"content": [item.model_dump() for item in self.content]}
        if self.is_error:
            payload["isError"] = True
        return payload


class ResourceContents(BaseModel):
    """Text contents read from a resource."""

    model_config = ConfigDict(frozen=True)

    uri: str
    text: str

    def to_wire(self) -> dict[str, Any]:
        return {"uri": self.uri, "text": self.text}


# ---------------------------------------------------------------------------
# Invocation context
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class InvocationContext:
    """What a capability may touch while it runs.

    Attributes:
        request_id: Correlation token of the request being served
        log: Notification channel bound to the requesting session
    """

    request_id: str | int | None
    log: NotificationChannel


ActionHandler = Callable[[dict[str, Any], InvocationContext], Awaitable[Outcome]]
ResourceReader = Callable[[InvocationContext], Awaitable["ResourceContents | str"]]


def _require_coroutine_function(fn: Any) -> Any:
    if not callable(fn):
        raise ValueError("handler must be callable")
    call = getattr(fn, "__call__", None)
    if not (inspect.iscoroutinefunction(fn) or inspect.iscoroutinefunction(call)):
        raise ValueError("handler must be an async function")
    return fn


# ---------------------------------------------------------------------------
# Capabilities
# ---------------------------------------------------------------------------


class Action(BaseModel):
    """A named tool. ``invoke(arguments, context)`` returns an Outcome."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: Literal["tool"] = "tool"
    name: str = Field(min_length=1)
    description: str = ""
    input_shape: InputShape | None = None
    invoke: Callable[..., Awaitable[Any]]

    @field_validator("input_shape", mode="before")
    @classmethod
    def _compile_shape(cls, v: Any) -> Any:
        if isinstance(v, Mapping):
            return InputShape.from_fields(v)
        return v

    @field_validator("invoke")
    @classmethod
    def _check_invoke(cls, v: Any) -> Any:
        return _require_coroutine_function(v)

    def describe(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": input_schema(self.input_shape),
        }


class Resource(BaseModel):
    """A read-only data source addressed by ``uri``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["resource"] = "resource"
    name: str = Field(min_length=1)
    uri: str = Field(min_length=1)
    description: str = ""
    media_type: str = "text/plain"
    read: Callable[..., Awaitable[Any]]

    @field_validator("read")
    @classmethod
    def _check_read(cls, v: Any) -> Any:
        return _require_coroutine_function(v)

    def describe(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "uri": self.uri,
            "description": self.description,
            "mimeType": self.media_type,
        }


Capability = Action | Resource

__all__ = [
    "Action",
    "ActionHandler",
    "Capability",
    "FieldSpec",
    "InvocationContext",
    "Outcome",
    "Resource",
    "ResourceContents",
    "ResourceReader",
    "TextContent",
]
