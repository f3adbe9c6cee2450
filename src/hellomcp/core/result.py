"""
Unified Result types and error hierarchy for hello-mcp.

This module provides:
1. Result[T, E] type for explicit error handling
2. Domain-specific exception hierarchy

Usage:
    from hellomcp.core.result import Ok, Err, Result, ValidationError

    def check(arguments: dict) -> Result[dict, ValidationError]:
        if "name" not in arguments:
            return Err(ValidationError("Missing required argument 'name'"))
        return Ok(arguments)

    match check(arguments):
        case Ok(value):
            ...
        case Err(error):
            ...
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")
E = TypeVar("E", bound=Exception)


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Represents a successful result containing a value."""

    value: T


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Represents a failed result containing an error."""

    error: E


# Type alias for Result
Result = Ok[T] | Err[E]


# ---------------------------------------------------------------------------
# Domain-specific error hierarchy
# ---------------------------------------------------------------------------


class HelloMcpError(Exception):
    """Base exception for all hello-mcp errors.

    Carries a human-readable message plus optional structured context
    that is rendered after the message when the error is printed.
    """

    def __init__(self, message: str, *, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} [{ctx_str}]"
        return self.message


class ConfigurationError(HelloMcpError):
    """Raised for configuration issues.

    Examples:
    - Config file parse errors
    - Config root that is not a mapping
    """


class RegistrationError(HelloMcpError):
    """Raised when a capability cannot be registered.

    Examples:
    - Object that is neither an Action nor a Resource
    - Handler that is not a coroutine function
    """


class DuplicateNameError(RegistrationError):
    """Raised when an action name or resource URI is already registered."""


class NotFoundError(HelloMcpError):
    """Raised when a lookup names an action or resource that is not registered."""


class ValidationError(HelloMcpError):
    """Raised for argument validation failures.

    Examples:
    - Missing required argument
    - Wrong primitive type
    - Value outside the permitted set
    """


__all__ = [
    # Result types
    "Ok",
    "Err",
    "Result",
    # Error hierarchy
    "HelloMcpError",
    "ConfigurationError",
    "RegistrationError",
    "DuplicateNameError",
    "NotFoundError",
    "ValidationError",
]
