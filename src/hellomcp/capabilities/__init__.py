"""Capabilities package - capability records, registry and argument validation.

This package is transport-agnostic: it knows nothing about JSON-RPC,
sessions or byte streams.
"""

from __future__ import annotations

from hellomcp.capabilities.models import (
    Action,
    Capability,
    InvocationContext,
    Outcome,
    Resource,
    ResourceContents,
    TextContent,
)
from hellomcp.capabilities.registry import CapabilityRegistry
from hellomcp.capabilities.validation import FieldSpec, InputShape, validate_arguments

__all__ = [
    "Action",
    "Capability",
    "CapabilityRegistry",
    "FieldSpec",
    "InputShape",
    "InvocationContext",
    "Outcome",
    "Resource",
    "ResourceContents",
    "TextContent",
    "validate_arguments",
]
