"""MCP tools package.

This package contains the built-in tool implementations:
    - greetings: hello_world, hello_name, greet_name, list_languages

register_tools() adds them to a registry in a fixed order; that order is
the discovery order clients see.
"""

from __future__ import annotations

from collections.abc import Mapping

from hellomcp.capabilities.registry import CapabilityRegistry
from hellomcp.capabilities.validation import string
from hellomcp.mcp.tools.greetings import (
    hello_name,
    hello_world,
    make_greet_name,
    make_list_languages,
)


def register_tools(registry: CapabilityRegistry, *, greetings: Mapping[str, str]) -> None:
    """Register every built-in tool with ``registry``."""
    registry.register_action(
        "hello_world",
        hello_world,
        description="Returns a Hello, World! greeting",
    )
    registry.register_action(
        "hello_name",
        hello_name,
        description="Returns a personalized Hello greeting",
        input_shape={"name": string("The name to greet")},
    )
    registry.register_action(
        "greet_name",
        make_greet_name(greetings),
        description=(
            "Returns a personalized greeting in the specified language. "
            "Check the languages resource for supported languages."
        ),
        input_shape={
            "name": string("The name to greet"),
            "language": string("The language to greet in (e.g. 'french', 'japanese')"),
        },
    )
    registry.register_action(
        "list_languages",
        make_list_languages(greetings),
        description="Returns the list of supported greeting languages",
    )


__all__ = ["register_tools"]
