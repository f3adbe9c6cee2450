"""Greeting tools.

Provides tools for greeting people:
    - hello_world: Fixed "Hello, World!" greeting
    - hello_name: Personalized English greeting
    - greet_name: Personalized greeting in a supported language
    - list_languages: Supported greeting languages

greet_name and list_languages are built from a greetings mapping injected
at registration, so they never import their data source directly.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from hellomcp.capabilities.models import ActionHandler, InvocationContext, Outcome


async def hello_world(arguments: dict[str, Any], context: InvocationContext) -> Outcome:
    """Return a Hello, World! greeting."""
    return Outcome.text("Hello, World!")


async def hello_name(arguments: dict[str, Any], context: InvocationContext) -> Outcome:
    """Return a personalized Hello greeting."""
    return Outcome.text(f"Hello, {arguments['name']}!")


def make_greet_name(greetings: Mapping[str, str]) -> ActionHandler:
    """Build the greet_name handler over a language -> greeting mapping.

    An unknown language is a recoverable failure, not a protocol fault: the
    calling model gets the message and can pick a supported language.
    """

    async def greet_name(arguments: dict[str, Any], context: InvocationContext) -> Outcome:
        name = arguments["name"]
        language = arguments["language"]

        await context.log.info(f'greet_name called with name="{name}", language="{language}"')

        greeting = greetings.get(language)
        if not greeting:
            await context.log.warning(f'Unsupported language requested: "{language}"')
            return Outcome.error(
                f'Unsupported language: "{language}". '
                "Check the languages resource for supported options."
            )

        await context.log.debug(f'Greeting resolved: "{greeting}"')
        return Outcome.text(f"{greeting}, {name}!")

    return greet_name


def make_list_languages(greetings: Mapping[str, str]) -> ActionHandler:
    async def list_languages(arguments: dict[str, Any], context: InvocationContext) -> Outcome:
        return Outcome.text(", ".join(greetings))

    return list_languages
