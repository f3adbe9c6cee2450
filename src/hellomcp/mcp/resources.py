"""Built-in resources.

    - languages (languages://list): JSON array of supported greeting languages
"""

from __future__ import annotations

import json
from collections.abc import Mapping

from hellomcp.capabilities.models import InvocationContext, ResourceContents, ResourceReader
from hellomcp.capabilities.registry import CapabilityRegistry

LANGUAGES_URI = "languages://list"


def make_languages_reader(greetings: Mapping[str, str]) -> ResourceReader:
    async def read_languages(context: InvocationContext) -> ResourceContents:
        return ResourceContents(uri=LANGUAGES_URI, text=json.dumps(list(greetings), indent=2))

    return read_languages


def register_resources(registry: CapabilityRegistry, *, greetings: Mapping[str, str]) -> None:
    """Register every built-in resource with ``registry``."""
    registry.register_resource(
        "languages",
        LANGUAGES_URI,
        make_languages_reader(greetings),
        description="List of supported greeting languages",
        media_type="application/json",
    )


__all__ = ["LANGUAGES_URI", "make_languages_reader", "register_resources"]
