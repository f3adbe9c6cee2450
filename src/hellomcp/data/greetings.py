"""Greeting words keyed by language name (lowercase English)."""

from __future__ import annotations

from types import MappingProxyType

GREETINGS = MappingProxyType(
    {
        "english": "Hello",
        "french": "Bonjour",
        "spanish": "Hola",
        "german": "Hallo",
        "italian": "Ciao",
        "portuguese": "Olá",
        "dutch": "Hallo",
        "japanese": "Konnichiwa",
        "hawaiian": "Aloha",
        "swahili": "Jambo",
    }
)
