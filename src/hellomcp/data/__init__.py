"""Static data backing the built-in capabilities."""

from __future__ import annotations

from hellomcp.data.greetings import GREETINGS

__all__ = ["GREETINGS"]
