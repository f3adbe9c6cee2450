"""hellomcp - a Model Context Protocol host for greeting capabilities.

This package provides a transport-agnostic capability registry and
request-dispatch core, plus HTTP and stdio transport adapters and the
`hello-mcp` command-line tool.

Exports:
    __version__: Package version string.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "1.0.0"
