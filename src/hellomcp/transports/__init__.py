"""Transport adapters binding McpServer to concrete byte channels.

    - http: stateless Streamable HTTP (FastAPI + uvicorn)
    - stdio: newline-delimited JSON over stdin/stdout
"""

from __future__ import annotations
