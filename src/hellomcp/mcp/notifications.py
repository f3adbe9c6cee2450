"""Out-of-band log delivery from capabilities to the connected peer.

Capabilities receive a NotificationChannel through their InvocationContext
and call ``await context.log.info(...)``. The channel forwards to whichever
session carried the request; with no session, a closed session, or a level
below the session threshold, emitting does nothing. Unknown level names
are logged locally and dropped. Delivery problems are
logged locally and never fail the invocation.
"""

from __future__ import annotations

import asyncio
import logging

from hellomcp.core.console import get_logger
from hellomcp.mcp.protocol import LogEvent, LogLevel, Method
from hellomcp.mcp.session import Session

logger = get_logger("mcp.notifications")
capability_logger = get_logger("capabilities")

_PYTHON_LEVELS: dict[LogLevel, int] = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.NOTICE: logging.INFO + 5,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.CRITICAL: logging.CRITICAL,
    LogLevel.ALERT: logging.CRITICAL,
    LogLevel.EMERGENCY: logging.CRITICAL,
}


class NotificationChannel:
    """Emits LogEvents to the session bound at construction time."""

    __slots__ = ("_session", "_logger_name")

    def __init__(self, session: Session | None = None, *, logger_name: str | None = None) -> None:
        self._session = session
        self._logger_name = logger_name

    @property
    def active(self) -> bool:
        return self._session is not None and not self._session.closed

    async def emit(self, level: LogLevel | str, message: str) -> None:
        try:
            level = LogLevel(level)
        except ValueError:
            logger.warning("Ignored log event with unknown level %r: %s", level, message)
            return
        capability_logger.log(_PYTHON_LEVELS[level], message)

        session = self._session
        if session is None or session.closed:
            return
        if level < session.log_level:
            return

        event = LogEvent(level=level, message=message, logger=self._logger_name)
        try:
            await session.send_notification(Method.LOG_MESSAGE, event.to_params())
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.warning(
                "Dropped %s log event for failing session", level.value, exc_info=True
            )

    async def debug(self, message: str) -> None:
        await self.emit(LogLevel.DEBUG, message)

    async def info(self, message: str) -> None:
        await self.emit(LogLevel.INFO, message)

    async def warning(self, message: str) -> None:
        await self.emit(LogLevel.WARNING, message)

    async def error(self, message: str) -> None:
        await self.emit(LogLevel.ERROR, message)


__all__ = ["NotificationChannel"]
