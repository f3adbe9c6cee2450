"""Tests for mcp/notifications.py - log delivery to the requesting session."""

from __future__ import annotations

import logging

import pytest

from hellomcp.mcp.notifications import NotificationChannel
from hellomcp.mcp.protocol import LogEvent, LogLevel
from tests.mocks.sessions import FailingSession, RecordingSession


@pytest.mark.asyncio
async def test_events_arrive_in_emission_order(session: RecordingSession) -> None:
    channel = NotificationChannel(session)

    await channel.info("first")
    await channel.warning("second")
    await channel.error("third")

    assert session.log_events == [("info", "first"), ("warning", "second"), ("error", "third")]
    assert all(method == "notifications/message" for method, _ in session.sent)


@pytest.mark.asyncio
async def test_no_session_is_a_noop() -> None:
    channel = NotificationChannel()

    await channel.info("nobody is listening")

    assert channel.active is False


@pytest.mark.asyncio
async def test_closed_session_receives_nothing(session: RecordingSession) -> None:
    channel = NotificationChannel(session)
    session.close()

    await channel.info("too late")

    assert session.sent == []
    assert channel.active is False


@pytest.mark.asyncio
async def test_events_below_threshold_are_dropped(session: RecordingSession) -> None:
    session.log_level = LogLevel.WARNING
    channel = NotificationChannel(session)

    await channel.debug("noise")
    await channel.info("still noise")
    await channel.warning("kept")
    await channel.emit("critical", "also kept")

    assert session.log_events == [("warning", "kept"), ("critical", "also kept")]


@pytest.mark.asyncio
async def test_delivery_failure_does_not_raise(caplog: pytest.LogCaptureFixture) -> None:
    channel = NotificationChannel(FailingSession())

    with caplog.at_level(logging.WARNING, logger="hellomcp.mcp.notifications"):
        await channel.error("lost")

    assert "Dropped error log event" in caplog.text


@pytest.mark.asyncio
async def test_logger_name_is_forwarded(session: RecordingSession) -> None:
    channel = NotificationChannel(session, logger_name="greetings")

    await channel.info("hi")

    assert session.sent == [
        ("notifications/message", {"level": "info", "data": "hi", "logger": "greetings"})
    ]


@pytest.mark.asyncio
async def test_unknown_level_is_dropped_locally(
    session: RecordingSession, caplog: pytest.LogCaptureFixture
) -> None:
    channel = NotificationChannel(session)

    with caplog.at_level(logging.WARNING, logger="hellomcp.mcp.notifications"):
        await channel.emit("loud", "nope")
        await channel.emit("info", "still delivered")

    assert "unknown level 'loud'" in caplog.text
    assert session.log_events == [("info", "still delivered")]


def test_log_levels_are_ordered() -> None:
    assert LogLevel.DEBUG < LogLevel.INFO < LogLevel.WARNING < LogLevel.EMERGENCY
    assert LogLevel.ERROR >= LogLevel.ERROR
    assert max(LogLevel) is LogLevel.EMERGENCY


def test_log_event_params_omit_empty_logger() -> None:
    assert LogEvent(level=LogLevel.INFO, message="m").to_params() == {"level": "info", "data": "m"}
