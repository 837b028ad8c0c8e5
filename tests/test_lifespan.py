"""
Tests for the host lifespan when a Discord token is configured
"""
import asyncio
import logging

import discord
import pytest
from sqlalchemy import delete

from remindbot import database, main
from remindbot.config import get_settings
from remindbot.features.reminders import service
from remindbot.features.reminders.dispatcher import ReminderDispatcher
from remindbot.models.models import PendingReminder
from fakes import wait_for


class FakeGatewayClient:
    """Stands in for discord.Client: start() blocks until close() like the real gateway loop."""

    def __init__(self, events, login_error=None):
        self.events = events
        self.login_error = login_error
        self.user = "remindbot#0001"
        self._ready = asyncio.Event()
        self._closed = asyncio.Event()

    async def start(self, token):
        self.events.append("start")
        if self.login_error is not None:
            raise self.login_error
        self._ready.set()
        await self._closed.wait()

    async def wait_until_ready(self):
        await self._ready.wait()

    async def close(self):
        self.events.append("close")
        self._closed.set()

    def get_channel(self, channel_id):
        return None


@pytest.fixture()
def events():
    return []


@pytest.fixture()
def with_token(monkeypatch, events):
    settings = get_settings().model_copy(update={"discord_token": "test-token"})
    monkeypatch.setattr(main, "get_settings", lambda: settings)

    original_drain = ReminderDispatcher.drain

    async def recording_drain(self):
        events.append("drain")
        await original_drain(self)

    monkeypatch.setattr(ReminderDispatcher, "drain", recording_drain)
    return settings


async def _clear_reminders():
    async def _clear(session):
        await session.execute(delete(PendingReminder))

    await database.write(_clear)


@pytest.mark.asyncio
async def test_scheduler_starts_on_ready_and_drains_before_close(with_token, events, monkeypatch):
    await _clear_reminders()
    client = FakeGatewayClient(events)
    monkeypatch.setattr(main, "create_discord_client", lambda: client)

    async with main.lifespan(main.app):
        assert await wait_for(service.is_scheduler_running)
        dispatcher = main.app.state.dispatcher
        assert dispatcher is not None
        assert await wait_for(lambda: dispatcher.stats.cycles >= 1)

    assert not service.is_scheduler_running()
    assert events == ["start", "drain", "close"]


@pytest.mark.asyncio
async def test_login_failure_is_logged_and_stops_dispatch_start(with_token, events, monkeypatch, caplog):
    caplog.set_level(logging.ERROR, logger="main")
    client = FakeGatewayClient(events, login_error=discord.LoginFailure("Improper token has been passed."))
    monkeypatch.setattr(main, "create_discord_client", lambda: client)

    async with main.lifespan(main.app):
        assert await wait_for(
            lambda: any(
                r.levelno >= logging.ERROR and "Improper token" in r.getMessage() for r in caplog.records
            )
        )
        dispatch_start = next(t for t in main.app.state.background_tasks if t.get_name() == "dispatch-start")
        assert await wait_for(dispatch_start.done)
        assert dispatch_start.cancelled()
        assert not service.is_scheduler_running()

    assert events == ["start", "drain", "close"]
