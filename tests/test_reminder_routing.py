import pytest
import discord
from unittest.mock import Mock

from remindbot.features.reminders.routing import (
    DM_FALLBACK_DESCRIPTION,
    PrivateRoute,
    PublicRoute,
    compute_reminder_route,
)
from fakes import FakeUser, http_error, make_client, make_dm_channel, make_text_channel


@pytest.mark.asyncio
async def test_public_route_when_channel_exists():
    author = FakeUser(42, "alice")
    channel = make_text_channel(100)
    client = make_client(channels={100: channel}, users={42: author})

    route = await compute_reminder_route(client, 100, 42)

    assert isinstance(route, PublicRoute)
    assert route.channel is channel
    assert route.target is author
    assert route.description == "<@42>"
    client.create_dm.assert_not_awaited()


@pytest.mark.asyncio
async def test_public_route_with_unknown_author():
    channel = make_text_channel(100)
    client = make_client(channels={100: channel})

    route = await compute_reminder_route(client, 100, 42)

    assert isinstance(route, PublicRoute)
    assert route.target is None
    assert route.description is None


@pytest.mark.asyncio
async def test_private_route_when_channel_missing():
    author = FakeUser(42, "alice")
    dm = make_dm_channel(author)
    client = make_client(dm=dm)

    route = await compute_reminder_route(client, 100, 42)

    assert isinstance(route, PrivateRoute)
    assert route.channel is dm
    assert route.target is author
    assert route.description == DM_FALLBACK_DESCRIPTION
    opened_for = client.create_dm.await_args.args[0]
    assert opened_for.id == 42


@pytest.mark.asyncio
async def test_non_messageable_channel_falls_back_to_dm():
    category = Mock(spec=discord.CategoryChannel)
    dm = make_dm_channel(FakeUser(42, "alice"))
    client = make_client(channels={100: category}, dm=dm)

    route = await compute_reminder_route(client, 100, 42)

    assert isinstance(route, PrivateRoute)
    assert route.channel is dm


@pytest.mark.asyncio
async def test_private_route_failure_propagates():
    client = make_client(dm_error=http_error(text="Cannot send messages to this user"))

    with pytest.raises(discord.Forbidden):
        await compute_reminder_route(client, 100, 42)
