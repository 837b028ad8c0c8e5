"""
Resolution of where a reminder gets delivered: the original channel if the bot
can still see it, otherwise a direct message to the author.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Union

import discord

logger = logging.getLogger("reminder_routing")

DM_FALLBACK_DESCRIPTION = (
    "(Sending your reminder directly, because I was unable to locate"
    " the original channel you wanted it to be send to)"
)


@dataclass(frozen=True)
class PublicRoute:
    """Deliver into the channel the reminder was created in."""

    channel: discord.abc.Messageable
    target: Optional[discord.abc.User]

    @property
    def description(self) -> Optional[str]:
        return None if self.target is None else self.target.mention


@dataclass(frozen=True)
class PrivateRoute:
    """Deliver as a direct message because the original channel is gone."""

    channel: discord.DMChannel
    target: Optional[discord.abc.User]

    @property
    def description(self) -> str:
        return DM_FALLBACK_DESCRIPTION


ReminderRoute = Union[PublicRoute, PrivateRoute]


async def _fetch_user_or_none(client: discord.Client, user_id: int) -> Optional[discord.User]:
    try:
        return await client.fetch_user(user_id)
    except Exception as e:
        logger.debug("Could not resolve reminder author %s, sending as unknown user: %s", user_id, e)
        return None


async def create_public_route(
    client: discord.Client, author_id: int, channel: discord.abc.Messageable
) -> PublicRoute:
    author = await _fetch_user_or_none(client, author_id)
    return PublicRoute(channel=channel, target=author)


async def create_private_route(client: discord.Client, author_id: int) -> PrivateRoute:
    # Raises if the DM cannot be opened; the caller treats that as a failed delivery
    dm = await client.create_dm(discord.Object(id=author_id))
    return PrivateRoute(channel=dm, target=dm.recipient)


async def compute_reminder_route(client: discord.Client, channel_id: int, author_id: int) -> ReminderRoute:
    channel = client.get_channel(channel_id)
    if isinstance(channel, discord.abc.Messageable):
        return await create_public_route(client, author_id, channel)

    return await create_private_route(client, author_id)
