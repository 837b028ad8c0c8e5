"""
Rendering of the reminder message embed.
"""
from datetime import datetime, timezone
from typing import Optional

import discord

AMBIENT_COLOR = discord.Colour(0xF7F492)
UNKNOWN_AUTHOR_NAME = "Unknown user"
FOOTER_TEXT = "reminder from"


def _as_utc(ts: datetime) -> datetime:
    # SQLite hands back naive datetimes; they were stored as UTC
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts


def create_reminder_embed(
    content: str,
    created_at: datetime,
    author: Optional[discord.abc.User],
) -> discord.Embed:
    """Build the embed shown for a due reminder.

    The author block falls back to "Unknown user" without an icon when the
    author could not be resolved.
    """
    author_name = UNKNOWN_AUTHOR_NAME if author is None else str(author)
    author_icon_url = None if author is None else author.display_avatar.url

    embed = discord.Embed(
        description=content,
        colour=AMBIENT_COLOR,
        timestamp=_as_utc(created_at),
    )
    embed.set_author(name=author_name, icon_url=author_icon_url)
    embed.set_footer(text=FOOTER_TEXT)
    return embed
