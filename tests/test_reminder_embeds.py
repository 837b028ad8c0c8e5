"""
Tests for the reminder embed renderer
"""
from datetime import datetime, timezone

import discord

from remindbot.features.reminders.embeds import create_reminder_embed
from fakes import FakeUser


T0 = datetime(2026, 10, 1, 12, 30, tzinfo=timezone.utc)


class TestReminderEmbed:
    """Test the rendered reminder embed."""

    def test_embed_with_author(self):
        author = FakeUser(42, "alice")

        embed = create_reminder_embed("hello", T0, author)

        assert embed.description == "hello"
        assert embed.author.name == "alice"
        assert embed.author.icon_url == "https://cdn.example.test/avatars/42.png"
        assert embed.footer.text == "reminder from"
        assert embed.timestamp == T0
        assert embed.colour == discord.Colour(0xF7F492)

    def test_embed_without_author(self):
        embed = create_reminder_embed("hello", T0, None)

        assert embed.author.name == "Unknown user"
        assert embed.author.icon_url is None
        assert embed.description == "hello"

    def test_naive_timestamp_read_as_utc(self):
        embed = create_reminder_embed("hello", T0.replace(tzinfo=None), None)
        assert embed.timestamp == T0
