"""
Reminder dispatcher: hands every due reminder off for delivery and removes it
from the store.

Delivery is fire-and-forget. A reminder row is deleted as soon as its send has
been scheduled, so each reminder gets at most one delivery attempt.
"""
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional, Set

import discord
from sqlalchemy.ext.asyncio import AsyncSession

from remindbot import crud, database
from remindbot.features.reminders.embeds import create_reminder_embed
from remindbot.features.reminders.routing import compute_reminder_route

SCHEDULE_INTERVAL_SECONDS = 30

WriteFn = Callable[[Callable[[AsyncSession], Awaitable[Any]]], Awaitable[Any]]


@dataclass(frozen=True)
class Schedule:
    mode: str
    initial_delay_seconds: float
    period_seconds: float


@dataclass(frozen=True)
class _DueReminder:
    id: int
    channel_id: int
    author_id: int
    content: str
    created_at: datetime


@dataclass
class DispatchStats:
    cycles: int = 0
    last_run_at: Optional[datetime] = None
    last_due_count: int = 0
    delivered: int = 0
    failed: int = 0


class ReminderDispatcher:
    """Sends pending reminders whose time has come."""

    def __init__(
        self,
        client: discord.Client,
        *,
        write: WriteFn = database.write,
        logger: Optional[logging.Logger] = None,
        interval_seconds: float = SCHEDULE_INTERVAL_SECONDS,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.client = client
        self.write = write
        self.logger = logger or logging.getLogger("reminder_dispatcher")
        self.interval_seconds = interval_seconds
        self.clock = clock
        self.stats = DispatchStats()
        self._pending_sends: Set[asyncio.Task] = set()
        self._active_cycles: Set[asyncio.Future] = set()

    def create_schedule(self) -> Schedule:
        return Schedule(mode="fixed_rate", initial_delay_seconds=0, period_seconds=self.interval_seconds)

    async def run_once(self) -> int:
        """Run one dispatch cycle and return the number of reminders handed off."""
        now = self.clock()
        cycle_done = asyncio.get_running_loop().create_future()
        self._active_cycles.add(cycle_done)

        async def _dispatch_due(session: AsyncSession) -> int:
            due = await crud.get_due_reminders(session, now)
            for row in due:
                self._send_reminder(
                    _DueReminder(
                        id=row.id,
                        channel_id=row.channel_id,
                        author_id=row.author_id,
                        content=row.content,
                        created_at=row.created_at,
                    )
                )
                await crud.delete_reminder(session, row)
            return len(due)

        try:
            count = await self.write(_dispatch_due)
        finally:
            self._active_cycles.discard(cycle_done)
            cycle_done.set_result(None)

        self.stats.cycles += 1
        self.stats.last_run_at = now
        self.stats.last_due_count = count
        if count:
            self.logger.info("Handed off %d due reminder(s) for delivery", count)
        return count

    async def drain(self) -> None:
        """Wait for running cycles to finish handing off, then for every in-flight send to settle."""
        while self._active_cycles or self._pending_sends:
            # cancelling drain must not cancel the cycles or sends it waits on
            await asyncio.wait([*self._active_cycles, *self._pending_sends])

    @property
    def pending_sends(self) -> int:
        return len(self._pending_sends)

    def _send_reminder(self, reminder: _DueReminder) -> None:
        task = asyncio.create_task(self._deliver(reminder), name=f"reminder-{reminder.id}")
        self._pending_sends.add(task)
        task.add_done_callback(lambda t: self._on_delivery_done(reminder.id, t))

    async def _deliver(self, reminder: _DueReminder) -> None:
        route = await compute_reminder_route(self.client, reminder.channel_id, reminder.author_id)
        embed = create_reminder_embed(reminder.content, reminder.created_at, route.target)
        await route.channel.send(content=route.description, embed=embed)

    def _on_delivery_done(self, reminder_id: int, task: asyncio.Task) -> None:
        self._pending_sends.discard(task)
        if task.cancelled():
            self.stats.failed += 1
            self.logger.warning("Delivery of reminder (id '%s') was cancelled, skipping it.", reminder_id)
            return

        error = task.exception()
        if error is None:
            self.stats.delivered += 1
            return

        self.stats.failed += 1
        self.logger.warning(
            "Failed to send a reminder (id '%s'), skipping it. This can be due to a network issue, "
            "but also happen if the bot disconnected from the target guild and the "
            "user has disabled DMs or has been deleted. (%s: %s)",
            reminder_id,
            type(error).__name__,
            error,
        )
