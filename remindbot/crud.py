import logging
from datetime import datetime, timezone
from typing import Optional, List
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from remindbot import database
from remindbot.models import models as db

logger = logging.getLogger("crud")


# --- Generic DB helpers ------------------------------------------------------

async def _get_or_none(session, model, id_):
    obj = await session.get(model, id_)
    if not obj:
        logger.warning("%s with id=%s not found.", model.__name__, id_)
    return obj


async def _commit_refresh(session, obj):
    await session.commit()
    await session.refresh(obj)
    return obj


# --- Reminder Operations -----------------------------------------------------

async def create_reminder(
    channel_id: int,
    author_id: int,
    content: str,
    remind_at: datetime,
    created_at: Optional[datetime] = None,
) -> db.PendingReminder:
    async with database.AsyncSessionLocal() as dbs:
        reminder = db.PendingReminder(
            channel_id=channel_id,
            author_id=author_id,
            content=content,
            remind_at=remind_at,
            created_at=created_at or datetime.now(timezone.utc),
        )
        dbs.add(reminder)
        await _commit_refresh(dbs, reminder)
        logger.info("Created reminder %s for user %s (due %s)", reminder.id, author_id, remind_at)
        return reminder


async def get_reminder(reminder_id: int) -> Optional[db.PendingReminder]:
    async with database.AsyncSessionLocal() as dbs:
        return await _get_or_none(dbs, db.PendingReminder, reminder_id)


async def get_reminders(author_id: int) -> List[db.PendingReminder]:
    async with database.AsyncSessionLocal() as dbs:
        result = await dbs.execute(
            select(db.PendingReminder)
            .where(db.PendingReminder.author_id == author_id)
            .order_by(db.PendingReminder.remind_at)
        )
        reminders = list(result.scalars())
        logger.info("Fetched %d reminders for user %s", len(reminders), author_id)
        return reminders


# --- Transaction-scoped helpers (caller owns the session) --------------------

async def get_due_reminders(session: AsyncSession, now: datetime) -> List[db.PendingReminder]:
    """All reminders whose remind_at is at or before ``now``, in store order."""
    result = await session.execute(
        select(db.PendingReminder).where(db.PendingReminder.remind_at <= now)
    )
    return list(result.scalars())


async def delete_reminder(session: AsyncSession, reminder: db.PendingReminder) -> None:
    await session.delete(reminder)
    await session.flush()
    logger.debug("Deleted reminder %s", reminder.id)
