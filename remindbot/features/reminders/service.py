"""
Reminder Service: background scheduler that drives the reminder dispatcher
"""
import logging
from datetime import datetime, timezone, timedelta
from typing import Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from remindbot.config import get_settings
from remindbot.features.reminders.dispatcher import ReminderDispatcher

logger = logging.getLogger("reminder_service")

# Global scheduler instance
_scheduler: Optional[AsyncIOScheduler] = None
_dispatcher: Optional[ReminderDispatcher] = None

JOB_ID = "reminder_dispatcher"


async def _run_dispatch_cycle() -> None:
    """One scheduled tick; a failing cycle must not kill the job."""
    if _dispatcher is None:
        return
    try:
        await _dispatcher.run_once()
    except Exception as e:
        logger.error("Error in reminder dispatch cycle: %s", e)


async def start_reminder_scheduler(dispatcher: ReminderDispatcher):
    """Start the background reminder scheduler."""
    global _scheduler, _dispatcher

    if _scheduler is not None:
        logger.warning("Scheduler already running")
        return

    settings = get_settings()
    schedule = dispatcher.create_schedule()

    _dispatcher = dispatcher
    _scheduler = AsyncIOScheduler()

    # Fixed rate: runs start every period regardless of how long the previous one took
    _scheduler.add_job(
        _run_dispatch_cycle,
        trigger=IntervalTrigger(seconds=schedule.period_seconds),
        next_run_time=datetime.now(timezone.utc) + timedelta(seconds=schedule.initial_delay_seconds),
        id=JOB_ID,
        name="Send due reminders",
        replace_existing=True,
        max_instances=settings.reminder_dispatch_max_instances,
        coalesce=False,
        misfire_grace_time=None,
    )

    _scheduler.start()
    logger.info("Reminder scheduler started (dispatching every %s seconds)", schedule.period_seconds)


async def stop_reminder_scheduler():
    """Stop the background reminder scheduler."""
    global _scheduler, _dispatcher

    if _scheduler is None:
        logger.warning("Scheduler not running")
        return

    _scheduler.shutdown(wait=False)
    _scheduler = None
    _dispatcher = None
    logger.info("Reminder scheduler stopped")


def is_scheduler_running() -> bool:
    """Check if scheduler is running."""
    return _scheduler is not None and _scheduler.running


def get_scheduler() -> Optional[AsyncIOScheduler]:
    return _scheduler
