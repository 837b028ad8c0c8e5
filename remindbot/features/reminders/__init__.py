"""
Reminder feature module: delivers due reminders to their Discord channel or via DM
"""
from .dispatcher import ReminderDispatcher
from .service import start_reminder_scheduler, stop_reminder_scheduler, is_scheduler_running

__all__ = ["ReminderDispatcher", "start_reminder_scheduler", "stop_reminder_scheduler", "is_scheduler_running"]
