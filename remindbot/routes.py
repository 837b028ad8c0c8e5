from fastapi import APIRouter, Request
from remindbot import schemas
from remindbot.config import get_settings
from remindbot.features.reminders import is_scheduler_running

router = APIRouter(tags=["Reminders"])


@router.get("/reminders/status", response_model=schemas.DispatcherStatus)
async def get_reminder_status(request: Request):
    dispatcher = getattr(request.app.state, "dispatcher", None)
    if dispatcher is None:
        return schemas.DispatcherStatus(
            enabled=False,
            running=False,
            interval_seconds=get_settings().reminder_dispatch_interval_seconds,
        )

    stats = dispatcher.stats
    return schemas.DispatcherStatus(
        enabled=True,
        running=is_scheduler_running(),
        interval_seconds=dispatcher.interval_seconds,
        cycles=stats.cycles,
        last_run_at=stats.last_run_at,
        last_due_count=stats.last_due_count,
        delivered=stats.delivered,
        failed=stats.failed,
        pending_sends=dispatcher.pending_sends,
    )
