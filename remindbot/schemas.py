from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class DispatcherStatus(BaseModel):
    enabled: bool
    running: bool
    interval_seconds: float
    cycles: int = 0
    last_run_at: Optional[datetime] = None
    last_due_count: int = 0
    delivered: int = 0
    failed: int = 0
    pending_sends: int = 0
