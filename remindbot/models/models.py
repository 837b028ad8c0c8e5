from __future__ import annotations

from sqlalchemy import BigInteger, Integer, Text, DateTime
from sqlalchemy.orm import declarative_base
from datetime import datetime, timezone
from sqlalchemy.orm import Mapped, mapped_column

Base = declarative_base()


class PendingReminder(Base):
    __tablename__ = "pending_reminders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    channel_id: Mapped[int] = mapped_column(BigInteger)
    author_id: Mapped[int] = mapped_column(BigInteger)
    remind_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    content: Mapped[str] = mapped_column(Text)
