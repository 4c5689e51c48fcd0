"""
SQLAlchemy model for meter readings — the source of truth for usage.

Composite PK: (user_id, date). A second reading for the same day
replaces the first, so `date` doubles as the dedup key inside a
user's partition.

`date` is stored as an ISO string (YYYY-MM-DD) so that ordering by the
sort key is plain string ordering, same as the range queries expect.
"""

import datetime

from sqlalchemy import DateTime, Float, String
from sqlalchemy.sql import func
from sqlalchemy.orm import Mapped, mapped_column

from powerpulse.core.database import Base


class Reading(Base):
    """One daily meter reading for one user."""

    __tablename__ = "readings"

    user_id: Mapped[str] = mapped_column(
        String(128), primary_key=True,
    )
    date: Mapped[str] = mapped_column(
        String(10), primary_key=True,
    )
    usage: Mapped[float] = mapped_column(
        Float, nullable=False,
    )
    timestamp: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<Reading user={self.user_id} date={self.date} usage={self.usage}>"
