"""
SQLAlchemy models for derived insight artifacts.

Neither table is authoritative — both are reproducible from readings and
the profile.

Design notes:
  • insights_cache — composite PK (user_id, request_hash). A row is a
    coalescing hint: 'pending' while a generation is in flight, 'ready'
    once an AI-enhanced result exists.
  • insights_history — composite PK (user_id, date) where date is the
    generation day, so at most one row per user per day.
  • expires_at is epoch seconds. Reads treat expired rows as absent and
    purge_expired() deletes them.
"""

import datetime
from typing import Any

from sqlalchemy import BigInteger, DateTime, String
from sqlalchemy.sql import func
from sqlalchemy.orm import Mapped, mapped_column

from powerpulse.core.database import Base, JSONDocument


class InsightsCacheEntry(Base):
    """
    Cached insight list for one request shape.

    PK: (user_id, request_hash)
    """

    __tablename__ = "insights_cache"

    user_id: Mapped[str] = mapped_column(
        String(128), primary_key=True,
    )
    request_hash: Mapped[str] = mapped_column(
        String(64), primary_key=True,
    )
    status: Mapped[str] = mapped_column(
        String(10), nullable=False,
    )
    insights: Mapped[list[dict[str, Any]] | None] = mapped_column(
        JSONDocument, nullable=True,
    )
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    expires_at: Mapped[int] = mapped_column(
        BigInteger, nullable=False, index=True,
    )

    def __repr__(self) -> str:
        return (
            f"<InsightsCacheEntry user={self.user_id} "
            f"hash={self.request_hash:.8} status={self.status}>"
        )


class InsightsHistoryEntry(Base):
    """
    Last generated insight set per user per day — the rate-limit fallback.

    PK: (user_id, date)
    """

    __tablename__ = "insights_history"

    user_id: Mapped[str] = mapped_column(
        String(128), primary_key=True,
    )
    date: Mapped[str] = mapped_column(
        String(10), primary_key=True,
    )
    timestamp: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    insights: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONDocument, nullable=False,
    )
    # Python attribute is `metadata_` because `metadata` is reserved on
    # declarative classes; the DB column is named `metadata`.
    metadata_: Mapped[dict[str, Any]] = mapped_column(
        "metadata", JSONDocument, nullable=False,
    )
    expires_at: Mapped[int] = mapped_column(
        BigInteger, nullable=False, index=True,
    )
