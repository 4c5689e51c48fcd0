"""
Per-user rate limit state for insight generation.

One row per user holding a fixed window counter plus the time of the
last accepted request (cooldown). All times are epoch seconds.

Rows are only written on accepted requests. Idle rows are reclaimed by
purge_expired(); an idle row behaves exactly like a missing one.
"""

from sqlalchemy import BigInteger, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from powerpulse.core.database import Base


class RateLimitState(Base):
    """Fixed-window + cooldown counter for one user."""

    __tablename__ = "rate_limits"

    user_id: Mapped[str] = mapped_column(
        String(128), primary_key=True,
    )
    window_start: Mapped[int] = mapped_column(
        BigInteger, nullable=False,
    )
    count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    last_request_at: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=0, index=True,
    )

    def __repr__(self) -> str:
        return (
            f"<RateLimitState user={self.user_id} "
            f"window_start={self.window_start} count={self.count}>"
        )
