"""
User profile model — location, home type and declared appliances.

One row per user. Saves replace the whole row (no field-level merge).
`appliances` is a JSON document: {appliance_key: {"star_rating": 1-5}}.
"""

import datetime
from typing import Any

from sqlalchemy import DateTime, String, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import Mapped, mapped_column

from powerpulse.core.database import Base, JSONDocument


class UserProfile(Base):
    """Household description used to personalise insights."""

    __tablename__ = "user_profiles"

    user_id: Mapped[str] = mapped_column(
        String(128), primary_key=True,
    )
    location: Mapped[str] = mapped_column(
        Text, nullable=False,
    )
    home_type: Mapped[str] = mapped_column(
        String(50), nullable=False,
    )
    appliances: Mapped[dict[str, Any]] = mapped_column(
        JSONDocument, nullable=False,
    )
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"<UserProfile user={self.user_id} home_type={self.home_type!r}>"
