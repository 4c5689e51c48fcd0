"""
Pydantic v2 schemas for meter readings.

Separation:
  • ReadingCreate — what the CLIENT sends (no timestamp).
  • ReadingOut    — a stored reading, as returned by the store and the API.
"""

from __future__ import annotations

import datetime

from pydantic import BaseModel, ConfigDict, Field


# ── Request schema ──────────────────────────────────────────
class ReadingCreate(BaseModel):
    """
    Payload accepted by POST /readings.

    timestamp is absent — the capture instant is set server-side.
    """

    model_config = ConfigDict(extra="forbid")

    user_id: str = Field(
        ...,
        min_length=1,
        max_length=128,
        examples=["user-123"],
    )
    date: datetime.date = Field(
        ...,
        examples=["2026-10-19"],
        description="Calendar day the reading covers.",
    )
    usage: float = Field(
        ...,
        ge=0,
        examples=[12.4],
        description="Energy used that day, in kWh.",
    )


# ── Response schemas ────────────────────────────────────────
class ReadingOut(BaseModel):
    """A stored reading."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    date: str
    usage: float
    timestamp: datetime.datetime


class ReadingCreated(BaseModel):
    message: str
    data: ReadingOut
