"""
Pydantic v2 schemas for generated insights and their derived artifacts.

InsightRecord is the unit the client renders. It never lives on its own —
it is always embedded in a cache entry, a history entry or a response.
"""

from __future__ import annotations

import datetime
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

InsightType = Literal["info", "warning", "success", "tip", "ai", "error"]
InsightsKind = Literal["ai-enhanced", "rule-based", "cached-latest"]


class InsightRecord(BaseModel):
    """One human-readable observation about a user's usage."""

    type: InsightType
    icon: str
    title: str | None = None
    message: str


class WeatherSnapshot(BaseModel):
    """Current conditions for a profile location (metric units)."""

    temperature: float
    feels_like: float | None = None
    humidity: float | None = None
    description: str = ""
    location: str = ""


class ApplianceEstimate(BaseModel):
    daily_kwh: float
    star_rating: int
    full_name: str
    category: str
    # Same appliance at 5 stars; None when the table has no 5-star figure.
    five_star_daily_kwh: float | None = None


class ApplianceEstimates(BaseModel):
    """Per-appliance daily draw plus the total, from the efficiency table."""

    estimates: dict[str, ApplianceEstimate] = Field(default_factory=dict)
    total_estimated: float = 0.0


class InsightsMetadata(BaseModel):
    """
    Describes how an insight list was produced.

    Only the fields relevant to a given path are set; the rest stay None
    and are dropped when serialised.
    """

    type: InsightsKind
    cache: bool | None = None
    rate_limited: bool | None = None
    from_date: str | None = None
    readings_count: int | None = None
    has_weather: bool | None = None
    has_profile: bool | None = None
    ai_insights_count: int | None = None
    generated_at: datetime.datetime | None = None
    weather: WeatherSnapshot | None = None
    appliance_estimates: ApplianceEstimates | None = None


# ── Store records ───────────────────────────────────────────
class CacheEntryOut(BaseModel):
    """A row of the insights cache."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    request_hash: str
    status: Literal["pending", "ready"]
    insights: list[InsightRecord] | None = None
    expires_at: int


class HistoryEntryOut(BaseModel):
    """A stored insight set for one user and generation day."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    date: str
    timestamp: datetime.datetime
    insights: list[InsightRecord]
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        # Maps to the ORM attribute `metadata_` (column name is `metadata`)
        validation_alias=AliasChoices("metadata_", "metadata"),
    )
    expires_at: int
