"""
Tagged results of the insight request pipeline.

The pipeline returns exactly one of these per request and never raises
for expected outcomes; the router is the only place they become HTTP.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from powerpulse.schemas.insights import InsightRecord, InsightsMetadata


@dataclass(frozen=True, slots=True)
class InsightsGenerated:
    insights: list[InsightRecord]
    metadata: InsightsMetadata


@dataclass(frozen=True, slots=True)
class NoReadings:
    """The user has a profile but has not logged any readings yet."""

    insights: list[InsightRecord]


@dataclass(frozen=True, slots=True)
class ProfileMissing:
    """The user must complete onboarding first."""


@dataclass(frozen=True, slots=True)
class RateLimited:
    """
    The limiter rejected the request.

    Carries the best fallback available: the ready cache entry for this
    request, else the latest history entry, else nothing.
    """

    retry_after: int
    using_cache: bool = False
    message: str | None = None
    insights: list[InsightRecord] | None = None
    metadata: InsightsMetadata | None = None


@dataclass(frozen=True, slots=True)
class InsightsFailed:
    """An unexpected error; carries one static error record."""

    message: str
    insights: list[InsightRecord] = field(default_factory=list)


InsightsResult = Union[InsightsGenerated, NoReadings, ProfileMissing, RateLimited, InsightsFailed]
