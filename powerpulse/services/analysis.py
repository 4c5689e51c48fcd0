"""
Basic usage statistics over stored readings.

usage_stats() is shared with the rule engine so the analysis endpoint and
the insight text always agree on the mean.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from powerpulse.schemas.analysis import UsageAnalysis
from powerpulse.schemas.readings import ReadingOut
from powerpulse.services.store import InsightStore

ENERGY_TIPS: tuple[str, ...] = (
    "Switch off devices completely when not in use instead of leaving them in standby mode.",
    "Use LED bulbs instead of incandescent lights to reduce energy consumption by up to 80%.",
    "Run washing machines and dishwashers only with full loads to maximize efficiency.",
)


@dataclass(frozen=True, slots=True)
class UsageStats:
    average: float
    maximum: float
    minimum: float


def usage_stats(readings: Sequence[ReadingOut]) -> UsageStats:
    """Mean / max / min usage. All zero for an empty sequence."""
    if not readings:
        return UsageStats(average=0.0, maximum=0.0, minimum=0.0)

    usages = [r.usage for r in readings]
    return UsageStats(
        average=sum(usages) / len(usages),
        maximum=max(usages),
        minimum=min(usages),
    )


async def build_usage_analysis(store: InsightStore, user_id: str) -> UsageAnalysis:
    """Statistics over every reading the user has, ordered by date ascending."""
    readings = await store.list_readings(user_id)
    stats = usage_stats(readings)

    return UsageAnalysis(
        average=stats.average,
        max=stats.maximum,
        min=stats.minimum,
        readings=readings,
        tips=list(ENERGY_TIPS),
    )
