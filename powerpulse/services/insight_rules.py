"""
Deterministic rule-based insight engine.

Every number, comparison, and percentage is computed here in Python —
no AI logic and no I/O. Given the same inputs it returns the same list,
and it never raises: any rule whose inputs are unusable (e.g. a zero
baseline) is simply skipped.

Presentation contract:
  • kWh and percentages → one decimal place (ROUND_HALF_UP)
  • rupees              → whole units (ROUND_HALF_UP)
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from decimal import Decimal, ROUND_HALF_UP

from powerpulse.schemas.insights import ApplianceEstimates, InsightRecord, WeatherSnapshot
from powerpulse.schemas.readings import ReadingOut
from powerpulse.services.analysis import usage_stats

logger = logging.getLogger(__name__)

# ── Tariff ──────────────────────────────────────────────────
RUPEES_PER_KWH = 6
DAYS_PER_MONTH = 30

# ── Rule thresholds ─────────────────────────────────────────
MAX_READINGS = 30
SPIKE_FACTOR = 1.2
DAILY_CHANGE_PCT = 10.0
HOT_ABOVE_C = 30.0
COLD_BELOW_C = 15.0
UPGRADE_BELOW_STARS = 4
WEEKLY_MIN_READINGS = 14
WEEKLY_CHANGE_PCT = 5.0

NEED_MORE_DATA = InsightRecord(
    type="info",
    icon="📊",
    message="Start tracking for at least a week to get meaningful insights and comparisons.",
)


def _one_decimal(value: float) -> str:
    return str(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def _rupees(value: float) -> str:
    return str(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


def build_rule_based_insights(
    readings: Sequence[ReadingOut],
    appliance_estimates: ApplianceEstimates | None,
    weather: WeatherSnapshot | None,
) -> list[InsightRecord]:
    """
    Produce ordered insights from recent readings.

    Order: spike, day-over-day, weather, top appliance (+ upgrade tip),
    weekly trend, monthly cost. Fewer than 2 readings → a single
    "need more data" record.
    """
    if len(readings) < 2:
        return [NEED_MORE_DATA.model_copy()]

    ordered = sorted(readings, key=lambda r: r.date)[-MAX_READINGS:]
    latest, previous = ordered[-1], ordered[-2]
    avg_usage = usage_stats(ordered).average

    insights: list[InsightRecord] = []

    # ── 1. Spike ────────────────────────────────────────────
    if avg_usage > 0 and latest.usage >= avg_usage * SPIKE_FACTOR:
        pct_above = (latest.usage - avg_usage) / avg_usage * 100
        insights.append(InsightRecord(
            type="warning",
            icon="⚠️",
            title="Usage Spike Detected",
            message=(
                f"Your latest reading ({_one_decimal(latest.usage)} kWh) is "
                f"{_one_decimal(pct_above)}% higher than your average "
                f"({_one_decimal(avg_usage)} kWh)."
            ),
        ))

    # ── 2. Day-over-day ─────────────────────────────────────
    if previous.usage > 0:
        day_change = (latest.usage - previous.usage) / previous.usage * 100
        if abs(day_change) > DAILY_CHANGE_PCT:
            direction = "increased" if day_change > 0 else "decreased"
            insights.append(InsightRecord(
                type="warning" if day_change > 0 else "success",
                icon="📈" if day_change > 0 else "📉",
                title=f"Daily Usage {direction.capitalize()}",
                message=(
                    f"Usage {direction} by {_one_decimal(abs(day_change))}% compared to "
                    f"yesterday ({_one_decimal(previous.usage)} → "
                    f"{_one_decimal(latest.usage)} kWh)."
                ),
            ))

    # ── 3. Weather ──────────────────────────────────────────
    if weather is not None:
        if weather.temperature > HOT_ABOVE_C:
            insights.append(InsightRecord(
                type="info",
                icon="🌡️",
                title="Hot Weather Impact",
                message=(
                    f"Temperature is {_one_decimal(weather.temperature)}°C. Cooling appliances "
                    "likely consuming more energy. Consider setting AC to 25-26°C for "
                    "optimal efficiency."
                ),
            ))
        elif weather.temperature < COLD_BELOW_C:
            insights.append(InsightRecord(
                type="info",
                icon="❄️",
                title="Cold Weather Impact",
                message=(
                    f"Temperature is {_one_decimal(weather.temperature)}°C. Heating appliances "
                    "may be consuming more energy. Use geysers efficiently and consider "
                    "solar heating."
                ),
            ))

    # ── 4. Top appliance ────────────────────────────────────
    if appliance_estimates is not None and appliance_estimates.total_estimated > 0:
        insights.extend(_top_appliance_insights(appliance_estimates))

    # ── 5. Weekly trend ─────────────────────────────────────
    if len(ordered) >= WEEKLY_MIN_READINGS:
        weekly = _weekly_trend_insight(ordered)
        if weekly is not None:
            insights.append(weekly)

    # ── 6. Monthly cost (always last) ───────────────────────
    monthly_cost = avg_usage * DAYS_PER_MONTH * RUPEES_PER_KWH
    insights.append(InsightRecord(
        type="info",
        icon="💰",
        title="Estimated Monthly Cost",
        message=(
            f"Based on your average usage ({_one_decimal(avg_usage)} kWh/day), your "
            f"estimated monthly bill is ₹{_rupees(monthly_cost)} "
            f"(at ₹{RUPEES_PER_KWH}/kWh)."
        ),
    ))

    logger.debug("Built %d rule-based insights from %d readings", len(insights), len(ordered))
    return insights


# ── Internal helpers ────────────────────────────────────────

def _top_appliance_insights(appliance_estimates: ApplianceEstimates) -> list[InsightRecord]:
    """Share of the biggest consumer, plus an upgrade tip for low ratings."""
    if not appliance_estimates.estimates:
        return []

    top = max(appliance_estimates.estimates.values(), key=lambda e: e.daily_kwh)
    share = top.daily_kwh / appliance_estimates.total_estimated * 100

    records = [InsightRecord(
        type="info",
        icon="🔌",
        title="Top Energy Consumer",
        message=(
            f"Your {top.full_name} ({top.star_rating}-star) accounts for "
            f"~{_one_decimal(share)}% of estimated consumption "
            f"(~{_one_decimal(top.daily_kwh)} kWh/day)."
        ),
    )]

    if top.star_rating < UPGRADE_BELOW_STARS and top.five_star_daily_kwh is not None:
        saved_kwh = top.daily_kwh - top.five_star_daily_kwh
        if saved_kwh > 0:
            saved_rupees = saved_kwh * RUPEES_PER_KWH * DAYS_PER_MONTH
            records.append(InsightRecord(
                type="tip",
                icon="💡",
                title="Upgrade Opportunity",
                message=(
                    f"Upgrading your {top.full_name} to a 5-star model could save "
                    f"~{_one_decimal(saved_kwh)} kWh/day (₹{_rupees(saved_rupees)}/month "
                    f"at ₹{RUPEES_PER_KWH}/kWh)."
                ),
            ))

    return records


def _weekly_trend_insight(ordered: Sequence[ReadingOut]) -> InsightRecord | None:
    """Compare the mean of the last 7 readings against the 7 before them."""
    last_week = _mean([r.usage for r in ordered[-7:]])
    previous_week = _mean([r.usage for r in ordered[-14:-7]])
    if previous_week <= 0:
        return None

    weekly_change = (last_week - previous_week) / previous_week * 100

    if weekly_change < -WEEKLY_CHANGE_PCT:
        saved_rupees = (previous_week - last_week) * 7 * RUPEES_PER_KWH
        return InsightRecord(
            type="success",
            icon="🌱",
            title="Great Progress!",
            message=(
                f"You saved {_one_decimal(abs(weekly_change))}% energy this week compared "
                f"to last week (~₹{_rupees(saved_rupees)} saved)."
            ),
        )
    if weekly_change > WEEKLY_CHANGE_PCT:
        return InsightRecord(
            type="warning",
            icon="📊",
            title="Weekly Increase",
            message=(
                f"Energy usage increased by {_one_decimal(weekly_change)}% this week. "
                "Review your appliance usage patterns."
            ),
        )
    return None
