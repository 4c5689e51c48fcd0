"""
Insight request pipeline.

Flow for request_insights(user_id):
  1. Load profile → ProfileMissing if absent.
  2. Load the newest readings → NoReadings if none (no cache, no limiter).
  3. Compute the request hash.
  4. Rate limit → RateLimited with the best fallback on rejection.
  5. Cache: ready → serve it; absent → best-effort pending insert.
  6. Appliance estimates, weather, rule engine, optional AI.
  7. AI success → promote the cache entry to ready.
  8. Persist the day's history entry and return.

Every expected outcome is a tagged result; anything unexpected is logged
and returned as InsightsFailed. Nothing here raises to the caller.
"""

from __future__ import annotations

import datetime
import logging

from powerpulse.core.context import AppContext
from powerpulse.schemas.insights import (
    ApplianceEstimates,
    HistoryEntryOut,
    InsightRecord,
    InsightsMetadata,
    WeatherSnapshot,
)
from powerpulse.schemas.profile import UserProfileOut
from powerpulse.schemas.readings import ReadingOut
from powerpulse.services.appliances import estimate_appliance_consumption
from powerpulse.services.insight_results import (
    InsightsFailed,
    InsightsGenerated,
    InsightsResult,
    NoReadings,
    ProfileMissing,
    RateLimited,
)
from powerpulse.services.insight_rules import build_rule_based_insights
from powerpulse.services.rate_limiter import check_and_consume
from powerpulse.services.request_hash import compute_request_hash
from powerpulse.services.store import InsightStore

logger = logging.getLogger(__name__)

# ── Lifetimes (seconds) ─────────────────────────────────────
PENDING_TTL_SECONDS = 30 * 60
READY_TTL_SECONDS = 2 * 60
HISTORY_TTL_SECONDS = 90 * 24 * 60 * 60

READINGS_WINDOW = 30
MIN_READINGS_FOR_AI = 3

GET_STARTED = InsightRecord(
    type="info",
    icon="📊",
    title="Get Started",
    message=(
        "Start adding your daily electricity readings to get personalized insights "
        "and track your energy consumption patterns."
    ),
)

GENERATION_ERROR = InsightRecord(
    type="error",
    icon="⚠️",
    title="Error",
    message="Unable to generate insights at this time. Please try again later.",
)

RATE_LIMITED_CACHE_MESSAGE = "Too many requests. Showing previously generated insights."
RATE_LIMITED_HISTORY_MESSAGE = "Too many requests. Showing your most recent insights."


def utc_day(now: datetime.datetime) -> str:
    """Calendar day (UTC) used for the hash date bucket and the history key."""
    return now.astimezone(datetime.timezone.utc).date().isoformat()


class InsightsPipeline:
    """One instance per request; holds no state between calls."""

    def __init__(self, context: AppContext, store: InsightStore) -> None:
        self._ctx = context
        self._store = store

    async def request_insights(self, user_id: str) -> InsightsResult:
        try:
            return await self._run(user_id)
        except Exception:
            logger.exception("Insight generation failed for user %s", user_id)
            return InsightsFailed(
                message="An unexpected error occurred while generating insights.",
                insights=[GENERATION_ERROR.model_copy()],
            )

    async def _run(self, user_id: str) -> InsightsResult:
        now = self._ctx.clock()
        epoch = int(now.timestamp())
        today = utc_day(now)

        # ── 1-2. Inputs ─────────────────────────────────────
        profile = await self._store.get_profile(user_id)
        if profile is None:
            return ProfileMissing()

        readings = await self._store.list_readings(
            user_id, newest_first=True, limit=READINGS_WINDOW
        )
        if not readings:
            return NoReadings(insights=[GET_STARTED.model_copy()])

        # ── 3. Request hash ─────────────────────────────────
        request_hash = compute_request_hash(
            readings, profile, self._ctx.settings.AI_MODEL, today
        )

        # ── 4. Rate limit ───────────────────────────────────
        decision = await check_and_consume(self._store, user_id, epoch)
        if not decision.allowed:
            return await self._rate_limited(user_id, request_hash, epoch, decision.retry_after)

        # ── 5. Cache ────────────────────────────────────────
        cached = await self._store.get_cache_entry(user_id, request_hash, epoch)
        if cached is not None and cached.status == "ready" and cached.insights is not None:
            logger.info("Serving cached insights for user %s", user_id)
            return InsightsGenerated(
                insights=cached.insights,
                metadata=InsightsMetadata(type="ai-enhanced", cache=True),
            )
        if cached is None:
            # A lost race is harmless: the other writer's entry is just as good.
            await self._store.put_cache_pending(
                user_id, request_hash, epoch + PENDING_TTL_SECONDS, epoch
            )

        # ── 6. Generate ─────────────────────────────────────
        estimates = estimate_appliance_consumption(profile.appliances, self._ctx.catalog)
        weather = await self._fetch_weather(profile)

        rule_insights = build_rule_based_insights(readings, estimates, weather)
        insights = list(rule_insights)
        metadata = InsightsMetadata(
            type="rule-based",
            readings_count=len(readings),
            has_weather=weather is not None,
            has_profile=True,
        )

        ai_insights = await self._generate_ai(readings, profile, estimates, weather)
        if ai_insights:
            insights = [*ai_insights, *rule_insights]
            metadata.type = "ai-enhanced"
            metadata.ai_insights_count = len(ai_insights)
            # ── 7. Promote ──────────────────────────────────
            await self._store.put_cache_ready(
                user_id, request_hash, insights, epoch + READY_TTL_SECONDS, epoch
            )

        # ── 8. History ──────────────────────────────────────
        await self._store.put_history(HistoryEntryOut(
            user_id=user_id,
            date=today,
            timestamp=now,
            insights=insights,
            metadata=metadata.model_dump(mode="json", exclude_none=True),
            expires_at=epoch + HISTORY_TTL_SECONDS,
        ))

        metadata.generated_at = now
        metadata.weather = weather
        metadata.appliance_estimates = estimates
        logger.info(
            "Generated %d insights (%s) for user %s", len(insights), metadata.type, user_id
        )
        return InsightsGenerated(insights=insights, metadata=metadata)

    # ── Internal helpers ────────────────────────────────────

    async def _rate_limited(
        self,
        user_id: str,
        request_hash: str,
        epoch: int,
        retry_after: int,
    ) -> RateLimited:
        """Best available fallback: ready cache → latest history → nothing."""
        cached = await self._store.get_cache_entry(user_id, request_hash, epoch)
        if cached is not None and cached.status == "ready" and cached.insights is not None:
            return RateLimited(
                retry_after=retry_after,
                using_cache=True,
                message=RATE_LIMITED_CACHE_MESSAGE,
                insights=cached.insights,
                metadata=InsightsMetadata(type="ai-enhanced", cache=True, rate_limited=True),
            )

        latest = await self._store.latest_history(user_id, epoch)
        if latest is not None:
            return RateLimited(
                retry_after=retry_after,
                using_cache=True,
                message=RATE_LIMITED_HISTORY_MESSAGE,
                insights=latest.insights,
                metadata=InsightsMetadata(
                    type="cached-latest", rate_limited=True, from_date=latest.date
                ),
            )

        return RateLimited(retry_after=retry_after)

    async def _fetch_weather(self, profile: UserProfileOut) -> WeatherSnapshot | None:
        if not profile.location:
            return None
        return await self._ctx.weather.fetch(profile.location)

    async def _generate_ai(
        self,
        readings: list[ReadingOut],
        profile: UserProfileOut,
        estimates: ApplianceEstimates,
        weather: WeatherSnapshot | None,
    ) -> list[InsightRecord] | None:
        if not self._ctx.settings.USE_AI or len(readings) < MIN_READINGS_FOR_AI:
            return None
        return await self._ctx.ai.generate_insights(readings, profile, estimates, weather)
