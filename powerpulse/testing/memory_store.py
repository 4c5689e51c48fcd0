"""
Dict-backed InsightStore for tests and local experiments.

Semantics match SqlAlchemyInsightStore: writes are immediate, reads
return copies, and expired rows read as absent.
"""

from __future__ import annotations

import datetime

from powerpulse.schemas.insights import CacheEntryOut, HistoryEntryOut, InsightRecord
from powerpulse.schemas.profile import ProfileSave, UserProfileOut
from powerpulse.schemas.rate_limit import RateLimitStateOut
from powerpulse.schemas.readings import ReadingOut
from powerpulse.services.store import InsightStore


class InMemoryInsightStore(InsightStore):
    """InsightStore kept entirely in process memory."""

    def __init__(self) -> None:
        self.readings: dict[tuple[str, str], ReadingOut] = {}
        self.profiles: dict[str, UserProfileOut] = {}
        self.cache: dict[tuple[str, str], CacheEntryOut] = {}
        self.rate_limits: dict[str, RateLimitStateOut] = {}
        self.history: dict[tuple[str, str], HistoryEntryOut] = {}

    async def put_reading(
        self,
        user_id: str,
        date: str,
        usage: float,
        timestamp: datetime.datetime,
    ) -> ReadingOut:
        reading = ReadingOut(user_id=user_id, date=date, usage=usage, timestamp=timestamp)
        self.readings[(user_id, date)] = reading
        return reading.model_copy()

    async def list_readings(
        self,
        user_id: str,
        *,
        newest_first: bool = False,
        limit: int | None = None,
    ) -> list[ReadingOut]:
        rows = sorted(
            (r for (uid, _), r in self.readings.items() if uid == user_id),
            key=lambda r: r.date,
            reverse=newest_first,
        )
        if limit is not None:
            rows = rows[:limit]
        return [r.model_copy() for r in rows]

    async def get_profile(self, user_id: str) -> UserProfileOut | None:
        profile = self.profiles.get(user_id)
        return profile.model_copy(deep=True) if profile is not None else None

    async def save_profile(
        self,
        profile: ProfileSave,
        now: datetime.datetime,
    ) -> UserProfileOut:
        existing = self.profiles.get(profile.user_id)
        stored = UserProfileOut(
            user_id=profile.user_id,
            location=profile.location,
            home_type=profile.home_type,
            appliances=profile.appliances,
            created_at=existing.created_at if existing is not None else now,
            updated_at=now,
        )
        self.profiles[profile.user_id] = stored
        return stored.model_copy(deep=True)

    async def delete_profile(self, user_id: str) -> bool:
        return self.profiles.pop(user_id, None) is not None

    async def get_cache_entry(
        self,
        user_id: str,
        request_hash: str,
        now: int,
    ) -> CacheEntryOut | None:
        entry = self.cache.get((user_id, request_hash))
        if entry is None or entry.expires_at <= now:
            return None
        return entry.model_copy(deep=True)

    async def put_cache_pending(
        self,
        user_id: str,
        request_hash: str,
        expires_at: int,
        now: int,
    ) -> bool:
        existing = self.cache.get((user_id, request_hash))
        if existing is not None and existing.expires_at > now:
            return False
        self.cache[(user_id, request_hash)] = CacheEntryOut(
            user_id=user_id,
            request_hash=request_hash,
            status="pending",
            expires_at=expires_at,
        )
        return True

    async def put_cache_ready(
        self,
        user_id: str,
        request_hash: str,
        insights: list[InsightRecord],
        expires_at: int,
        now: int,
    ) -> None:
        self.cache[(user_id, request_hash)] = CacheEntryOut(
            user_id=user_id,
            request_hash=request_hash,
            status="ready",
            insights=[i.model_copy() for i in insights],
            expires_at=expires_at,
        )

    async def get_rate_limit_state(self, user_id: str) -> RateLimitStateOut | None:
        state = self.rate_limits.get(user_id)
        return state.model_copy() if state is not None else None

    async def save_rate_limit_state(self, state: RateLimitStateOut) -> None:
        self.rate_limits[state.user_id] = state.model_copy()

    async def put_history(self, entry: HistoryEntryOut) -> None:
        self.history[(entry.user_id, entry.date)] = entry.model_copy(deep=True)

    async def latest_history(self, user_id: str, now: int) -> HistoryEntryOut | None:
        live = [
            e for (uid, _), e in self.history.items()
            if uid == user_id and e.expires_at > now
        ]
        if not live:
            return None
        return max(live, key=lambda e: e.date).model_copy(deep=True)

    async def purge_expired(self, now: int, rate_limit_idle_seconds: int) -> int:
        idle_before = now - rate_limit_idle_seconds
        expired_cache = [k for k, e in self.cache.items() if e.expires_at <= now]
        expired_history = [k for k, e in self.history.items() if e.expires_at <= now]
        idle_limits = [
            k for k, s in self.rate_limits.items()
            if s.window_start <= idle_before and s.last_request_at <= idle_before
        ]
        for key in expired_cache:
            del self.cache[key]
        for key in expired_history:
            del self.history[key]
        for user_id in idle_limits:
            del self.rate_limits[user_id]
        return len(expired_cache) + len(expired_history) + len(idle_limits)
