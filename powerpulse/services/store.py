"""
Persistence contract for readings, profiles and insight artifacts.

The pipeline only needs key-value / sorted-range semantics:
  • get by key
  • put (optionally conditional)
  • range query by partition, ordered by sort key

Every write is atomic and durable on return — implementations must not
batch writes across calls. Expiry (`expires_at`, epoch seconds) is
enforced on read: an expired row is reported as absent.
"""

from __future__ import annotations

import datetime
from abc import ABC, abstractmethod

from powerpulse.schemas.insights import CacheEntryOut, HistoryEntryOut, InsightRecord
from powerpulse.schemas.profile import ProfileSave, UserProfileOut
from powerpulse.schemas.rate_limit import RateLimitStateOut
from powerpulse.schemas.readings import ReadingOut


class InsightStore(ABC):
    """Abstract base class for PowerPulse persistence backends."""

    # ── Readings (partition=user_id, sort=date) ─────────────
    @abstractmethod
    async def put_reading(
        self,
        user_id: str,
        date: str,
        usage: float,
        timestamp: datetime.datetime,
    ) -> ReadingOut:
        """Insert or overwrite the reading for (user_id, date)."""

    @abstractmethod
    async def list_readings(
        self,
        user_id: str,
        *,
        newest_first: bool = False,
        limit: int | None = None,
    ) -> list[ReadingOut]:
        """Return a user's readings ordered by date."""

    # ── Profiles (key=user_id) ──────────────────────────────
    @abstractmethod
    async def get_profile(self, user_id: str) -> UserProfileOut | None:
        ...

    @abstractmethod
    async def save_profile(
        self,
        profile: ProfileSave,
        now: datetime.datetime,
    ) -> UserProfileOut:
        """Replace the whole profile. created_at survives from an existing row."""

    @abstractmethod
    async def delete_profile(self, user_id: str) -> bool:
        """Delete a profile. Returns False if there was nothing to delete."""

    # ── Insights cache (partition=user_id, sort=request_hash) ─
    @abstractmethod
    async def get_cache_entry(
        self,
        user_id: str,
        request_hash: str,
        now: int,
    ) -> CacheEntryOut | None:
        ...

    @abstractmethod
    async def put_cache_pending(
        self,
        user_id: str,
        request_hash: str,
        expires_at: int,
        now: int,
    ) -> bool:
        """
        Create a pending entry only if no live entry exists.

        Returns True if this call created the entry, False if a live entry
        was already present or a concurrent writer won the race.
        """

    @abstractmethod
    async def put_cache_ready(
        self,
        user_id: str,
        request_hash: str,
        insights: list[InsightRecord],
        expires_at: int,
        now: int,
    ) -> None:
        ...

    # ── Rate limits (key=user_id) ───────────────────────────
    @abstractmethod
    async def get_rate_limit_state(self, user_id: str) -> RateLimitStateOut | None:
        ...

    @abstractmethod
    async def save_rate_limit_state(self, state: RateLimitStateOut) -> None:
        ...

    # ── Insights history (partition=user_id, sort=date) ─────
    @abstractmethod
    async def put_history(self, entry: HistoryEntryOut) -> None:
        """Insert or overwrite the entry for (user_id, date)."""

    @abstractmethod
    async def latest_history(self, user_id: str, now: int) -> HistoryEntryOut | None:
        """Most recent unexpired entry by generation date, or None."""

    # ── Housekeeping ────────────────────────────────────────
    @abstractmethod
    async def purge_expired(self, now: int, rate_limit_idle_seconds: int) -> int:
        """
        Delete expired cache and history rows, plus rate-limit rows whose
        window_start and last_request_at are both older than
        rate_limit_idle_seconds. Returns the number of rows removed.
        """
