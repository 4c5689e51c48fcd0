"""
SQLAlchemy implementation of the InsightStore contract.

Each write commits immediately so that every store call is a single
atomic step, like a put against a key-value store. The only write that
tolerates a conflict is the conditional pending insert.
"""

from __future__ import annotations

import datetime
import logging

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from powerpulse.models.insights import InsightsCacheEntry, InsightsHistoryEntry
from powerpulse.models.profile import UserProfile
from powerpulse.models.rate_limit import RateLimitState
from powerpulse.models.reading import Reading
from powerpulse.schemas.insights import CacheEntryOut, HistoryEntryOut, InsightRecord
from powerpulse.schemas.profile import ProfileSave, UserProfileOut
from powerpulse.schemas.rate_limit import RateLimitStateOut
from powerpulse.schemas.readings import ReadingOut
from powerpulse.services.store import InsightStore

logger = logging.getLogger(__name__)


def _utc(epoch_seconds: int) -> datetime.datetime:
    return datetime.datetime.fromtimestamp(epoch_seconds, tz=datetime.timezone.utc)


class SqlAlchemyInsightStore(InsightStore):
    """InsightStore backed by a request-scoped AsyncSession."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    # ── Readings ────────────────────────────────────────────
    async def put_reading(
        self,
        user_id: str,
        date: str,
        usage: float,
        timestamp: datetime.datetime,
    ) -> ReadingOut:
        row = await self._session.merge(
            Reading(user_id=user_id, date=date, usage=usage, timestamp=timestamp)
        )
        await self._session.commit()
        return ReadingOut.model_validate(row, from_attributes=True)

    async def list_readings(
        self,
        user_id: str,
        *,
        newest_first: bool = False,
        limit: int | None = None,
    ) -> list[ReadingOut]:
        order = Reading.date.desc() if newest_first else Reading.date.asc()
        stmt = select(Reading).where(Reading.user_id == user_id).order_by(order)
        if limit is not None:
            stmt = stmt.limit(limit)

        rows = (await self._session.execute(stmt)).scalars().all()
        return [ReadingOut.model_validate(r, from_attributes=True) for r in rows]

    # ── Profiles ────────────────────────────────────────────
    async def get_profile(self, user_id: str) -> UserProfileOut | None:
        row = await self._session.get(UserProfile, user_id)
        if row is None:
            return None
        return UserProfileOut.model_validate(row, from_attributes=True)

    async def save_profile(
        self,
        profile: ProfileSave,
        now: datetime.datetime,
    ) -> UserProfileOut:
        existing = await self._session.get(UserProfile, profile.user_id)
        created_at = existing.created_at if existing is not None else now

        row = await self._session.merge(
            UserProfile(
                user_id=profile.user_id,
                location=profile.location,
                home_type=profile.home_type,
                appliances={
                    key: rating.model_dump()
                    for key, rating in profile.appliances.items()
                },
                created_at=created_at,
                updated_at=now,
            )
        )
        await self._session.commit()
        return UserProfileOut.model_validate(row, from_attributes=True)

    async def delete_profile(self, user_id: str) -> bool:
        row = await self._session.get(UserProfile, user_id)
        if row is None:
            return False
        await self._session.delete(row)
        await self._session.commit()
        return True

    # ── Insights cache ──────────────────────────────────────
    async def get_cache_entry(
        self,
        user_id: str,
        request_hash: str,
        now: int,
    ) -> CacheEntryOut | None:
        row = await self._session.get(
            InsightsCacheEntry,
            (user_id, request_hash),
            populate_existing=True,
        )
        if row is None or row.expires_at <= now:
            return None
        return CacheEntryOut.model_validate(row, from_attributes=True)

    async def put_cache_pending(
        self,
        user_id: str,
        request_hash: str,
        expires_at: int,
        now: int,
    ) -> bool:
        existing = await self._session.get(InsightsCacheEntry, (user_id, request_hash))
        if existing is not None:
            if existing.expires_at > now:
                return False
            # Expired placeholder — replace it rather than leave it orphaned.
            await self._session.delete(existing)
            await self._session.flush()

        self._session.add(
            InsightsCacheEntry(
                user_id=user_id,
                request_hash=request_hash,
                status="pending",
                insights=None,
                updated_at=_utc(now),
                expires_at=expires_at,
            )
        )
        try:
            await self._session.commit()
        except IntegrityError:
            await self._session.rollback()
            logger.debug(
                "Pending cache insert lost the race user=%s hash=%.8s",
                user_id,
                request_hash,
            )
            return False
        return True

    async def put_cache_ready(
        self,
        user_id: str,
        request_hash: str,
        insights: list[InsightRecord],
        expires_at: int,
        now: int,
    ) -> None:
        await self._session.merge(
            InsightsCacheEntry(
                user_id=user_id,
                request_hash=request_hash,
                status="ready",
                insights=[i.model_dump() for i in insights],
                updated_at=_utc(now),
                expires_at=expires_at,
            )
        )
        await self._session.commit()

    # ── Rate limits ─────────────────────────────────────────
    async def get_rate_limit_state(self, user_id: str) -> RateLimitStateOut | None:
        row = await self._session.get(RateLimitState, user_id, populate_existing=True)
        if row is None:
            return None
        return RateLimitStateOut.model_validate(row, from_attributes=True)

    async def save_rate_limit_state(self, state: RateLimitStateOut) -> None:
        await self._session.merge(RateLimitState(**state.model_dump()))
        await self._session.commit()

    # ── Insights history ────────────────────────────────────
    async def put_history(self, entry: HistoryEntryOut) -> None:
        await self._session.merge(
            InsightsHistoryEntry(
                user_id=entry.user_id,
                date=entry.date,
                timestamp=entry.timestamp,
                insights=[i.model_dump() for i in entry.insights],
                metadata_=entry.metadata,
                expires_at=entry.expires_at,
            )
        )
        await self._session.commit()

    async def latest_history(self, user_id: str, now: int) -> HistoryEntryOut | None:
        stmt = (
            select(InsightsHistoryEntry)
            .where(
                InsightsHistoryEntry.user_id == user_id,
                InsightsHistoryEntry.expires_at > now,
            )
            .order_by(InsightsHistoryEntry.date.desc())
            .limit(1)
        )
        row = (await self._session.execute(stmt)).scalars().first()
        if row is None:
            return None
        return HistoryEntryOut.model_validate(row, from_attributes=True)

    # ── Housekeeping ────────────────────────────────────────
    async def purge_expired(self, now: int, rate_limit_idle_seconds: int) -> int:
        idle_before = now - rate_limit_idle_seconds

        cache = await self._session.execute(
            delete(InsightsCacheEntry).where(InsightsCacheEntry.expires_at <= now)
        )
        history = await self._session.execute(
            delete(InsightsHistoryEntry).where(InsightsHistoryEntry.expires_at <= now)
        )
        limits = await self._session.execute(
            delete(RateLimitState).where(
                RateLimitState.window_start <= idle_before,
                RateLimitState.last_request_at <= idle_before,
            )
        )
        await self._session.commit()
        return cache.rowcount + history.rowcount + limits.rowcount
