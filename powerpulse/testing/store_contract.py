"""InsightStore contract tests.

Every store backend must satisfy these. Subclass and provide the
`store` fixture:

    class TestSqlStoreContract(InsightStoreContractTest):
        @pytest.fixture
        async def store(self, session):
            return SqlAlchemyInsightStore(session)
"""

import datetime
import uuid
from abc import ABC, abstractmethod

import pytest

from powerpulse.schemas.insights import HistoryEntryOut, InsightRecord
from powerpulse.schemas.profile import ApplianceRating, ProfileSave
from powerpulse.schemas.rate_limit import RateLimitStateOut

NOW = 1_760_000_000
NOW_DT = datetime.datetime.fromtimestamp(NOW, tz=datetime.timezone.utc)


def _record(message: str = "Your usage is steady this week, nice work.") -> InsightRecord:
    return InsightRecord(type="info", icon="📊", title="Steady", message=message)


class InsightStoreContractTest(ABC):
    """Base class for InsightStore contract tests."""

    @pytest.fixture
    @abstractmethod
    def store(self):
        """Create the store instance under test."""
        pass

    @pytest.fixture
    def user_id(self) -> str:
        return f"user-{uuid.uuid4().hex[:8]}"

    # ── Readings ────────────────────────────────────────────
    async def test_readings_are_ordered_by_date(self, store, user_id):
        for date, usage in [("2026-10-03", 3.0), ("2026-10-01", 1.0), ("2026-10-02", 2.0)]:
            await store.put_reading(user_id, date, usage, NOW_DT)

        ascending = await store.list_readings(user_id)
        newest = await store.list_readings(user_id, newest_first=True, limit=2)

        assert [r.date for r in ascending] == ["2026-10-01", "2026-10-02", "2026-10-03"]
        assert [r.date for r in newest] == ["2026-10-03", "2026-10-02"]

    async def test_reading_for_same_day_overwrites(self, store, user_id):
        await store.put_reading(user_id, "2026-10-01", 4.0, NOW_DT)
        await store.put_reading(user_id, "2026-10-01", 6.5, NOW_DT)

        readings = await store.list_readings(user_id)

        assert len(readings) == 1
        assert readings[0].usage == 6.5

    async def test_readings_are_partitioned_by_user(self, store, user_id):
        await store.put_reading(user_id, "2026-10-01", 4.0, NOW_DT)
        await store.put_reading("someone-else", "2026-10-01", 9.0, NOW_DT)

        assert [r.usage for r in await store.list_readings(user_id)] == [4.0]

    # ── Profiles ────────────────────────────────────────────
    async def test_profile_round_trip_and_replace(self, store, user_id):
        first = ProfileSave(
            user_id=user_id,
            location="Pune, IN",
            home_type="apartment",
            appliances={"AC": ApplianceRating(star_rating=3)},
        )
        saved = await store.save_profile(first, NOW_DT)

        second = first.model_copy(
            update={"home_type": "villa", "appliances": {"Geyser": ApplianceRating(star_rating=2)}}
        )
        later = NOW_DT + datetime.timedelta(days=1)
        replaced = await store.save_profile(second, later)
        fetched = await store.get_profile(user_id)

        assert saved.home_type == "apartment"
        assert fetched is not None
        assert fetched.home_type == "villa"
        assert set(fetched.appliances) == {"Geyser"}
        assert replaced.created_at.replace(tzinfo=None) == NOW_DT.replace(tzinfo=None)

    async def test_get_missing_profile_returns_none(self, store):
        assert await store.get_profile("nobody-12345") is None

    async def test_delete_profile(self, store, user_id):
        await store.save_profile(
            ProfileSave(user_id=user_id, location="X", home_type="apartment", appliances={}),
            NOW_DT,
        )

        assert await store.delete_profile(user_id) is True
        assert await store.get_profile(user_id) is None
        assert await store.delete_profile(user_id) is False

    # ── Cache ───────────────────────────────────────────────
    async def test_pending_insert_is_conditional(self, store, user_id):
        assert await store.put_cache_pending(user_id, "h1", NOW + 1800, NOW) is True
        assert await store.put_cache_pending(user_id, "h1", NOW + 1800, NOW) is False

        entry = await store.get_cache_entry(user_id, "h1", NOW)
        assert entry is not None
        assert entry.status == "pending"
        assert entry.insights is None

    async def test_expired_pending_entry_reads_absent_and_is_replaced(self, store, user_id):
        await store.put_cache_pending(user_id, "h1", NOW + 10, NOW)
        later = NOW + 11

        assert await store.get_cache_entry(user_id, "h1", later) is None
        assert await store.put_cache_pending(user_id, "h1", later + 1800, later) is True

    async def test_ready_entry_overwrites_pending(self, store, user_id):
        await store.put_cache_pending(user_id, "h1", NOW + 1800, NOW)
        await store.put_cache_ready(user_id, "h1", [_record()], NOW + 120, NOW)

        entry = await store.get_cache_entry(user_id, "h1", NOW)
        assert entry is not None
        assert entry.status == "ready"
        assert [i.message for i in entry.insights] == [_record().message]
        assert await store.get_cache_entry(user_id, "h1", NOW + 120) is None

    # ── Rate limits ─────────────────────────────────────────
    async def test_rate_limit_state_round_trip(self, store, user_id):
        assert await store.get_rate_limit_state(user_id) is None

        state = RateLimitStateOut(user_id=user_id, window_start=NOW, count=2, last_request_at=NOW)
        await store.save_rate_limit_state(state)
        await store.save_rate_limit_state(state.model_copy(update={"count": 3}))

        fetched = await store.get_rate_limit_state(user_id)
        assert fetched is not None
        assert fetched.count == 3

    # ── History ─────────────────────────────────────────────
    async def test_latest_history_is_newest_unexpired(self, store, user_id):
        for date, expires_at in [
            ("2026-10-01", NOW + 100),
            ("2026-10-03", NOW + 100),
            ("2026-10-02", NOW + 100),
        ]:
            await store.put_history(
                HistoryEntryOut(
                    user_id=user_id,
                    date=date,
                    timestamp=NOW_DT,
                    insights=[_record()],
                    metadata={"type": "rule-based"},
                    expires_at=expires_at,
                )
            )

        latest = await store.latest_history(user_id, NOW)

        assert latest is not None
        assert latest.date == "2026-10-03"
        assert latest.metadata == {"type": "rule-based"}
        assert await store.latest_history(user_id, NOW + 100) is None

    # ── Housekeeping ────────────────────────────────────────
    async def test_purge_expired_removes_only_stale_rows(self, store, user_id):
        await store.put_cache_pending(user_id, "old", NOW - 1, NOW - 1800)
        await store.put_cache_pending(user_id, "live", NOW + 60, NOW)
        await store.save_rate_limit_state(
            RateLimitStateOut(user_id=user_id, window_start=NOW - 600, count=4, last_request_at=NOW - 600)
        )
        await store.save_rate_limit_state(
            RateLimitStateOut(user_id="active", window_start=NOW - 10, count=1, last_request_at=NOW - 10)
        )

        removed = await store.purge_expired(NOW, rate_limit_idle_seconds=60)

        assert removed == 2
        assert await store.get_cache_entry(user_id, "live", NOW) is not None
        assert await store.get_rate_limit_state(user_id) is None
        assert await store.get_rate_limit_state("active") is not None
