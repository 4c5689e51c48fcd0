"""
Dev seed script — create a demo profile and two weeks of readings.

Usage:
    python -m scripts.seed_demo [user_id]

This will:
  1. Save a profile (Pune apartment, AC / Refrigerator / Geyser / fans)
  2. Write 14 daily readings ending today, with a visible usage drop in
     the last week so the weekly-trend insight fires
  3. Print the user id to pass to GET /insights

Re-running is safe: readings and the profile are overwritten in place.
"""

import asyncio
import datetime
import sys

# Ensure the project root is on the path
sys.path.insert(0, ".")

from powerpulse.core.database import async_session_factory, engine
from powerpulse.schemas.profile import ApplianceRating, ProfileSave
from powerpulse.services.sql_store import SqlAlchemyInsightStore

DEMO_USAGE_KWH = [
    18.2, 19.5, 17.8, 20.1, 21.4, 19.9, 18.7,   # previous week
    16.4, 15.9, 17.2, 16.1, 15.4, 16.8, 22.5,   # this week, spike today
]


async def main(user_id: str) -> None:
    now = datetime.datetime.now(datetime.timezone.utc)
    today = now.date()

    async with async_session_factory() as session:
        store = SqlAlchemyInsightStore(session)

        # ── Profile ─────────────────────────────────────────
        await store.save_profile(
            ProfileSave(
                user_id=user_id,
                location="Pune, IN",
                home_type="apartment",
                appliances={
                    "AC": ApplianceRating(star_rating=3),
                    "Refrigerator": ApplianceRating(star_rating=4),
                    "Geyser": ApplianceRating(star_rating=2),
                    "CeilingFan": ApplianceRating(star_rating=5),
                },
            ),
            now,
        )

        # ── Readings (offset 0 = today) ─────────────────────
        for offset, usage in enumerate(reversed(DEMO_USAGE_KWH)):
            day = today - datetime.timedelta(days=offset)
            await store.put_reading(user_id, day.isoformat(), usage, now)

    # ── Print results ───────────────────────────────────────
    print()
    print("=" * 60)
    print("  Demo Seed Complete")
    print("=" * 60)
    print()
    print(f"  User ID:   {user_id}")
    print(f"  Readings:  {len(DEMO_USAGE_KWH)} days ending {today}")
    print()
    print(f"  Try:  GET /insights?user_id={user_id}")
    print("=" * 60)
    print()

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else "demo-user"))
