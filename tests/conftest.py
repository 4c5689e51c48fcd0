"""Shared fixtures for the PowerPulse test suite."""

import datetime
import os

# Settings and the engine are built at import time.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

from unittest.mock import AsyncMock

import pytest

from powerpulse.core.config import Settings
from powerpulse.core.context import AppContext
from powerpulse.schemas.profile import ApplianceRating, ProfileSave
from powerpulse.services.appliances import load_appliance_catalog
from powerpulse.services.llm_client import HuggingFaceInsightGenerator
from powerpulse.services.weather import OpenWeatherClient
from powerpulse.testing.memory_store import InMemoryInsightStore

# 2026-10-19 12:00:00 UTC
FIXED_NOW = datetime.datetime(2026, 10, 19, 12, 0, tzinfo=datetime.timezone.utc)


class FakeClock:
    """Settable clock for AppContext."""

    def __init__(self, now: datetime.datetime = FIXED_NOW) -> None:
        self.now = now

    def __call__(self) -> datetime.datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += datetime.timedelta(seconds=seconds)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        DATABASE_URL="sqlite+aiosqlite://",
        USE_AI=True,
        AI_MODEL="test/model",
        HUGGINGFACE_API_KEY="hf-test",
        OPENWEATHER_API_KEY="ow-test",
    )


@pytest.fixture
def weather_client() -> AsyncMock:
    client = AsyncMock(spec=OpenWeatherClient)
    client.fetch.return_value = None
    return client


@pytest.fixture
def ai_generator() -> AsyncMock:
    generator = AsyncMock(spec=HuggingFaceInsightGenerator)
    generator.generate_insights.return_value = None
    return generator


@pytest.fixture
def app_context(test_settings, weather_client, ai_generator, clock) -> AppContext:
    return AppContext(
        settings=test_settings,
        catalog=load_appliance_catalog(),
        weather=weather_client,
        ai=ai_generator,
        started_at=FIXED_NOW,
        clock=clock,
    )


@pytest.fixture
def memory_store() -> InMemoryInsightStore:
    return InMemoryInsightStore()


@pytest.fixture
def demo_profile() -> ProfileSave:
    return ProfileSave(
        user_id="user-1",
        location="Pune, IN",
        home_type="apartment",
        appliances={
            "AC": ApplianceRating(star_rating=3),
            "Refrigerator": ApplianceRating(star_rating=5),
        },
    )


async def seed_readings(store, user_id: str, usages: list[float], end: datetime.date) -> None:
    """Write one reading per day, the last one on `end`."""
    for offset, usage in enumerate(reversed(usages)):
        day = end - datetime.timedelta(days=offset)
        await store.put_reading(user_id, day.isoformat(), usage, FIXED_NOW)
