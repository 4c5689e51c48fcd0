"""Tests for the insights cache key."""

import datetime

import pytest

from powerpulse.schemas.profile import ApplianceRating, UserProfileOut
from powerpulse.schemas.readings import ReadingOut
from powerpulse.services.request_hash import compute_request_hash

TS = datetime.datetime(2026, 10, 19, tzinfo=datetime.timezone.utc)


def _readings(usages: list[float]) -> list[ReadingOut]:
    start = datetime.date(2026, 10, 1)
    return [
        ReadingOut(
            user_id="u1",
            date=(start + datetime.timedelta(days=i)).isoformat(),
            usage=u,
            timestamp=TS,
        )
        for i, u in enumerate(usages)
    ]


def _profile(appliances: dict[str, int], home_type: str = "apartment") -> UserProfileOut:
    return UserProfileOut(
        user_id="u1",
        location="Pune, IN",
        home_type=home_type,
        appliances={k: ApplianceRating(star_rating=v) for k, v in appliances.items()},
        created_at=TS,
        updated_at=TS,
    )


@pytest.fixture
def base():
    readings = _readings([10.0, 11.0, 12.0, 13.0, 14.0, 15.0, 16.0, 17.0, 18.0])
    profile = _profile({"AC": 3, "Refrigerator": 5})
    return readings, profile


def test_hash_is_sha256_hex(base):
    readings, profile = base
    digest = compute_request_hash(readings, profile, "m", "2026-10-19")

    assert len(digest) == 64
    int(digest, 16)


def test_stable_under_appliance_reordering(base):
    readings, profile = base
    reordered = _profile({"Refrigerator": 5, "AC": 3})

    assert compute_request_hash(readings, profile, "m", "2026-10-19") == compute_request_hash(
        readings, reordered, "m", "2026-10-19"
    )


def test_stable_under_reading_order(base):
    readings, profile = base

    assert compute_request_hash(readings, profile, "m", "2026-10-19") == compute_request_hash(
        list(reversed(readings)), profile, "m", "2026-10-19"
    )


def test_ignores_readings_older_than_newest_seven(base):
    readings, profile = base
    changed = list(readings)
    changed[0] = changed[0].model_copy(update={"usage": 99.0})

    assert compute_request_hash(readings, profile, "m", "2026-10-19") == compute_request_hash(
        changed, profile, "m", "2026-10-19"
    )


def test_changes_with_recent_reading(base):
    readings, profile = base
    changed = list(readings)
    changed[-1] = changed[-1].model_copy(update={"usage": 17.5})

    assert compute_request_hash(readings, profile, "m", "2026-10-19") != compute_request_hash(
        changed, profile, "m", "2026-10-19"
    )


@pytest.mark.parametrize(
    "kwargs",
    [
        {"date_bucket": "2026-10-20"},
        {"model": "other/model"},
        {"profile": _profile({"AC": 3, "Refrigerator": 5}, home_type="villa")},
        {"profile": _profile({"AC": 4, "Refrigerator": 5})},
    ],
)
def test_changes_with_day_model_and_profile(base, kwargs):
    readings, profile = base
    args = {"readings": readings, "profile": profile, "model": "m", "date_bucket": "2026-10-19"}

    assert compute_request_hash(**args) != compute_request_hash(**{**args, **kwargs})
