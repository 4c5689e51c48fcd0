"""
Request fingerprint used as the insights cache key.

The hash covers exactly the inputs that change engine output:
  • the 7 most recent readings as (date, usage) pairs
  • the profile's home_type and appliances
  • the AI model identifier
  • the calendar day (UTC) the request falls on

Older readings are deliberately left out so the key stays stable as
history grows. Keys are serialised with sort_keys, so the order in which
appliances were declared does not matter.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Sequence

from powerpulse.schemas.profile import UserProfileOut
from powerpulse.schemas.readings import ReadingOut

# Bump when the payload layout changes so old cache rows stop matching.
REQUEST_HASH_VERSION = 1
RECENT_READINGS = 7


def compute_request_hash(
    readings: Sequence[ReadingOut],
    profile: UserProfileOut,
    model: str,
    date_bucket: str,
) -> str:
    """
    SHA-256 hex digest of the canonical request payload.

    Args:
        readings:    Any slice of the user's readings; order does not matter.
        profile:     The user's profile.
        model:       Active AI model identifier.
        date_bucket: ISO calendar day, e.g. "2026-10-19".
    """
    recent = sorted(readings, key=lambda r: r.date)[-RECENT_READINGS:]

    payload = {
        "readings": [{"d": r.date, "u": float(r.usage)} for r in recent],
        "profile": {
            "home_type": profile.home_type,
            "appliances": {
                key: rating.model_dump() for key, rating in profile.appliances.items()
            },
        },
        "model": model,
        "date_bucket": date_bucket,
        "v": REQUEST_HASH_VERSION,
    }
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
