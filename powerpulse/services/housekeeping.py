"""
Store housekeeping.

Removes rows that can no longer affect any request:
  • expired cache entries
  • expired history entries
  • rate-limit rows idle long enough to equal a fresh default state

Runs once at startup from the lifespan; safe to run at any time.
"""

from __future__ import annotations

import datetime
import logging

from powerpulse.services.rate_limiter import RATE_LIMIT_IDLE_SECONDS
from powerpulse.services.store import InsightStore

logger = logging.getLogger(__name__)


async def purge_expired(store: InsightStore, now: datetime.datetime) -> int:
    """Delete dead rows. Returns how many were removed."""
    removed = await store.purge_expired(int(now.timestamp()), RATE_LIMIT_IDLE_SECONDS)
    logger.info("Housekeeping removed %d expired rows", removed)
    return removed
