"""
Per-user rate limiter for insight generation.

One state row per user: {window_start, count, last_request_at}, all in
epoch seconds. Two limits apply to every request:
  • Cooldown — at least 15 s between accepted requests.
  • Window   — at most 4 accepted requests per 60 s fixed window.

Design decisions:
  • Check BEFORE persist — rejected requests (429) never touch the row,
    so hammering the endpoint does not extend the penalty.
  • Evaluation is a pure function; check_and_consume() only adds the
    load/save around it.
  • No cross-request locking — two concurrent requests may both read the
    same state. At this volume the occasional extra request is accepted.

A row idle for RATE_LIMIT_IDLE_SECONDS is indistinguishable from a fresh
default state, which is what lets housekeeping delete it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from powerpulse.schemas.rate_limit import RateLimitStateOut
from powerpulse.services.store import InsightStore

logger = logging.getLogger(__name__)

# ── Limits ──────────────────────────────────────────────────
WINDOW_SECONDS = 60
CAPACITY = 4
COOLDOWN_SECONDS = 15

RATE_LIMIT_IDLE_SECONDS = WINDOW_SECONDS + COOLDOWN_SECONDS


@dataclass(frozen=True, slots=True)
class RateLimitDecision:
    """Outcome of one limiter check.

    Attributes:
        allowed:     True when the request may proceed.
        retry_after: Seconds to wait before retrying (0 when allowed).
    """

    allowed: bool
    retry_after: int = 0


def default_state(user_id: str, now: int) -> RateLimitStateOut:
    """State for a user with no stored row."""
    return RateLimitStateOut(user_id=user_id, window_start=now, count=0, last_request_at=0)


def evaluate_rate_limit(
    state: RateLimitStateOut,
    now: int,
) -> tuple[RateLimitDecision, RateLimitStateOut | None]:
    """
    Apply window reset, cooldown and capacity to a loaded state.

    Returns the decision and, when accepted, the state to persist.
    A rejection returns None for the state.
    """
    window_start, count = state.window_start, state.count

    # ── 1. Window reset ─────────────────────────────────────
    if now - window_start >= WINDOW_SECONDS:
        window_start, count = now, 0

    # ── 2. Cooldown ─────────────────────────────────────────
    since_last = now - state.last_request_at
    if since_last < COOLDOWN_SECONDS:
        return RateLimitDecision(allowed=False, retry_after=COOLDOWN_SECONDS - since_last), None

    # ── 3. Capacity ─────────────────────────────────────────
    if count >= CAPACITY:
        retry_after = max(window_start + WINDOW_SECONDS - now, 1)
        return RateLimitDecision(allowed=False, retry_after=retry_after), None

    accepted = RateLimitStateOut(
        user_id=state.user_id,
        window_start=window_start,
        count=count + 1,
        last_request_at=now,
    )
    return RateLimitDecision(allowed=True), accepted


async def check_and_consume(store: InsightStore, user_id: str, now: int) -> RateLimitDecision:
    """
    Check the user's limits and record the request if it is allowed.

    Order: load → evaluate → persist (acceptances only).
    """
    state = await store.get_rate_limit_state(user_id)
    if state is None:
        state = default_state(user_id, now)

    decision, new_state = evaluate_rate_limit(state, now)

    if new_state is None:
        logger.info("Rate limit hit for user %s (retry after %ds)", user_id, decision.retry_after)
        return decision

    await store.save_rate_limit_state(new_state)
    return decision
