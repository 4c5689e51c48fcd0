"""
Readings router — meter reading capture and basic usage analysis.

POST /readings
  1. Requires a Bearer credential.
  2. Validates the payload (Pydantic) — negative usage → 422.
  3. Stamps the capture time server-side.
  4. Upserts the reading by (user_id, date) and returns it with 201.

GET /analysis?user_id=
  Mean / max / min over every stored reading plus static energy tips.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from powerpulse.auth.dependencies import require_authorization
from powerpulse.core.dependencies import Context, Store
from powerpulse.schemas.analysis import UsageAnalysis
from powerpulse.schemas.readings import ReadingCreate, ReadingCreated
from powerpulse.services.analysis import build_usage_analysis

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Readings"], dependencies=[Depends(require_authorization)])


@router.post(
    "/readings",
    response_model=ReadingCreated,
    status_code=status.HTTP_201_CREATED,
    summary="Record a daily meter reading",
    description=(
        "Stores the day's electricity usage for a user. Posting the same "
        "user and date again overwrites the earlier reading."
    ),
)
async def add_reading(
    payload: ReadingCreate,
    store: Store,
    ctx: Context,
) -> ReadingCreated:
    try:
        reading = await store.put_reading(
            user_id=payload.user_id,
            date=payload.date.isoformat(),
            usage=payload.usage,
            timestamp=ctx.clock(),
        )
    except Exception:
        logger.exception("Failed to persist reading for user %s", payload.user_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to store the reading. Please try again.",
        )

    logger.debug("Stored reading %s/%s = %.2f kWh", reading.user_id, reading.date, reading.usage)
    return ReadingCreated(message="Reading added successfully", data=reading)


@router.get(
    "/analysis",
    response_model=UsageAnalysis,
    summary="Usage statistics for a user",
)
async def get_analysis(
    store: Store,
    user_id: str = Query(..., min_length=1, description="User whose readings to analyse"),
) -> UsageAnalysis:
    """All readings oldest-first, with average / max / min and energy tips."""
    return await build_usage_analysis(store, user_id)
