"""
Insights router — the HTTP face of the insight request pipeline.

GET /insights?user_id=

The pipeline returns a tagged result; this module is the only place those
results become status codes:
  • InsightsGenerated → 200 {insights, metadata}
  • NoReadings        → 200 {insights}
  • ProfileMissing    → 404 {error, message}
  • RateLimited       → 429 {error, retry_after, using_cache, …} + Retry-After
  • InsightsFailed    → 500 {error, message, insights}
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from powerpulse.auth.dependencies import require_authorization
from powerpulse.core.dependencies import Context, Store
from powerpulse.schemas.insights import InsightRecord
from powerpulse.services.insight_results import (
    InsightsFailed,
    InsightsGenerated,
    InsightsResult,
    NoReadings,
    ProfileMissing,
    RateLimited,
)
from powerpulse.services.insights_pipeline import InsightsPipeline

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Insights"], dependencies=[Depends(require_authorization)])

PROFILE_REQUIRED_MESSAGE = (
    "Please create your profile first to get personalized insights. Go to Profile "
    "Settings to add your location, home type, and appliances."
)


def _records(insights: list[InsightRecord]) -> list[dict[str, Any]]:
    return [i.model_dump(mode="json", exclude_none=True) for i in insights]


def insights_response(result: InsightsResult) -> JSONResponse:
    """Translate a pipeline result into the HTTP response."""
    if isinstance(result, InsightsGenerated):
        return JSONResponse(content={
            "insights": _records(result.insights),
            "metadata": result.metadata.model_dump(mode="json", exclude_none=True),
        })

    if isinstance(result, NoReadings):
        return JSONResponse(content={"insights": _records(result.insights)})

    if isinstance(result, ProfileMissing):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": "User profile not found", "message": PROFILE_REQUIRED_MESSAGE},
        )

    if isinstance(result, RateLimited):
        body: dict[str, Any] = {
            "error": "Too Many Requests",
            "retry_after": result.retry_after,
            "using_cache": result.using_cache,
        }
        if result.message is not None:
            body["message"] = result.message
        if result.insights is not None:
            body["insights"] = _records(result.insights)
        if result.metadata is not None:
            body["metadata"] = result.metadata.model_dump(mode="json", exclude_none=True)
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content=body,
            headers={"Retry-After": str(result.retry_after)},
        )

    if isinstance(result, InsightsFailed):
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Failed to generate insights",
                "message": result.message,
                "insights": _records(result.insights),
            },
        )

    raise TypeError(f"Unhandled insights result: {type(result).__name__}")


@router.get(
    "/insights",
    summary="Generate usage insights",
    description=(
        "Rule-based insights, optionally enhanced with AI. Rate limited to "
        "4 requests per minute with a 15 second cooldown; rejected requests "
        "fall back to cached or previously generated insights."
    ),
)
async def get_insights(
    ctx: Context,
    store: Store,
    user_id: str = Query(..., min_length=1, description="User to generate insights for"),
) -> JSONResponse:
    result = await InsightsPipeline(ctx, store).request_insights(user_id)
    return insights_response(result)
