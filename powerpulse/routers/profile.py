"""
Profile router — the onboarding data insights depend on.

GET    /profile?user_id=  → stored profile, or 404 with onboarding text
POST   /profile           → validate and fully replace
DELETE /profile?user_id=  → remove
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from powerpulse.auth.dependencies import require_authorization
from powerpulse.core.dependencies import Context, Store
from powerpulse.schemas.profile import ProfileSave, ProfileSaved, UserProfileOut

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Profile"], dependencies=[Depends(require_authorization)])

PROFILE_NOT_FOUND = {
    "error": "Profile not found",
    "message": "Please create a profile first to get personalized insights",
}


@router.get(
    "/profile",
    response_model=UserProfileOut,
    summary="Fetch a user's profile",
    responses={404: {"description": "User has not completed onboarding"}},
)
async def get_profile(
    store: Store,
    user_id: str = Query(..., min_length=1),
):
    profile = await store.get_profile(user_id)
    if profile is None:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content=PROFILE_NOT_FOUND)
    return profile


@router.post(
    "/profile",
    response_model=ProfileSaved,
    summary="Create or replace a user's profile",
    description=(
        "Requires location, home_type and appliances. Star ratings must be "
        "between 1 and 5; `starRating` is accepted as an alias."
    ),
)
async def save_profile(
    payload: ProfileSave,
    store: Store,
    ctx: Context,
) -> ProfileSaved:
    profile = await store.save_profile(payload, ctx.clock())
    logger.info(
        "Saved profile for user %s (%d appliances)", profile.user_id, len(profile.appliances)
    )
    return ProfileSaved(message="Profile saved successfully", profile=profile)


@router.delete(
    "/profile",
    summary="Delete a user's profile",
)
async def delete_profile(
    store: Store,
    user_id: str = Query(..., min_length=1),
) -> dict[str, str]:
    deleted = await store.delete_profile(user_id)
    if not deleted:
        logger.debug("Delete requested for missing profile %s", user_id)
    return {"message": "Profile deleted successfully"}
