"""
Pydantic v2 schemas for user profiles.

The dashboard historically sent `starRating`; both spellings are accepted
on input, and the snake_case name is what gets stored and returned.
"""

from __future__ import annotations

import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ApplianceRating(BaseModel):
    """Declared efficiency of one appliance."""

    star_rating: int = Field(
        ...,
        ge=1,
        le=5,
        validation_alias=AliasChoices("star_rating", "starRating"),
        examples=[3],
    )


class ProfileSave(BaseModel):
    """
    Payload accepted by POST /profile.

    A save is a full replace — every field is required.
    """

    user_id: str = Field(..., min_length=1, max_length=128)
    location: str = Field(
        ...,
        min_length=1,
        examples=["Pune, IN"],
        description="Free-text, geocodable location for weather lookups.",
    )
    home_type: str = Field(
        ...,
        min_length=1,
        max_length=50,
        examples=["apartment", "independent-house"],
    )
    appliances: dict[str, ApplianceRating] = Field(
        ...,
        examples=[{"AC": {"star_rating": 3}, "Refrigerator": {"star_rating": 5}}],
        description="Appliance key → declared star rating.",
    )


class UserProfileOut(BaseModel):
    """A stored profile."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    location: str
    home_type: str
    appliances: dict[str, ApplianceRating]
    created_at: datetime.datetime
    updated_at: datetime.datetime


class ProfileSaved(BaseModel):
    message: str
    profile: UserProfileOut
