"""
Pydantic v2 response schema for the usage analysis endpoint.

Statistics are computed over every stored reading for the user.
"""

from pydantic import BaseModel, Field

from powerpulse.schemas.readings import ReadingOut


class UsageAnalysis(BaseModel):
    """Mean / max / min usage plus the readings they were computed from."""

    average: float = Field(..., description="Mean daily usage in kWh.")
    max: float
    min: float
    readings: list[ReadingOut] = Field(
        default_factory=list,
        description="All readings, ordered by date ascending.",
    )
    tips: list[str] = Field(default_factory=list)
