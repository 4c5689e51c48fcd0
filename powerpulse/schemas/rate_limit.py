"""Pydantic v2 schema for the per-user rate limit record."""

from pydantic import BaseModel, ConfigDict


class RateLimitStateOut(BaseModel):
    """Window start, accepted count and last accepted request (epoch seconds)."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    window_start: int
    count: int
    last_request_at: int
