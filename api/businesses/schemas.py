"""
Pydantic schemas for review endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

MIN_RATING = 1
MAX_RATING = 5


class ReviewRequest(BaseModel):
    # JSON integers only: no floats, numeric strings or booleans.
    rating: int = Field(..., strict=True, ge=MIN_RATING, le=MAX_RATING)
    comment: str | None = Field(default=None, max_length=5000)
