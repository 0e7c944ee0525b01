"""
Follow request schema.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class FollowRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    followed_id: int = Field(..., alias="followedId", gt=0)
