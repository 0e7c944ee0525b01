"""
Profile schemas.

`ProfileUpdateRequest` is what the client sends; `ProfileChanges` is the
explicit list of columns the update statement may touch, each with its own
on/off switch.
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, Field


class ProfileUpdateRequest(BaseModel):
    name: str | None = Field(default=None, max_length=100)
    bio: str | None = Field(default=None, max_length=2000)
    # Either a URL, an empty string (clear), or a data:image/...;base64 URI.
    avatar_url: str | None = None


@dataclass(frozen=True)
class ProfileChanges:
    set_display_name: bool = False
    display_name: str | None = None
    set_bio: bool = False
    bio: str | None = None
    set_avatar: bool = False
    avatar_url: str | None = None

    def is_empty(self) -> bool:
        return not (self.set_display_name or self.set_bio or self.set_avatar)
