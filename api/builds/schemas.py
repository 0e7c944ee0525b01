"""
Build schemas.

Builds arrive as multipart forms, so list-valued fields (`mods`,
`keepCovers`, `keepGallery`) are JSON strings parsed by the service.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, Field

OWNERSHIP_STATUSES = ("current", "previous")

MAX_COVER_IMAGES = 2
MAX_GALLERY_IMAGES = 10
MAX_MOD_IMAGES_CREATE = 50
MAX_MOD_IMAGES_UPDATE = 20


class ModIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    main: str | None = None
    sub: str | None = None
    name: str | None = None
    details: str | None = None
    # True when this mod expects the next newly uploaded mod image.
    has_image: bool = Field(default=False, alias="hasImage")
    # Previously stored image to keep when no new file is expected.
    image_url: str | None = None


@dataclass(frozen=True)
class BuildFields:
    ownership: str
    car_name: str
    model: str | None
    body_style: str | None
    description: str | None


@dataclass(frozen=True)
class ModRow:
    category: str
    sub_category: str | None
    mod_name: str
    image_url: str | None
    mod_note: str | None


@dataclass(frozen=True)
class BuildUploads:
    covers: list[str] = field(default_factory=list)
    gallery: list[str] = field(default_factory=list)
    mods: list[str] = field(default_factory=list)

    def all_urls(self) -> list[str]:
        return [*self.covers, *self.gallery, *self.mods]
