"""
Build business logic.

The pure helpers at the top decide *what* a build's children become
(cover slots, mod image pairing); the async functions below store uploads
and hand the result to the repository in one transaction.

Mod images are matched to mods by position. On create, mod i gets uploaded
mod file i. On update, only mods flagged `hasImage` take a file, consuming the
uploads in the order they were sent; a flagged mod with no file left gets no
image, and an unflagged mod keeps its `image_url` if one was supplied.
"""

from __future__ import annotations

import json
import logging

import pydantic
from fastapi import UploadFile

from core import uploads
from core.errors import NotFoundError, ValidationError

from . import repository, schemas

logger = logging.getLogger(__name__)


def parse_json_list(raw: str | None, *, field_name: str) -> list:
    try:
        value = json.loads(raw or "[]")
    except json.JSONDecodeError as exc:
        raise ValidationError(f"Invalid JSON payload in '{field_name}'.") from exc
    if not isinstance(value, list):
        raise ValidationError(f"'{field_name}' must be a JSON array.")
    return value


def parse_mods(raw: str | None) -> list[schemas.ModIn]:
    items = parse_json_list(raw, field_name="mods")
    try:
        return [schemas.ModIn.model_validate(item) for item in items]
    except pydantic.ValidationError as exc:
        raise ValidationError("Invalid mod entry in 'mods'.") from exc


def parse_url_list(raw: str | None, *, field_name: str) -> list[str]:
    items = parse_json_list(raw, field_name=field_name)
    if not all(isinstance(item, str) for item in items):
        raise ValidationError(f"'{field_name}' must be a list of image URLs.")
    return items


def validate_fields(
    *,
    ownership: str,
    car_name: str,
    model: str | None,
    body_style: str | None,
    description: str | None,
) -> schemas.BuildFields:
    status = (ownership or "").strip().lower()
    if status not in schemas.OWNERSHIP_STATUSES:
        raise ValidationError(f"ownership must be one of {list(schemas.OWNERSHIP_STATUSES)}.")
    return schemas.BuildFields(
        ownership=status,
        car_name=car_name,
        model=model,
        body_style=body_style,
        description=description,
    )


def check_upload_counts(
    *,
    covers: list[UploadFile] | None,
    gallery: list[UploadFile] | None,
    mods: list[UploadFile] | None,
    max_mod_images: int,
) -> None:
    limits = (
        ("coverImages", covers, schemas.MAX_COVER_IMAGES),
        ("galleryImages", gallery, schemas.MAX_GALLERY_IMAGES),
        ("modImages", mods, max_mod_images),
    )
    for name, files, limit in limits:
        if len(files or []) > limit:
            raise ValidationError(f"Too many files in '{name}'. Max is {limit}.")


def merge_covers(kept: list[str], uploaded: list[str]) -> tuple[str | None, str | None]:
    """
    Kept covers first, then new uploads, both in order; only two slots exist.
    """
    ordered = [*kept, *uploaded]
    first = ordered[0] if len(ordered) > 0 else None
    second = ordered[1] if len(ordered) > 1 else None
    return first, second


def index_mod_images(mod_count: int, uploaded: list[str]) -> list[str | None]:
    """
    Create-time pairing: mod i gets uploaded file i, if there is one.
    """
    return [uploaded[i] if i < len(uploaded) else None for i in range(mod_count)]


def pair_mod_images(mods: list[schemas.ModIn], uploaded: list[str]) -> list[str | None]:
    """
    Update-time pairing driven by each mod's `hasImage` flag.
    """
    images: list[str | None] = []
    cursor = 0
    for mod in mods:
        if mod.has_image:
            if cursor < len(uploaded):
                images.append(uploaded[cursor])
                cursor += 1
            else:
                images.append(None)
        else:
            images.append(mod.image_url or None)
    return images


def build_mod_rows(mods: list[schemas.ModIn], images: list[str | None]) -> list[schemas.ModRow]:
    return [
        schemas.ModRow(
            category=mod.main or "",
            sub_category=mod.sub or None,
            mod_name=mod.name or "",
            image_url=image,
            mod_note=mod.details or None,
        )
        for mod, image in zip(mods, images)
    ]


async def _save_build_uploads(
    *,
    covers: list[UploadFile] | None,
    gallery: list[UploadFile] | None,
    mods: list[UploadFile] | None,
) -> schemas.BuildUploads:
    saved = schemas.BuildUploads()
    try:
        saved.covers.extend(await uploads.save_uploads(covers, field_name="coverImages"))
        saved.gallery.extend(await uploads.save_uploads(gallery, field_name="galleryImages"))
        saved.mods.extend(await uploads.save_uploads(mods, field_name="modImages"))
    except Exception:
        uploads.discard(saved.all_urls())
        raise
    return saved


async def list_builds(user_id: int) -> dict:
    current = await repository.list_builds(user_id, ownership_status="current")
    previous = await repository.list_builds(user_id, ownership_status="previous")
    return {"currentBuilds": current, "previousBuilds": previous}


async def get_build(build_id: int, *, viewer_id: int | None) -> dict:
    """
    A build with covers, gallery and mods. Anyone may read it; `isOwner`
    only tells the viewer whether they may edit it.
    """
    row = await repository.get_build(build_id)
    if row is None:
        raise NotFoundError("Build not found")

    gallery = await repository.list_gallery(build_id)
    mods = await repository.list_mods(build_id)

    build = {
        "id": row["id"],
        "user_id": row["user_id"],
        "owner_username": row["owner_username"],
        "ownership": row["ownership"],
        "car_name": row["car_name"],
        "model": row["model"],
        "description": row["description"],
        "bodyStyle": row["body_style"],
        "cover_image": row["cover_image"],
        "cover_image2": row["cover_image2"],
        "coverImages": [url for url in (row["cover_image"], row["cover_image2"]) if url],
        "galleryImages": gallery,
    }
    is_owner = viewer_id is not None and int(row["user_id"]) == viewer_id
    return {"build": build, "mods": mods, "isOwner": is_owner}


async def create_build(
    *,
    user_id: int,
    fields: schemas.BuildFields,
    mods_json: str | None,
    cover_files: list[UploadFile] | None,
    gallery_files: list[UploadFile] | None,
    mod_files: list[UploadFile] | None,
) -> int:
    mods = parse_mods(mods_json)
    check_upload_counts(
        covers=cover_files,
        gallery=gallery_files,
        mods=mod_files,
        max_mod_images=schemas.MAX_MOD_IMAGES_CREATE,
    )

    saved = await _save_build_uploads(covers=cover_files, gallery=gallery_files, mods=mod_files)
    try:
        build_id = await repository.insert_build(
            user_id=user_id,
            fields=fields,
            covers=merge_covers([], saved.covers),
            gallery=saved.gallery,
            mods=build_mod_rows(mods, index_mod_images(len(mods), saved.mods)),
        )
    except Exception:
        uploads.discard(saved.all_urls())
        raise

    logger.info(
        "build_created build_id=%s user_id=%s gallery=%s mods=%s",
        build_id,
        user_id,
        len(saved.gallery),
        len(mods),
    )
    return build_id


async def update_build(
    build_id: int,
    *,
    user_id: int,
    fields: schemas.BuildFields,
    mods_json: str | None,
    keep_covers_json: str | None,
    keep_gallery_json: str | None,
    cover_files: list[UploadFile] | None,
    gallery_files: list[UploadFile] | None,
    mod_files: list[UploadFile] | None,
) -> None:
    keep_covers = parse_url_list(keep_covers_json, field_name="keepCovers")
    keep_gallery = parse_url_list(keep_gallery_json, field_name="keepGallery")
    mods = parse_mods(mods_json)
    check_upload_counts(
        covers=cover_files,
        gallery=gallery_files,
        mods=mod_files,
        max_mod_images=schemas.MAX_MOD_IMAGES_UPDATE,
    )

    saved = await _save_build_uploads(covers=cover_files, gallery=gallery_files, mods=mod_files)
    try:
        await repository.reconcile_build(
            build_id,
            user_id=user_id,
            fields=fields,
            covers=merge_covers(keep_covers, saved.covers),
            keep_gallery=keep_gallery,
            new_gallery=saved.gallery,
            mods=build_mod_rows(mods, pair_mod_images(mods, saved.mods)),
        )
    except Exception:
        uploads.discard(saved.all_urls())
        raise

    logger.info(
        "build_updated build_id=%s kept_gallery=%s new_gallery=%s mods=%s",
        build_id,
        len(keep_gallery),
        len(saved.gallery),
        len(mods),
    )


async def delete_build(build_id: int, *, user_id: int) -> None:
    await repository.delete_build(build_id, user_id=user_id)
    logger.info("build_deleted build_id=%s user_id=%s", build_id, user_id)
