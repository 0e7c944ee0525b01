"""
Build API endpoints.

Create and update take multipart forms with up to three file fields:
`coverImages`, `galleryImages` and `modImages`.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from auth import dependencies as auth_dependencies
from auth.security import Principal
from core.errors import ValidationError

from . import service

router = APIRouter(prefix="/builds")


@router.get("")
async def list_builds(
    user_id: int | None = Query(default=None, alias="userId"),
    current_user: Principal | None = Depends(auth_dependencies.get_optional_user),
) -> dict:
    """
    Builds of `userId`, or of the caller when no user is given.
    """
    target_user_id = user_id or (current_user.id if current_user is not None else None)
    if not target_user_id:
        raise ValidationError("User ID not found for fetching builds.")
    result = await service.list_builds(target_user_id)
    return {"success": True, **result}


@router.get("/{build_id}")
async def get_build(
    build_id: int,
    current_user: Principal | None = Depends(auth_dependencies.get_optional_user),
) -> dict:
    result = await service.get_build(
        build_id,
        viewer_id=current_user.id if current_user is not None else None,
    )
    return {"success": True, **result}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_build(
    car_name: str = Form(..., min_length=1),
    ownership: str = Form("current"),
    model: str | None = Form(None),
    description: str | None = Form(None),
    body_style: str | None = Form(None, alias="bodyStyle"),
    mods: str = Form("[]"),
    cover_images: list[UploadFile] | None = File(None, alias="coverImages"),
    gallery_images: list[UploadFile] | None = File(None, alias="galleryImages"),
    mod_images: list[UploadFile] | None = File(None, alias="modImages"),
    current_user: Principal = Depends(auth_dependencies.get_current_user),
) -> dict:
    fields = service.validate_fields(
        ownership=ownership,
        car_name=car_name,
        model=model,
        body_style=body_style,
        description=description,
    )
    build_id = await service.create_build(
        user_id=current_user.id,
        fields=fields,
        mods_json=mods,
        cover_files=cover_images,
        gallery_files=gallery_images,
        mod_files=mod_images,
    )
    return {"success": True, "buildId": build_id}


@router.put("/{build_id}")
async def update_build(
    build_id: int,
    ownership: str = Form("current"),
    car_name: str = Form(""),
    model: str = Form(""),
    description: str = Form(""),
    body_style: str | None = Form(None, alias="bodyStyle"),
    mods: str = Form("[]"),
    keep_covers: str = Form("[]", alias="keepCovers"),
    keep_gallery: str = Form("[]", alias="keepGallery"),
    cover_images: list[UploadFile] | None = File(None, alias="coverImages"),
    gallery_images: list[UploadFile] | None = File(None, alias="galleryImages"),
    mod_images: list[UploadFile] | None = File(None, alias="modImages"),
    current_user: Principal = Depends(auth_dependencies.get_current_user),
) -> dict:
    """
    Full reconciliation of an owned build: fields, covers, gallery and mods.
    """
    fields = service.validate_fields(
        ownership=ownership,
        car_name=car_name,
        model=model,
        body_style=body_style,
        description=description,
    )
    await service.update_build(
        build_id,
        user_id=current_user.id,
        fields=fields,
        mods_json=mods,
        keep_covers_json=keep_covers,
        keep_gallery_json=keep_gallery,
        cover_files=cover_images,
        gallery_files=gallery_images,
        mod_files=mod_images,
    )
    return {"success": True}


@router.delete("/{build_id}")
async def delete_build(
    build_id: int,
    current_user: Principal = Depends(auth_dependencies.get_current_user),
) -> dict:
    await service.delete_build(build_id, user_id=current_user.id)
    return {"success": True}
