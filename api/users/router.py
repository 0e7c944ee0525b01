"""
Profile API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from auth import dependencies as auth_dependencies
from auth.security import Principal

from . import schemas, service

router = APIRouter()


@router.get("/user-profile/{user_id}")
async def get_user_profile(user_id: int) -> dict:
    user = await service.get_public_profile(user_id)
    return {"success": True, "user": user}


@router.put("/profile/{user_id}")
async def update_profile(
    user_id: int,
    payload: schemas.ProfileUpdateRequest,
    current_user: Principal = Depends(auth_dependencies.get_current_user),
) -> dict:
    user, changed = await service.update_profile(user_id, payload, current_user_id=current_user.id)
    message = "Profile updated successfully." if changed else "No information provided to update."
    return {"success": True, "message": message, "user": user}
