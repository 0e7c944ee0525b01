"""
Follow API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from auth import dependencies as auth_dependencies
from auth.security import Principal

from . import repository, schemas, service

router = APIRouter(prefix="/follows")


@router.post("", status_code=status.HTTP_201_CREATED)
async def follow(
    payload: schemas.FollowRequest,
    current_user: Principal = Depends(auth_dependencies.get_current_user),
) -> dict:
    await service.follow(current_user.id, payload.followed_id)
    return {"success": True, "message": "Successfully followed user."}


@router.delete("/{followed_id}")
async def unfollow(
    followed_id: int,
    current_user: Principal = Depends(auth_dependencies.get_current_user),
) -> dict:
    await service.unfollow(current_user.id, followed_id)
    return {"success": True, "message": "Successfully unfollowed user."}


@router.get("/status/{target_user_id}")
async def follow_status(
    target_user_id: int,
    current_user: Principal = Depends(auth_dependencies.get_current_user),
) -> dict:
    following = await repository.is_following(current_user.id, target_user_id)
    return {"success": True, "isFollowing": following}


@router.get("/{user_id}/followers")
async def followers(user_id: int) -> dict:
    rows = await repository.list_followers(user_id)
    return {"success": True, "followers": rows}


@router.get("/{user_id}/following")
async def following(user_id: int) -> dict:
    rows = await repository.list_following(user_id)
    return {"success": True, "following": rows}
