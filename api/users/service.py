"""
Profile business logic (self-service updates and avatar files).
"""

from __future__ import annotations

import logging

from core import uploads
from core.errors import AuthorizationError, NotFoundError

from . import repository, schemas

logger = logging.getLogger(__name__)


async def get_public_profile(user_id: int) -> dict:
    user = await repository.get_public_profile(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


async def _resolve_avatar(user_id: int, avatar_url: str | None) -> tuple[str | None, str | None]:
    """
    Turn the submitted avatar value into what gets stored.

    Returns (value, replaced). A data URI is written to disk and `replaced` is
    the previous avatar, to remove once the new one is stored; a malformed data
    URI stores NULL. An empty string clears the avatar.
    """
    if uploads.is_data_uri(avatar_url):
        previous = await repository.get_avatar_url(user_id)
        saved = uploads.save_avatar_data_uri(avatar_url, user_id=user_id)
        replaced = previous if saved is not None and previous and previous != saved else None
        return saved, replaced
    if avatar_url == "":
        return None, None
    return avatar_url, None


async def update_profile(
    user_id: int,
    payload: schemas.ProfileUpdateRequest,
    *,
    current_user_id: int,
) -> tuple[dict, bool]:
    """
    Returns (profile, changed).
    """
    if user_id != current_user_id:
        raise AuthorizationError("Unauthorized.")

    provided = payload.model_fields_set
    avatar_url, replaced_avatar = None, None
    if "avatar_url" in provided:
        avatar_url, replaced_avatar = await _resolve_avatar(user_id, payload.avatar_url)
    written_avatar = avatar_url if uploads.is_data_uri(payload.avatar_url) else None

    changes = schemas.ProfileChanges(
        set_display_name="name" in provided,
        display_name=payload.name,
        set_bio="bio" in provided,
        bio=payload.bio,
        set_avatar="avatar_url" in provided,
        avatar_url=avatar_url,
    )

    if changes.is_empty():
        user = await repository.get_own_profile(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user, False

    try:
        user = await repository.update_profile(user_id, changes)
        if user is None:
            raise NotFoundError("User not found")
    except Exception:
        if written_avatar:
            uploads.discard([written_avatar])
        raise

    if replaced_avatar:
        uploads.remove_avatar(replaced_avatar)
    logger.info(
        "profile_updated user_id=%s display_name=%s bio=%s avatar=%s",
        user_id,
        changes.set_display_name,
        changes.set_bio,
        changes.set_avatar,
    )
    return user, True
