"""
Follow business logic.
"""

from __future__ import annotations

import logging

from core.errors import NotFollowing, SelfFollow

from . import repository

logger = logging.getLogger(__name__)


async def follow(follower_id: int, followed_id: int) -> None:
    if follower_id == followed_id:
        raise SelfFollow()
    await repository.insert_follow(follower_id, followed_id)
    logger.info("follow_created follower_id=%s followed_id=%s", follower_id, followed_id)


async def unfollow(follower_id: int, followed_id: int) -> None:
    deleted = await repository.delete_follow(follower_id, followed_id)
    if deleted == 0:
        raise NotFollowing()
    logger.info("follow_deleted follower_id=%s followed_id=%s", follower_id, followed_id)
