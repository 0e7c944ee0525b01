"""
Follow graph persistence.
"""

from __future__ import annotations

import asyncpg

from core import db
from core.errors import AlreadyFollowing, NotFoundError


async def insert_follow(follower_id: int, followed_id: int) -> None:
    try:
        await db.execute(
            "INSERT INTO follows (follower_id, followed_id) VALUES ($1, $2)",
            follower_id,
            followed_id,
        )
    except asyncpg.UniqueViolationError as exc:
        raise AlreadyFollowing() from exc
    except asyncpg.ForeignKeyViolationError as exc:
        raise NotFoundError("User not found.") from exc


async def delete_follow(follower_id: int, followed_id: int) -> int:
    return await db.execute(
        "DELETE FROM follows WHERE follower_id = $1 AND followed_id = $2",
        follower_id,
        followed_id,
    )


async def is_following(follower_id: int, followed_id: int) -> bool:
    row = await db.fetch_one(
        """
        SELECT 1 AS ok
        FROM follows
        WHERE follower_id = $1
          AND followed_id = $2
        """,
        follower_id,
        followed_id,
    )
    return row is not None


async def list_followers(user_id: int) -> list[dict]:
    return await db.fetch_all(
        """
        SELECT u.id, u.username, u.display_name, u.avatar_url
        FROM users u
        JOIN follows f ON u.id = f.follower_id
        WHERE f.followed_id = $1
        ORDER BY u.username
        """,
        user_id,
    )


async def list_following(user_id: int) -> list[dict]:
    return await db.fetch_all(
        """
        SELECT u.id, u.username, u.display_name, u.avatar_url
        FROM users u
        JOIN follows f ON u.id = f.followed_id
        WHERE f.follower_id = $1
        ORDER BY u.username
        """,
        user_id,
    )
