"""
User profile persistence.
"""

from __future__ import annotations

from core import db

from .schemas import ProfileChanges


async def get_public_profile(user_id: int) -> dict | None:
    return await db.fetch_one(
        """
        SELECT id, username, display_name, bio, avatar_url
        FROM users
        WHERE id = $1
        """,
        user_id,
    )


async def get_own_profile(user_id: int) -> dict | None:
    return await db.fetch_one(
        """
        SELECT id, username, display_name, email, bio, avatar_url
        FROM users
        WHERE id = $1
        """,
        user_id,
    )


async def get_avatar_url(user_id: int) -> str | None:
    row = await db.fetch_one("SELECT avatar_url FROM users WHERE id = $1", user_id)
    return row["avatar_url"] if row is not None else None


async def update_profile(user_id: int, changes: ProfileChanges) -> dict | None:
    """
    Apply the switched-on columns of `changes`; the statement text never varies.
    """
    return await db.fetch_one(
        """
        UPDATE users
        SET display_name = CASE WHEN $2 THEN $3 ELSE display_name END,
            bio = CASE WHEN $4 THEN $5 ELSE bio END,
            avatar_url = CASE WHEN $6 THEN $7 ELSE avatar_url END,
            updated_at = now()
        WHERE id = $1
        RETURNING id, username, display_name, email, bio, avatar_url
        """,
        user_id,
        changes.set_display_name,
        changes.display_name,
        changes.set_bio,
        changes.bio,
        changes.set_avatar,
        changes.avatar_url,
    )
