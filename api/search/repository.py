"""
Search queries (case-insensitive substring match).
"""

from __future__ import annotations

from core import db


async def search_users(pattern: str) -> list[dict]:
    return await db.fetch_all(
        """
        SELECT id, username, display_name, avatar_url
        FROM users
        WHERE username ILIKE $1
           OR display_name ILIKE $1
        ORDER BY username
        """,
        pattern,
    )


async def search_builds(pattern: str) -> list[dict]:
    return await db.fetch_all(
        """
        SELECT b.id, b.car_name, b.cover_image, b.user_id,
               u.username AS owner_username, u.display_name AS owner_display_name
        FROM builds b
        JOIN users u ON b.user_id = u.id
        WHERE b.car_name ILIKE $1
        ORDER BY b.id DESC
        """,
        pattern,
    )
