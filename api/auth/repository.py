"""
Auth persistence helpers.
"""

from __future__ import annotations

import asyncpg

from core import db
from core.errors import DuplicateAccount, ParentInsertFailed


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


async def create_user(*, username: str, email: str, password_hash: str) -> dict:
    """
    Insert a user; the display name starts out as the username.
    """
    try:
        row = await db.fetch_one(
            """
            INSERT INTO users (username, email, password_hash, display_name)
            VALUES ($1, $2, $3, $1)
            RETURNING id, username, email, display_name, created_at
            """,
            username.strip(),
            normalize_email(email),
            password_hash,
        )
    except asyncpg.UniqueViolationError as exc:
        raise DuplicateAccount() from exc
    if row is None:
        raise ParentInsertFailed("Failed to create user.")
    return row


async def get_user_by_email(email: str) -> dict | None:
    return await db.fetch_one(
        """
        SELECT id, username, email, password_hash, display_name, avatar_url
        FROM users
        WHERE lower(email) = lower($1)
        """,
        normalize_email(email),
    )
