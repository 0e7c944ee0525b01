"""
Business and review persistence (raw SQL).
"""

from __future__ import annotations

import asyncpg

from core import db
from core.errors import DuplicateReview, NotFoundError, StoreError

_REVIEW_WITH_USERNAME_SQL = """
    SELECT br.id, br.business_id, br.user_id, br.rating, br.comment,
           br.create_time, br.updated_at, u.username
    FROM business_reviews br
    JOIN users u ON br.user_id = u.id
"""


async def list_businesses() -> list[dict]:
    return await db.fetch_all(
        """
        SELECT *
        FROM businesses
        ORDER BY name
        """
    )


async def get_business_by_name(name: str) -> dict | None:
    return await db.fetch_one(
        """
        SELECT *
        FROM businesses
        WHERE name = $1
        """,
        name,
    )


async def list_reviews(business_id: int) -> list[dict]:
    """
    Reviews of a business with the reviewer's username, newest first.
    """
    return await db.fetch_all(
        _REVIEW_WITH_USERNAME_SQL
        + """
        WHERE br.business_id = $1
        ORDER BY br.create_time DESC, br.id DESC
        """,
        business_id,
    )


async def get_review(review_id: int) -> dict | None:
    return await db.fetch_one(
        _REVIEW_WITH_USERNAME_SQL
        + """
        WHERE br.id = $1
        """,
        review_id,
    )


async def review_exists(business_id: int, *, user_id: int) -> bool:
    row = await db.fetch_one(
        """
        SELECT 1 AS ok
        FROM business_reviews
        WHERE business_id = $1
          AND user_id = $2
        LIMIT 1
        """,
        business_id,
        user_id,
    )
    return row is not None


async def insert_review(business_id: int, *, user_id: int, rating: int, comment: str | None) -> int:
    try:
        row = await db.fetch_one(
            """
            INSERT INTO business_reviews (business_id, user_id, rating, comment)
            VALUES ($1, $2, $3, $4)
            RETURNING id
            """,
            business_id,
            user_id,
            rating,
            comment,
        )
    except asyncpg.UniqueViolationError as exc:
        # Lost a race with a concurrent submission from the same user.
        raise DuplicateReview() from exc
    except asyncpg.ForeignKeyViolationError as exc:
        raise NotFoundError("Business not found.") from exc
    if row is None:
        raise StoreError("Failed to insert review.")
    return int(row["id"])


async def get_review_owner(review_id: int) -> int | None:
    row = await db.fetch_one(
        "SELECT user_id FROM business_reviews WHERE id = $1",
        review_id,
    )
    return int(row["user_id"]) if row is not None else None


async def update_review(review_id: int, *, rating: int, comment: str | None) -> None:
    await db.execute(
        """
        UPDATE business_reviews
        SET rating = $2,
            comment = $3,
            updated_at = now()
        WHERE id = $1
        """,
        review_id,
        rating,
        comment,
    )
