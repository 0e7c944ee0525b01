"""
Review business logic.

One review per (business, user): checked up front so the caller gets a
specific error rather than a constraint violation.
"""

from __future__ import annotations

import logging

from core.errors import AuthorizationError, DuplicateReview, NotFoundError

from . import repository, schemas

logger = logging.getLogger(__name__)


async def get_business(name: str) -> dict:
    business = await repository.get_business_by_name(name)
    if business is None:
        raise NotFoundError("Business not found")
    return business


async def create_review(business_id: int, payload: schemas.ReviewRequest, *, user_id: int) -> dict:
    if await repository.review_exists(business_id, user_id=user_id):
        raise DuplicateReview()

    review_id = await repository.insert_review(
        business_id,
        user_id=user_id,
        rating=payload.rating,
        comment=payload.comment or None,
    )
    logger.info("review_created review_id=%s business_id=%s", review_id, business_id)
    return await repository.get_review(review_id)


async def update_review(review_id: int, payload: schemas.ReviewRequest, *, user_id: int) -> dict:
    owner_id = await repository.get_review_owner(review_id)
    if owner_id is None:
        raise NotFoundError("Review not found.")
    if owner_id != user_id:
        raise AuthorizationError("You are not authorized to edit this review.")

    await repository.update_review(review_id, rating=payload.rating, comment=payload.comment or None)
    logger.info("review_updated review_id=%s", review_id)
    return await repository.get_review(review_id)
