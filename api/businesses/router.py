"""
Business and review API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from auth import dependencies as auth_dependencies
from auth.security import Principal

from . import repository, schemas, service

router = APIRouter()


@router.get("/businesses")
async def list_businesses() -> dict:
    businesses = await repository.list_businesses()
    return {"success": True, "businesses": businesses}


@router.get("/businesses/{name}")
async def get_business(name: str) -> dict:
    business = await service.get_business(name)
    return {"success": True, "business": business}


@router.get("/businesses/{business_id}/reviews")
async def list_reviews(business_id: int) -> dict:
    reviews = await repository.list_reviews(business_id)
    return {"success": True, "reviews": reviews}


@router.post("/businesses/{business_id}/reviews", status_code=status.HTTP_201_CREATED)
async def create_review(
    business_id: int,
    payload: schemas.ReviewRequest,
    current_user: Principal = Depends(auth_dependencies.get_current_user),
) -> dict:
    review = await service.create_review(business_id, payload, user_id=current_user.id)
    return {"success": True, "message": "Review submitted successfully.", "review": review}


@router.put("/reviews/{review_id}")
async def update_review(
    review_id: int,
    payload: schemas.ReviewRequest,
    current_user: Principal = Depends(auth_dependencies.get_current_user),
) -> dict:
    review = await service.update_review(review_id, payload, user_id=current_user.id)
    return {"success": True, "message": "Review updated successfully.", "review": review}
