"""
Search API endpoint.
"""

from __future__ import annotations

from fastapi import APIRouter, Query

from . import service

router = APIRouter()


@router.get("/search")
async def search(q: str = Query(default="", max_length=200)) -> dict:
    results = await service.search(q)
    return {"success": True, **results}
