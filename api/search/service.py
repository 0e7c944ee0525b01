"""
Search business logic.
"""

from __future__ import annotations

import logging

from . import repository

logger = logging.getLogger(__name__)


async def search(q: str | None) -> dict:
    """
    Match `q` anywhere in usernames, display names and build names.

    A blank query returns empty lists without querying the database.
    """
    term = (q or "").strip()
    if not term:
        return {"users": [], "builds": []}

    pattern = f"%{term}%"
    users = await repository.search_users(pattern)
    builds = await repository.search_builds(pattern)
    logger.debug("search term=%r users=%s builds=%s", term, len(users), len(builds))
    return {"users": users, "builds": builds}
