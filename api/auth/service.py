"""
Auth business logic.
"""

from __future__ import annotations

import logging

from core.errors import InvalidCredentials

from . import repository, schemas, security

logger = logging.getLogger(__name__)


async def signup(payload: schemas.SignupRequest) -> dict:
    password_hash = security.hash_password(payload.password)
    user_row = await repository.create_user(
        username=payload.username,
        email=payload.email,
        password_hash=password_hash,
    )
    logger.info("user_created user_id=%s", user_row["id"])
    return user_row


async def login(payload: schemas.LoginRequest) -> tuple[schemas.LoginResponse, str]:
    """
    Check credentials and issue a session token.

    Unknown email and wrong password produce the same error.
    """
    user_row = await repository.get_user_by_email(payload.email)
    if user_row is None:
        raise InvalidCredentials()

    if not security.verify_password(payload.password, str(user_row.get("password_hash") or "")):
        raise InvalidCredentials()

    token = security.issue_token(
        user_id=int(user_row["id"]),
        username=str(user_row["username"]),
        display_name=user_row.get("display_name"),
    )
    response = schemas.LoginResponse(
        username=str(user_row["username"]),
        user_id=int(user_row["id"]),
        email=str(user_row["email"]),
        display_name=user_row.get("display_name"),
        avatar_url=user_row.get("avatar_url"),
    )
    logger.info("user_logged_in user_id=%s", user_row["id"])
    return response, token
