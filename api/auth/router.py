"""
Signup, login and logout.
"""

from __future__ import annotations

from fastapi import APIRouter, Response, status

from core import settings

from . import schemas, security, service

router = APIRouter()


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=security.SESSION_COOKIE_NAME,
        value=token,
        max_age=security.session_ttl_seconds(),
        httponly=True,
        secure=not settings.is_development(),
        samesite="lax",
    )


@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def signup(payload: schemas.SignupRequest) -> dict:
    await service.signup(payload)
    return {"success": True, "message": "User created successfully"}


@router.post("/login")
async def login(payload: schemas.LoginRequest, response: Response) -> dict:
    body, token = await service.login(payload)
    _set_session_cookie(response, token)
    return body.model_dump(by_alias=True)


@router.post("/logout")
async def logout(response: Response) -> dict:
    """
    Clear the session cookie. The token itself is not revoked server-side.
    """
    response.delete_cookie(
        key=security.SESSION_COOKIE_NAME,
        httponly=True,
        secure=not settings.is_development(),
        samesite="lax",
    )
    return {"success": True, "message": "Logged out successfully"}
