"""
Auth dependencies for protected FastAPI routes.

The session token is read from the `token` cookie on every request; the
decoded principal lives only for that request.
"""

from __future__ import annotations

from fastapi import Cookie

from core.errors import AuthenticationError

from . import security


async def get_current_user(
    token: str | None = Cookie(default=None, alias=security.SESSION_COOKIE_NAME),
) -> security.Principal:
    return security.validate_token(token)


async def get_optional_user(
    token: str | None = Cookie(default=None, alias=security.SESSION_COOKIE_NAME),
) -> security.Principal | None:
    """
    Like `get_current_user`, but anonymous and invalid sessions yield None.
    """
    try:
        return security.validate_token(token)
    except AuthenticationError:
        return None
