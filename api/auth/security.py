"""
Auth security helpers.

Sessions are stateless: a signed JWT carrying the user's id, username and
display name, delivered in an httpOnly cookie. Nothing is stored server-side,
so logout only clears the cookie and a token stays valid until it expires.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any

import bcrypt
import jwt

from core import settings
from core.errors import TokenInvalid, TokenMissing

SESSION_COOKIE_NAME = "token"
DEFAULT_SESSION_TTL_SECONDS = 3600
# bcrypt only accepts this many bytes of password.
MAX_PASSWORD_BYTES = 72


@dataclass(frozen=True)
class Principal:
    id: int
    username: str
    display_name: str | None = None


def jwt_secret() -> str:
    # Local default keeps development simple.
    # In production, set JWT_SECRET in environment.
    return settings.env_str("JWT_SECRET", "dev-change-this-secret")


def jwt_algorithm() -> str:
    return settings.env_str("JWT_ALG", "HS256")


def session_ttl_seconds() -> int:
    ttl = settings.env_int("SESSION_TTL_SECONDS", DEFAULT_SESSION_TTL_SECONDS)
    return ttl if ttl > 0 else DEFAULT_SESSION_TTL_SECONDS


def now_epoch_s() -> int:
    return int(time.time())


def hash_password(plain_password: str) -> str:
    password = (plain_password or "").encode("utf-8")
    if not password:
        raise ValueError("Password is empty.")
    if len(password) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password is longer than {MAX_PASSWORD_BYTES} bytes.")
    return bcrypt.hashpw(password, bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    password = (plain_password or "").encode("utf-8")
    hashed = (password_hash or "").encode("utf-8")
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password, hashed)
    except ValueError:
        return False


def issue_token(
    *,
    user_id: int,
    username: str,
    display_name: str | None,
    ttl_seconds: int | None = None,
) -> str:
    issued_at = now_epoch_s()
    expires_at = issued_at + (ttl_seconds if ttl_seconds is not None else session_ttl_seconds())

    payload = {
        "sub": str(user_id),
        "username": username,
        "displayName": display_name,
        "iat": issued_at,
        "exp": expires_at,
    }
    return jwt.encode(payload, jwt_secret(), algorithm=jwt_algorithm())


def validate_token(token: str | None) -> Principal:
    """
    Decode a session token into its principal.

    Raises TokenMissing for an absent token and TokenInvalid for anything else
    that fails: bad signature, malformed claims, or expiry.
    """
    raw = (token or "").strip()
    if not raw:
        raise TokenMissing()

    try:
        payload: dict[str, Any] = jwt.decode(
            raw,
            jwt_secret(),
            algorithms=[jwt_algorithm()],
            options={"require": ["exp", "sub"]},
        )
    except jwt.InvalidTokenError as exc:
        raise TokenInvalid() from exc

    subject = str(payload.get("sub") or "").strip()
    if not subject.isdigit():
        raise TokenInvalid()

    return Principal(
        id=int(subject),
        username=str(payload.get("username") or ""),
        display_name=payload.get("displayName"),
    )
