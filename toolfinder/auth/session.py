"""
Session tokens carried in an HttpOnly cookie.

The cookie holds a short JWT (HS256, signed with SESSION_SECRET) whose 'sub'
claim is the user id. Nothing is kept server-side; logging out deletes the
cookie.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import Response
from jwt import decode, encode

from toolfinder.config import Settings

logger = logging.getLogger(__name__)

SESSION_ALGORITHM = "HS256"


def issue_session_token(settings: Settings, user_id: int, username: str) -> str:
    """Create a signed session token for a user."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "username": username,
        "iat": now,
        "exp": now + timedelta(seconds=settings.SESSION_MAX_AGE_SECONDS),
    }
    return encode(payload, settings.SESSION_SECRET, algorithm=SESSION_ALGORITHM)


def decode_session_token(settings: Settings, token: str) -> dict[str, Any]:
    """
    Verify signature and expiry of a session token.

    Raises:
        jwt.exceptions.ExpiredSignatureError: token expired
        jwt.exceptions.InvalidTokenError: any other verification failure
    """
    return decode(
        token,
        settings.SESSION_SECRET,
        algorithms=[SESSION_ALGORITHM],
        options={
            "verify_signature": True,
            "verify_exp": True,
            "require": ["sub", "exp"],
        },
    )


def set_session_cookie(response: Response, settings: Settings, user_id: int, username: str) -> None:
    """Start a session by attaching the signed cookie to the response."""
    token = issue_session_token(settings, user_id, username)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_MAX_AGE_SECONDS,
        httponly=True,
        secure=settings.is_production(),
        samesite="lax",
    )
    logger.debug(f"Session cookie issued for user_id={user_id}")


def clear_session_cookie(response: Response, settings: Settings) -> None:
    """End the session by deleting the cookie."""
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        httponly=True,
        secure=settings.is_production(),
        samesite="lax",
    )
