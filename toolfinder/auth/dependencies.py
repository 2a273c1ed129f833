"""
FastAPI dependency functions for authentication.

These functions are used as FastAPI dependencies to verify the session
cookie and produce the caller's AuthContext. Route handlers receive identity
only through AuthContext; any user id sent in a request body is ignored.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import HTTPException, Request, status
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError

from toolfinder.auth.session import decode_session_token
from toolfinder.config import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthContext:
    """
    Represents the authenticated caller of a request.

    Attributes:
        user_id: The user's integer id (from the session token's 'sub' claim)
        username: The username recorded when the session was issued
    """
    user_id: int
    username: str


def get_settings(request: Request) -> Settings:
    """FastAPI dependency: the Settings the app was created with."""
    return request.app.state.settings


def _resolve_session(request: Request) -> AuthContext:
    """
    Verify the session cookie and build an AuthContext.

    Raises:
        HTTPException: 401 if the cookie is missing, invalid, or expired
    """
    settings = get_settings(request)
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)

    if not token:
        logger.debug("Missing session cookie")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "unauthorized", "details": "Authentication required"}
        )

    try:
        payload = decode_session_token(settings, token)
        user_id = int(payload["sub"])

    except ExpiredSignatureError:
        logger.info("Session token has expired")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "session_expired", "details": "Session has expired, please log in again"}
        )

    except (InvalidTokenError, KeyError, ValueError) as e:
        logger.warning(f"Invalid session token: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "invalid_session", "details": "Invalid session"}
        )

    return AuthContext(user_id=user_id, username=str(payload.get("username", "")))


async def get_auth_context(request: Request) -> AuthContext:
    """
    Require an authenticated session.

    Usage:
        @router.get("/protected")
        async def protected_route(auth: AuthContext = Depends(get_auth_context)):
            # auth.user_id is verified and safe to use
            pass
    """
    return _resolve_session(request)


async def get_optional_auth_context(request: Request) -> Optional[AuthContext]:
    """Like get_auth_context, but returns None instead of raising 401."""
    try:
        return _resolve_session(request)
    except HTTPException:
        return None
