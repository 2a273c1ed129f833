"""
Auth API endpoints.

Provides endpoints for account and session operations:
- POST /api/auth/register - Create an account and start a session
- POST /api/auth/login    - Start a session
- POST /api/auth/logout   - End the session
- GET  /api/auth/status   - Report whether the caller has a valid session

Sessions are carried in an HttpOnly cookie (see toolfinder.auth.session).
register, login and status are public; logout works with or without a session.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from toolfinder.auth.dependencies import AuthContext, get_optional_auth_context, get_settings
from toolfinder.auth.session import clear_session_cookie, set_session_cookie
from toolfinder.config import Settings
from toolfinder.db.session import get_db_session
from toolfinder.errors import AuthError, ConflictError
from toolfinder.schemas.auth import (
    AuthStatusResponse,
    LoginRequest,
    LoginResponse,
    LoginUser,
    RegisterRequest,
    RegisterResponse,
    UserSummary,
)
from toolfinder.schemas.base import MessageResponse
from toolfinder.services import authenticate_user, create_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    description="""
    Create a new account and log the user in.

    This endpoint:
    - Validates username (3-30 chars, letters/numbers/underscores)
    - Validates password (6+ chars, lowercase, uppercase and digit)
    - Stores only a bcrypt hash of the password
    - Creates the user's zeroed usage statistics
    - Sets the session cookie

    Returns 409 if the username is already taken.
    """
)
async def register(
    request: RegisterRequest,
    response: Response,
    session: Annotated[Session, Depends(get_db_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> RegisterResponse:
    """Register a user and start their session."""
    logger.info(f"Registration attempt for username {request.username}")

    try:
        user = await create_user(session, request.username, request.password)

    except ConflictError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"error": "username_taken", "details": e.message}
        )
    except Exception as e:
        logger.error(f"Failed to register user {request.username}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "registration_failed", "details": "Registration failed"}
        )

    set_session_cookie(response, settings, user.id, user.username)

    return RegisterResponse(user=UserSummary(id=user.id, username=user.username))


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    summary="Log in",
    description="""
    Verify username and password and start a session.

    Returns 401 for an unknown username or a wrong password (the two cases
    are indistinguishable to the caller).
    """
)
async def login(
    request: LoginRequest,
    response: Response,
    session: Annotated[Session, Depends(get_db_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> LoginResponse:
    """Authenticate and set the session cookie."""
    try:
        user = await authenticate_user(session, request.username, request.password)

    except AuthError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "invalid_credentials", "details": e.message}
        )
    except Exception as e:
        logger.error(f"Login failed unexpectedly: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "login_failed", "details": "Login failed"}
        )

    set_session_cookie(response, settings, user.id, user.username)

    return LoginResponse(
        user=LoginUser(id=user.id, username=user.username, has_api_key=user.has_api_key)
    )


@router.post(
    "/logout",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Log out",
    description="Clear the session cookie. Succeeds whether or not a session exists."
)
async def logout(
    response: Response,
    settings: Annotated[Settings, Depends(get_settings)],
    auth: Annotated[Optional[AuthContext], Depends(get_optional_auth_context)],
) -> MessageResponse:
    if auth is not None:
        logger.info(f"User {auth.user_id} logged out")

    clear_session_cookie(response, settings)
    return MessageResponse(message="Logout successful")


@router.get(
    "/status",
    response_model=AuthStatusResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="Check authentication status",
    description="""
    Public endpoint reporting whether the request carries a valid session.

    Never returns 401; an invalid or expired cookie reports
    authenticated=false.
    """
)
async def auth_status(
    auth: Annotated[Optional[AuthContext], Depends(get_optional_auth_context)],
) -> AuthStatusResponse:
    if auth is None:
        return AuthStatusResponse(authenticated=False)

    return AuthStatusResponse(
        authenticated=True,
        user=UserSummary(id=auth.user_id, username=auth.username),
    )
