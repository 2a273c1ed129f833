"""
User API endpoints.

Provides endpoints for the authenticated user's own account:
- GET    /api/user/profile  - Profile plus usage counters
- PUT    /api/user/api-key  - Store a Gemini API key
- DELETE /api/user/api-key  - Remove the stored Gemini API key
- GET    /api/user/stats    - Dashboard statistics

All endpoints require a valid session cookie. The stored API key itself is
never returned, only whether one exists.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from toolfinder.auth.dependencies import AuthContext, get_auth_context
from toolfinder.db.base import as_utc
from toolfinder.db.session import get_db_session
from toolfinder.errors import NotFoundError
from toolfinder.schemas.base import MessageResponse
from toolfinder.schemas.user import (
    ApiKeyUpdateRequest,
    DashboardStats,
    ProfileResponse,
    ProfileStats,
    RecentSearch,
    StatsResponse,
    UserProfile,
)
from toolfinder.services import (
    clear_api_key,
    get_search_activity,
    get_user_stats,
    require_user,
    update_api_key,
)
from toolfinder.services.search_service import (
    RECENT_PREVIEW_LENGTH,
    extract_use_case,
    summarize_use_case,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/user", tags=["user"])


def _user_not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={"error": "not_found", "details": "User not found"}
    )


@router.get(
    "/profile",
    response_model=ProfileResponse,
    status_code=status.HTTP_200_OK,
    summary="Get user profile",
    description="""
    Retrieve the authenticated user's profile and usage counters.

    This endpoint:
    - Returns id, username, hasApiKey and account creation time
    - Returns totalSearches, totalApiCalls, lastSearchDate, memberSince

    Returns 404 if the session refers to a user that no longer exists.
    """
)
async def get_profile(
    auth: Annotated[AuthContext, Depends(get_auth_context)],
    session: Annotated[Session, Depends(get_db_session)],
) -> ProfileResponse:
    """Profile and counters for the session's user."""
    logger.info(f"Fetching profile for user {auth.user_id}")

    try:
        user = await require_user(session, auth.user_id)
        stats = await get_user_stats(session, auth.user_id)

    except NotFoundError:
        raise _user_not_found()
    except Exception as e:
        logger.error(f"Failed to fetch profile for user {auth.user_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "fetch_error", "details": "Failed to retrieve profile"}
        )

    created_at = as_utc(user.created_at)

    return ProfileResponse(
        user=UserProfile(
            id=user.id,
            username=user.username,
            has_api_key=user.has_api_key,
            created_at=created_at,
        ),
        stats=ProfileStats(
            total_searches=stats.total_searches,
            total_api_calls=stats.total_api_calls,
            last_search_date=as_utc(stats.last_search_date),
            member_since=created_at,
        ),
    )


@router.put(
    "/api-key",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Store Gemini API key",
    description="""
    Save a Gemini API key on the account, replacing any existing key.

    The key is used for recommendation requests that don't supply their own.
    Keys shorter than 10 characters are rejected with 400.
    """
)
async def put_api_key(
    request: ApiKeyUpdateRequest,
    auth: Annotated[AuthContext, Depends(get_auth_context)],
    session: Annotated[Session, Depends(get_db_session)],
) -> MessageResponse:
    try:
        await update_api_key(session, auth.user_id, request.api_key)

    except NotFoundError:
        raise _user_not_found()
    except Exception as e:
        logger.error(f"Failed to update API key for user {auth.user_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "update_error", "details": "Failed to update API key"}
        )

    return MessageResponse(message="API key updated successfully")


@router.delete(
    "/api-key",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Remove Gemini API key",
    description="Delete the stored Gemini API key. Succeeds when no key is stored."
)
async def delete_api_key(
    auth: Annotated[AuthContext, Depends(get_auth_context)],
    session: Annotated[Session, Depends(get_db_session)],
) -> MessageResponse:
    try:
        await clear_api_key(session, auth.user_id)

    except NotFoundError:
        raise _user_not_found()
    except Exception as e:
        logger.error(f"Failed to remove API key for user {auth.user_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "delete_error", "details": "Failed to remove API key"}
        )

    return MessageResponse(message="API key removed successfully")


@router.get(
    "/stats",
    response_model=StatsResponse,
    status_code=status.HTTP_200_OK,
    summary="Get dashboard statistics",
    description="""
    Usage statistics for the dashboard.

    This endpoint:
    - Returns the stored totalSearches / totalApiCalls / lastSearchDate
    - Counts saved searches from the last 7 and 30 days
    - Lists the 5 most recent saved searches with a 60-character use-case preview
    """
)
async def get_stats(
    auth: Annotated[AuthContext, Depends(get_auth_context)],
    session: Annotated[Session, Depends(get_db_session)],
) -> StatsResponse:
    logger.info(f"Fetching stats for user {auth.user_id}")

    try:
        stats = await get_user_stats(session, auth.user_id)
        activity = await get_search_activity(session, auth.user_id)

    except Exception as e:
        logger.error(f"Failed to fetch stats for user {auth.user_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "fetch_error", "details": "Failed to retrieve statistics"}
        )

    recent = [
        RecentSearch(
            id=search.id,
            title=search.search_title,
            created_at=as_utc(search.created_at),
            use_case=summarize_use_case(extract_use_case(search.query_data), RECENT_PREVIEW_LENGTH),
        )
        for search in activity["recent_searches"]
    ]

    return StatsResponse(
        stats=DashboardStats(
            total_searches=stats.total_searches,
            total_api_calls=stats.total_api_calls,
            searches_this_week=activity["searches_this_week"],
            searches_this_month=activity["searches_this_month"],
            last_search_date=as_utc(stats.last_search_date),
            recent_searches=recent,
        )
    )
