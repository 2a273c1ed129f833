"""
FastAPI routes for tool recommendations and saved searches.

Endpoints:
- POST /api/search/recommend: Generate recommendations with Gemini
- POST /api/search/save: Persist a query + recommendation payload
- GET  /api/search/history: The caller's saved searches, newest first
- GET  /api/search/{search_id}: One saved search owned by the caller

All endpoints require a valid session cookie.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from toolfinder.agents.recommendation import build_recommendation_prompt, prompt_fingerprint
from toolfinder.auth.dependencies import AuthContext, get_auth_context, get_settings
from toolfinder.config import Settings
from toolfinder.db.base import as_utc
from toolfinder.db.session import get_db_session
from toolfinder.errors import AuthError, MalformedResponseError, NotFoundError, UpstreamError
from toolfinder.schemas.recommendations import (
    RecommendRequest,
    RecommendResponse,
    SaveSearchRequest,
    SaveSearchResponse,
    SearchDetail,
    SearchDetailResponse,
    SearchHistoryResponse,
    SearchSummary,
)
from toolfinder.services import (
    create_search,
    degraded_result,
    get_recommendations,
    get_search_by_id,
    get_stored_api_key,
    get_user_searches,
    increment_user_stats,
    normalize_recommendations,
)
from toolfinder.services.search_service import (
    HISTORY_PREVIEW_LENGTH,
    extract_use_case,
    summarize_use_case,
)
from toolfinder.utils.logging import preview

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/search", tags=["search"])


# ============================================================================
# ENDPOINTS
# ============================================================================

@router.post(
    "/recommend",
    response_model=RecommendResponse,
    status_code=status.HTTP_200_OK,
    summary="Generate tool recommendations",
    description="""
    Ask Gemini for 3-5 tool recommendations matching the query.

    **Authentication:** Required (session cookie)

    **Credential:** `apiKey` from the body if present, otherwise the key
    stored on the account. With neither, the request fails with 400.

    **Behavior:**
    - Upstream non-success status or timeout: 503
    - Upstream answer without usable text: 200 with an empty result
    - Upstream text that isn't the expected JSON: 200 with an empty result
    - On success the user's totalSearches / totalApiCalls are incremented

    **Saving:** with `save: true` the result is stored as a search record
    and its id returned as `searchId`.
    """
)
async def recommend(
    request: RecommendRequest,
    auth: Annotated[AuthContext, Depends(get_auth_context)],
    session: Annotated[Session, Depends(get_db_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> RecommendResponse:
    """
    Recommendation endpoint.

    - Auth: get_auth_context dependency
    - Parse/Validate: RecommendRequest (budget/privacy enums, non-empty useCase)
    - Call LLM: single Gemini call via the recommendation service
    - Persistence: optional search record, then usage counters
    """
    query = request.query_data

    logger.info(
        f"POST /api/search/recommend called by user_id={auth.user_id}, "
        f"use_case='{preview(query.use_case)}'"
    )

    credential: Optional[str] = request.api_key.strip() if request.api_key else None
    if not credential:
        credential = await get_stored_api_key(session, auth.user_id)

    prompt = build_recommendation_prompt(
        use_case=query.use_case,
        budget=query.budget.value,
        category=query.category,
        platform=query.platform,
        privacy=query.privacy.value,
        additional=query.additional,
    )
    logger.debug(f"Prompt fingerprint {prompt_fingerprint(prompt)[:12]}")

    try:
        result = await get_recommendations(
            prompt,
            credential,
            model=settings.GEMINI_MODEL,
            timeout_seconds=settings.GEMINI_TIMEOUT_SECONDS,
        )

    except AuthError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "missing_api_key", "details": e.message}
        )

    except UpstreamError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"error": "upstream_error", "details": e.message}
        )

    except MalformedResponseError:
        logger.warning(f"Malformed Gemini response for user {auth.user_id}, returning empty result")
        return RecommendResponse(recommendations=degraded_result())

    except Exception as e:
        logger.error(f"Recommendation failed for user {auth.user_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "internal_error", "details": "Failed to generate recommendations"}
        )

    search_id: Optional[int] = None
    if request.save:
        try:
            search = await create_search(
                session,
                auth.user_id,
                query_data=query.model_dump(by_alias=True, mode="json"),
                recommendations=result.model_dump(by_alias=True, mode="json"),
                search_title=request.search_title,
            )
            search_id = search.id

        except Exception as e:
            logger.error(f"Failed to save search for user {auth.user_id}: {e}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail={"error": "save_error", "details": "Failed to save search"}
            )

    # Counters are best-effort: the recommendation is already generated
    try:
        await increment_user_stats(session, auth.user_id)
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Failed to update stats for user {auth.user_id}: {e}", exc_info=True)

    return RecommendResponse(recommendations=result, search_id=search_id)


@router.post(
    "/save",
    response_model=SaveSearchResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Save a search",
    description="""
    Persist a query and its recommendation payload to the caller's history.

    The payload is stored verbatim. Without `searchTitle` the title defaults
    to "Search: " + the first 50 characters of useCase + "...", or
    "Untitled Search" when the query has no useCase.
    """
)
async def save_search(
    request: SaveSearchRequest,
    auth: Annotated[AuthContext, Depends(get_auth_context)],
    session: Annotated[Session, Depends(get_db_session)],
) -> SaveSearchResponse:
    logger.info(f"Saving search for user {auth.user_id}")

    try:
        search = await create_search(
            session,
            auth.user_id,
            query_data=request.query_data,
            recommendations=request.recommendations,
            search_title=request.search_title,
        )

    except Exception as e:
        logger.error(f"Failed to save search for user {auth.user_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "save_error", "details": "Failed to save search"}
        )

    return SaveSearchResponse(search_id=search.id)


@router.get(
    "/history",
    response_model=SearchHistoryResponse,
    status_code=status.HTTP_200_OK,
    summary="List saved searches",
    description="""
    The caller's saved searches, newest first.

    Each entry carries a 100-character use-case preview and the number of
    recommendation items in the stored payload (whatever its shape).
    """
)
async def search_history(
    auth: Annotated[AuthContext, Depends(get_auth_context)],
    session: Annotated[Session, Depends(get_db_session)],
    limit: Annotated[int, Query(ge=1, le=1000, description="Maximum entries to return")] = 50,
) -> SearchHistoryResponse:
    try:
        searches = await get_user_searches(session, auth.user_id, limit=limit)

    except Exception as e:
        logger.error(f"Failed to fetch history for user {auth.user_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "fetch_error", "details": "Failed to retrieve search history"}
        )

    return SearchHistoryResponse(
        searches=[
            SearchSummary(
                id=search.id,
                title=search.search_title,
                created_at=as_utc(search.created_at),
                use_case=summarize_use_case(extract_use_case(search.query_data), HISTORY_PREVIEW_LENGTH),
                recommendation_count=len(normalize_recommendations(search.recommendations).recommendations),
            )
            for search in searches
        ]
    )


@router.get(
    "/{search_id}",
    response_model=SearchDetailResponse,
    status_code=status.HTTP_200_OK,
    summary="Get a saved search",
    description="""
    Return one saved search with its stored query and recommendation payload.

    `recommendations` is the payload exactly as stored; `normalized` is the
    same payload flattened to {recommendations, summary, additionalNotes}.

    Searches owned by another user are reported as 404, never 403.
    """
)
async def get_search(
    search_id: int,
    auth: Annotated[AuthContext, Depends(get_auth_context)],
    session: Annotated[Session, Depends(get_db_session)],
) -> SearchDetailResponse:
    try:
        search = await get_search_by_id(session, search_id, auth.user_id)

    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "not_found", "details": e.message}
        )
    except Exception as e:
        logger.error(f"Failed to fetch search {search_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "fetch_error", "details": "Failed to retrieve search"}
        )

    return SearchDetailResponse(
        search=SearchDetail(
            id=search.id,
            title=search.search_title,
            created_at=as_utc(search.created_at),
            query_data=search.query_data,
            recommendations=search.recommendations,
            normalized=normalize_recommendations(search.recommendations).to_result(),
        )
    )
