"""
Search service.

Handles persistence of saved searches (query + recommendation payload) and
the derived history/dashboard views.

Searches are immutable once created and always scoped to their owner:
a search that exists but belongs to someone else is reported exactly like
a search that does not exist.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from toolfinder.db.base import utcnow
from toolfinder.db.models import Search
from toolfinder.errors import NotFoundError

logger = logging.getLogger(__name__)

UNTITLED_SEARCH = "Untitled Search"
DEFAULT_TITLE_LENGTH = 50
HISTORY_PREVIEW_LENGTH = 100
RECENT_PREVIEW_LENGTH = 60
RECENT_SEARCHES_LIMIT = 5
ACTIVITY_WINDOW_LIMIT = 1000


def summarize_use_case(text: Any, length: int) -> str:
    """Preview of a use case: its first `length` characters followed by '...'."""
    if not isinstance(text, str) or not text:
        return ""
    return f"{text[:length]}..."


def extract_use_case(query_data: Any) -> str:
    """The useCase of a stored query object, or '' if it has none."""
    if isinstance(query_data, dict):
        use_case = query_data.get("useCase")
        if isinstance(use_case, str):
            return use_case
    return ""


def default_search_title(query_data: Any) -> str:
    """
    Title for a search saved without one.

    "Search: <first 50 chars of useCase>..." or "Untitled Search".
    """
    use_case = extract_use_case(query_data)
    if not use_case:
        return UNTITLED_SEARCH
    return f"Search: {use_case[:DEFAULT_TITLE_LENGTH]}..."


async def create_search(
    session: Session,
    user_id: int,
    query_data: Dict[str, Any],
    recommendations: Any,
    search_title: Optional[str] = None,
) -> Search:
    """
    Persist a search for the user.

    Args:
        session: Database session
        user_id: Owner
        query_data: The query object as sent by the client
        recommendations: The recommendation payload, stored verbatim
        search_title: Optional title; blank means a default is derived

    Returns:
        The persisted Search (with id assigned)
    """
    title = search_title.strip() if search_title and search_title.strip() else default_search_title(query_data)

    search = Search(
        user_id=user_id,
        query_data=query_data,
        recommendations=recommendations,
        search_title=title,
    )
    session.add(search)
    session.commit()

    logger.info(f"Search {search.id} saved for user {user_id}")
    return search


async def get_user_searches(session: Session, user_id: int, limit: int = 50) -> List[Search]:
    """The user's searches, newest first, at most `limit`."""
    logger.debug(f"Fetching searches for user {user_id} (limit={limit})")

    searches = list(
        session.scalars(
            select(Search)
            .where(Search.user_id == user_id)
            .order_by(Search.created_at.desc(), Search.id.desc())
            .limit(limit)
        )
    )

    logger.info(f"Found {len(searches)} searches for user {user_id}")
    return searches


async def get_search_by_id(session: Session, search_id: int, user_id: int) -> Search:
    """
    Fetch one search owned by the user.

    Raises:
        NotFoundError: no such search, or it belongs to another user
    """
    search = session.scalar(
        select(Search).where(Search.id == search_id, Search.user_id == user_id)
    )
    if search is None:
        logger.info(f"Search {search_id} not found for user {user_id}")
        raise NotFoundError("Search not found")
    return search


async def get_search_activity(
    session: Session,
    user_id: int,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Derived dashboard counters.

    Counts over the user's newest ACTIVITY_WINDOW_LIMIT searches:
    searches_this_week (last 7 days) and searches_this_month (last 30 days),
    plus the RECENT_SEARCHES_LIMIT newest searches.
    """
    now = now or utcnow()
    week_ago = now - timedelta(days=7)
    month_ago = now - timedelta(days=30)

    searches = await get_user_searches(session, user_id, limit=ACTIVITY_WINDOW_LIMIT)

    return {
        "searches_this_week": sum(1 for s in searches if s.created_at >= week_ago),
        "searches_this_month": sum(1 for s in searches if s.created_at >= month_ago),
        "recent_searches": searches[:RECENT_SEARCHES_LIMIT],
    }
