"""
User service.

Handles account creation, credential checks, the stored Gemini API key and
per-user usage counters.

Every user has exactly one user_stats row, created in the same transaction
as the user. Counters are only changed through increment_user_stats(),
which issues a single UPDATE with in-database arithmetic so concurrent
searches by the same user are all counted.
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from toolfinder.auth.passwords import hash_password, verify_password
from toolfinder.config import settings
from toolfinder.db.base import utcnow
from toolfinder.db.models import User, UserStats
from toolfinder.errors import AuthError, ConflictError, NotFoundError

logger = logging.getLogger(__name__)


async def create_user(session: Session, username: str, password: str) -> User:
    """
    Register a new user and its zeroed stats row.

    Args:
        session: Database session
        username: Validated username (3-30 chars, [A-Za-z0-9_])
        password: Validated plaintext password

    Returns:
        The persisted User

    Raises:
        ConflictError: username already taken
    """
    existing = session.scalar(select(User.id).where(User.username == username))
    if existing is not None:
        logger.info(f"Registration rejected, username already taken: {username}")
        raise ConflictError("Username already exists")

    # bcrypt blocks for the whole cost factor, so hash in a worker thread
    password_hash = await run_in_threadpool(hash_password, password, settings.BCRYPT_ROUNDS)

    user = User(username=username, password_hash=password_hash)
    user.stats = UserStats(total_searches=0, total_api_calls=0)
    session.add(user)

    try:
        session.commit()
    except IntegrityError:
        # Lost a race against a concurrent registration of the same name
        session.rollback()
        logger.info(f"Registration rejected on unique constraint: {username}")
        raise ConflictError("Username already exists")

    logger.info(f"User registered: id={user.id}")
    return user


async def authenticate_user(session: Session, username: str, password: str) -> User:
    """
    Check a username/password pair.

    The same error is raised for an unknown username and a wrong password.

    Raises:
        AuthError: invalid credentials
    """
    user = session.scalar(select(User).where(User.username == username))

    if user is None or not await run_in_threadpool(verify_password, password, user.password_hash):
        logger.info("Login failed: invalid credentials")
        raise AuthError("Invalid username or password")

    logger.info(f"User logged in: id={user.id}")
    return user


async def get_user_by_id(session: Session, user_id: int) -> Optional[User]:
    """Return the user or None."""
    return session.get(User, user_id)


async def require_user(session: Session, user_id: int) -> User:
    """
    Return the user for an authenticated request.

    Raises:
        NotFoundError: the session refers to a user that no longer exists
    """
    user = await get_user_by_id(session, user_id)
    if user is None:
        logger.warning(f"Session refers to missing user {user_id}")
        raise NotFoundError("User not found")
    return user


async def update_api_key(session: Session, user_id: int, api_key: str) -> None:
    """Store a Gemini API key on the account, replacing any previous key."""
    user = await require_user(session, user_id)
    user.gemini_api_key = api_key
    user.updated_at = utcnow()
    session.commit()
    logger.info(f"API key updated for user {user_id}")


async def clear_api_key(session: Session, user_id: int) -> None:
    """Remove the stored Gemini API key. A no-op when none is stored."""
    user = await require_user(session, user_id)
    user.gemini_api_key = None
    user.updated_at = utcnow()
    session.commit()
    logger.info(f"API key removed for user {user_id}")


async def get_stored_api_key(session: Session, user_id: int) -> Optional[str]:
    """The stored Gemini API key, or None."""
    return session.scalar(select(User.gemini_api_key).where(User.id == user_id))


async def get_user_stats(session: Session, user_id: int) -> UserStats:
    """
    Return the user's counters.

    A user without a stats row (not expected, but harmless) gets a transient
    zeroed object rather than an error.
    """
    stats = session.scalar(select(UserStats).where(UserStats.user_id == user_id))
    if stats is None:
        logger.warning(f"No stats row for user {user_id}, reporting zeros")
        return UserStats(user_id=user_id, total_searches=0, total_api_calls=0, last_search_date=None)
    return stats


def _apply_increment(session: Session, user_id: int, now: datetime) -> int:
    """Run the counter UPDATE; returns the number of stats rows it touched."""
    result = session.execute(
        update(UserStats)
        .where(UserStats.user_id == user_id)
        .values(
            total_searches=UserStats.total_searches + 1,
            total_api_calls=UserStats.total_api_calls + 1,
            last_search_date=now,
            updated_at=now,
        )
    )
    return result.rowcount


async def increment_user_stats(session: Session, user_id: int) -> None:
    """
    Count one successful recommendation generation.

    total_searches and total_api_calls are each increased by one and
    last_search_date is set to now, in a single UPDATE statement. If the
    stats row is missing it is created with both counters at one; when a
    concurrent writer creates it first, the UPDATE is applied to that row.
    """
    now = utcnow()

    if _apply_increment(session, user_id, now) == 0:
        logger.warning(f"Stats row missing for user {user_id}, creating it")
        session.add(
            UserStats(
                user_id=user_id,
                total_searches=1,
                total_api_calls=1,
                last_search_date=now,
            )
        )
        try:
            session.commit()
            return
        except IntegrityError:
            session.rollback()
            logger.info(f"Stats row for user {user_id} created concurrently, retrying update")
            _apply_increment(session, user_id, now)

    session.commit()
    logger.debug(f"Stats incremented for user {user_id}")
