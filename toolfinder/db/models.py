"""
SQLAlchemy models for users, saved searches and per-user usage statistics.
"""
from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from toolfinder.db.base import Base, JSONEncodedText, utcnow


class User(Base):
    """
    Registered user.

    Usernames are unique; the password is stored only as a bcrypt hash.
    The Gemini API key is optional and can be set or cleared from the profile.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(30), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    gemini_api_key: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    searches: Mapped[List["Search"]] = relationship(
        back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
    stats: Mapped[Optional["UserStats"]] = relationship(
        back_populates="user", cascade="all, delete-orphan", passive_deletes=True, uselist=False
    )

    @property
    def has_api_key(self) -> bool:
        return bool(self.gemini_api_key)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username})>"


class Search(Base):
    """
    A saved query + recommendation pair. Immutable once created.

    query_data and recommendations are JSON documents stored as TEXT.
    """

    __tablename__ = "searches"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    query_data: Mapped[Any] = mapped_column(JSONEncodedText, nullable=False)
    recommendations: Mapped[Any] = mapped_column(JSONEncodedText, nullable=False)
    search_title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False, index=True)

    user: Mapped[User] = relationship(back_populates="searches")

    def __repr__(self) -> str:
        return f"<Search(id={self.id}, user_id={self.user_id})>"


class UserStats(Base):
    """
    Aggregate usage counters, exactly one row per user.

    Counters are only ever changed with an in-database increment so that
    concurrent searches by the same user are all counted.
    """

    __tablename__ = "user_stats"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    total_searches: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_api_calls: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_search_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    user: Mapped[User] = relationship(back_populates="stats")

    def __repr__(self) -> str:
        return (
            f"<UserStats(user_id={self.user_id}, total_searches={self.total_searches}, "
            f"total_api_calls={self.total_api_calls})>"
        )
