"""
Database handle and per-request session management.

A Database is constructed explicitly by the hosting process (see the FastAPI
lifespan in toolfinder.main), stored on app.state, and injected into route
handlers through get_db_session(). There is no module-level engine.
"""
import logging
import os
from contextlib import contextmanager
from typing import Any, Iterator

from fastapi import Depends, Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker

from toolfinder.db.base import Base

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    """SQLite ignores ON DELETE CASCADE unless foreign keys are enabled per connection."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    Owns the SQLAlchemy engine and session factory.

    Usage:
        database = Database("sqlite:///./database/tool-finder.db")
        database.create_all()
        with database.session() as session:
            ...
        database.dispose()
    """

    def __init__(self, database_url: str, echo: bool = False):
        self.url = make_url(database_url)
        self._is_sqlite = self.url.get_backend_name() == "sqlite"

        connect_args: dict[str, Any] = {}
        if self._is_sqlite:
            # Sessions are used from FastAPI's threadpool as well as the event loop
            connect_args["check_same_thread"] = False

        self.engine = create_engine(database_url, echo=echo, connect_args=connect_args)

        if self._is_sqlite:
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

        self.session_factory = sessionmaker(
            bind=self.engine,
            class_=Session,
            expire_on_commit=False,
            autoflush=False,
        )

    def create_all(self) -> None:
        """Create the database file directory (SQLite) and all tables."""
        if self._is_sqlite and self.url.database and self.url.database != ":memory:":
            directory = os.path.dirname(os.path.abspath(self.url.database))
            os.makedirs(directory, exist_ok=True)

        # Import models so they register on Base.metadata
        from toolfinder.db import models  # noqa: F401

        Base.metadata.create_all(self.engine)
        logger.info(f"Database tables ready ({self.url.get_backend_name()})")

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Yield a session; roll back if the block raises. Callers commit explicitly."""
        session = self.session_factory()
        try:
            yield session
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        """Close all pooled connections."""
        self.engine.dispose()
        logger.info("Database connections closed")


def get_database(request: Request) -> Database:
    """FastAPI dependency: the Database created at startup."""
    return request.app.state.database


def get_db_session(database: Database = Depends(get_database)) -> Iterator[Session]:
    """FastAPI dependency: one session per request."""
    with database.session() as session:
        yield session
