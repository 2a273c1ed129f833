"""
Database access layer for the Tool Finder backend.

All search-scoped queries MUST filter by (id, user_id), never by id alone.

Includes:
- Declarative base and the JSON-as-TEXT column type
- User, Search and UserStats models
- The Database handle and FastAPI session dependency
"""

from .models import Search, User, UserStats
from .session import Database, get_database, get_db_session

__all__ = [
    "Database",
    "get_database",
    "get_db_session",
    "User",
    "Search",
    "UserStats",
]
