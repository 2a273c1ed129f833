"""
Pydantic schemas for user profile, API key and statistics endpoints.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from toolfinder.schemas.base import CamelModel


# --- Profile ---

class UserProfile(CamelModel):
    """Profile fields exposed to the account owner."""
    id: int = Field(..., description="User id")
    username: str = Field(..., description="Username")
    has_api_key: bool = Field(..., description="Whether a Gemini API key is stored")
    created_at: datetime = Field(..., description="Account creation time (UTC)")


class ProfileStats(CamelModel):
    """Usage counters shown on the profile page."""
    total_searches: int = Field(0, description="Successful recommendation generations")
    total_api_calls: int = Field(0, description="Calls made to the Gemini API")
    last_search_date: Optional[datetime] = Field(None, description="Time of the last search (UTC)")
    member_since: datetime = Field(..., description="Account creation time (UTC)")


class ProfileResponse(CamelModel):
    """Response for GET /api/user/profile."""
    success: bool = True
    user: UserProfile
    stats: ProfileStats


# --- API key ---

class ApiKeyUpdateRequest(CamelModel):
    """
    Request to store a Gemini API key on the account.

    The key is opaque to the backend; only a minimum length is enforced.
    """
    api_key: str = Field(
        ...,
        min_length=10,
        max_length=512,
        description="Gemini API key",
        examples=["AIzaSyExampleExampleExample"]
    )

    @field_validator("api_key", mode="before")
    @classmethod
    def strip_api_key(cls, value):
        return value.strip() if isinstance(value, str) else value


# --- Dashboard statistics ---

class RecentSearch(CamelModel):
    """Short summary of a recent search for the dashboard."""
    id: int
    title: Optional[str] = None
    created_at: datetime
    use_case: str = Field(..., description="Use-case preview (first 60 characters)")


class DashboardStats(CamelModel):
    """Aggregate counters plus derived week/month counts."""
    total_searches: int = 0
    total_api_calls: int = 0
    searches_this_week: int = Field(0, description="Saved searches in the last 7 days")
    searches_this_month: int = Field(0, description="Saved searches in the last 30 days")
    last_search_date: Optional[datetime] = None
    recent_searches: List[RecentSearch] = Field(default_factory=list, description="Up to 5 newest searches")


class StatsResponse(CamelModel):
    """Response for GET /api/user/stats."""
    success: bool = True
    stats: DashboardStats
