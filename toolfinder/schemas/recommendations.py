"""
Pydantic schemas for tool recommendation and saved search endpoints.

These models define the request/response contracts for the recommendation
flow powered by Gemini. Recommendation items are passed through exactly as
the model produced them (order, rank and unknown fields preserved), so they
are typed as plain JSON objects rather than validated item models.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import ConfigDict, Field, field_validator

from toolfinder.schemas.base import CamelModel


class Budget(str, Enum):
    """Monthly budget tiers offered in the search form."""
    FREE = "free"
    UNDER_20 = "under20"
    UNDER_50 = "under50"
    UNDER_100 = "under100"
    FLEXIBLE = "flexible"


class Privacy(str, Enum):
    """Privacy requirement tiers."""
    STANDARD = "standard"
    HIGH = "high"
    LOCAL = "local"
    OPENSOURCE = "opensource"


# ============================================================================
# QUERY
# ============================================================================

class QueryData(CamelModel):
    """
    Structured description of the tool the user needs.

    Extra keys sent by the client are kept so they survive a save/reload.
    """
    model_config = ConfigDict(extra="allow")

    use_case: str = Field(
        ...,
        min_length=1,
        max_length=2000,
        description="Free-text description of what the tool is for",
        examples=["citation management for thesis"]
    )
    budget: Budget = Field(..., description="Budget tier", examples=["under50"])
    category: str = Field(
        "any",
        max_length=100,
        description="Tool category, or 'any'",
        examples=["research", "design", "productivity", "data-analysis", "any"]
    )
    platform: str = Field(
        "any",
        max_length=100,
        description="Target platform, or 'any'",
        examples=["web", "windows", "mac", "linux", "mobile", "any"]
    )
    privacy: Privacy = Field(..., description="Privacy tier", examples=["standard"])
    additional: Optional[str] = Field(
        None,
        max_length=2000,
        description="Additional constraints",
        examples=["Must integrate with Word and Google Docs"]
    )

    @field_validator("use_case", mode="before")
    @classmethod
    def strip_use_case(cls, value):
        # Blank use cases fail min_length once stripped
        return value.strip() if isinstance(value, str) else value


# ============================================================================
# RECOMMENDATION RESULT
# ============================================================================

class RecommendationResult(CamelModel):
    """
    Ranked recommendations plus free-text summary and notes.

    Each item normally carries: rank, name, tagline, description, website,
    pricing, trialAvailable, pros, cons, confidence (0-100), reasoning,
    keyFeatures, alternativesConsidered.
    """
    recommendations: List[Dict[str, Any]] = Field(
        default_factory=list,
        description="Recommendation items in rank order (3-5 expected, 0 tolerated)"
    )
    summary: str = Field("", description="Overall summary of the recommendations")
    additional_notes: str = Field("", description="Caveats and tips")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "recommendations": [
                        {
                            "rank": 1,
                            "name": "Zotero",
                            "tagline": "Free, open-source reference manager",
                            "website": "https://www.zotero.org",
                            "pricing": "Free; storage plans from $20/year",
                            "trialAvailable": False,
                            "confidence": 92,
                        }
                    ],
                    "summary": "Zotero best fits a thesis workflow on a small budget.",
                    "additionalNotes": "Install the Word plugin for in-text citations."
                }
            ]
        }
    }


# ============================================================================
# REQUEST MODELS
# ============================================================================

class RecommendRequest(CamelModel):
    """
    Request to generate recommendations for a query.

    If apiKey is omitted the key stored on the account is used.
    With save=true the result is also persisted as a search record.
    """
    query_data: QueryData
    api_key: Optional[str] = Field(
        None,
        max_length=512,
        description="Gemini API key for this request only (not stored)"
    )
    save: bool = Field(False, description="Persist the result to search history")
    search_title: Optional[str] = Field(None, max_length=255, description="Title used when save=true")


class SaveSearchRequest(CamelModel):
    """
    Request to persist a query + recommendations pair.

    The recommendation payload is stored verbatim in whichever shape the
    client holds it (flat, nested, stringified or a bare item list).
    """
    query_data: Dict[str, Any] = Field(..., description="The query object that was searched")
    recommendations: Union[Dict[str, Any], List[Any], str] = Field(
        ..., description="The recommendation payload to store"
    )
    search_title: Optional[str] = Field(None, max_length=255, description="Optional title")


# ============================================================================
# RESPONSE MODELS
# ============================================================================

class RecommendResponse(CamelModel):
    """Response for POST /api/search/recommend."""
    success: bool = True
    recommendations: RecommendationResult
    message: str = "Recommendations generated successfully"
    search_id: Optional[int] = Field(None, description="Id of the saved search when save=true")


class SaveSearchResponse(CamelModel):
    """Response for POST /api/search/save."""
    success: bool = True
    search_id: int
    message: str = "Search saved successfully"


class SearchSummary(CamelModel):
    """History list entry."""
    id: int
    title: Optional[str] = None
    created_at: datetime
    use_case: str = Field(..., description="Use-case preview (first 100 characters)")
    recommendation_count: int = Field(0, description="Number of recommendation items stored")


class SearchHistoryResponse(CamelModel):
    """Response for GET /api/search/history."""
    success: bool = True
    searches: List[SearchSummary]


class SearchDetail(CamelModel):
    """A full saved search."""
    id: int
    title: Optional[str] = None
    created_at: datetime
    query_data: Any = Field(..., description="Stored query object")
    recommendations: Any = Field(..., description="Stored recommendation payload, verbatim")
    normalized: RecommendationResult = Field(
        ..., description="The stored payload flattened to {recommendations, summary, additionalNotes}"
    )


class SearchDetailResponse(CamelModel):
    """Response for GET /api/search/{search_id}."""
    success: bool = True
    search: SearchDetail
