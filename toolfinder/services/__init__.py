"""
Service layer for the Tool Finder backend.

Contains business logic that:
- Calls Gemini and parses its answer (recommendation_service)
- Flattens stored recommendation payloads (result_normalizer)
- Manages accounts, API keys and usage counters (user_service)
- Persists and queries saved searches (search_service)

Services act as the glue between routes (HTTP layer) and the database/LLM.
They raise the domain exceptions in toolfinder.errors; routes translate
those into HTTP responses.
"""

from .recommendation_service import (
    degraded_result,
    get_recommendations,
    parse_recommendation_text,
)
from .result_normalizer import (
    NormalizedRecommendations,
    PayloadShape,
    detect_payload_shape,
    normalize_recommendations,
)
from .search_service import (
    create_search,
    default_search_title,
    get_search_activity,
    get_search_by_id,
    get_user_searches,
)
from .user_service import (
    authenticate_user,
    clear_api_key,
    create_user,
    get_stored_api_key,
    get_user_by_id,
    get_user_stats,
    increment_user_stats,
    require_user,
    update_api_key,
)

__all__ = [
    # recommendation_service
    "degraded_result",
    "get_recommendations",
    "parse_recommendation_text",
    # result_normalizer
    "NormalizedRecommendations",
    "PayloadShape",
    "detect_payload_shape",
    "normalize_recommendations",
    # search_service
    "create_search",
    "default_search_title",
    "get_search_activity",
    "get_search_by_id",
    "get_user_searches",
    # user_service
    "authenticate_user",
    "clear_api_key",
    "create_user",
    "get_stored_api_key",
    "get_user_by_id",
    "get_user_stats",
    "increment_user_stats",
    "require_user",
    "update_api_key",
]
