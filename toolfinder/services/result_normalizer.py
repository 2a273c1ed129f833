"""
Normalization of stored recommendation payloads.

Saved searches hold whatever the client posted, which comes in several
shapes:

- FLAT:        {"recommendations": [...], "summary": ..., "additionalNotes": ...}
- NESTED:      {"queryData": {...}, "recommendations": {"recommendations": [...],
                "summary": ..., "additionalNotes": ...}}   (a reloaded saved search)
- STRINGIFIED: {"recommendations": "<JSON text>", ...}
- BARE_LIST:   [{"name": ...}, ...]
- UNKNOWN:     anything else

detect_payload_shape() classifies a payload; normalize_recommendations()
flattens it. Neither raises: an unusable payload normalizes to an empty
result and callers check has_content.
"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from toolfinder.schemas.recommendations import RecommendationResult

logger = logging.getLogger(__name__)


class PayloadShape(str, Enum):
    FLAT = "flat"
    NESTED = "nested"
    STRINGIFIED = "stringified"
    BARE_LIST = "bare_list"
    UNKNOWN = "unknown"


@dataclass
class NormalizedRecommendations:
    """Flat view of a recommendation payload."""
    recommendations: List[Dict[str, Any]] = field(default_factory=list)
    summary: str = ""
    additional_notes: str = ""
    query_data: Optional[Dict[str, Any]] = None
    shape: PayloadShape = PayloadShape.UNKNOWN

    @property
    def has_content(self) -> bool:
        """False means "no content": nothing to show, but not an error."""
        return bool(self.recommendations or self.summary or self.additional_notes)

    def to_result(self) -> RecommendationResult:
        return RecommendationResult(
            recommendations=self.recommendations,
            summary=self.summary,
            additional_notes=self.additional_notes,
        )


def _is_item_list(value: Any) -> bool:
    return (
        isinstance(value, list)
        and len(value) > 0
        and all(isinstance(item, dict) and "name" in item for item in value)
    )


def _dict_items(value: Any) -> List[Dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def detect_payload_shape(payload: Any) -> PayloadShape:
    """Classify a stored payload by which fields are present."""
    if isinstance(payload, list):
        return PayloadShape.BARE_LIST if _is_item_list(payload) else PayloadShape.UNKNOWN

    if not isinstance(payload, dict):
        return PayloadShape.UNKNOWN

    inner = payload.get("recommendations")
    if isinstance(inner, dict) and isinstance(inner.get("recommendations"), list):
        return PayloadShape.NESTED
    if isinstance(inner, str):
        return PayloadShape.STRINGIFIED
    if isinstance(inner, list):
        return PayloadShape.FLAT
    return PayloadShape.UNKNOWN


def normalize_recommendations(payload: Any) -> NormalizedRecommendations:
    """
    Flatten any known payload shape to {recommendations, summary, additionalNotes}.

    Order of precedence:
    1. NESTED: inner recommendations/summary/notes win over outer duplicates
    2. STRINGIFIED: the string is parsed as JSON (object or array)
    3. FLAT: used as-is
    4. BARE_LIST: the payload itself is the item list
    """
    shape = detect_payload_shape(payload)

    if shape is PayloadShape.BARE_LIST:
        return NormalizedRecommendations(recommendations=_dict_items(payload), shape=shape)

    if shape is PayloadShape.UNKNOWN:
        return NormalizedRecommendations(shape=shape)

    outer_summary = _text(payload.get("summary"))
    outer_notes = _text(payload.get("additionalNotes"))
    query_data = payload.get("queryData") if isinstance(payload.get("queryData"), dict) else None
    inner = payload["recommendations"]

    if shape is PayloadShape.NESTED:
        return NormalizedRecommendations(
            recommendations=_dict_items(inner["recommendations"]),
            summary=_text(inner.get("summary")) or outer_summary,
            additional_notes=_text(inner.get("additionalNotes")) or outer_notes,
            query_data=query_data,
            shape=shape,
        )

    if shape is PayloadShape.STRINGIFIED:
        try:
            parsed = json.loads(inner)
        except json.JSONDecodeError:
            logger.warning("Stored recommendations string is not valid JSON")
            parsed = None

        if isinstance(parsed, dict):
            return NormalizedRecommendations(
                recommendations=_dict_items(parsed.get("recommendations")),
                summary=_text(parsed.get("summary")) or outer_summary,
                additional_notes=_text(parsed.get("additionalNotes")) or outer_notes,
                query_data=query_data,
                shape=shape,
            )
        return NormalizedRecommendations(
            recommendations=_dict_items(parsed),
            summary=outer_summary,
            additional_notes=outer_notes,
            query_data=query_data,
            shape=shape,
        )

    return NormalizedRecommendations(
        recommendations=_dict_items(inner),
        summary=outer_summary,
        additional_notes=outer_notes,
        query_data=query_data,
        shape=shape,
    )
