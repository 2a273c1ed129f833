"""
Recommendation Service - Gemini tool recommendations

This service sends the prompt built by
toolfinder.agents.recommendation.prompts to Google's Gemini model and turns
the returned text into a RecommendationResult.

Architecture:
- Pattern: Single-shot LLM call
- Model: Gemini Flash (GEMINI_MODEL setting)
- API: Google Gen AI Python SDK (google-genai), async client
- Generation: temperature 0.7, top_k 40, top_p 0.95, max 8192 output tokens
- Safety: all harm categories set to BLOCK_NONE (answers routinely name
  commercial products and competitors)
- Timeout: GEMINI_TIMEOUT_SECONDS per call, no retries

Failure policy:
- No credential                     -> AuthError
- Non-success HTTP status / timeout -> UpstreamError
- No candidate text in the envelope -> MalformedResponseError
- Text that is not the expected JSON -> degraded empty result (never raises)

The API key is per-user, so a client is created for every call.
"""

import asyncio
import json
import logging
import re
from typing import Any, Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from toolfinder.config import settings
from toolfinder.errors import AuthError, MalformedResponseError, UpstreamError
from toolfinder.schemas.recommendations import RecommendationResult

logger = logging.getLogger(__name__)

GENERATION_TEMPERATURE = 0.7
GENERATION_TOP_K = 40
GENERATION_TOP_P = 0.95
GENERATION_MAX_OUTPUT_TOKENS = 8192

SAFETY_CATEGORIES = (
    types.HarmCategory.HARM_CATEGORY_HARASSMENT,
    types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
    types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
    types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
)

DEGRADED_SUMMARY = "Failed to parse recommendations. Please try again."
DEGRADED_NOTES = (
    "There was an issue processing the AI response. "
    "Please verify your internet connection and try again."
)

# ```json ... ``` block first, then any ``` ... ``` block
_JSON_FENCE = re.compile(r"```json\s*([\s\S]*?)```", re.IGNORECASE)
_ANY_FENCE = re.compile(r"```\s*([\s\S]*?)```")
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def degraded_result() -> RecommendationResult:
    """Well-formed empty result returned when Gemini output cannot be used."""
    return RecommendationResult(
        recommendations=[],
        summary=DEGRADED_SUMMARY,
        additional_notes=DEGRADED_NOTES,
    )


def build_generation_config() -> types.GenerateContentConfig:
    """Generation parameters and safety thresholds for every recommendation call."""
    return types.GenerateContentConfig(
        temperature=GENERATION_TEMPERATURE,
        top_k=GENERATION_TOP_K,
        top_p=GENERATION_TOP_P,
        max_output_tokens=GENERATION_MAX_OUTPUT_TOKENS,
        safety_settings=[
            types.SafetySetting(
                category=category,
                threshold=types.HarmBlockThreshold.BLOCK_NONE,
            )
            for category in SAFETY_CATEGORIES
        ],
    )


def _create_gemini_client(api_key: str) -> genai.Client:
    """Create a Gemini client bound to the caller's API key."""
    return genai.Client(api_key=api_key)


def _extract_candidate_text(response: Any) -> Optional[str]:
    """
    Pull the text out of the first candidate.

    Parts are read directly because response.text can be None even when a
    part carries text.
    """
    candidates = getattr(response, "candidates", None)
    if not candidates:
        return None

    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) if content else None
    if parts:
        for part in parts:
            text = getattr(part, "text", None)
            if text:
                return text

    # Fall back to response.text if parts didn't work
    text = getattr(response, "text", None)
    return text if isinstance(text, str) and text else None


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def extract_json_content(text: str) -> str:
    """
    Pull the JSON document out of Gemini's answer.

    The model may wrap the JSON in a ```json block or put prose around it.
    A fenced block wins; otherwise the text is cut from the first `{` to the
    last `}`. Text with neither is returned stripped.
    """
    json_content = text.strip()

    fence_match = _JSON_FENCE.search(json_content) or _ANY_FENCE.search(json_content)
    if fence_match:
        json_content = fence_match.group(1).strip()
    else:
        json_start = json_content.find("{")
        json_end = json_content.rfind("}")
        if json_start != -1 and json_end > json_start:
            json_content = json_content[json_start:json_end + 1]

    # Remove trailing commas before } or ] (common LLM mistake)
    json_content = _TRAILING_COMMA.sub(r"\1", json_content)

    return _CONTROL_CHARS.sub("", json_content)


def parse_recommendation_text(text: str) -> RecommendationResult:
    """
    Parse Gemini's answer into a RecommendationResult.

    The JSON is extracted with extract_json_content() before parsing.
    Anything that is not a JSON object with a `recommendations` list yields
    degraded_result(); this function never raises for bad model output.

    Args:
        text: Raw candidate text from Gemini

    Returns:
        RecommendationResult with the items in the order Gemini returned them
    """
    json_content = extract_json_content(text)

    try:
        response_data = json.loads(json_content)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse JSON response: {e}")
        logger.debug(f"Raw content: {text[:500]}")
        return degraded_result()

    if not isinstance(response_data, dict):
        logger.error(f"Expected a JSON object, got {type(response_data).__name__}")
        return degraded_result()

    items = response_data.get("recommendations")
    if not isinstance(items, list):
        logger.error("LLM response missing 'recommendations' list")
        return degraded_result()

    recommendations = [item for item in items if isinstance(item, dict)]
    if len(recommendations) != len(items):
        logger.warning(f"Dropped {len(items) - len(recommendations)} non-object recommendation entries")

    return RecommendationResult(
        recommendations=recommendations,
        summary=_as_text(response_data.get("summary")),
        additional_notes=_as_text(response_data.get("additionalNotes")),
    )


async def get_recommendations(
    prompt: str,
    credential: Optional[str],
    model: Optional[str] = None,
    timeout_seconds: Optional[float] = None,
) -> RecommendationResult:
    """
    Ask Gemini for tool recommendations.

    This function:
    1. Creates a Gemini client for the caller's credential
    2. Sends the prompt with the fixed generation/safety configuration
    3. Extracts the first candidate's text
    4. Parses it, degrading to an empty result on bad JSON

    Args:
        prompt: Text from build_recommendation_prompt()
        credential: Gemini API key (request-supplied or stored on the account)
        model: Gemini model name (defaults to GEMINI_MODEL)
        timeout_seconds: Upper bound for the call (defaults to GEMINI_TIMEOUT_SECONDS)

    Returns:
        RecommendationResult

    Raises:
        AuthError: no credential
        UpstreamError: non-success status, timeout, or transport failure
        MalformedResponseError: success response without candidate text
    """
    if not credential:
        raise AuthError("Gemini API key is required. Please provide it or set it in your profile.")

    model = model or settings.GEMINI_MODEL
    timeout_seconds = timeout_seconds or settings.GEMINI_TIMEOUT_SECONDS

    client = _create_gemini_client(credential)

    logger.info(f"Calling Gemini model={model} (timeout={timeout_seconds}s)")

    try:
        response = await asyncio.wait_for(
            client.aio.models.generate_content(
                model=model,
                contents=prompt,
                config=build_generation_config(),
            ),
            timeout=timeout_seconds,
        )

    except genai_errors.APIError as e:
        logger.error(f"Gemini API request failed: status={e.code}")
        raise UpstreamError(f"API request failed: {e.code}", upstream_status=e.code)

    except (asyncio.TimeoutError, httpx.TimeoutException):
        logger.error(f"Gemini API request timed out after {timeout_seconds}s")
        raise UpstreamError("API request timed out", timeout=True)

    except (httpx.HTTPError, OSError) as e:
        logger.error(f"Gemini API transport error: {e}")
        raise UpstreamError("API request failed: could not reach Gemini")

    text = _extract_candidate_text(response)
    if not text:
        logger.error("Empty response from Gemini API")
        raise MalformedResponseError("Invalid response structure from API")

    result = parse_recommendation_text(text)
    logger.info(f"Gemini returned {len(result.recommendations)} recommendations")
    return result
