"""
Recommendation Prompt Templates

Contains the prompt builder for the Recommendation Service.

The prompt maps the structured query (use case, budget tier, category,
platform, privacy tier, extra constraints) to human-readable requirement
phrases and embeds a literal example of the JSON document Gemini must
return.

build_recommendation_prompt() is a pure function: the same query always
yields byte-identical text, so prompt_fingerprint() can be used as a cache
key by callers that want deterministic results.
"""

import hashlib
from typing import Optional

# =============================================================================
# REQUIREMENT PHRASES
# =============================================================================

BUDGET_PHRASES = {
    "free": "free tools only",
    "under20": "under $20/month",
    "under50": "under $50/month",
    "under100": "under $100/month",
    "flexible": "any price range",
}
DEFAULT_BUDGET_PHRASE = "any price range"

PRIVACY_PHRASES = {
    "standard": "standard privacy",
    "high": "high privacy with GDPR compliance",
    "local": "local/on-premise solutions only",
    "opensource": "open source preferred",
}
DEFAULT_PRIVACY_PHRASE = "standard privacy"

NO_ADDITIONAL_REQUIREMENTS = "None specified"

# Field names Gemini must use in its JSON answer
RESPONSE_SCHEMA_FIELDS = (
    "recommendations",
    "rank",
    "name",
    "tagline",
    "description",
    "website",
    "pricing",
    "trialAvailable",
    "pros",
    "cons",
    "confidence",
    "reasoning",
    "keyFeatures",
    "alternativesConsidered",
    "summary",
    "additionalNotes",
)

# =============================================================================
# OUTPUT SCHEMA EXAMPLE
# =============================================================================

RECOMMENDATION_OUTPUT_SCHEMA = """{
  "recommendations": [
    {
      "rank": 1,
      "name": "Tool Name",
      "tagline": "Brief description in one line",
      "description": "Detailed description of the tool and how it matches the requirements",
      "website": "https://actual-website.com",
      "pricing": "Specific pricing details (e.g., Free tier available, $19/month for Pro)",
      "trialAvailable": true/false,
      "pros": ["Pro 1 specific to use case", "Pro 2", "Pro 3"],
      "cons": ["Con 1 specific to use case", "Con 2"],
      "confidence": 85,
      "reasoning": "Why this tool is recommended for this specific use case",
      "keyFeatures": ["Feature 1", "Feature 2", "Feature 3", "Feature 4"],
      "alternativesConsidered": "Brief mention of why this was chosen over similar tools"
    }
  ],
  "summary": "Brief summary of the recommendations and any important considerations",
  "additionalNotes": "Any caveats, tips, or additional information the user should know"
}"""


def _any_or_value(value: Optional[str], catch_all: str) -> str:
    """'any', empty or missing map to the catch-all phrase; anything else is used verbatim."""
    if value is None:
        return catch_all
    value = value.strip()
    if not value or value.lower() == "any":
        return catch_all
    return value


def build_recommendation_prompt(
    use_case: str,
    budget: Optional[str],
    category: Optional[str] = "any",
    platform: Optional[str] = "any",
    privacy: Optional[str] = "standard",
    additional: Optional[str] = None,
) -> str:
    """
    Build the prompt sent to Gemini for a tool recommendation query.

    The caller is responsible for validating that use_case is non-empty.
    Unknown budget/privacy values fall back to their catch-all phrases.

    Args:
        use_case: Free-text description of what the tool is for
        budget: Budget tier key (e.g. "under50")
        category: Tool category, or "any"
        platform: Target platform, or "any"
        privacy: Privacy tier key (e.g. "high")
        additional: Extra constraints (optional)

    Returns:
        str: Prompt text ready to be sent to Gemini
    """
    budget_phrase = BUDGET_PHRASES.get(budget or "", DEFAULT_BUDGET_PHRASE)
    privacy_phrase = PRIVACY_PHRASES.get(privacy or "", DEFAULT_PRIVACY_PHRASE)
    category_phrase = _any_or_value(category, "any category")
    platform_phrase = _any_or_value(platform, "any platform")
    additional_phrase = additional.strip() if additional and additional.strip() else NO_ADDITIONAL_REQUIREMENTS

    return f"""You are an expert tool recommendation system. Based on the following requirements, provide exactly 3-5 tool recommendations with detailed analysis. Use real-time search to ensure accuracy.

USER REQUIREMENTS:
- Use Case: {use_case}
- Budget: {budget_phrase}
- Category: {category_phrase}
- Platform: {platform_phrase}
- Privacy: {privacy_phrase}
- Additional Requirements: {additional_phrase}

IMPORTANT: Search for current, real tools that exist today. Include accurate pricing, real websites, and factual information.

Provide your response in the following JSON format:
{RECOMMENDATION_OUTPUT_SCHEMA}

Ensure all recommendations are real, currently available tools with accurate information."""


def prompt_fingerprint(prompt: str) -> str:
    """SHA-256 hex digest of a prompt, usable as a response cache key."""
    return hashlib.sha256(prompt.encode("utf-8")).hexdigest()
