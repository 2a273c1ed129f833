"""
AI Components for the Tool Finder backend.

1. Tool Recommendation (Single-Shot LLM)
   - Builds a structured prompt from the user's query
   - Gemini is called through the Google Gen AI SDK
   - Located in: toolfinder/services/recommendation_service.py

The project uses a single LLM call per query instead of a multi-agent
architecture; only the prompt templates live under agents/.
"""

from toolfinder.agents.recommendation import (
    build_recommendation_prompt,
    prompt_fingerprint,
)

__all__ = [
    "build_recommendation_prompt",
    "prompt_fingerprint",
]
