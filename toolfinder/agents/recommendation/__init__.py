"""
Tool Recommendation - Single-Shot LLM Architecture

This module contains the prompt builder for the Gemini-based tool
recommendation flow.

Architecture:
- Pattern: Single-shot LLM call (one generate_content request per query)
- Model: Gemini Flash (configurable via GEMINI_MODEL)
- Temperature: 0.7 with top_k 40 / top_p 0.95
- Output: JSON requested in the prompt and parsed defensively from text

The service layer is in:
- toolfinder/services/recommendation_service.py

Prompt templates are in:
- toolfinder/agents/recommendation/prompts.py
"""

from toolfinder.agents.recommendation.prompts import (
    BUDGET_PHRASES,
    PRIVACY_PHRASES,
    RECOMMENDATION_OUTPUT_SCHEMA,
    RESPONSE_SCHEMA_FIELDS,
    build_recommendation_prompt,
    prompt_fingerprint,
)

__all__ = [
    "BUDGET_PHRASES",
    "PRIVACY_PHRASES",
    "RECOMMENDATION_OUTPUT_SCHEMA",
    "RESPONSE_SCHEMA_FIELDS",
    "build_recommendation_prompt",
    "prompt_fingerprint",
]
