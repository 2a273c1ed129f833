#!/usr/bin/env python3
"""
Recommendation Smoke Script

Sends one real query to Gemini through the same prompt builder and client the
API uses, without starting the server or touching the database.

Requires a Gemini API key in GEMINI_API_KEY (environment or .env).

Usage:
    python scripts/try_recommendations.py
    python scripts/try_recommendations.py --use-case "video editing for YouTube" --budget under20
    python scripts/try_recommendations.py --use-case "password manager" --privacy opensource --platform linux
    python scripts/try_recommendations.py --suite
"""

import argparse
import asyncio
import logging
import os
from typing import Optional

from dotenv import load_dotenv

from toolfinder.agents.recommendation import BUDGET_PHRASES, PRIVACY_PHRASES, build_recommendation_prompt
from toolfinder.errors import MalformedResponseError, UpstreamError
from toolfinder.schemas.recommendations import RecommendationResult
from toolfinder.services.recommendation_service import get_recommendations

load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

SUITE = [
    {"use_case": "citation management for thesis", "budget": "under50", "category": "research",
     "additional": "Must integrate with Word and Google Docs"},
    {"use_case": "video editing for YouTube", "budget": "under20", "platform": "windows"},
    {"use_case": "team password manager", "budget": "flexible", "privacy": "opensource"},
    {"use_case": "note taking that works offline", "budget": "free", "privacy": "local"},
]


def print_result(result: RecommendationResult) -> None:
    """Pretty print the recommendation result."""
    print("\n" + "=" * 60)
    print(f"{len(result.recommendations)} recommendation(s)")
    print("=" * 60)

    for item in result.recommendations:
        print(f"\n#{item.get('rank', '?')} {item.get('name', '(no name)')}  [{item.get('confidence', '?')}%]")
        print(f"  Tagline:  {item.get('tagline', '')}")
        print(f"  Website:  {item.get('website', '')}")
        print(f"  Pricing:  {item.get('pricing', '')}")

    print(f"\nSummary: {result.summary}")
    if result.additional_notes:
        print(f"Notes:   {result.additional_notes}")


async def run_query(
    api_key: str,
    use_case: str,
    budget: str = "flexible",
    category: str = "any",
    platform: str = "any",
    privacy: str = "standard",
    additional: Optional[str] = None,
) -> Optional[RecommendationResult]:
    """Run a single recommendation query and print it."""
    prompt = build_recommendation_prompt(use_case, budget, category, platform, privacy, additional)

    print(f"\nUse case: {use_case} | budget={budget} category={category} platform={platform} privacy={privacy}")
    print("Calling Gemini API...")

    try:
        result = await get_recommendations(prompt, api_key)
    except UpstreamError as e:
        print(f"\n❌ Upstream error: {e.message}")
        return None
    except MalformedResponseError as e:
        print(f"\n❌ Malformed response: {e.message}")
        return None

    print_result(result)
    return result


async def run_suite(api_key: str) -> None:
    """Run the predefined queries, pausing between calls to respect rate limits."""
    failed = 0
    for i, case in enumerate(SUITE, 1):
        print(f"\n{'#' * 60}\n# QUERY {i}/{len(SUITE)}\n{'#' * 60}")
        result = await run_query(api_key, **case)
        if result is None or not result.recommendations:
            failed += 1
        await asyncio.sleep(2)

    print("\n" + "=" * 60)
    print(f"Total: {len(SUITE)} | With results: {len(SUITE) - failed} | Empty or failed: {failed}")
    print("=" * 60)


def main() -> None:
    parser = argparse.ArgumentParser(description="Try the tool recommendation client against Gemini")
    parser.add_argument("--use-case", "-u", default="citation management for thesis", help="What the tool is for")
    parser.add_argument("--budget", "-b", default="flexible", choices=sorted(BUDGET_PHRASES), help="Budget tier")
    parser.add_argument("--category", "-c", default="any", help="Tool category")
    parser.add_argument("--platform", "-p", default="any", help="Target platform")
    parser.add_argument("--privacy", default="standard", choices=sorted(PRIVACY_PHRASES), help="Privacy tier")
    parser.add_argument("--additional", "-a", help="Additional requirements")
    parser.add_argument("--suite", action="store_true", help="Run the predefined queries")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    args = parser.parse_args()

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    api_key = os.getenv("GEMINI_API_KEY")
    if not api_key:
        print("\n⚠️  ERROR: GEMINI_API_KEY environment variable not set!")
        print("   Get your API key at: https://aistudio.google.com/app/apikey")
        return

    if args.suite:
        asyncio.run(run_suite(api_key))
    else:
        asyncio.run(
            run_query(
                api_key,
                use_case=args.use_case,
                budget=args.budget,
                category=args.category,
                platform=args.platform,
                privacy=args.privacy,
                additional=args.additional,
            )
        )


if __name__ == "__main__":
    main()
