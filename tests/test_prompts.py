"""
Tests for the recommendation prompt builder.

Covers requirement phrase mapping, catch-all fallbacks, determinism and the
embedded output schema.
"""

from toolfinder.agents.recommendation.prompts import (
    BUDGET_PHRASES,
    PRIVACY_PHRASES,
    RESPONSE_SCHEMA_FIELDS,
    build_recommendation_prompt,
    prompt_fingerprint,
)


class TestRequirementPhrases:
    """Structured query values become readable requirement lines."""

    def test_zotero_query(self):
        prompt = build_recommendation_prompt(
            use_case="citation management for thesis",
            budget="under50",
            category="research",
            platform="any",
            privacy="standard",
            additional="Must integrate with Word and Google Docs",
        )

        assert "- Use Case: citation management for thesis" in prompt
        assert "- Budget: under $50/month" in prompt
        assert "- Category: research" in prompt
        assert "- Platform: any platform" in prompt
        assert "- Privacy: standard privacy" in prompt
        assert "- Additional Requirements: Must integrate with Word and Google Docs" in prompt

    def test_every_budget_tier_has_a_phrase(self):
        for tier, phrase in BUDGET_PHRASES.items():
            prompt = build_recommendation_prompt("notes", tier)
            assert f"- Budget: {phrase}" in prompt

    def test_every_privacy_tier_has_a_phrase(self):
        for tier, phrase in PRIVACY_PHRASES.items():
            prompt = build_recommendation_prompt("notes", "free", privacy=tier)
            assert f"- Privacy: {phrase}" in prompt

    def test_unknown_budget_and_privacy_fall_back(self):
        prompt = build_recommendation_prompt("notes", "lottery", privacy="paranoid")

        assert "- Budget: any price range" in prompt
        assert "- Privacy: standard privacy" in prompt

    def test_any_category_and_platform(self):
        prompt = build_recommendation_prompt("notes", "free", category="any", platform="ANY")

        assert "- Category: any category" in prompt
        assert "- Platform: any platform" in prompt

    def test_missing_additional_requirements(self):
        for additional in (None, "", "   "):
            prompt = build_recommendation_prompt("notes", "free", additional=additional)
            assert "- Additional Requirements: None specified" in prompt


class TestPromptShape:

    def test_prompt_is_deterministic(self):
        args = ("video editing", "under20", "design", "mac", "high", "4K export")

        first = build_recommendation_prompt(*args)
        second = build_recommendation_prompt(*args)

        assert first == second
        assert prompt_fingerprint(first) == prompt_fingerprint(second)

    def test_different_queries_have_different_fingerprints(self):
        a = build_recommendation_prompt("video editing", "free")
        b = build_recommendation_prompt("audio editing", "free")

        assert prompt_fingerprint(a) != prompt_fingerprint(b)
        assert len(prompt_fingerprint(a)) == 64

    def test_output_schema_names_every_field(self):
        prompt = build_recommendation_prompt("notes", "free")

        for name in RESPONSE_SCHEMA_FIELDS:
            assert f'"{name}"' in prompt

    def test_asks_for_three_to_five_real_tools(self):
        prompt = build_recommendation_prompt("notes", "free")

        assert "exactly 3-5 tool recommendations" in prompt
        assert "real, currently available tools" in prompt
