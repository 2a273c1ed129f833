"""
Tests for search endpoints.

Tests cover:
- Recommendation generation (credential resolution, stats, degradation,
  upstream failures, optional save)
- Saving, listing and fetching searches
- Ownership scoping (another user's search is a 404)
- The Zotero example round trip: save -> history -> get by id
"""

import json
from types import SimpleNamespace
from unittest.mock import patch

import httpx
import pytest
from google.genai import errors as genai_errors
from sqlalchemy.exc import OperationalError

CLIENT_FACTORY = "toolfinder.services.recommendation_service._create_gemini_client"

QUERY = {
    "useCase": "citation management for thesis",
    "budget": "under50",
    "category": "research",
    "platform": "any",
    "privacy": "standard",
    "additional": "Must integrate with Word and Google Docs",
}

ZOTERO_RESULT = {
    "recommendations": [
        {
            "rank": 1,
            "name": "Zotero",
            "tagline": "Free, open-source reference manager",
            "website": "https://www.zotero.org",
            "pricing": "Free; storage plans from $20/year",
            "trialAvailable": False,
            "pros": ["Free", "Word and Google Docs plugins"],
            "cons": ["Limited free sync storage"],
            "confidence": 92,
            "reasoning": "Covers thesis citation workflows for free",
            "keyFeatures": ["Browser connector", "Word plugin", "Group libraries"],
            "alternativesConsidered": "Mendeley, EndNote",
        }
    ],
    "summary": "Zotero is the best fit.",
    "additionalNotes": "Install the Word plugin.",
}


@pytest.fixture
def gemini_answers(gemini_response, mock_gemini_client):
    """Patch genai.Client so every call answers with ZOTERO_RESULT."""
    client = mock_gemini_client(response=gemini_response(json.dumps(ZOTERO_RESULT)))
    with patch(CLIENT_FACTORY, return_value=client) as factory:
        yield factory


def _stats(client):
    return client.get("/api/user/stats").json()["stats"]


class TestRecommend:
    """Tests for POST /api/search/recommend"""

    def test_with_request_key(self, client, alice, gemini_answers):
        response = client.post("/api/search/recommend", json={"queryData": QUERY, "apiKey": "AIza-request-key"})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["recommendations"] == ZOTERO_RESULT
        assert data["searchId"] is None
        gemini_answers.assert_called_once_with("AIza-request-key")

        stats = _stats(client)
        assert stats["totalSearches"] == 1
        assert stats["totalApiCalls"] == 1
        assert stats["lastSearchDate"] is not None

    def test_falls_back_to_stored_key(self, client, alice, gemini_answers):
        client.put("/api/user/api-key", json={"apiKey": "AIza-stored-key"})

        response = client.post("/api/search/recommend", json={"queryData": QUERY})

        assert response.status_code == 200
        gemini_answers.assert_called_once_with("AIza-stored-key")

    def test_no_key_anywhere(self, client, alice, gemini_answers):
        response = client.post("/api/search/recommend", json={"queryData": QUERY})

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "missing_api_key"
        gemini_answers.assert_not_called()
        assert _stats(client)["totalSearches"] == 0

    def test_two_searches_count_twice(self, client, alice, gemini_answers):
        for _ in range(2):
            client.post("/api/search/recommend", json={"queryData": QUERY, "apiKey": "AIza-request-key"})

        stats = _stats(client)
        assert stats["totalSearches"] == 2
        assert stats["totalApiCalls"] == 2

    def test_save_flag_persists_search(self, client, alice, gemini_answers):
        response = client.post(
            "/api/search/recommend",
            json={"queryData": QUERY, "apiKey": "AIza-request-key", "save": True, "searchTitle": "Thesis tools"},
        )

        search_id = response.json()["searchId"]
        assert isinstance(search_id, int)

        search = client.get(f"/api/search/{search_id}").json()["search"]
        assert search["title"] == "Thesis tools"
        assert search["queryData"]["useCase"] == QUERY["useCase"]
        assert search["recommendations"] == ZOTERO_RESULT

    def test_stats_failure_keeps_saved_search(self, client, alice, gemini_answers):
        with patch(
            "toolfinder.routes.search.increment_user_stats",
            side_effect=OperationalError("UPDATE user_stats", {}, Exception("database is locked")),
        ):
            response = client.post(
                "/api/search/recommend",
                json={"queryData": QUERY, "apiKey": "AIza-request-key", "save": True},
            )

        assert response.status_code == 200
        search_id = response.json()["searchId"]
        assert isinstance(search_id, int)
        assert [entry["id"] for entry in client.get("/api/search/history").json()["searches"]] == [search_id]
        assert _stats(client)["totalSearches"] == 0

    def test_unparseable_answer_degrades(self, client, alice, gemini_response, mock_gemini_client):
        gemini = mock_gemini_client(response=gemini_response("Sorry, I can't help with that."))

        with patch(CLIENT_FACTORY, return_value=gemini):
            response = client.post("/api/search/recommend", json={"queryData": QUERY, "apiKey": "AIza-request-key"})

        assert response.status_code == 200
        result = response.json()["recommendations"]
        assert result["recommendations"] == []
        assert result["summary"] == "Failed to parse recommendations. Please try again."

    def test_empty_envelope_degrades_without_counting(self, client, alice, mock_gemini_client):
        gemini = mock_gemini_client(response=SimpleNamespace(candidates=[], text=None))

        with patch(CLIENT_FACTORY, return_value=gemini):
            response = client.post("/api/search/recommend", json={"queryData": QUERY, "apiKey": "AIza-request-key"})

        assert response.status_code == 200
        assert response.json()["recommendations"]["recommendations"] == []
        assert _stats(client)["totalSearches"] == 0

    def test_upstream_status_error(self, client, alice, mock_gemini_client):
        error = genai_errors.ClientError(
            400, {"error": {"code": 400, "message": "API key not valid", "status": "INVALID_ARGUMENT"}}
        )
        gemini = mock_gemini_client(side_effect=error)

        with patch(CLIENT_FACTORY, return_value=gemini):
            response = client.post("/api/search/recommend", json={"queryData": QUERY, "apiKey": "bad-key-123"})

        assert response.status_code == 503
        assert response.json()["detail"]["error"] == "upstream_error"
        assert _stats(client)["totalSearches"] == 0

    def test_upstream_timeout(self, client, alice, mock_gemini_client):
        gemini = mock_gemini_client(side_effect=httpx.ReadTimeout("timed out"))

        with patch(CLIENT_FACTORY, return_value=gemini):
            response = client.post("/api/search/recommend", json={"queryData": QUERY, "apiKey": "AIza-request-key"})

        assert response.status_code == 503

    @pytest.mark.parametrize(
        "query",
        [
            {**QUERY, "useCase": ""},
            {**QUERY, "useCase": "   "},
            {**QUERY, "budget": "unlimited"},
            {**QUERY, "privacy": "paranoid"},
            {k: v for k, v in QUERY.items() if k != "useCase"},
        ],
    )
    def test_invalid_query(self, client, alice, gemini_answers, query):
        response = client.post("/api/search/recommend", json={"queryData": query, "apiKey": "AIza-request-key"})

        assert response.status_code == 400
        gemini_answers.assert_not_called()
        assert _stats(client)["totalSearches"] == 0

    def test_requires_session(self, client, gemini_answers):
        response = client.post("/api/search/recommend", json={"queryData": QUERY, "apiKey": "AIza-request-key"})

        assert response.status_code == 401


class TestSaveAndFetch:
    """Tests for POST /api/search/save, GET /api/search/history, GET /api/search/{id}"""

    def test_zotero_round_trip(self, client, alice):
        saved = client.post(
            "/api/search/save",
            json={"queryData": QUERY, "recommendations": ZOTERO_RESULT},
        )

        assert saved.status_code == 201
        search_id = saved.json()["searchId"]

        history = client.get("/api/search/history").json()["searches"]
        assert len(history) == 1
        entry = history[0]
        assert entry["id"] == search_id
        assert entry["title"] == "Search: citation management for thesis..."
        assert entry["useCase"] == "citation management for thesis..."
        assert entry["recommendationCount"] == 1

        search = client.get(f"/api/search/{search_id}").json()["search"]
        assert search["queryData"] == QUERY
        assert search["recommendations"] == ZOTERO_RESULT
        assert search["normalized"] == ZOTERO_RESULT

    def test_nested_payload_is_normalized(self, client, alice):
        nested = {"queryData": QUERY, "recommendations": ZOTERO_RESULT, "summary": "outer"}

        search_id = client.post(
            "/api/search/save", json={"queryData": QUERY, "recommendations": nested}
        ).json()["searchId"]

        search = client.get(f"/api/search/{search_id}").json()["search"]
        assert search["recommendations"] == nested
        assert search["normalized"]["recommendations"] == ZOTERO_RESULT["recommendations"]
        assert search["normalized"]["summary"] == "Zotero is the best fit."

        history = client.get("/api/search/history").json()["searches"]
        assert history[0]["recommendationCount"] == 1

    def test_untitled_without_use_case(self, client, alice):
        client.post("/api/search/save", json={"queryData": {}, "recommendations": {"recommendations": []}})

        assert client.get("/api/search/history").json()["searches"][0]["title"] == "Untitled Search"

    def test_history_newest_first_with_limit(self, client, alice):
        ids = [
            client.post(
                "/api/search/save",
                json={"queryData": QUERY, "recommendations": ZOTERO_RESULT, "searchTitle": f"search {i}"},
            ).json()["searchId"]
            for i in range(3)
        ]

        history = client.get("/api/search/history", params={"limit": 2}).json()["searches"]

        assert [entry["id"] for entry in history] == [ids[2], ids[1]]

    @pytest.mark.parametrize("limit", [0, 1001, "many"])
    def test_history_limit_out_of_range(self, client, alice, limit):
        response = client.get("/api/search/history", params={"limit": limit})

        assert response.status_code == 400

    def test_other_users_search_is_not_found(self, client, other_client, alice, register):
        search_id = client.post(
            "/api/search/save", json={"queryData": QUERY, "recommendations": ZOTERO_RESULT}
        ).json()["searchId"]

        register(other_client, "bob")
        response = other_client.get(f"/api/search/{search_id}")

        assert response.status_code == 404
        assert other_client.get("/api/search/history").json()["searches"] == []

    def test_missing_search(self, client, alice):
        assert client.get("/api/search/999").status_code == 404

    def test_non_integer_id(self, client, alice):
        response = client.get("/api/search/abc")

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"
