"""
Tests for user endpoints.

Tests cover:
- Profile retrieval (including a session whose user was deleted)
- Storing and removing the Gemini API key
- Dashboard statistics
"""

from sqlalchemy import delete, func, select

from toolfinder.db.models import Search, User, UserStats


class TestGetProfile:
    """Tests for GET /api/user/profile"""

    def test_profile_of_new_user(self, client, alice):
        response = client.get("/api/user/profile")

        assert response.status_code == 200
        data = response.json()
        assert data["user"]["id"] == alice["id"]
        assert data["user"]["username"] == "alice"
        assert data["user"]["hasApiKey"] is False
        assert data["stats"]["totalSearches"] == 0
        assert data["stats"]["totalApiCalls"] == 0
        assert data["stats"]["lastSearchDate"] is None
        assert data["stats"]["memberSince"] == data["user"]["createdAt"]

    def test_api_key_is_never_returned(self, client, alice):
        client.put("/api/user/api-key", json={"apiKey": "AIzaSyExampleKey123"})

        response = client.get("/api/user/profile")

        assert response.json()["user"]["hasApiKey"] is True
        assert "AIzaSyExampleKey123" not in response.text

    def test_deleted_user(self, client, app, alice):
        saved = client.post(
            "/api/search/save",
            json={"queryData": {"useCase": "citation management"}, "recommendations": {"recommendations": []}},
        )
        assert saved.status_code == 201

        with app.state.database.session() as session:
            session.execute(delete(User).where(User.id == alice["id"]))
            session.commit()

            # Searches and counters go with the account
            for model in (Search, UserStats):
                remaining = session.scalar(
                    select(func.count()).select_from(model).where(model.user_id == alice["id"])
                )
                assert remaining == 0

        response = client.get("/api/user/profile")

        assert response.status_code == 404
        assert response.json()["detail"]["error"] == "not_found"


class TestApiKey:
    """Tests for PUT/DELETE /api/user/api-key"""

    def test_store_and_remove(self, client, alice):
        put = client.put("/api/user/api-key", json={"apiKey": "AIzaSyExampleKey123"})

        assert put.status_code == 200
        assert put.json()["success"] is True
        assert client.get("/api/user/profile").json()["user"]["hasApiKey"] is True

        removed = client.delete("/api/user/api-key")

        assert removed.status_code == 200
        assert client.get("/api/user/profile").json()["user"]["hasApiKey"] is False

    def test_key_too_short(self, client, alice):
        response = client.put("/api/user/api-key", json={"apiKey": "short"})

        assert response.status_code == 400

    def test_key_short_after_trimming(self, client, alice):
        response = client.put("/api/user/api-key", json={"apiKey": "x" + " " * 9})

        assert response.status_code == 400
        assert client.get("/api/user/profile").json()["user"]["hasApiKey"] is False

    def test_key_is_stored_trimmed(self, client, app, alice):
        client.put("/api/user/api-key", json={"apiKey": "  AIzaSyExampleKey123  "})

        with app.state.database.session() as session:
            user = session.get(User, alice["id"])
            assert user.gemini_api_key == "AIzaSyExampleKey123"

    def test_remove_without_key(self, client, alice):
        assert client.delete("/api/user/api-key").status_code == 200

    def test_requires_session(self, client):
        response = client.put("/api/user/api-key", json={"apiKey": "AIzaSyExampleKey123"})

        assert response.status_code == 401


class TestGetStats:
    """Tests for GET /api/user/stats"""

    def test_empty_stats(self, client, alice):
        response = client.get("/api/user/stats")

        assert response.status_code == 200
        stats = response.json()["stats"]
        assert stats["totalSearches"] == 0
        assert stats["searchesThisWeek"] == 0
        assert stats["searchesThisMonth"] == 0
        assert stats["recentSearches"] == []

    def test_recent_searches(self, client, alice):
        for i in range(6):
            client.post(
                "/api/search/save",
                json={
                    "queryData": {"useCase": f"use case number {i} " + "x" * 80},
                    "recommendations": {"recommendations": []},
                },
            )

        stats = client.get("/api/user/stats").json()["stats"]

        assert stats["searchesThisWeek"] == 6
        assert stats["searchesThisMonth"] == 6
        assert len(stats["recentSearches"]) == 5
        newest = stats["recentSearches"][0]
        assert newest["useCase"] == ("use case number 5 " + "x" * 80)[:60] + "..."
