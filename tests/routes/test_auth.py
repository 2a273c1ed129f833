"""
Tests for auth endpoints.

Tests cover:
- Registration (validation, duplicates, session cookie)
- Login / logout
- Status for authenticated and anonymous callers
- Rejection of missing and tampered session cookies
"""

import pytest


class TestRegister:
    """Tests for POST /api/auth/register"""

    def test_register_success(self, client, register):
        response = register(client, "thesis_writer")

        assert response.status_code == 201
        data = response.json()
        assert data["success"] is True
        assert data["user"]["username"] == "thesis_writer"
        assert isinstance(data["user"]["id"], int)
        assert "toolfinder_session" in response.cookies

    def test_register_starts_session(self, client, register):
        register(client, "thesis_writer")

        status = client.get("/api/auth/status").json()

        assert status["authenticated"] is True
        assert status["user"]["username"] == "thesis_writer"

    def test_duplicate_username(self, client, other_client, register):
        first = register(client, "alice")
        second = register(other_client, "alice", "Different789")

        assert second.status_code == 409
        assert second.json()["detail"]["error"] == "username_taken"

        # The original account still logs in with its own password
        login = other_client.post("/api/auth/login", json={"username": "alice", "password": "Secret123"})
        assert login.status_code == 200
        assert login.json()["user"]["id"] == first.json()["user"]["id"]

    @pytest.mark.parametrize(
        "username, password",
        [
            ("ab", "Secret123"),             # username too short
            ("a" * 31, "Secret123"),         # username too long
            ("bad name!", "Secret123"),      # illegal characters
            ("alice", "Sec1"),               # password too short
            ("alice", "secret123"),          # no uppercase
            ("alice", "SECRET123"),          # no lowercase
            ("alice", "SecretOnly"),         # no digit
        ],
    )
    def test_register_validation(self, client, register, username, password):
        response = register(client, username, password)

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"


class TestLogin:
    """Tests for POST /api/auth/login"""

    def test_login_success(self, client, other_client, register):
        register(client, "alice")

        response = other_client.post("/api/auth/login", json={"username": "alice", "password": "Secret123"})

        assert response.status_code == 200
        data = response.json()
        assert data["user"]["username"] == "alice"
        assert data["user"]["hasApiKey"] is False
        assert data["message"] == "Login successful"
        assert other_client.get("/api/auth/status").json()["authenticated"] is True

    def test_wrong_password(self, client, other_client, register):
        register(client, "alice")

        response = other_client.post("/api/auth/login", json={"username": "alice", "password": "Wrong123"})

        assert response.status_code == 401
        assert response.json()["detail"]["error"] == "invalid_credentials"

    def test_unknown_user(self, client):
        response = client.post("/api/auth/login", json={"username": "ghost", "password": "Secret123"})

        assert response.status_code == 401

    def test_empty_fields(self, client):
        response = client.post("/api/auth/login", json={"username": "", "password": ""})

        assert response.status_code == 400


class TestLogoutAndStatus:

    def test_status_anonymous(self, client):
        response = client.get("/api/auth/status")

        assert response.status_code == 200
        assert response.json() == {"authenticated": False}

    def test_logout_clears_session(self, client, alice):
        response = client.post("/api/auth/logout")

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert client.get("/api/auth/status").json()["authenticated"] is False
        assert client.get("/api/user/profile").status_code == 401

    def test_logout_without_session(self, client):
        response = client.post("/api/auth/logout")

        assert response.status_code == 200


class TestSessionCookie:

    def test_protected_route_requires_session(self, client):
        response = client.get("/api/user/profile")

        assert response.status_code == 401
        assert response.json()["detail"]["error"] == "unauthorized"

    def test_tampered_cookie_is_rejected(self, client, alice):
        token = client.cookies.get("toolfinder_session")
        client.cookies.clear()
        client.cookies.set("toolfinder_session", token[:-2] + "xx")

        response = client.get("/api/user/profile")

        assert response.status_code == 401
        assert response.json()["detail"]["error"] == "invalid_session"
        assert client.get("/api/auth/status").json()["authenticated"] is False
