"""
Pytest configuration for Tool Finder backend tests.

Sets up test environment and global fixtures.
"""
import os
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

# Disable config validation during tests
# This allows tests to run without requiring real environment variables
os.environ["VALIDATE_CONFIG"] = "false"

# Set test environment variables (must happen before toolfinder is imported)
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("SESSION_SECRET", "test-session-secret-0123456789abcdef")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from fastapi.testclient import TestClient  # noqa: E402

from toolfinder.config import Settings  # noqa: E402
from toolfinder.db.session import Database  # noqa: E402
from toolfinder.main import create_app  # noqa: E402

VALID_PASSWORD = "Secret123"


@pytest.fixture
def database(tmp_path):
    """A fresh SQLite database file per test."""
    db = Database(f"sqlite:///{tmp_path / 'tool-finder-test.db'}")
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def db_session(database):
    """One session on the per-test database."""
    with database.session() as session:
        yield session


@pytest.fixture
def app_settings(tmp_path):
    """Settings pointing the app at a per-test database file."""
    settings = Settings()
    settings.DATABASE_URL = f"sqlite:///{tmp_path / 'tool-finder-app.db'}"
    return settings


@pytest.fixture
def app(app_settings):
    return create_app(app_settings)


@pytest.fixture
def client(app):
    """TestClient with the lifespan running (database opened)."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def other_client(app, client):
    """A second browser: same app, separate cookie jar."""
    return TestClient(app)


def _register(client: TestClient, username: str, password: str = VALID_PASSWORD):
    return client.post("/api/auth/register", json={"username": username, "password": password})


@pytest.fixture
def register():
    """Register (and thereby log in) a user through the API."""
    return _register


@pytest.fixture
def alice(client):
    """`client` logged in as a freshly registered user."""
    response = _register(client, "alice")
    assert response.status_code == 201
    return response.json()["user"]


def _gemini_response(text):
    part = SimpleNamespace(text=text)
    candidate = SimpleNamespace(content=SimpleNamespace(parts=[part]))
    return SimpleNamespace(candidates=[candidate], text=text)


def _mock_gemini_client(response=None, side_effect=None):
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock(return_value=response, side_effect=side_effect)
    return client


@pytest.fixture
def gemini_response():
    """Build the shape of a google-genai GenerateContentResponse carrying `text`."""
    return _gemini_response


@pytest.fixture
def mock_gemini_client():
    """Build a MagicMock standing in for genai.Client with an async generate_content."""
    return _mock_gemini_client
