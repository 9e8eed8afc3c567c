"""Root conftest: an app on a throwaway SQLite file plus login helpers."""

import pytest
from fastapi.testclient import TestClient

from todo_api.config import Settings
from todo_api.main import create_app

TEST_SECRET = "test-signing-secret-0123456789abcdef0123456789"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'todo.db'}",
        jwt_secret=TEST_SECRET,
        pbkdf2_iters=1000,
        # nothing listens here; /health must report redis as down
        redis_url="redis://127.0.0.1:6399/0",
        db_connect_retries=1,
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth_headers(client):
    """Register (if needed) and log in; returns headers carrying the bearer token."""

    def _login(email="alice@example.com", password="s3cret-pw"):
        client.post("/register", json={"email": email, "password": password})
        r = client.post("/login", json={"email": email, "password": password})
        assert r.status_code == 200, r.text
        return {"Authorization": f"Bearer {r.json()['token']}"}

    return _login
