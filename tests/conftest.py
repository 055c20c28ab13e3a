"""Pytest configuration and fixtures for API tests."""

import os
import tempfile
from pathlib import Path

import pytest

# Importing the app module builds an app at import time; point it at a scratch area.
_bootstrap_dir = Path(tempfile.mkdtemp(prefix="design-center-tests-"))
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_bootstrap_dir / 'bootstrap.db'}")
os.environ.setdefault("UPLOADS_ROOT", str(_bootstrap_dir / "uploads"))
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ENABLE_PROMETHEUS_METRICS", "true")

from fastapi.testclient import TestClient  # noqa: E402

from design_center.core.config import get_settings  # noqa: E402
from design_center.main import create_app  # noqa: E402


@pytest.fixture
def uploads_root(tmp_path: Path) -> Path:
    return tmp_path / "uploads"


@pytest.fixture
def app(tmp_path: Path, uploads_root: Path, monkeypatch: pytest.MonkeyPatch):
    """Fresh application bound to a per-test SQLite file and uploads directory."""
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    monkeypatch.setenv("UPLOADS_ROOT", str(uploads_root))
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("SECRET_KEY", "test-secret-key")
    monkeypatch.setenv("CANVA_CLIENT_ID", "canva-client")
    monkeypatch.setenv("CANVA_CLIENT_SECRET", "canva-secret")
    get_settings.cache_clear()
    application = create_app()
    yield application
    application.dependency_overrides.clear()
    get_settings.cache_clear()


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


def signup(client: TestClient, email: str = "jane@example.com", password: str = "secret123", **extra):
    response = client.post("/api/auth/signup", json={"email": email, "password": password, **extra})
    assert response.status_code == 201, response.text
    return response.json()["user"]


def signin(client: TestClient, email: str = "jane@example.com", password: str = "secret123") -> str:
    response = client.post("/api/auth/signin", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["token"]


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user(client: TestClient) -> dict:
    return signup(client)


@pytest.fixture
def token(client: TestClient, user: dict) -> str:
    return signin(client)


@pytest.fixture
def headers(token: str) -> dict[str, str]:
    return auth_headers(token)


@pytest.fixture
def premium_headers(client: TestClient) -> dict[str, str]:
    signup(client, email="pro@example.com", plan="Premium")
    return auth_headers(signin(client, email="pro@example.com"))


@pytest.fixture
def ultra_headers(client: TestClient) -> dict[str, str]:
    signup(client, email="ultra@example.com", plan="Ultra-Premium")
    return auth_headers(signin(client, email="ultra@example.com"))
