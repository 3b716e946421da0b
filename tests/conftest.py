import os

# Keep the app off any real database/TMDB during tests
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from watchtrack.database import Base, get_db
from watchtrack.main import app
from watchtrack.models import User, UserRole
from watchtrack.services.tmdb_service import TMDBService
from watchtrack.utils.security import create_access_token

SQLALCHEMY_DATABASE_URL = "sqlite://"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

ALICE = "8a0c5a1e-0000-4000-8000-00000000a11c"
BOB = "8a0c5a1e-0000-4000-8000-000000000b0b"


@pytest.fixture
def alice_id():
    return ALICE


@pytest.fixture
def bob_id():
    return BOB


@pytest.fixture
def db_session():
    """Provide a clean database session for each test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db_session, monkeypatch):
    """FastAPI test client with the database dependency overridden."""

    def override_get_db():
        test_db = TestingSessionLocal()
        try:
            yield test_db
        finally:
            test_db.close()

    app.dependency_overrides[get_db] = override_get_db
    monkeypatch.delenv("ADMIN_USER_IDS", raising=False)
    monkeypatch.setattr(TMDBService, "API_KEY", "test-key")

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.pop(get_db, None)


def auth_headers_for(user_id: str, email: str = None) -> dict:
    token = create_access_token(user_id, email or f"{user_id[-4:]}@example.com")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def alice_headers():
    return auth_headers_for(ALICE, "alice@example.com")


@pytest.fixture
def bob_headers():
    return auth_headers_for(BOB, "bob@example.com")


@pytest.fixture
def admin_user(db_session):
    user = User(id="admin-0001", email="admin@example.com", role=UserRole.ADMIN.value)
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def admin_headers(admin_user):
    return auth_headers_for(admin_user.id, admin_user.email)


class FakeResponse:
    """Minimal stand-in for requests.Response"""

    def __init__(self, payload=None, status_code=200):
        self._payload = payload or {}
        self.status_code = status_code

    def json(self):
        return self._payload

    def raise_for_status(self):
        import requests
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Client Error")


@pytest.fixture
def fake_tmdb(monkeypatch):
    """
    Route requests.get to canned TMDB payloads.

    Usage: fake_tmdb["/search/multi"] = {...}; calls are recorded in fake_tmdb.calls
    """

    class Routes(dict):
        calls = []

    routes = Routes()
    routes.calls = []

    def fake_get(url, params=None, timeout=None):
        endpoint = url.replace(TMDBService.BASE_URL, "")
        routes.calls.append((endpoint, dict(params or {})))
        if endpoint not in routes:
            return FakeResponse({"status_message": "not found"}, status_code=404)
        payload = routes[endpoint]
        if isinstance(payload, Exception):
            raise payload
        return FakeResponse(payload)

    monkeypatch.setattr("watchtrack.services.tmdb_service.requests.get", fake_get)
    monkeypatch.setattr(TMDBService, "API_KEY", "test-key")
    return routes
