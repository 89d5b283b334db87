"""Pytest configuration and fixtures."""

import os
import tempfile
from unittest.mock import MagicMock

# Settings are cached on first import; configure them before loading the app
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="feed-images-"))
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import src.services.realtime as realtime_module
from src.database import Base, get_db
from src.main import app
from src.services.storage import ImageStore, get_image_store


class AuthHeaders(dict):
    """Dict subclass that also stores user_id and email."""

    def __init__(self, *args, user_id: int | None = None, email: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email


# Use test database - PostgreSQL in Docker, SQLite locally
if os.getenv("DATABASE_URL"):
    SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL").replace("/feed", "/feed_test")
else:
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture(autouse=True)
def redis_mock(monkeypatch):
    """Replace the pub/sub client so post events are captured instead of sent."""
    mock_redis = MagicMock()
    monkeypatch.setattr(realtime_module, "_sync_redis", mock_redis)
    return mock_redis


@pytest.fixture
def image_store(tmp_path):
    return ImageStore(tmp_path / "images")


@pytest.fixture(scope="function")
def client(db, image_store):
    """Create a test client with database and image store overrides."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_image_store] = lambda: image_store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_auth_headers(client):
    """Factory: sign up and log in a user, returning auth headers."""

    def _make(email: str = "test@example.com", password: str = "testpass", name: str = "Test User"):
        response = client.post(
            "/auth/signup", json={"email": email, "password": password, "name": name}
        )
        assert response.status_code == 201, response.text
        login = client.post("/auth/login", json={"email": email, "password": password})
        assert login.status_code == 200, login.text
        data = login.json()
        return AuthHeaders(
            {"Authorization": f"Bearer {data['token']}"}, user_id=int(data["userId"]), email=email
        )

    return _make


@pytest.fixture
def auth_headers(make_auth_headers):
    """Create a user and return auth headers with user info."""
    return make_auth_headers()


@pytest.fixture
def other_auth_headers(make_auth_headers):
    """A second, unrelated user."""
    return make_auth_headers(email="other@example.com", name="Other User")


@pytest.fixture
def create_post(client):
    """Factory: create a post over REST and return its JSON."""

    def _create(headers, title: str = "A title", content: str = "Some content"):
        response = client.post(
            "/feed/post",
            headers=headers,
            data={"title": title, "content": content},
            files={"image": ("photo.png", b"\x89PNG fake image bytes", "image/png")},
        )
        assert response.status_code == 201, response.text
        return response.json()["post"]

    return _create


@pytest.fixture
def raw_client(client):
    """Client that returns 500 responses instead of re-raising server errors."""
    return TestClient(client.app, raise_server_exceptions=False)
