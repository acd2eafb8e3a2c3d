"""Pytest configuration and fixtures."""

import os
from itertools import count
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import src.services.realtime as realtime_module
from src.api.dependencies import get_blob_store
from src.database import Base, get_db
from src.main import app
from src.services.storage import BlobStore


class AuthHeaders(dict):
    """Dict subclass that also stores user_id."""

    def __init__(
        self, *args, user_id: int | None = None, email: str | None = None, **kwargs
    ):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email


class FakeBlobStore(BlobStore):
    """In-memory blob store that records deletions."""

    def __init__(self):
        self.deleted: list[str] = []
        self._ids = count(1)

    def get_url(self, blob_id: str) -> str | None:
        return f"https://blobs.test/{blob_id}" if blob_id else None

    def generate_upload_url(self) -> dict:
        blob_id = f"covers/test-{next(self._ids)}"
        return {"upload_url": f"https://blobs.test/upload/{blob_id}", "blob_id": blob_id}

    def delete(self, blob_id: str) -> None:
        self.deleted.append(blob_id)


# Use test database - PostgreSQL in Docker, SQLite locally
if os.getenv("DATABASE_URL"):
    # Running in Docker - use PostgreSQL test database
    SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL").replace("/mise", "/mise_test")
else:
    # Running locally - use SQLite
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        # For PostgreSQL, create the test database
        from sqlalchemy_utils import create_database, database_exists

        # Create test database if it doesn't exist
        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

    Base.metadata.create_all(bind=engine)
    yield
    # Don't drop database - just leave it for next run (each test cleans up after itself)


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
def redis_mock():
    """Replace the sync Redis client used for publishing events."""
    previous = realtime_module._sync_redis
    mock = MagicMock()
    realtime_module._sync_redis = mock
    yield mock
    realtime_module._sync_redis = previous


@pytest.fixture
def blob_store():
    return FakeBlobStore()


@pytest.fixture(scope="function")
def client(db, blob_store):
    """Create a test client with database and blob store overrides."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def register(client):
    """Factory that registers a user and returns their auth headers."""

    def _register(username: str, name: str | None = None) -> AuthHeaders:
        response = client.post(
            "/api/v1/auth/register",
            json={
                "email": f"{username}@example.com",
                "password": "testpass123",
                "name": name or username.title(),
                "username": username,
            },
        )
        assert response.status_code == 201, response.text
        data = response.json()
        return AuthHeaders(
            {"Authorization": f"Bearer {data['access_token']}"},
            user_id=data["user"]["id"],
            email=data["user"]["email"],
        )

    return _register


@pytest.fixture
def auth_headers(register):
    """Create a user and return auth headers with user info."""
    return register("test_user", "Test User")


@pytest.fixture
def other_headers(register):
    """A second user, for cross-user scenarios."""
    return register("other_user", "Other User")


@pytest.fixture
def create_recipe(client):
    """Factory that creates a recipe through the API and returns its JSON."""

    def _create(headers: AuthHeaders, **overrides) -> dict:
        payload = {
            "title": "Lemon Tart",
            "category": "dessert",
            "ingredients": ["3 lemons", "200g flour", "100g butter"],
            "steps": ["Make the crust", "Fill and bake"],
            "status": "published",
            "prep_time": 20,
            "cook_time": 40,
            "difficulty": "medium",
        }
        payload.update(overrides)
        response = client.post("/api/v1/recipes", headers=headers, json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _create
