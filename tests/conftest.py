"""Pytest configuration and fixtures."""

import os
from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from usergate.database import Base, get_db
from usergate.main import app
from usergate.models.enums import Role
from usergate.models.user import User
from usergate.services.auth import get_password_hash


class AuthHeaders(dict):
    """Dict subclass that also stores the signed-in user's id and email."""

    def __init__(self, *args, user_id: str | None = None, email: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email


# Use test database - PostgreSQL in Docker, SQLite locally
if os.getenv("DATABASE_URL"):
    # Running in Docker - use PostgreSQL test database
    SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL") + "_test"
else:
    # Running locally - use SQLite
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TEST_PASSWORD = "testpass123"


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        from sqlalchemy_utils import create_database, database_exists

        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

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


@pytest.fixture(scope="function")
def client(db):
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    """Factory that inserts a user directly, optionally with a password and creation time."""
    base_time = datetime(2026, 1, 1, tzinfo=UTC)
    counter = {"n": 0}

    def _make_user(
        name: str = "User",
        email: str | None = None,
        role: Role = Role.USER,
        password: str | None = None,
        created_at: datetime | None = None,
    ) -> User:
        counter["n"] += 1
        user = User(
            name=name,
            email=email or f"user{counter['n']}@example.com",
            role=role.value,
            password_hash=get_password_hash(password) if password else None,
            created_at=created_at or base_time + timedelta(minutes=counter["n"]),
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def login(client):
    """Sign in through the API and return bearer headers."""

    def _login(email: str, password: str = TEST_PASSWORD) -> AuthHeaders:
        response = client.post("/api/auth/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        data = response.json()["data"]
        return AuthHeaders(
            {"Authorization": f"Bearer {data['token']}"},
            user_id=data["user"]["id"],
            email=data["user"]["email"],
        )

    return _login


@pytest.fixture
def auth_headers(client, login):
    """Register a regular user and return auth headers with user info."""
    response = client.post(
        "/api/auth/register",
        json={"name": "Test User", "email": "test@example.com", "password": TEST_PASSWORD},
    )
    assert response.status_code == 200
    return login("test@example.com")


@pytest.fixture
def admin_headers(make_user, login):
    """Create an admin directly in the database and return its auth headers."""
    make_user(name="Admin", email="admin@example.com", role=Role.ADMIN, password=TEST_PASSWORD)
    return login("admin@example.com")
