"""
Pytest configuration and fixtures for backend tests.
"""

import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from loguru import logger
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Add backend directory to path for imports
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Set test environment variables before importing config
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["AUTH_JWT_KEY"] = "test-session-key-for-testing-only"
os.environ["SUPER_ADMIN_EMAIL"] = "chief@civicsync.org"
os.environ["CORS_ORIGINS"] = '["http://localhost:3000"]'
os.environ["IDENTITY_WEBHOOK_SECRET"] = "whsec_MfKQ9r8GKYqrTwjUPD8ILPZIo2LaLaSw"
os.environ["EMAIL_PROVIDER"] = "console"
os.environ["LOG_TO_FILE"] = "false"

from authentication.auth import create_access_token  # noqa: E402
from main import app  # noqa: E402
from repositories.database import Base, get_db  # noqa: E402
import repositories.db_models as db_models  # noqa: E402

# Test database engine (in-memory SQLite)
TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

SAMPLE_IMAGE = "https://res.cloudinary.com/demo/image/upload/v1/civicsync/pothole.jpg"


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh in-memory database session for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db(db_session):
    """Alias for db_session."""
    return db_session


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client with overridden database dependency."""
    from helpers.rate_limiter import limiter

    # Reset rate limiter storage before each test to prevent rate limit errors
    limiter.reset()

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _create_user(
    db_session,
    external_id: str | None,
    email: str,
    first_name: str,
    last_name: str,
    role: db_models.UserRole = db_models.UserRole.USER,
) -> db_models.User:
    user = db_models.User(
        external_id=external_id,
        email=email,
        first_name=first_name,
        last_name=last_name,
        role=role,
        is_active=True,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


def _headers_for(user: db_models.User) -> dict:
    token = create_access_token(data={"sub": user.external_id, "email": user.email})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def test_user(db_session) -> db_models.User:
    """Create a citizen."""
    return _create_user(
        db_session, "user_citizen01", "maria@civicsync.org", "Maria", "Lopez"
    )


@pytest.fixture
def other_user(db_session) -> db_models.User:
    """Create a second citizen."""
    return _create_user(
        db_session, "user_citizen02", "omar@civicsync.org", "Omar", "Haddad"
    )


@pytest.fixture
def admin_user(db_session) -> db_models.User:
    """Create an admin."""
    return _create_user(
        db_session,
        "user_admin01",
        "clerk@civicsync.org",
        "City",
        "Clerk",
        role=db_models.UserRole.ADMIN,
    )


@pytest.fixture
def super_admin_user(db_session) -> db_models.User:
    """Create the super admin configured by SUPER_ADMIN_EMAIL."""
    return _create_user(
        db_session,
        "user_chief01",
        "chief@civicsync.org",
        "Chief",
        "Admin",
        role=db_models.UserRole.SUPER_ADMIN,
    )


@pytest.fixture
def auth_headers(test_user) -> dict:
    """Get authentication headers for test user."""
    return _headers_for(test_user)


@pytest.fixture
def other_auth_headers(other_user) -> dict:
    return _headers_for(other_user)


@pytest.fixture
def admin_auth_headers(admin_user) -> dict:
    return _headers_for(admin_user)


@pytest.fixture
def super_admin_auth_headers(super_admin_user) -> dict:
    return _headers_for(super_admin_user)


@pytest.fixture
def complaint_payload() -> dict:
    """A valid complaint submission body."""
    return {
        "title": "Deep pothole on Elm Street",
        "description": "A pothole near the bus stop is damaging tyres.",
        "category": "potholes",
        "location": {
            "latitude": 45.5017,
            "longitude": -73.5673,
            "address": "120 Elm Street",
        },
        "images": [SAMPLE_IMAGE],
    }


@pytest.fixture
def test_complaint(db_session, test_user) -> db_models.Complaint:
    """Create a pending, visible complaint owned by test_user (no events)."""
    complaint = db_models.Complaint(
        title="Broken water main",
        description="Water has been leaking onto the sidewalk for two days.",
        category=db_models.ComplaintCategory.WATER_SUPPLY,
        status=db_models.ComplaintStatus.PENDING,
        latitude=45.5,
        longitude=-73.56,
        address="8 Oak Avenue",
        images=[SAMPLE_IMAGE],
        votes=0,
        user_id=test_user.id,
    )
    db_session.add(complaint)
    db_session.commit()
    db_session.refresh(complaint)
    return complaint


@pytest.fixture
def log_messages():
    """Collect loguru messages emitted during a test."""
    messages: list[str] = []
    handler_id = logger.add(
        lambda message: messages.append(message.record["message"]), level="DEBUG"
    )
    yield messages
    logger.remove(handler_id)
