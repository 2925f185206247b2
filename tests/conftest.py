"""Shared test fixtures for TeamHub API tests"""

import os
from typing import AsyncGenerator

import pytest
import pytest_asyncio

# Set test environment before importing app
os.environ["ENVIRONMENT"] = "testing"
os.environ["JWT_SECRET"] = "test-jwt-secret-for-testing-only"
os.environ["JWT_REFRESH_SECRET"] = "test-refresh-secret-for-testing-only"
os.environ["DATABASE_PATH"] = "/tmp/test_teamhub.json"
os.environ["UPLOADS_DIR"] = "/tmp/test_teamhub_uploads"
os.environ["AUTH_DEBUG_DIAGNOSTICS"] = "false"
os.environ.pop("FIREBASE_PROJECT_ID", None)

from tests.factories import create_role, create_user  # noqa: E402


# =============================================================================
# Database
# =============================================================================

@pytest.fixture
def test_db():
    """Fresh in-memory database for each test"""
    from teamhub.services.database import db

    db.close()
    db.initialize(in_memory=True)
    yield db
    db.close()


@pytest.fixture
def uploads_dir(tmp_path, monkeypatch):
    """Point file uploads at a per-test directory"""
    from teamhub.config import settings

    monkeypatch.setattr(settings, "uploads_dir", str(tmp_path / "uploads"))
    return tmp_path / "uploads"


# =============================================================================
# Application and Client Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def app(test_db):
    """Get the FastAPI application backed by the in-memory database"""
    from teamhub.main import app as fastapi_app
    return fastapi_app


@pytest_asyncio.fixture
async def test_client(app) -> AsyncGenerator:
    """Create async HTTP client for testing"""
    from httpx import AsyncClient, ASGITransport

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# =============================================================================
# User Fixtures
# =============================================================================

def _directory_user(db, email: str, role: str, display_name: str) -> dict:
    db.create_role(create_role(email=email, role=role))
    return db.create_user(create_user(email=email, display_name=display_name, role=role))


@pytest.fixture
def admin_user(test_db) -> dict:
    return _directory_user(test_db, "admin@college.edu", "Admin", "Ada Admin")


@pytest.fixture
def spoc_user(test_db) -> dict:
    """Moderator-tier user"""
    return _directory_user(test_db, "spoc@college.edu", "SPOC", "Sam Spoc")


@pytest.fixture
def member_user(test_db) -> dict:
    return _directory_user(test_db, "member@college.edu", "Member", "Mia Member")


@pytest.fixture
def outsider_user(test_db) -> dict:
    """Member with no relation to any project"""
    return _directory_user(test_db, "outsider@college.edu", "Member", "Oscar Outsider")


# =============================================================================
# JWT Token Fixtures
# =============================================================================

def bearer(user: dict) -> dict:
    from teamhub.auth.jwt import create_access_token
    token = create_access_token(data={"sub": user["id"], "email": user["email"]})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(admin_user) -> dict:
    return bearer(admin_user)


@pytest.fixture
def spoc_headers(spoc_user) -> dict:
    return bearer(spoc_user)


@pytest.fixture
def member_headers(member_user) -> dict:
    return bearer(member_user)


@pytest.fixture
def outsider_headers(outsider_user) -> dict:
    return bearer(outsider_user)
