# tests/conftest.py
# Shared fixtures: in-memory MongoDB and authenticated API clients

import os

os.environ.setdefault("MONGO_URI", "mongodb://localhost:27017")
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["ENVIRONMENT"] = "test"
for var in ("STREAM_API_KEY", "STREAM_API_SECRET", "SMTP_HOST"):
    os.environ.pop(var, None)

import mongomock
import pytest
from fastapi.testclient import TestClient

from streamify.utils import db_setup
from streamify.utils.auth import create_access_token, get_password_hash
from streamify.utils.db_setup import utcnow


@pytest.fixture(autouse=True)
def db(monkeypatch):
    """Swap the shared MongoDB client for an in-memory one."""
    client = mongomock.MongoClient()
    monkeypatch.setattr(db_setup, "_client", client)
    yield client[db_setup.MONGO_DB_NAME]


@pytest.fixture
def app():
    from main import app as fastapi_app

    return fastapi_app


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def make_user(db):
    """Insert a user directly and return the stored document."""

    def _make_user(email, full_name="Test User", password="secret123", onboarded=True, **extra):
        now = utcnow()
        user = {
            "email": email,
            "password": get_password_hash(password),
            "full_name": full_name,
            "bio": "Hello there",
            "profile_pic": "https://avatar.iran.liara.run/public/1.png",
            "location": "Berlin",
            "is_onboarded": onboarded,
            "friends": [],
            "reset_password_otp": None,
            "reset_password_expiry": None,
            "created_at": now,
            "updated_at": now,
        }
        user.update(extra)
        user["_id"] = db.users.insert_one(user).inserted_id
        return user

    return _make_user


@pytest.fixture
def client_for(app):
    """Build a TestClient carrying the session cookie of a given user."""

    def _client_for(user):
        test_client = TestClient(app)
        test_client.cookies.set("jwt", create_access_token(str(user["_id"])))
        return test_client

    return _client_for
