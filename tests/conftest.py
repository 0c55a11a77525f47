"""Test fixtures - an isolated app per test backed by in-memory MongoDB.

Each test gets a fresh mongomock client, so no data leaks between tests and
no MongoDB server is needed. bcrypt runs with the minimum cost factor to
keep registration/login fast.
"""

import uuid

import mongomock
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from careerconnect.core.config import Settings
from careerconnect.db.mongodb import init_mongo_indexes
from careerconnect.main import create_app


DEFAULT_PASSWORD = "secure_password_123"


@pytest.fixture()
def settings():
    return Settings(
        mongodb_db="careerconnect_test",
        jwt_secret_key="test-secret",
        bcrypt_rounds=4,
        debug=True,
        log_level="WARNING",
    )


@pytest.fixture()
def app(settings):
    """Application wired to a fresh in-memory database with indexes created."""
    application = create_app(settings, mongo_client=mongomock.MongoClient(tz_aware=True))
    init_mongo_indexes(application.state.mongo_db)
    return application


@pytest.fixture()
def db(app):
    return app.state.mongo_db


@pytest_asyncio.fixture()
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def register(client):
    """Register a user and return (user, token).

    Usage:
        employer, token = await register(role="employer")
    """

    async def _register(role="jobseeker", email=None, password=DEFAULT_PASSWORD, **extra):
        body = {
            "email": email or f"{role}-{uuid.uuid4().hex[:8]}@example.com",
            "password": password,
            "firstName": "Test",
            "lastName": role.capitalize(),
            "role": role,
            **extra,
        }
        r = await client.post("/api/users/register", json=body)
        assert r.status_code == 201, r.text
        data = r.json()
        return data["user"], data["token"]

    return _register


def auth(token):
    return {"Authorization": f"Bearer {token}"}


def job_payload(**overrides):
    body = {
        "title": "Backend Engineer",
        "company": "Acme Corp",
        "location": "Remote",
        "description": "Build and run our REST APIs.",
        "requirements": "Python, MongoDB",
        "salary": {"min": 50000, "max": 70000},
        "jobType": "Full-time",
        "experienceLevel": "Mid",
    }
    body.update(overrides)
    return body
