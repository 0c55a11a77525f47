"""User API tests.

Cover:
1. Registration + duplicate email prevention
2. Login, including the unified invalid-credentials failure
3. Bearer token handling on protected routes
4. Profile read/update and password change
5. Admin-only user listing
"""

import pytest
from bson import ObjectId

from conftest import DEFAULT_PASSWORD, auth


# ═══════════════════════════════════════════════════════════
# Registration
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_register_returns_user_and_token(client):
    r = await client.post(
        "/api/users/register",
        json={
            "email": "Jane.Doe@Example.com",
            "password": DEFAULT_PASSWORD,
            "firstName": "Jane",
            "lastName": "Doe",
            "role": "jobseeker",
        },
    )
    assert r.status_code == 201
    data = r.json()
    assert data["token"]
    assert data["user"]["email"] == "jane.doe@example.com"
    assert data["user"]["firstName"] == "Jane"
    assert data["user"]["role"] == "jobseeker"
    assert "id" in data["user"]


@pytest.mark.asyncio
async def test_register_duplicate_email(client, register):
    """The second registration with the same email is a uniqueness violation."""
    await register(email="dup@example.com")

    r = await client.post(
        "/api/users/register",
        json={
            "email": "DUP@example.com",
            "password": DEFAULT_PASSWORD,
            "firstName": "Other",
            "lastName": "User",
            "role": "employer",
        },
    )
    assert r.status_code == 409
    assert r.json()["detail"] == "Email already registered"


@pytest.mark.asyncio
async def test_register_short_password(client):
    r = await client.post(
        "/api/users/register",
        json={
            "email": "short@example.com",
            "password": "abc",
            "firstName": "Short",
            "lastName": "Pw",
            "role": "jobseeker",
        },
    )
    assert r.status_code == 400
    body = r.json()
    assert body["detail"] == "Validation failed"
    assert any(err["field"] == "password" for err in body["errors"])


@pytest.mark.asyncio
async def test_register_rejects_unknown_role(client):
    r = await client.post(
        "/api/users/register",
        json={
            "email": "role@example.com",
            "password": DEFAULT_PASSWORD,
            "firstName": "Bad",
            "lastName": "Role",
            "role": "superuser",
        },
    )
    assert r.status_code == 400


# ═══════════════════════════════════════════════════════════
# Login
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_login_success(client, register):
    user, _ = await register(email="login@example.com")

    r = await client.post(
        "/api/users/login",
        json={"email": "login@example.com", "password": DEFAULT_PASSWORD},
    )
    assert r.status_code == 200
    data = r.json()
    assert data["user"]["id"] == user["id"]
    assert data["tokenType"] == "bearer"

    r = await client.get("/api/users/profile", headers=auth(data["token"]))
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_login_failures_are_indistinguishable(client, register):
    """Wrong password and unknown email fail with the same status and message."""
    await register(email="known@example.com")

    wrong_pw = await client.post(
        "/api/users/login",
        json={"email": "known@example.com", "password": "not-the-password"},
    )
    unknown = await client.post(
        "/api/users/login",
        json={"email": "nobody@example.com", "password": "whatever"},
    )
    assert wrong_pw.status_code == unknown.status_code == 401
    assert wrong_pw.json() == unknown.json() == {"detail": "Invalid login credentials"}


# ═══════════════════════════════════════════════════════════
# Token handling
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_profile_requires_token(client):
    r = await client.get("/api/users/profile")
    assert r.status_code == 401
    assert r.json()["detail"] == "Authentication token missing"
    assert r.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_profile_rejects_garbage_token(client):
    r = await client.get("/api/users/profile", headers=auth("not-a-jwt"))
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid authentication token"


@pytest.mark.asyncio
async def test_token_for_deleted_user_is_rejected(client, register, db):
    user, token = await register()

    db.users.delete_one({"_id": ObjectId(user["id"])})

    r = await client.get("/api/users/profile", headers=auth(token))
    assert r.status_code == 401
    assert r.json()["detail"] == "User for this token no longer exists"


# ═══════════════════════════════════════════════════════════
# Profile
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_update_profile(client, register):
    _, token = await register()

    r = await client.patch(
        "/api/users/profile",
        headers=auth(token),
        json={
            "firstName": "Updated",
            "profile": {
                "title": "Engineer",
                "bio": "Hello",
                "skills": ["Python", "MongoDB"],
                "experience": [
                    {
                        "title": "Developer",
                        "company": "Acme",
                        "startDate": "2020-01-15T00:00:00",
                        "current": True,
                        "description": "APIs",
                    }
                ],
            },
            "company": {"name": "Acme", "position": "Dev", "website": "https://acme.test"},
        },
    )
    assert r.status_code == 200
    user = r.json()
    assert user["firstName"] == "Updated"
    assert user["profile"]["skills"] == ["Python", "MongoDB"]
    assert user["profile"]["experience"][0]["startDate"].startswith("2020-01-15")
    assert user["company"]["name"] == "Acme"

    r = await client.get("/api/users/profile", headers=auth(token))
    assert r.json()["profile"]["bio"] == "Hello"


@pytest.mark.asyncio
async def test_update_profile_rejects_other_fields(client, register):
    """Only firstName, lastName, profile and company may be updated."""
    _, token = await register()

    for body in ({"email": "new@example.com"}, {"role": "admin"}, {"password": "newpassword"}):
        r = await client.patch("/api/users/profile", headers=auth(token), json=body)
        assert r.status_code == 400, body


@pytest.mark.asyncio
async def test_change_password(client, register):
    _, token = await register(email="pw@example.com")

    r = await client.put(
        "/api/users/profile/password",
        headers=auth(token),
        json={"currentPassword": "wrong-password", "newPassword": "brand_new_pw"},
    )
    assert r.status_code == 401

    r = await client.put(
        "/api/users/profile/password",
        headers=auth(token),
        json={"currentPassword": DEFAULT_PASSWORD, "newPassword": "brand_new_pw"},
    )
    assert r.status_code == 200

    old = await client.post("/api/users/login", json={"email": "pw@example.com", "password": DEFAULT_PASSWORD})
    new = await client.post("/api/users/login", json={"email": "pw@example.com", "password": "brand_new_pw"})
    assert old.status_code == 401
    assert new.status_code == 200


# ═══════════════════════════════════════════════════════════
# Admin listing / password exposure
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_list_users_admin_only(client, register):
    _, seeker_token = await register(role="jobseeker")
    _, admin_token = await register(role="admin")

    r = await client.get("/api/users", headers=auth(seeker_token))
    assert r.status_code == 403
    assert r.json()["detail"] == "Access denied."

    r = await client.get("/api/users", headers=auth(admin_token))
    assert r.status_code == 200
    assert len(r.json()) == 2


@pytest.mark.asyncio
async def test_password_never_returned(client, register):
    """No user-fetching endpoint exposes the password or its hash."""
    _, admin_token = await register(role="admin", email="admin@example.com")

    responses = [
        await client.post("/api/users/login", json={"email": "admin@example.com", "password": DEFAULT_PASSWORD}),
        await client.get("/api/users/profile", headers=auth(admin_token)),
        await client.get("/api/users", headers=auth(admin_token)),
        await client.patch("/api/users/profile", headers=auth(admin_token), json={"lastName": "Root"}),
    ]
    for r in responses:
        assert r.status_code == 200
        assert "password" not in r.text.lower()
        assert "$2b$" not in r.text


@pytest.mark.asyncio
async def test_user_timestamps_match_between_register_and_read(client, register):
    user, token = await register()

    r = await client.get("/api/users/profile", headers=auth(token))
    assert r.json()["createdAt"] == user["createdAt"]
    assert user["createdAt"].endswith("Z")


@pytest.mark.asyncio
async def test_health(client):
    r = await client.get("/api/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"
    assert "x-request-id" in r.headers
