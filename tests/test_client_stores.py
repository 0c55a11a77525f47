"""Client and store tests.

The API client is pointed at the app through starlette's TestClient (an
httpx.Client), so these exercise the real routes end to end.
"""

import uuid

import pytest
from fastapi.testclient import TestClient

from careerconnect.client import APIError, AuthStore, CareerConnectClient, JobStore, MessageStore
from conftest import DEFAULT_PASSWORD, job_payload


@pytest.fixture()
def http(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def make_client(http):
    def _make():
        return CareerConnectClient("http://testserver", http=http)

    return _make


def _signup(role="jobseeker", email=None):
    return {
        "email": email or f"{role}-{uuid.uuid4().hex[:8]}@example.com",
        "password": DEFAULT_PASSWORD,
        "firstName": "Store",
        "lastName": role.capitalize(),
        "role": role,
    }


# ═══════════════════════════════════════════════════════════
# API client
# ═══════════════════════════════════════════════════════════


def test_client_raises_api_error(make_client):
    client = make_client()
    with pytest.raises(APIError) as exc_info:
        client.get_profile()
    assert exc_info.value.status_code == 401
    assert exc_info.value.detail == "Authentication token missing"


def test_client_validation_errors_carry_fields(make_client):
    client = make_client()
    with pytest.raises(APIError) as exc_info:
        client.register({**_signup(), "password": "abc"})
    assert exc_info.value.status_code == 400
    assert any(err["field"] == "password" for err in exc_info.value.errors)


def test_client_keeps_token_after_login(make_client):
    client = make_client()
    client.register(_signup(email="keep@example.com"))
    client.logout()
    assert client.token is None

    client.login("keep@example.com", DEFAULT_PASSWORD)
    assert client.get_profile()["email"] == "keep@example.com"


# ═══════════════════════════════════════════════════════════
# AuthStore
# ═══════════════════════════════════════════════════════════


def test_auth_store_register_and_persist_token(make_client, tmp_path):
    token_file = tmp_path / "session" / "token"
    store = AuthStore(make_client(), token_path=token_file)

    store.register(_signup(email="persist@example.com"))
    assert store.is_authenticated
    assert store.user["email"] == "persist@example.com"
    assert token_file.read_text() == store.token

    # A new store picks the saved token up
    restored = AuthStore(make_client(), token_path=token_file)
    assert restored.is_authenticated
    restored.fetch_profile()
    assert restored.error is None
    assert restored.user["email"] == "persist@example.com"

    restored.logout()
    assert not restored.is_authenticated
    assert restored.user is None
    assert not token_file.exists()


def test_auth_store_login_failure_sets_error(make_client):
    store = AuthStore(make_client())
    store.register(_signup(email="fail@example.com"))
    store.logout()

    with pytest.raises(APIError):
        store.login("fail@example.com", "wrong-password")
    assert store.error == "Invalid login credentials"
    assert store.is_loading is False
    assert not store.is_authenticated

    store.login("fail@example.com", DEFAULT_PASSWORD)
    assert store.error is None
    assert store.is_authenticated


def test_auth_store_fetch_profile_without_token(make_client):
    store = AuthStore(make_client())
    store.fetch_profile()
    assert store.user is None
    assert store.error == "Authentication token missing"

    store.clear_error()
    assert store.error is None


def test_auth_store_update_profile(make_client):
    store = AuthStore(make_client())
    store.register(_signup())
    store.update_profile({"profile": {"skills": ["Python"]}})
    assert store.user["profile"]["skills"] == ["Python"]


# ═══════════════════════════════════════════════════════════
# JobStore
# ═══════════════════════════════════════════════════════════


def test_job_store_flow(make_client):
    employer = make_client()
    employer.register(_signup(role="employer"))
    employer_jobs = JobStore(employer)

    job = employer_jobs.create_job(job_payload(title="Store Job", jobType="Contract"))
    employer_jobs.create_job(job_payload(title="Other Job"))
    assert [j["title"] for j in employer_jobs.jobs] == ["Other Job", "Store Job"]

    seeker = make_client()
    seeker.register(_signup())
    jobs = JobStore(seeker)

    jobs.set_filters(jobType="Contract", search="")
    jobs.fetch_jobs()
    assert [j["title"] for j in jobs.jobs] == ["Store Job"]

    jobs.fetch_job(job["id"])
    assert jobs.current_job["applicants"] == []

    jobs.apply_to_job(job["id"])
    assert len(jobs.current_job["applicants"]) == 1

    with pytest.raises(APIError):
        jobs.apply_to_job(job["id"])
    assert jobs.error == "Already applied to this job"


def test_job_store_update_and_delete(make_client):
    employer = make_client()
    employer.register(_signup(role="employer"))
    store = JobStore(employer)

    job = store.create_job(job_payload())
    store.fetch_job(job["id"])

    store.update_job(job["id"], {"title": "Renamed"})
    assert store.jobs[0]["title"] == "Renamed"
    assert store.current_job["title"] == "Renamed"

    store.delete_job(job["id"])
    assert store.jobs == []
    assert store.current_job is None


def test_job_store_errors(make_client):
    seeker = make_client()
    seeker.register(_signup())
    store = JobStore(seeker)

    store.fetch_job("000000000000000000000000")
    assert store.current_job is None
    assert store.error == "Job not found"

    with pytest.raises(APIError):
        store.create_job(job_payload())
    assert store.error == "Access denied."
    assert store.jobs == []


# ═══════════════════════════════════════════════════════════
# MessageStore
# ═══════════════════════════════════════════════════════════


def test_message_store_flow(make_client):
    alice = make_client()
    alice_user = alice.register(_signup())["user"]
    bob = make_client()
    bob_user = bob.register(_signup())["user"]

    alice_messages = MessageStore(alice)
    alice_messages.fetch_messages_by_user(bob_user["id"])
    assert alice_messages.current_conversation == []

    sent = alice_messages.send_message(bob_user["id"], "Hi Bob")
    assert [m["content"] for m in alice_messages.current_conversation] == ["Hi Bob"]

    bob_messages = MessageStore(bob)
    bob_messages.fetch_conversations()
    assert len(bob_messages.conversations) == 1
    assert bob_messages.conversations[0][0]["senderId"] == alice_user["id"]

    bob_messages.fetch_messages_by_user(alice_user["id"])
    bob_messages.mark_message_as_read(sent["id"])
    assert bob_messages.current_conversation[0]["read"] is True

    # Only the sender may delete; the store keeps its state on failure
    with pytest.raises(APIError):
        bob_messages.delete_message(sent["id"])
    assert len(bob_messages.current_conversation) == 1

    alice_messages.delete_message(sent["id"])
    assert alice_messages.current_conversation == []


def test_message_store_send_failure(make_client):
    alice = make_client()
    me = alice.register(_signup())["user"]
    store = MessageStore(alice)

    with pytest.raises(APIError):
        store.send_message(me["id"], "talking to myself")
    assert store.error == "Cannot send a message to yourself"
    assert store.is_loading is False
