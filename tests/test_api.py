import asyncio
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from campus_complaints.core.security import TokenManager
from campus_complaints.main import create_app
from campus_complaints.utils.datetime_utils import utc_now

from conftest import TEST_PASSWORD, build_complaint

API = "/api/v1"


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def as_user(client, user_id):
    return bearer(client.app.state.tokens.create_access_token(user_id))


@pytest.fixture
def client(gateway):
    return TestClient(create_app(gateway))


def submit(client, user_id="student1", **body):
    payload = {"title": "Wifi not working in Block A", "description": "network connection dead"}
    payload.update(body)
    return client.post(f"{API}/complaints", json=payload, headers=as_user(client, user_id))


def test_login_and_failed_login(client):
    ok = client.post(f"{API}/auth/login", json={"email": "admin@campus.edu", "password": TEST_PASSWORD})
    assert ok.status_code == 200
    body = ok.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["id"] == "admin1"
    assert "password" not in body["user"]

    stats = client.get(f"{API}/complaints/stats", headers=bearer(body["access_token"]))
    assert stats.status_code == 200

    bad = client.post(f"{API}/auth/login", json={"email": "admin@campus.edu", "password": "nope"})
    assert bad.status_code == 401
    assert bad.json()["error"]["code"] == "AUTHENTICATION_FAILED"

    assert client.post(f"{API}/auth/logout").status_code == 200


def test_signup_then_duplicate(client):
    body = {
        "name": "Anita Rao",
        "email": "anita@campus.edu",
        "password": "secret12",
        "role": "student",
        "department": "Physics",
    }
    created = client.post(f"{API}/auth/signup", json=body)
    assert created.status_code == 201
    assert created.json()["role"] == "staff"
    assert created.json()["id"].startswith("user_")

    duplicate = client.post(f"{API}/auth/signup", json=body)
    assert duplicate.status_code == 422
    assert duplicate.json()["error"]["code"] == "DUPLICATE_ENTRY"
    assert duplicate.json()["error"]["type"] == "ValidationError"


def test_missing_token_or_unknown_user(client):
    assert client.get(f"{API}/complaints").status_code == 401
    response = client.get(f"{API}/complaints", headers=as_user(client, "ghost"))
    assert response.status_code == 401
    assert response.json()["error"]["type"] == "AuthenticationError"


def test_user_id_header_alone_grants_nothing(client, gateway):
    asyncio.run(gateway.save_complaint(build_complaint()))

    response = client.post(
        f"{API}/complaints/complaint_a/assign",
        json={"assignee_id": "manager1"},
        headers={"X-User-ID": "admin1"},
    )

    assert response.status_code == 401
    assert asyncio.run(gateway.get_complaints())[0].assigned_manager_id is None


def test_token_signed_with_another_key_is_rejected(client):
    forged = TokenManager(secret_key="a-different-signing-key-of-sufficient-length").create_access_token("admin1")

    response = client.get(f"{API}/complaints", headers=bearer(forged))

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "TOKEN_INVALID"


def test_expired_token_is_rejected(client):
    tokens = client.app.state.tokens
    stale = tokens.create_access_token("admin1", now=utc_now() - timedelta(minutes=tokens.expire_minutes + 5))

    response = client.get(f"{API}/complaints", headers=bearer(stale))

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "TOKEN_EXPIRED"


def test_classify(client):
    response = client.post(
        f"{API}/complaints/classify",
        json={"title": "Wifi not working in Block A", "description": "network connection dead"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["category"] == "wifi"
    assert body["priority"] == "medium"
    assert body["confidence"] == 0.9
    assert body["summary"] == "Detected: WiFi & Network | Priority: MEDIUM (90% confidence)"


def test_create_and_read_complaint(client):
    created = submit(client, location="Block A")
    assert created.status_code == 201
    complaint = created.json()
    assert complaint["status"] == "pending"
    assert complaint["category"] == "wifi"
    assert complaint["reporter_id"] == "student1"
    assert complaint["resolved_at"] is None

    fetched = client.get(f"{API}/complaints/{complaint['id']}", headers=as_user(client, "student1"))
    assert fetched.status_code == 200
    assert fetched.json() == complaint


def test_create_with_blank_title_is_rejected(client):
    response = submit(client, title="   ")
    assert response.status_code == 422
    assert "title" in response.json()["error"]["details"]["field_errors"]


def test_listing_search_and_stats(client, gateway):
    asyncio.run(gateway.save_complaint(build_complaint("complaint_other", reporter_id="student2")))
    submit(client)
    submit(client, title="Fan broken", description="Hostel room fan stopped")

    own = client.get(f"{API}/complaints", headers=as_user(client, "student1")).json()
    assert len(own) == 2

    searched = client.get(f"{API}/complaints", params={"q": "fan"}, headers=as_user(client, "student1")).json()
    assert [c["title"] for c in searched] == ["Fan broken"]

    everything = client.get(f"{API}/complaints", headers=as_user(client, "admin1")).json()
    assert len(everything) == 3

    pending = client.get(f"{API}/complaints", params={"status": "resolved"}, headers=as_user(client, "admin1"))
    assert pending.json() == []

    stats = client.get(f"{API}/complaints/stats", headers=as_user(client, "student1")).json()
    assert stats == {"total": 2, "pending": 2, "in_progress": 0, "resolved": 0}


def test_other_reporters_complaint_is_forbidden(client, gateway):
    asyncio.run(gateway.save_complaint(build_complaint(reporter_id="student2")))

    response = client.get(f"{API}/complaints/complaint_a", headers=as_user(client, "student1"))
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "AUTHORIZATION_FAILED"

    missing = client.get(f"{API}/complaints/complaint_missing", headers=as_user(client, "admin1"))
    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "RESOURCE_NOT_FOUND"


def test_workflow_over_http(client):
    complaint_id = submit(client).json()["id"]

    forbidden = client.post(
        f"{API}/complaints/{complaint_id}/status",
        json={"status": "in_progress"},
        headers=as_user(client, "student1"),
    )
    assert forbidden.status_code == 403

    managers = client.get(f"{API}/users/managers", headers=as_user(client, "admin1")).json()
    assert [m["id"] for m in managers] == ["manager1", "manager2"]

    assigned = client.post(
        f"{API}/complaints/{complaint_id}/assign",
        json={"assignee_id": "manager1"},
        headers=as_user(client, "admin1"),
    )
    assert assigned.status_code == 200
    assert assigned.json()["status"] == "in_progress"
    assert assigned.json()["assigned_manager_name"] == "Ramesh Patel"

    again = client.post(
        f"{API}/complaints/{complaint_id}/assign",
        json={"assignee_id": "manager2"},
        headers=as_user(client, "admin1"),
    )
    assert again.status_code == 409

    no_note = client.post(
        f"{API}/complaints/{complaint_id}/status",
        json={"status": "resolved", "note": "  "},
        headers=as_user(client, "manager1"),
    )
    assert no_note.status_code == 422

    resolved = client.post(
        f"{API}/complaints/{complaint_id}/status",
        json={"status": "resolved", "note": "Router replaced"},
        headers=as_user(client, "manager1"),
    )
    assert resolved.status_code == 200
    assert resolved.json()["resolved_at"] is not None

    reopened = client.post(
        f"{API}/complaints/{complaint_id}/status",
        json={"status": "in_progress"},
        headers=as_user(client, "admin1"),
    )
    assert reopened.status_code == 409
    assert reopened.json()["error"]["code"] == "INVALID_STATE_TRANSITION"

    updates = client.get(f"{API}/complaints/{complaint_id}/updates", headers=as_user(client, "student1")).json()
    assert [u["status"] for u in updates] == ["in_progress", "resolved"]
    assert updates[-1]["note"] == "Router replaced"


def test_request_id_is_echoed(client):
    response = client.post(
        f"{API}/complaints/classify",
        json={"title": "", "description": ""},
        headers={"X-Request-ID": "req-123"},
    )
    assert response.headers["X-Request-ID"] == "req-123"
    assert "X-Process-Time" in response.headers


def test_locations_list_ends_with_default(client):
    locations = client.get(f"{API}/complaints/locations").json()
    assert "Block A" in locations
    assert locations[-1] == "Others"
