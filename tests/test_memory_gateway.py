import asyncio
import json
from datetime import timedelta

import pytest

from campus_complaints.core.exceptions import PersistenceError, ValidationError
from campus_complaints.repositories.memory_gateway import STORAGE_KEYS, InMemoryGateway
from campus_complaints.repositories.seed import DEMO_USERS, seed_demo_users
from campus_complaints.schemas.complaint import ComplaintUpdate
from campus_complaints.schemas.enums import ComplaintStatus, UserRole
from campus_complaints.schemas.user import User

from conftest import BASE_TIME, TEST_BCRYPT_ROUNDS, TEST_PASSWORD, build_complaint


def build_update(update_id, complaint_id="complaint_a", minutes=1, status=ComplaintStatus.IN_PROGRESS):
    return ComplaintUpdate(
        id=update_id,
        complaint_id=complaint_id,
        status=status,
        note="Looking into it",
        updated_by="admin1",
        updated_by_name="Dr. Sharma",
        created_at=BASE_TIME + timedelta(minutes=minutes),
    )


def test_save_complaint_upserts_by_id(gateway):
    asyncio.run(gateway.save_complaint(build_complaint("complaint_a")))
    asyncio.run(gateway.save_complaint(build_complaint("complaint_b")))
    asyncio.run(gateway.save_complaint(build_complaint("complaint_a", title="Renamed")))

    complaints = asyncio.run(gateway.get_complaints())
    assert [c.id for c in complaints] == ["complaint_a", "complaint_b"]
    assert complaints[0].title == "Renamed"


def test_reads_return_copies(gateway):
    asyncio.run(gateway.save_complaint(build_complaint()))

    first = asyncio.run(gateway.get_complaints())[0]
    first.title = "mutated"

    assert asyncio.run(gateway.get_complaints())[0].title == "Projector flickering"


def test_updates_keep_insertion_order_per_complaint(gateway):
    asyncio.run(gateway.save_complaint_update(build_update("update_2", minutes=5)))
    asyncio.run(gateway.save_complaint_update(build_update("update_x", complaint_id="complaint_b")))
    asyncio.run(gateway.save_complaint_update(build_update("update_1", minutes=1)))

    updates = asyncio.run(gateway.get_complaint_updates("complaint_a"))
    assert [u.id for u in updates] == ["update_2", "update_1"]


def test_duplicate_update_id_is_rejected(gateway):
    asyncio.run(gateway.save_complaint_update(build_update("update_1")))
    with pytest.raises(PersistenceError):
        asyncio.run(gateway.save_complaint_update(build_update("update_1")))


def test_commit_change_writes_both_documents(gateway):
    complaint = build_complaint(status=ComplaintStatus.IN_PROGRESS)
    asyncio.run(gateway.commit_change(complaint, build_update("update_1")))

    assert asyncio.run(gateway.get_complaints()) == [complaint]
    assert [u.id for u in asyncio.run(gateway.get_complaint_updates(complaint.id))] == ["update_1"]


def test_commit_change_with_duplicate_update_writes_nothing(gateway):
    asyncio.run(gateway.commit_change(build_complaint(), build_update("update_1")))
    changed = build_complaint(title="Changed")

    with pytest.raises(PersistenceError):
        asyncio.run(gateway.commit_change(changed, build_update("update_1")))

    assert asyncio.run(gateway.get_complaints())[0].title == "Projector flickering"


def test_documents_are_json_under_storage_keys():
    store = {}
    gw = InMemoryGateway(store, bcrypt_rounds=TEST_BCRYPT_ROUNDS)
    asyncio.run(gw.save_complaint(build_complaint()))

    documents = json.loads(store[STORAGE_KEYS["COMPLAINTS"]])
    assert documents[0]["id"] == "complaint_a"
    assert documents[0]["status"] == "pending"
    assert json.loads(store[STORAGE_KEYS["COMPLAINT_UPDATES"]]) == []


def test_corrupted_document_raises_persistence_error():
    store = {STORAGE_KEYS["COMPLAINTS"]: "not json"}
    gw = InMemoryGateway(store)
    with pytest.raises(PersistenceError):
        asyncio.run(gw.get_complaints())


def test_seed_adds_missing_demo_users_once(gateway):
    assert asyncio.run(seed_demo_users(gateway, TEST_PASSWORD)) == 0
    users = asyncio.run(gateway.get_all_users())
    assert {u.email for u in users} == {u.email for u in DEMO_USERS}


def test_login_with_valid_credentials(gateway):
    user = asyncio.run(gateway.login("  Admin@Campus.edu ", TEST_PASSWORD))

    assert user is not None
    assert user.id == "admin1"
    assert user.role == UserRole.ADMIN
    assert asyncio.run(gateway.get_current_user()) == user


@pytest.mark.parametrize(
    "email, password",
    [
        ("admin@campus.edu", "wrong-password"),
        ("nobody@campus.edu", TEST_PASSWORD),
        ("admin@campus.edu", ""),
    ],
)
def test_login_rejected(gateway, email, password):
    assert asyncio.run(gateway.login(email, password)) is None
    assert asyncio.run(gateway.get_current_user()) is None


def test_current_user_survives_new_gateway_over_same_store():
    store = {}
    gw = InMemoryGateway(store, bcrypt_rounds=TEST_BCRYPT_ROUNDS)
    asyncio.run(seed_demo_users(gw, TEST_PASSWORD))
    asyncio.run(gw.login("manager@campus.edu", TEST_PASSWORD))

    reopened = InMemoryGateway(store, bcrypt_rounds=TEST_BCRYPT_ROUNDS)
    assert asyncio.run(reopened.get_current_user()).id == "manager1"

    asyncio.run(reopened.logout())
    assert asyncio.run(reopened.get_current_user()) is None
    assert STORAGE_KEYS["CURRENT_USER"] not in store


def test_passwords_are_stored_hashed():
    store = {}
    gw = InMemoryGateway(store, bcrypt_rounds=TEST_BCRYPT_ROUNDS)
    asyncio.run(seed_demo_users(gw, TEST_PASSWORD))

    credentials = json.loads(store[STORAGE_KEYS["CREDENTIALS"]])
    assert set(credentials) == {u.id for u in DEMO_USERS}
    assert all(h.startswith("$2") and TEST_PASSWORD not in h for h in credentials.values())


def test_add_user_rejects_duplicates(gateway):
    duplicate_email = User(
        id="someone", name="Someone", email="ADMIN@campus.edu", role=UserRole.STAFF
    )
    with pytest.raises(ValidationError) as exc_info:
        asyncio.run(gateway.add_user(duplicate_email, "secret1"))
    assert "email" in exc_info.value.field_errors

    duplicate_id = User(id="admin1", name="Other", email="other@campus.edu", role=UserRole.STAFF)
    with pytest.raises(ValidationError):
        asyncio.run(gateway.add_user(duplicate_id, "secret1"))
