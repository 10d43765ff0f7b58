import asyncio

import pytest

from campus_complaints.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    PersistenceError,
    ValidationError,
)
from campus_complaints.repositories.memory_gateway import InMemoryGateway
from campus_complaints.repositories.seed import seed_demo_users
from campus_complaints.schemas.complaint import ComplaintCreate
from campus_complaints.schemas.enums import ComplaintCategory, ComplaintStatus
from campus_complaints.services.session import ComplaintSession

from conftest import TEST_BCRYPT_ROUNDS, TEST_PASSWORD, build_complaint


def signed_in(gateway, email):
    session = ComplaintSession(gateway)
    assert asyncio.run(session.login(email, TEST_PASSWORD))
    return session


def test_operations_require_sign_in(gateway):
    session = ComplaintSession(gateway)

    assert session.current_user is None
    with pytest.raises(AuthenticationError):
        session.visible_complaints()
    with pytest.raises(AuthenticationError):
        session.stats()
    with pytest.raises(AuthenticationError):
        asyncio.run(session.submit(ComplaintCreate(title="t", description="d")))


def test_login_failure_keeps_session_anonymous(gateway):
    session = ComplaintSession(gateway)
    assert asyncio.run(session.login("student@campus.edu", "wrong")) is False
    assert not session.is_authenticated


def test_submit_refreshes_visible_complaints(gateway):
    session = signed_in(gateway, "student@campus.edu")

    created = asyncio.run(
        session.submit(ComplaintCreate(title="Library AC not working", description="Too hot"))
    )

    assert created.category == ComplaintCategory.LIBRARY
    assert [c.id for c in session.visible_complaints()] == [created.id]
    assert session.stats().pending == 1


def test_visible_complaints_follow_role(gateway):
    asyncio.run(gateway.save_complaint(build_complaint("mine")))
    asyncio.run(gateway.save_complaint(build_complaint("theirs", reporter_id="student2")))

    staff_session = signed_in(gateway, "student@campus.edu")
    admin_session = signed_in(gateway, "admin@campus.edu")

    assert [c.id for c in staff_session.visible_complaints()] == ["mine"]
    assert {c.id for c in admin_session.visible_complaints()} == {"mine", "theirs"}
    assert admin_session.visible_complaints(status="resolved") == []
    assert admin_session.stats().total == 2


def test_assign_and_resolve_through_sessions(gateway):
    asyncio.run(gateway.save_complaint(build_complaint()))
    admin_session = signed_in(gateway, "admin@campus.edu")

    managers = asyncio.run(admin_session.assignable_managers())
    assert [m.id for m in managers] == ["manager1", "manager2"]

    assigned = asyncio.run(admin_session.assign_manager("complaint_a", "manager1"))
    assert assigned.status == ComplaintStatus.IN_PROGRESS
    assert admin_session.stats().in_progress == 1

    manager_session = signed_in(gateway, "manager@campus.edu")
    assert [c.id for c in manager_session.visible_complaints()] == ["complaint_a"]
    asyncio.run(manager_session.change_status("complaint_a", ComplaintStatus.RESOLVED, "Done"))

    timeline = asyncio.run(manager_session.timeline("complaint_a"))
    assert [u.status for u in timeline] == [ComplaintStatus.IN_PROGRESS, ComplaintStatus.RESOLVED]
    assert manager_session.stats().resolved == 1


def test_unknown_status_strings_are_validation_errors(gateway):
    asyncio.run(gateway.save_complaint(build_complaint()))
    session = signed_in(gateway, "admin@campus.edu")

    with pytest.raises(ValidationError):
        session.visible_complaints(status="bogus")
    with pytest.raises(ValidationError):
        asyncio.run(session.change_status("complaint_a", "closed", "done"))

    assert asyncio.run(gateway.get_complaints())[0].status == ComplaintStatus.PENDING


def test_timeline_requires_visibility(gateway):
    asyncio.run(gateway.save_complaint(build_complaint(reporter_id="student2")))
    session = signed_in(gateway, "student@campus.edu")

    with pytest.raises(AuthorizationError):
        asyncio.run(session.timeline("complaint_a"))


def test_load_restores_signed_in_user_and_logout_clears():
    store = {}
    gw = InMemoryGateway(store, bcrypt_rounds=TEST_BCRYPT_ROUNDS)
    asyncio.run(seed_demo_users(gw, TEST_PASSWORD))
    asyncio.run(gw.save_complaint(build_complaint()))
    signed_in(gw, "student@campus.edu")

    restored = ComplaintSession(InMemoryGateway(store))
    user = asyncio.run(restored.load())

    assert user.id == "student1"
    assert [c.id for c in restored.visible_complaints()] == ["complaint_a"]

    asyncio.run(restored.logout())
    assert restored.current_user is None
    assert asyncio.run(ComplaintSession(InMemoryGateway(store)).load()) is None


def test_suggest_uses_classifier(gateway):
    session = ComplaintSession(gateway)
    suggestion = session.suggest("Wifi not working in Block A", "network connection dead")
    assert suggestion.summary() == "Detected: WiFi & Network | Priority: MEDIUM (90% confidence)"


class ReadFailingGateway(InMemoryGateway):
    """Commits succeed; complaint listing fails after the first commit once armed."""

    armed = False
    fail_reads = False

    async def commit_change(self, complaint, update):
        await super().commit_change(complaint, update)
        self.fail_reads = self.armed

    async def get_complaints(self):
        if self.fail_reads:
            raise PersistenceError("complaint store offline", operation="get_complaints")
        return await super().get_complaints()


def test_failed_reload_does_not_fail_committed_change():
    gw = ReadFailingGateway(bcrypt_rounds=TEST_BCRYPT_ROUNDS)
    asyncio.run(seed_demo_users(gw, TEST_PASSWORD))
    asyncio.run(gw.save_complaint(build_complaint()))
    session = signed_in(gw, "admin@campus.edu")

    gw.armed = True
    updated = asyncio.run(session.change_status("complaint_a", ComplaintStatus.IN_PROGRESS))

    assert updated.status == ComplaintStatus.IN_PROGRESS
    assert session.is_stale
    assert [c.status for c in session.visible_complaints()] == [ComplaintStatus.IN_PROGRESS]

    gw.armed = gw.fail_reads = False
    asyncio.run(session.refresh())
    assert not session.is_stale
