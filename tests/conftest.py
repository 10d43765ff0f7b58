"""Shared fixtures: a seeded in-memory gateway, demo users and complaint builders.

If users invoke `pytest` outside the project's virtualenv, we still add the project
root to sys.path so `import campus_complaints` works.
"""

from __future__ import annotations

import asyncio
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from campus_complaints.repositories.memory_gateway import InMemoryGateway  # noqa: E402
from campus_complaints.repositories.seed import DEMO_USERS, seed_demo_users  # noqa: E402
from campus_complaints.schemas.complaint import Complaint  # noqa: E402
from campus_complaints.schemas.enums import (  # noqa: E402
    ComplaintCategory,
    ComplaintPriority,
    ComplaintStatus,
)

TEST_PASSWORD = "campus123"
TEST_BCRYPT_ROUNDS = 4
BASE_TIME = datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc)


class StepClock:
    """Deterministic clock advancing one minute per call."""

    def __init__(self, start: datetime = BASE_TIME + timedelta(days=1)):
        self.current = start

    def __call__(self) -> datetime:
        self.current += timedelta(minutes=1)
        return self.current


class SequentialIds:
    def __init__(self):
        self.counter = 0

    def __call__(self, prefix: str) -> str:
        self.counter += 1
        return f"{prefix}_{self.counter:04d}"


def build_complaint(
    complaint_id: str = "complaint_a",
    *,
    title: str = "Projector flickering",
    description: str = "The projector in room 101 keeps flickering",
    location: str = "Block A",
    status: ComplaintStatus = ComplaintStatus.PENDING,
    reporter_id: str = "student1",
    reporter_name: str = "Rahul Kumar",
    assigned_manager_id: str | None = None,
    assigned_manager_name: str | None = None,
    created_at: datetime = BASE_TIME,
) -> Complaint:
    return Complaint(
        id=complaint_id,
        title=title,
        description=description,
        category=ComplaintCategory.OTHERS,
        location=location,
        priority=ComplaintPriority.LOW,
        status=status,
        reporter_id=reporter_id,
        reporter_name=reporter_name,
        assigned_manager_id=assigned_manager_id,
        assigned_manager_name=assigned_manager_name,
        created_at=created_at,
        updated_at=created_at,
        resolved_at=created_at if status == ComplaintStatus.RESOLVED else None,
    )


def _demo_user(user_id: str):
    return next(u for u in DEMO_USERS if u.id == user_id)


@pytest.fixture
def gateway() -> InMemoryGateway:
    gw = InMemoryGateway(bcrypt_rounds=TEST_BCRYPT_ROUNDS)
    asyncio.run(seed_demo_users(gw, TEST_PASSWORD))
    return gw


@pytest.fixture
def staff():
    return _demo_user("student1")


@pytest.fixture
def admin():
    return _demo_user("admin1")


@pytest.fixture
def manager():
    return _demo_user("manager1")


@pytest.fixture
def other_manager():
    return _demo_user("manager2")


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def ids() -> SequentialIds:
    return SequentialIds()
