"""
Demo accounts installed on a fresh store.
"""

from typing import List, Optional

from campus_complaints.core.config import settings
from campus_complaints.core.logging import get_logger
from campus_complaints.repositories.gateway import PersistenceGateway
from campus_complaints.schemas.enums import UserRole
from campus_complaints.schemas.user import User

logger = get_logger(__name__)

DEMO_USERS: List[User] = [
    User(
        id="student1",
        name="Rahul Kumar",
        email="student@campus.edu",
        role=UserRole.STAFF,
        department="Computer Science",
        employee_id="CS2021001",
    ),
    User(
        id="admin1",
        name="Dr. Sharma",
        email="admin@campus.edu",
        role=UserRole.ADMIN,
        department="Administration",
    ),
    User(
        id="manager1",
        name="Ramesh Patel",
        email="manager@campus.edu",
        role=UserRole.MANAGER,
        department="IT Support",
    ),
    User(
        id="manager2",
        name="Priya Singh",
        email="manager2@campus.edu",
        role=UserRole.MANAGER,
        department="Facilities",
    ),
]


async def seed_demo_users(
    gateway: PersistenceGateway,
    password: Optional[str] = None,
) -> int:
    """
    Add the demo accounts that are not registered yet.

    Returns:
        Number of accounts added
    """
    password = password or settings.security.DEMO_USER_PASSWORD
    known_emails = {u.email for u in await gateway.get_all_users()}

    added = 0
    for user in DEMO_USERS:
        if user.email in known_emails:
            continue
        await gateway.add_user(user, password)
        added += 1

    if added:
        logger.info(f"Seeded {added} demo users")
    return added
