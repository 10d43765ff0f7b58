"""
Persistence gateway contract.

The complaint core never talks to a storage backend directly; it goes
through a ``PersistenceGateway``. Every method is a coroutine and therefore a
suspend point: callers await a mutation before reading its results back, and
the last writer of a complaint id wins (whole-record upsert).

Implementations report storage failures as ``PersistenceError``.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from campus_complaints.schemas.complaint import Complaint, ComplaintUpdate
from campus_complaints.schemas.user import User

__all__ = ["PersistenceGateway"]


class PersistenceGateway(ABC):
    """
    Storage abstraction for users, complaints and complaint updates.

    Gateways whose backend can write a complaint and its audit entry in one
    transaction set ``supports_atomic_writes`` and implement
    ``commit_change``; the lifecycle service then hands both records over in
    a single call instead of compensating on partial failure.
    """

    supports_atomic_writes: bool = False

    # -------------------------------------------------------------------------
    # Complaints
    # -------------------------------------------------------------------------

    @abstractmethod
    async def get_complaints(self) -> List[Complaint]:
        """Return every stored complaint."""

    @abstractmethod
    async def save_complaint(self, complaint: Complaint) -> None:
        """Insert or replace the complaint with the same id."""

    @abstractmethod
    async def get_complaint_updates(self, complaint_id: str) -> List[ComplaintUpdate]:
        """Return a complaint's updates in chronological (insertion) order."""

    @abstractmethod
    async def save_complaint_update(self, update: ComplaintUpdate) -> None:
        """Append an update record."""

    async def commit_change(self, complaint: Complaint, update: ComplaintUpdate) -> None:
        """Upsert ``complaint`` and append ``update`` atomically."""
        raise NotImplementedError(
            f"{type(self).__name__} does not support atomic writes"
        )

    # -------------------------------------------------------------------------
    # Users & identity
    # -------------------------------------------------------------------------

    @abstractmethod
    async def get_all_users(self) -> List[User]:
        """Return every known user."""

    @abstractmethod
    async def add_user(self, user: User, password: str) -> None:
        """Register a user; raises ValidationError for a duplicate email or id."""

    @abstractmethod
    async def login(self, email: str, password: str) -> Optional[User]:
        """Verify credentials and remember the user as current; None when rejected."""

    @abstractmethod
    async def logout(self) -> None:
        """Forget the current user."""

    @abstractmethod
    async def get_current_user(self) -> Optional[User]:
        """Return the signed-in user, if any."""
