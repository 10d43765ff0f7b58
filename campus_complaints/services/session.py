"""
Client session context.

Holds the signed-in user and a cached complaint list for one client, and
routes every mutation through the lifecycle service. The cache is refreshed
after each mutation completes, so reads never show a half-applied change.
"""

from typing import List, Optional, Union

from campus_complaints.core.exceptions import AuthenticationError, PersistenceError
from campus_complaints.core.logging import get_logger
from campus_complaints.repositories.gateway import PersistenceGateway
from campus_complaints.schemas.complaint import (
    CategorySuggestion,
    Complaint,
    ComplaintCreate,
    ComplaintStats,
    ComplaintUpdate,
)
from campus_complaints.schemas.enums import ComplaintStatus
from campus_complaints.schemas.user import User
from campus_complaints.services.access_policy import AccessPolicy, complaint_stats
from campus_complaints.services.lifecycle import ComplaintLifecycleService, parse_status

logger = get_logger(__name__)

__all__ = ["ComplaintSession"]


class ComplaintSession:
    """
    Per-client state: current user plus the complaints last read from storage.

    Call ``load()`` once to restore a previously signed-in user.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        lifecycle: Optional[ComplaintLifecycleService] = None,
        policy: Optional[AccessPolicy] = None,
    ):
        self.gateway = gateway
        self.policy = policy or (lifecycle.policy if lifecycle else AccessPolicy())
        self.lifecycle = lifecycle or ComplaintLifecycleService(gateway, policy=self.policy)
        self._user: Optional[User] = None
        self._complaints: List[Complaint] = []
        self._stale = False

    @property
    def current_user(self) -> Optional[User]:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    @property
    def is_stale(self) -> bool:
        """True when the last post-mutation reload failed."""
        return self._stale

    def _require_user(self) -> User:
        if self._user is None:
            raise AuthenticationError()
        return self._user

    # -------------------------------------------------------------------------
    # Authentication
    # -------------------------------------------------------------------------

    async def load(self) -> Optional[User]:
        """Restore the stored current user and, if any, their complaints."""
        self._user = await self.gateway.get_current_user()
        if self._user is not None:
            await self.refresh()
        return self._user

    async def login(self, email: str, password: str) -> bool:
        user = await self.gateway.login(email, password)
        if user is None:
            logger.warning("Sign in failed")
            return False
        self._user = user
        await self.refresh()
        return True

    async def logout(self) -> None:
        await self.gateway.logout()
        if self._user is not None:
            logger.info("Signed out", extra={"user_ref": self._user.id})
        self._user = None
        self._complaints = []
        self._stale = False

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def refresh(self) -> List[Complaint]:
        self._complaints = await self.gateway.get_complaints()
        self._stale = False
        return list(self._complaints)

    async def _refresh_after(self, committed: Complaint) -> None:
        """
        Reload after a committed mutation.

        On failure the committed complaint is merged into the cache and the
        session stays stale until the next successful ``refresh()``.
        """
        try:
            await self.refresh()
        except PersistenceError:
            logger.error(
                "Reload after commit failed; complaint cache is stale",
                extra={"complaint_id": committed.id},
                exc_info=True,
            )
            self._complaints = [
                c for c in self._complaints if c.id != committed.id
            ] + [committed]
            self._stale = True

    def visible_complaints(
        self,
        query: Optional[str] = None,
        status: Optional[Union[ComplaintStatus, str]] = None,
    ) -> List[Complaint]:
        user = self._require_user()
        if status is not None:
            status = parse_status(status)
        return self.policy.filter_complaints(user, self._complaints, query, status)

    def stats(self) -> ComplaintStats:
        """Status counts over the complaints the user can see."""
        user = self._require_user()
        return complaint_stats(self.policy.visible_to(user, self._complaints))

    async def assignable_managers(self) -> List[User]:
        self._require_user()
        users = await self.gateway.get_all_users()
        return [u for u in users if u.is_manager]

    async def timeline(self, complaint_id: str) -> List[ComplaintUpdate]:
        user = self._require_user()
        complaint = await self.lifecycle.get_complaint(complaint_id)
        self.policy.require_view(user, complaint)
        return await self.gateway.get_complaint_updates(complaint_id)

    def suggest(self, title: Optional[str], description: Optional[str]) -> CategorySuggestion:
        return self.lifecycle.classifier.classify(title, description)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def submit(self, request: ComplaintCreate) -> Complaint:
        user = self._require_user()
        complaint = await self.lifecycle.create_complaint(request, user)
        await self._refresh_after(complaint)
        return complaint

    async def change_status(
        self,
        complaint_id: str,
        new_status: Union[ComplaintStatus, str],
        note: Optional[str] = None,
    ) -> Complaint:
        user = self._require_user()
        complaint = await self.lifecycle.change_status(complaint_id, new_status, note, user)
        await self._refresh_after(complaint)
        return complaint

    async def assign_manager(
        self,
        complaint_id: str,
        assignee_id: str,
        assignee_name: Optional[str] = None,
    ) -> Complaint:
        user = self._require_user()
        complaint = await self.lifecycle.assign_manager(
            complaint_id, assignee_id, assignee_name, user
        )
        await self._refresh_after(complaint)
        return complaint
