"""
Role-based access decisions for complaints.

Single place where roles are interpreted:

- staff see the complaints they reported
- managers see the complaints assigned to them
- admins see everything, and are the only ones who assign work

The boolean checks never raise; the ``require_*`` helpers raise
AuthorizationError so callers can guard an operation in one line.
"""
from __future__ import annotations

from typing import Iterable, List, Optional

from campus_complaints.core.exceptions import AuthorizationError
from campus_complaints.schemas.complaint import Complaint, ComplaintStats
from campus_complaints.schemas.enums import ComplaintStatus, UserRole
from campus_complaints.schemas.user import User

__all__ = ["AccessPolicy", "complaint_stats", "role_in"]


def role_in(user: User, allowed_roles: Iterable[UserRole]) -> bool:
    """
    Check if the user's role is in the allowed set.

    Example:
        >>> if role_in(user, [UserRole.ADMIN, UserRole.MANAGER]):
        ...     # Allow access
    """
    return user.role in set(allowed_roles)


class AccessPolicy:
    """Visibility and mutation rules for complaints."""

    def can_view(self, user: User, complaint: Complaint) -> bool:
        if user.is_admin:
            return True
        if user.is_manager:
            return complaint.assigned_manager_id == user.id
        return complaint.reporter_id == user.id

    def visible_to(self, user: User, complaints: Iterable[Complaint]) -> List[Complaint]:
        """Complaints the user may see, in input order."""
        return [c for c in complaints if self.can_view(user, c)]

    def can_manage(self, user: User, complaint: Complaint) -> bool:
        """Admins, or the manager the complaint is assigned to."""
        if user.is_admin:
            return True
        return (
            user.is_manager
            and complaint.assigned_manager_id is not None
            and complaint.assigned_manager_id == user.id
        )

    def can_assign(self, user: User, complaint: Complaint) -> bool:
        """Admins, while the complaint has no assignee."""
        return user.is_admin and not complaint.assigned_manager_id

    def can_change_status(self, user: User, complaint: Complaint) -> bool:
        return self.can_manage(user, complaint)

    # -------------------------------------------------------------------------
    # Listing
    # -------------------------------------------------------------------------

    def filter_complaints(
        self,
        user: User,
        complaints: Iterable[Complaint],
        query: Optional[str] = None,
        status: Optional[ComplaintStatus] = None,
    ) -> List[Complaint]:
        """
        Visible complaints narrowed by status and free-text search.

        Args:
            user: Acting user
            complaints: Candidate complaints
            query: Case-insensitive substring matched against title,
                description and location
            status: Exact status to keep

        Returns:
            Matching complaints, newest first
        """
        result = self.visible_to(user, complaints)

        if status is not None:
            result = [c for c in result if c.status == status]

        needle = (query or "").strip().lower()
        if needle:
            result = [
                c for c in result
                if needle in c.title.lower()
                or needle in c.description.lower()
                or needle in (c.location or "").lower()
            ]

        return sorted(result, key=lambda c: c.created_at, reverse=True)

    # -------------------------------------------------------------------------
    # Guards
    # -------------------------------------------------------------------------

    def require_role(
        self,
        user: User,
        allowed_roles: Iterable[UserRole],
        action: str,
    ) -> None:
        """Raise AuthorizationError unless the user's role is allowed."""
        allowed_roles = list(allowed_roles)
        if not role_in(user, allowed_roles):
            roles_str = ", ".join(r.value for r in allowed_roles)
            raise AuthorizationError(
                f"Not authorized to {action}; requires role: {roles_str}",
                required_permission=action,
                user_id=user.id,
                role=user.role.value,
            )

    def require_view(self, user: User, complaint: Complaint) -> None:
        if not self.can_view(user, complaint):
            raise self._denied(user, "view", complaint)

    def require_manage(self, user: User, complaint: Complaint) -> None:
        if not self.can_manage(user, complaint):
            raise self._denied(user, "manage", complaint)

    def require_assign(self, user: User, complaint: Complaint) -> None:
        if not self.can_assign(user, complaint):
            raise self._denied(user, "assign", complaint)

    @staticmethod
    def _denied(user: User, action: str, complaint: Complaint) -> AuthorizationError:
        return AuthorizationError(
            f"Not authorized to {action} complaint {complaint.id}",
            required_permission=f"complaint:{action}",
            user_id=user.id,
            role=user.role.value,
        )


def complaint_stats(complaints: Iterable[Complaint]) -> ComplaintStats:
    """Total and per-status counts."""
    stats = ComplaintStats()
    for complaint in complaints:
        stats.total += 1
        if complaint.status == ComplaintStatus.PENDING:
            stats.pending += 1
        elif complaint.status == ComplaintStatus.IN_PROGRESS:
            stats.in_progress += 1
        elif complaint.status == ComplaintStatus.RESOLVED:
            stats.resolved += 1
    return stats
