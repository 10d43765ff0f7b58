"""
Complaint lifecycle: creation, status transitions and manager assignment.

Every material change is one complaint upsert plus one appended
ComplaintUpdate. Gateways that can write both in one transaction receive them
through ``commit_change``; otherwise the complaint is saved first, the audit
append is retried, and on final failure the previous complaint state is
written back before the error is re-raised.
"""

import asyncio
from typing import Callable, Dict, FrozenSet, List, Optional, Union

from campus_complaints.core.config import settings
from campus_complaints.core.constants import (
    COMPLAINT_ID_PREFIX,
    DEFAULT_LOCATION,
    UPDATE_ID_PREFIX,
)
from campus_complaints.core.exceptions import (
    AuthorizationError,
    ComplaintNotFoundError,
    PersistenceError,
    ReconciliationError,
    StateError,
    ValidationError,
    create_validation_error,
)
from campus_complaints.core.logging import get_logger
from campus_complaints.repositories.gateway import PersistenceGateway
from campus_complaints.schemas.complaint import Complaint, ComplaintCreate, ComplaintUpdate
from campus_complaints.schemas.enums import ComplaintStatus, UserRole
from campus_complaints.schemas.user import User
from campus_complaints.services.access_policy import AccessPolicy
from campus_complaints.services.classifier import ComplaintClassifier
from campus_complaints.utils.datetime_utils import utc_now
from campus_complaints.utils.identifiers import new_id

logger = get_logger(__name__)

__all__ = [
    "ALLOWED_TRANSITIONS",
    "ComplaintLifecycleService",
    "is_allowed_transition",
    "parse_status",
]


ALLOWED_TRANSITIONS: Dict[ComplaintStatus, FrozenSet[ComplaintStatus]] = {
    ComplaintStatus.PENDING: frozenset({ComplaintStatus.IN_PROGRESS, ComplaintStatus.RESOLVED}),
    ComplaintStatus.IN_PROGRESS: frozenset({ComplaintStatus.RESOLVED}),
    ComplaintStatus.RESOLVED: frozenset(),
}


def is_allowed_transition(current: ComplaintStatus, requested: ComplaintStatus) -> bool:
    return requested in ALLOWED_TRANSITIONS.get(current, frozenset())


def parse_status(value: Union[ComplaintStatus, str]) -> ComplaintStatus:
    """Coerce caller input to a status, rejecting unknown values."""
    try:
        return ComplaintStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in ComplaintStatus)
        raise ValidationError(
            f"Unknown complaint status: {value!r}",
            field_errors={"status": [f"Must be one of: {allowed}"]},
        ) from None


class ComplaintLifecycleService:
    """
    Validates and records complaint state changes.

    Args:
        gateway: Persistence gateway
        policy: Access policy deciding who may manage and assign
        classifier: Fills in category/priority a submission leaves out
        clock: Returns the current aware UTC time
        id_factory: Builds an identifier from a prefix
        max_retries: Attempts for the audit append on non-atomic gateways
        retry_delay: Base delay in seconds; attempt ``n`` waits ``n * retry_delay``
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        policy: Optional[AccessPolicy] = None,
        classifier: Optional[ComplaintClassifier] = None,
        clock: Optional[Callable] = None,
        id_factory: Optional[Callable[[str], str]] = None,
        max_retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
    ):
        self.gateway = gateway
        self.policy = policy or AccessPolicy()
        self.classifier = classifier or ComplaintClassifier()
        self._clock = clock or utc_now
        self._new_id = id_factory or new_id
        self.max_retries = max(
            1,
            max_retries if max_retries is not None
            else settings.lifecycle.AUDIT_APPEND_MAX_RETRIES,
        )
        self.retry_delay = (
            retry_delay if retry_delay is not None
            else settings.lifecycle.AUDIT_APPEND_RETRY_DELAY
        )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    async def list_complaints(self) -> List[Complaint]:
        return await self.gateway.get_complaints()

    async def get_complaint(self, complaint_id: str) -> Complaint:
        """Return the complaint or raise ComplaintNotFoundError."""
        for complaint in await self.gateway.get_complaints():
            if complaint.id == complaint_id:
                return complaint
        raise ComplaintNotFoundError(complaint_id)

    async def get_timeline(self, complaint_id: str) -> List[ComplaintUpdate]:
        """Updates of an existing complaint, oldest first."""
        await self.get_complaint(complaint_id)
        return await self.gateway.get_complaint_updates(complaint_id)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def create_complaint(self, request: ComplaintCreate, actor: User) -> Complaint:
        """
        Record a new pending complaint reported by ``actor``.

        Raises:
            ValidationError: Title or description is blank
        """
        title = (request.title or "").strip()
        description = (request.description or "").strip()

        field_errors: Dict[str, List[str]] = {}
        if not title:
            field_errors["title"] = ["Title is required"]
        if not description:
            field_errors["description"] = ["Description is required"]
        if field_errors:
            logger.warning(
                "Complaint rejected: missing fields",
                extra={"fields": sorted(field_errors), "actor_id": actor.id},
            )
            raise create_validation_error(field_errors)

        category = request.category
        priority = request.priority
        if category is None or priority is None:
            suggestion = self.classifier.classify(title, description)
            category = category or suggestion.category
            priority = priority or suggestion.priority

        now = self._clock()
        complaint = Complaint(
            id=self._new_id(COMPLAINT_ID_PREFIX),
            title=title,
            description=description,
            category=category,
            location=(request.location or "").strip() or DEFAULT_LOCATION,
            priority=priority,
            status=ComplaintStatus.PENDING,
            reporter_id=actor.id,
            reporter_name=actor.name,
            image_url=request.image_url or None,
            created_at=now,
            updated_at=now,
            resolved_at=None,
        )

        try:
            await self.gateway.save_complaint(complaint)
        except PersistenceError:
            logger.error(f"Failed to save new complaint {complaint.id}", exc_info=True)
            raise

        logger.info(
            f"Complaint created: {complaint.id}",
            extra={
                "complaint_id": complaint.id,
                "category": category.value,
                "priority": priority.value,
                "actor_id": actor.id,
            },
        )
        return complaint

    async def change_status(
        self,
        complaint_id: str,
        new_status: Union[ComplaintStatus, str],
        note: Optional[str],
        actor: User,
    ) -> Complaint:
        """
        Move a complaint along the workflow and record the change.

        Raises:
            ValidationError: Unknown status, or resolving without a note
            ComplaintNotFoundError: Unknown complaint
            AuthorizationError: Actor may not manage the complaint
            StateError: Transition not allowed from the current status
        """
        new_status = parse_status(new_status)
        note_text = (note or "").strip()

        if new_status == ComplaintStatus.RESOLVED and not note_text:
            raise ValidationError(
                "Resolution note is required to resolve a complaint",
                field_errors={"note": ["Resolution note is required"]},
            )

        complaint = await self.get_complaint(complaint_id)
        self._guard(
            lambda: self.policy.require_manage(actor, complaint),
            "status change", actor, complaint_id,
        )

        if not is_allowed_transition(complaint.status, new_status):
            logger.warning(
                f"Rejected status change {complaint.status.value} -> {new_status.value}",
                extra={"complaint_id": complaint_id, "actor_id": actor.id},
            )
            raise StateError(
                f"Cannot change status from {complaint.status.value} to {new_status.value}",
                current_status=complaint.status.value,
                requested_status=new_status.value,
            )

        now = self._clock()
        updated = self._evolve(
            complaint,
            status=new_status,
            updated_at=now,
            resolved_at=now if new_status == ComplaintStatus.RESOLVED else None,
        )
        update = self._make_update(
            updated,
            note_text or f"Status changed to {new_status.value}",
            actor,
            now,
        )

        await self._commit(complaint, updated, update)
        logger.info(
            f"Complaint {complaint_id} moved to {new_status.value}",
            extra={"complaint_id": complaint_id, "update_id": update.id, "actor_id": actor.id},
        )
        return updated

    async def assign_manager(
        self,
        complaint_id: str,
        assignee_id: str,
        assignee_name: Optional[str],
        actor: User,
    ) -> Complaint:
        """
        Assign a manager; a pending complaint moves to in progress.

        Raises:
            ComplaintNotFoundError: Unknown complaint
            AuthorizationError: Actor is not an admin
            StateError: Complaint is resolved or already assigned
            ValidationError: Assignee is not a known manager
        """
        complaint = await self.get_complaint(complaint_id)
        self._guard(
            lambda: self.policy.require_role(actor, [UserRole.ADMIN], "assign complaints"),
            "assignment", actor, complaint_id,
        )

        if complaint.status == ComplaintStatus.RESOLVED:
            raise StateError(
                f"Cannot assign resolved complaint {complaint_id}",
                current_status=complaint.status.value,
            )
        if complaint.is_assigned:
            raise StateError(
                f"Complaint {complaint_id} is already assigned to "
                f"{complaint.assigned_manager_name or complaint.assigned_manager_id}",
                current_status=complaint.status.value,
            )

        assignee = next(
            (
                u for u in await self.gateway.get_all_users()
                if u.id == assignee_id and u.is_manager
            ),
            None,
        )
        if assignee is None:
            raise ValidationError(
                f"User {assignee_id} is not a manager",
                field_errors={"assignee_id": ["Assignee must be a manager"]},
            )
        name = (assignee_name or "").strip() or assignee.name

        now = self._clock()
        new_status = (
            ComplaintStatus.IN_PROGRESS
            if complaint.status == ComplaintStatus.PENDING
            else complaint.status
        )
        updated = self._evolve(
            complaint,
            assigned_manager_id=assignee.id,
            assigned_manager_name=name,
            status=new_status,
            updated_at=now,
        )
        update = self._make_update(updated, f"Complaint assigned to manager {name}", actor, now)

        await self._commit(complaint, updated, update)
        logger.info(
            f"Complaint {complaint_id} assigned to {assignee.id}",
            extra={"complaint_id": complaint_id, "update_id": update.id, "actor_id": actor.id},
        )
        return updated

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _guard(check: Callable[[], None], action: str, actor: User, complaint_id: str) -> None:
        try:
            check()
        except AuthorizationError:
            logger.warning(
                f"Rejected {action}: not authorized",
                extra={"complaint_id": complaint_id, "actor_id": actor.id, "role": actor.role.value},
            )
            raise

    @staticmethod
    def _evolve(complaint: Complaint, **changes) -> Complaint:
        # Re-validate so the resolved_at invariant is checked on every change.
        return Complaint.model_validate({**complaint.model_dump(), **changes})

    def _make_update(
        self,
        complaint: Complaint,
        note: str,
        actor: User,
        now,
    ) -> ComplaintUpdate:
        return ComplaintUpdate(
            id=self._new_id(UPDATE_ID_PREFIX),
            complaint_id=complaint.id,
            status=complaint.status,
            note=note,
            updated_by=actor.id,
            updated_by_name=actor.name,
            created_at=now,
        )

    async def _commit(
        self,
        previous: Complaint,
        updated: Complaint,
        update: ComplaintUpdate,
    ) -> None:
        log = logger.bind(complaint_id=updated.id, update_id=update.id)

        if self.gateway.supports_atomic_writes:
            try:
                await self.gateway.commit_change(updated, update)
            except PersistenceError:
                log.error(f"Failed to commit change to {updated.id}", exc_info=True)
                raise
            return

        try:
            await self.gateway.save_complaint(updated)
        except PersistenceError:
            log.error(f"Failed to save complaint {updated.id}", exc_info=True)
            raise

        last_error: Optional[PersistenceError] = None
        for attempt in range(1, self.max_retries + 1):
            try:
                await self.gateway.save_complaint_update(update)
                return
            except PersistenceError as e:
                last_error = e
                log.warning(f"Audit append failed (attempt {attempt}/{self.max_retries})")
                if attempt < self.max_retries and self.retry_delay > 0:
                    await asyncio.sleep(self.retry_delay * attempt)

        log.error(f"Audit append for {updated.id} failed; restoring previous complaint state")
        try:
            await self.gateway.save_complaint(previous)
        except PersistenceError as restore_error:
            log.critical(
                f"Could not restore complaint {updated.id}; manual reconciliation required",
                exc_info=True,
            )
            raise ReconciliationError(
                updated.id, update.id, original_error=str(last_error)
            ) from restore_error

        raise last_error
