"""
Complaint endpoints: listing, submission, status changes and assignment.

Visibility and permission decisions come from the access policy; workflow
rules are enforced by the lifecycle service.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status

from campus_complaints.api import deps
from campus_complaints.core.constants import LOCATIONS
from campus_complaints.schemas.complaint import (
    AssignmentRequest,
    ClassifyRequest,
    Complaint,
    ComplaintCreate,
    ComplaintStats,
    ComplaintUpdate,
    StatusChangeRequest,
)
from campus_complaints.schemas.enums import ComplaintStatus
from campus_complaints.schemas.user import User
from campus_complaints.services.access_policy import AccessPolicy, complaint_stats
from campus_complaints.services.lifecycle import ComplaintLifecycleService

router = APIRouter(prefix="/complaints", tags=["Complaints"])


@router.post("/classify")
async def classify(
    payload: ClassifyRequest,
    lifecycle: ComplaintLifecycleService = Depends(deps.get_lifecycle),
) -> Dict[str, Any]:
    """Suggested category, priority and confidence for draft text."""
    suggestion = lifecycle.classifier.classify(payload.title, payload.description)
    return {**suggestion.model_dump(mode="json"), "summary": suggestion.summary()}


@router.get("", response_model=List[Complaint])
async def list_complaints(
    q: Optional[str] = Query(default=None, description="Search title, description and location"),
    status_filter: Optional[ComplaintStatus] = Query(default=None, alias="status"),
    current_user: User = Depends(deps.get_current_user),
    policy: AccessPolicy = Depends(deps.get_policy),
    lifecycle: ComplaintLifecycleService = Depends(deps.get_lifecycle),
) -> List[Complaint]:
    complaints = await lifecycle.list_complaints()
    return policy.filter_complaints(current_user, complaints, q, status_filter)


@router.get("/stats", response_model=ComplaintStats)
async def get_stats(
    current_user: User = Depends(deps.get_current_user),
    policy: AccessPolicy = Depends(deps.get_policy),
    lifecycle: ComplaintLifecycleService = Depends(deps.get_lifecycle),
) -> ComplaintStats:
    complaints = await lifecycle.list_complaints()
    return complaint_stats(policy.visible_to(current_user, complaints))


@router.get("/locations", response_model=List[str])
async def list_locations() -> List[str]:
    """Campus locations offered on the submission form."""
    return list(LOCATIONS)


@router.post("", response_model=Complaint, status_code=status.HTTP_201_CREATED)
async def create_complaint(
    payload: ComplaintCreate,
    current_user: User = Depends(deps.get_current_user),
    lifecycle: ComplaintLifecycleService = Depends(deps.get_lifecycle),
) -> Complaint:
    return await lifecycle.create_complaint(payload, current_user)


@router.get("/{complaint_id}", response_model=Complaint)
async def get_complaint(
    complaint_id: str,
    current_user: User = Depends(deps.get_current_user),
    policy: AccessPolicy = Depends(deps.get_policy),
    lifecycle: ComplaintLifecycleService = Depends(deps.get_lifecycle),
) -> Complaint:
    complaint = await lifecycle.get_complaint(complaint_id)
    policy.require_view(current_user, complaint)
    return complaint


@router.get("/{complaint_id}/updates", response_model=List[ComplaintUpdate])
async def get_complaint_updates(
    complaint_id: str,
    current_user: User = Depends(deps.get_current_user),
    policy: AccessPolicy = Depends(deps.get_policy),
    lifecycle: ComplaintLifecycleService = Depends(deps.get_lifecycle),
) -> List[ComplaintUpdate]:
    complaint = await lifecycle.get_complaint(complaint_id)
    policy.require_view(current_user, complaint)
    return await lifecycle.get_timeline(complaint_id)


@router.post("/{complaint_id}/status", response_model=Complaint)
async def change_status(
    complaint_id: str,
    payload: StatusChangeRequest,
    current_user: User = Depends(deps.get_current_user),
    lifecycle: ComplaintLifecycleService = Depends(deps.get_lifecycle),
) -> Complaint:
    return await lifecycle.change_status(complaint_id, payload.status, payload.note, current_user)


@router.post("/{complaint_id}/assign", response_model=Complaint)
async def assign_manager(
    complaint_id: str,
    payload: AssignmentRequest,
    current_user: User = Depends(deps.get_current_user),
    lifecycle: ComplaintLifecycleService = Depends(deps.get_lifecycle),
) -> Complaint:
    return await lifecycle.assign_manager(
        complaint_id, payload.assignee_id, payload.assignee_name, current_user
    )
