# --- File: campus_complaints/schemas/complaint.py ---
"""
Complaint schemas.

``Complaint`` and ``ComplaintUpdate`` are the records exchanged with the
persistence gateway; the request schemas describe what callers submit.
Blank titles, descriptions and resolution notes are accepted here and
rejected by the lifecycle service, which reports them as ValidationError.
"""

from datetime import datetime
from typing import Union

from pydantic import Field, model_validator

from campus_complaints.core.constants import DEFAULT_LOCATION
from campus_complaints.schemas.base import BaseSchema, TimestampMixin
from campus_complaints.schemas.enums import (
    ComplaintCategory,
    ComplaintPriority,
    ComplaintStatus,
)

__all__ = [
    "Complaint",
    "ComplaintUpdate",
    "ComplaintCreate",
    "StatusChangeRequest",
    "AssignmentRequest",
    "ClassifyRequest",
    "CategorySuggestion",
    "ComplaintStats",
]


class Complaint(BaseSchema, TimestampMixin):
    """
    A reported campus issue.

    ``resolved_at`` is set exactly when ``status`` is resolved.
    """

    id: str = Field(..., min_length=1)
    title: str
    description: str
    category: ComplaintCategory = Field(default=ComplaintCategory.OTHERS)
    location: str = Field(default=DEFAULT_LOCATION)
    priority: ComplaintPriority = Field(default=ComplaintPriority.LOW)
    status: ComplaintStatus = Field(default=ComplaintStatus.PENDING)

    reporter_id: str
    reporter_name: str

    assigned_manager_id: Union[str, None] = None
    assigned_manager_name: Union[str, None] = None

    image_url: Union[str, None] = None
    resolved_at: Union[datetime, None] = None

    @model_validator(mode="after")
    def check_resolution_timestamp(self) -> "Complaint":
        resolved = self.status == ComplaintStatus.RESOLVED
        if resolved and self.resolved_at is None:
            raise ValueError("resolved_at is required when status is resolved")
        if not resolved and self.resolved_at is not None:
            raise ValueError("resolved_at must be empty unless status is resolved")
        return self

    @property
    def is_assigned(self) -> bool:
        return bool(self.assigned_manager_id)


class ComplaintUpdate(BaseSchema):
    """Append-only audit entry for a status change or assignment."""

    id: str = Field(..., min_length=1)
    complaint_id: str
    status: ComplaintStatus
    note: str
    updated_by: str
    updated_by_name: str
    created_at: datetime


class ComplaintCreate(BaseSchema):
    """
    Complaint submission.

    Category and priority are optional: when omitted, the classifier's
    suggestion is used.
    """

    title: str = Field(default="", max_length=255)
    description: str = Field(default="", max_length=5000)
    category: Union[ComplaintCategory, None] = None
    priority: Union[ComplaintPriority, None] = None
    location: Union[str, None] = Field(default=None, max_length=255)
    image_url: Union[str, None] = Field(default=None, max_length=2048)


class StatusChangeRequest(BaseSchema):
    status: ComplaintStatus
    note: str = Field(default="", max_length=2000)


class AssignmentRequest(BaseSchema):
    assignee_id: str = Field(..., min_length=1)
    assignee_name: Union[str, None] = None


class ClassifyRequest(BaseSchema):
    title: str = ""
    description: str = ""


class CategorySuggestion(BaseSchema):
    """Classifier output for a title/description pair."""

    category: ComplaintCategory
    priority: ComplaintPriority
    confidence: float = Field(..., ge=0.0, le=1.0)
    match_count: int = Field(default=0, ge=0)

    def summary(self) -> str:
        """Human readable hint shown next to the submission form."""
        return (
            f"Detected: {self.category.label} | "
            f"Priority: {self.priority.value.upper()} "
            f"({round(self.confidence * 100)}% confidence)"
        )


class ComplaintStats(BaseSchema):
    """Status counts over a set of complaints."""

    total: int = 0
    pending: int = 0
    in_progress: int = 0
    resolved: int = 0
