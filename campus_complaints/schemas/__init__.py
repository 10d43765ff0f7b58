"""
Pydantic schemas for users, complaints and audit entries.
"""

from campus_complaints.schemas.enums import (
    ComplaintCategory,
    ComplaintPriority,
    ComplaintStatus,
    UserRole,
)
from campus_complaints.schemas.user import LoginRequest, SignupRequest, TokenResponse, User
from campus_complaints.schemas.complaint import (
    AssignmentRequest,
    CategorySuggestion,
    ClassifyRequest,
    Complaint,
    ComplaintCreate,
    ComplaintStats,
    ComplaintUpdate,
    StatusChangeRequest,
)

__all__ = [
    "ComplaintCategory",
    "ComplaintPriority",
    "ComplaintStatus",
    "UserRole",
    "User",
    "LoginRequest",
    "SignupRequest",
    "TokenResponse",
    "AssignmentRequest",
    "CategorySuggestion",
    "ClassifyRequest",
    "Complaint",
    "ComplaintCreate",
    "ComplaintStats",
    "ComplaintUpdate",
    "StatusChangeRequest",
]
