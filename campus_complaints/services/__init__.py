"""
Complaint services: classifier, access policy, lifecycle and session context.
"""

from campus_complaints.services.access_policy import AccessPolicy, complaint_stats
from campus_complaints.services.classifier import ComplaintClassifier, classify_complaint
from campus_complaints.services.lifecycle import (
    ALLOWED_TRANSITIONS,
    ComplaintLifecycleService,
    is_allowed_transition,
    parse_status,
)
from campus_complaints.services.session import ComplaintSession

__all__ = [
    "AccessPolicy",
    "complaint_stats",
    "ComplaintClassifier",
    "classify_complaint",
    "ALLOWED_TRANSITIONS",
    "ComplaintLifecycleService",
    "is_allowed_transition",
    "parse_status",
    "ComplaintSession",
]
