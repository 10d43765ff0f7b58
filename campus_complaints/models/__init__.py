"""
SQLAlchemy ORM models used by the relational persistence gateway.
"""

from campus_complaints.models.base import Base
from campus_complaints.models.user import UserRecord
from campus_complaints.models.complaint import ComplaintRecord, ComplaintUpdateRecord

__all__ = [
    "Base",
    "UserRecord",
    "ComplaintRecord",
    "ComplaintUpdateRecord",
]
