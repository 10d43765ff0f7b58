# --- File: campus_complaints/schemas/enums.py ---
"""
Enumerations shared by schemas, ORM models and services.

The member order of ComplaintCategory is significant: the classifier breaks
ties in favour of the category listed first.
"""

from enum import Enum

__all__ = [
    "UserRole",
    "ComplaintCategory",
    "ComplaintPriority",
    "ComplaintStatus",
]


class UserRole(str, Enum):
    """User role enumeration."""

    STAFF = "staff"  # reports complaints
    MANAGER = "manager"  # works on assigned complaints
    ADMIN = "admin"

    @classmethod
    def _missing_(cls, value):
        # Older records call the reporter role "student".
        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized == "student":
                return cls.STAFF
            for member in cls:
                if member.value == normalized:
                    return member
        return None

    @property
    def label(self) -> str:
        return _ROLE_LABELS[self]


class ComplaintCategory(str, Enum):
    """Complaint category enumeration."""

    WIFI = "wifi"
    LAB = "lab"
    HOSTEL = "hostel"
    ELECTRICAL = "electrical"
    INFRASTRUCTURE = "infrastructure"
    LIBRARY = "library"
    OTHERS = "others"

    @property
    def label(self) -> str:
        return _CATEGORY_LABELS[self]


class ComplaintPriority(str, Enum):
    """Priority level enumeration."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class ComplaintStatus(str, Enum):
    """Complaint status enumeration."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]


_ROLE_LABELS = {
    UserRole.STAFF: "Staff",
    UserRole.MANAGER: "Manager",
    UserRole.ADMIN: "Admin",
}

_CATEGORY_LABELS = {
    ComplaintCategory.WIFI: "WiFi & Network",
    ComplaintCategory.LAB: "Lab & Systems",
    ComplaintCategory.HOSTEL: "Hostel Facilities",
    ComplaintCategory.ELECTRICAL: "Electrical",
    ComplaintCategory.INFRASTRUCTURE: "Infrastructure",
    ComplaintCategory.LIBRARY: "Library",
    ComplaintCategory.OTHERS: "Others",
}

_STATUS_LABELS = {
    ComplaintStatus.PENDING: "Pending",
    ComplaintStatus.IN_PROGRESS: "In Progress",
    ComplaintStatus.RESOLVED: "Resolved",
}
