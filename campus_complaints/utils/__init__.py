"""
Shared helpers: password hashing, UTC timestamps and identifiers.
"""

from campus_complaints.utils.datetime_utils import ensure_utc, utc_now
from campus_complaints.utils.hashing import PasswordHasher
from campus_complaints.utils.identifiers import new_id

__all__ = ["PasswordHasher", "ensure_utc", "utc_now", "new_id"]
