# campus_complaints/core/constants.py
from __future__ import annotations

"""
Core application constants.

These values centralize literals shared by the services and the HTTP layer:
- Common HTTP header names.
- Identifier prefixes.
- The campus location list offered to reporters.
"""

# Common HTTP header names
HEADER_REQUEST_ID: str = "X-Request-ID"

# Identifier prefixes
COMPLAINT_ID_PREFIX: str = "complaint"
UPDATE_ID_PREFIX: str = "update"

# Campus locations
DEFAULT_LOCATION: str = "Others"

LOCATIONS: tuple = (
    "Block A",
    "Block B",
    "Block C",
    "Lab - Computer Science",
    "Lab - Electronics",
    "Lab - Mechanical",
    "Hostel - Boys",
    "Hostel - Girls",
    "Library - Main",
    "Library - Reference",
    "Cafeteria",
    "Auditorium",
    "Sports Complex",
    "Administrative Block",
    DEFAULT_LOCATION,
)
