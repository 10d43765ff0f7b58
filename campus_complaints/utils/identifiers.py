"""
Identifier helpers.
"""

from uuid import uuid4


def new_id(prefix: str) -> str:
    """Return a unique identifier such as ``complaint_3f2a...``."""
    return f"{prefix}_{uuid4().hex}"
