"""
Campus complaint tracker: keyword triage, a status workflow with an audit
trail, and role-based access for staff, managers and admins.
"""

__version__ = "1.0.0"
