# --- File: campus_complaints/models/complaint.py ---
"""
Complaint and complaint update tables.

Reporter, assignee and updater references are denormalized (id plus display
name) because user identities belong to the external identity provider.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from campus_complaints.models.base import Base, TimestampMixin, value_enum
from campus_complaints.schemas.enums import (
    ComplaintCategory,
    ComplaintPriority,
    ComplaintStatus,
)

__all__ = ["ComplaintRecord", "ComplaintUpdateRecord"]


class ComplaintRecord(Base, TimestampMixin):
    """Stored complaint; one row per complaint id, written by whole-record upsert."""

    __tablename__ = "complaints"
    __table_args__ = (
        Index("ix_complaints_reporter_id", "reporter_id"),
        Index("ix_complaints_assigned_manager_status", "assigned_manager_id", "status"),
        CheckConstraint(
            "(status = 'resolved') = (resolved_at IS NOT NULL)",
            name="check_resolved_at_matches_status",
        ),
        {"comment": "Campus complaints"},
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[ComplaintCategory] = mapped_column(
        value_enum(ComplaintCategory, "complaint_category_enum"),
        nullable=False,
        index=True,
    )
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    priority: Mapped[ComplaintPriority] = mapped_column(
        value_enum(ComplaintPriority, "complaint_priority_enum"),
        nullable=False,
    )
    status: Mapped[ComplaintStatus] = mapped_column(
        value_enum(ComplaintStatus, "complaint_status_enum"),
        nullable=False,
        index=True,
    )

    reporter_id: Mapped[str] = mapped_column(String(64), nullable=False)
    reporter_name: Mapped[str] = mapped_column(String(255), nullable=False)
    assigned_manager_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    assigned_manager_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    image_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    resolved_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<ComplaintRecord id={self.id} status={self.status.value}>"


class ComplaintUpdateRecord(Base):
    """Append-only audit entry. ``seq`` preserves insertion order."""

    __tablename__ = "complaint_updates"
    __table_args__ = (
        Index("ix_complaint_updates_complaint_seq", "complaint_id", "seq"),
        {"comment": "Complaint status and assignment audit trail"},
    )

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    complaint_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("complaints.id", ondelete="RESTRICT"),
        nullable=False,
    )
    status: Mapped[ComplaintStatus] = mapped_column(
        value_enum(ComplaintStatus, "complaint_status_enum"),
        nullable=False,
    )
    note: Mapped[str] = mapped_column(Text, nullable=False)
    updated_by: Mapped[str] = mapped_column(String(64), nullable=False)
    updated_by_name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<ComplaintUpdateRecord id={self.id} complaint_id={self.complaint_id}>"
