# --- File: campus_complaints/models/user.py ---
"""
User table.
"""

from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from campus_complaints.models.base import Base, value_enum
from campus_complaints.schemas.enums import UserRole

__all__ = ["UserRecord"]


class UserRecord(Base):
    """Campus user with an optional bcrypt password hash."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
        comment="Sign-in email, stored lowercase",
    )
    role: Mapped[UserRole] = mapped_column(
        value_enum(UserRole, "user_role_enum"),
        nullable=False,
        index=True,
    )
    department: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    employee_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    password_hash: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)

    def __repr__(self) -> str:
        return f"<UserRecord id={self.id} role={self.role.value}>"
