# --- File: campus_complaints/models/base.py ---
"""
Base model configuration for SQLAlchemy ORM.

Provides the declarative base shared by all tables and the timestamp
mixin used by mutable records.
"""

from datetime import datetime
from enum import Enum as PyEnum
from typing import Any, Dict, List, Optional, Type

from sqlalchemy import DateTime, Enum
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base for all campus complaint tables."""

    def to_dict(self, exclude: Optional[List[str]] = None) -> Dict[str, Any]:
        """
        Convert model instance to dictionary.

        Args:
            exclude: List of column names to exclude

        Returns:
            Dictionary keyed by column name
        """
        exclude = exclude or []
        return {
            column.name: getattr(self, column.key)
            for column in self.__table__.columns
            if column.name not in exclude
        }


class TimestampMixin:
    """
    Mixin for timestamp tracking.

    Values are assigned by the service layer so that a record read back
    carries exactly the timestamps the caller saved.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
        comment="Record creation timestamp (UTC)",
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        comment="Record last update timestamp (UTC)",
    )


def value_enum(enum_cls: Type[PyEnum], name: str) -> Enum:
    """Enum column type that stores member values rather than member names."""
    return Enum(
        enum_cls,
        name=name,
        values_callable=lambda members: [member.value for member in members],
        validate_strings=True,
    )
