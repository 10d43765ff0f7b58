# --- File: campus_complaints/schemas/user.py ---
"""
User schemas.

Credentials never live on the User model; gateways keep password hashes
next to the user record.
"""

from typing import Union

from pydantic import EmailStr, Field, field_validator

from campus_complaints.schemas.base import BaseSchema
from campus_complaints.schemas.enums import UserRole

__all__ = [
    "User",
    "LoginRequest",
    "SignupRequest",
    "TokenResponse",
]


class User(BaseSchema):
    """Authenticated campus user."""

    id: str = Field(..., min_length=1, description="Unique identifier")
    name: str = Field(..., min_length=1, max_length=255, description="Display name")
    email: EmailStr = Field(..., description="Sign-in email")
    role: UserRole = Field(..., description="Access role")
    department: Union[str, None] = Field(default=None, max_length=255)
    employee_id: Union[str, None] = Field(
        default=None,
        max_length=64,
        description="Employee or roll number",
    )

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_manager(self) -> bool:
        return self.role == UserRole.MANAGER


class LoginRequest(BaseSchema):
    email: EmailStr
    password: str = Field(..., min_length=1)


class SignupRequest(BaseSchema):
    """Self-service account creation."""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: UserRole = Field(default=UserRole.STAFF)
    department: Union[str, None] = Field(default=None, max_length=255)
    employee_id: Union[str, None] = Field(default=None, max_length=64)


class TokenResponse(BaseSchema):
    """Bearer token issued on sign in."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Token lifetime in seconds")
    user: User
