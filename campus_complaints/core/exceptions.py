"""
Custom Exceptions for the Campus Complaints application

This module defines the typed failures surfaced by the complaint core and
rendered by the HTTP layer. Every exception carries a message, a stable error
code, structured details and the HTTP status it maps to.
"""

from typing import Any, Dict, List, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Standard error codes for the application"""
    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"

    # Authentication & Authorization
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"
    AUTHORIZATION_FAILED = "AUTHORIZATION_FAILED"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    TOKEN_INVALID = "TOKEN_INVALID"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    DUPLICATE_ENTRY = "DUPLICATE_ENTRY"

    # Workflow errors
    INVALID_STATE_TRANSITION = "INVALID_STATE_TRANSITION"

    # Persistence errors
    DATABASE_ERROR = "DATABASE_ERROR"
    RECONCILIATION_REQUIRED = "RECONCILIATION_REQUIRED"


class BaseAppException(Exception):
    """
    Base exception class for all application exceptions.

    Provides consistent error handling across the application with
    structured error information.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format"""
        return {
            "error": {
                "message": self.message,
                "code": self.error_code.value,
                "details": self.details,
                "type": self.__class__.__name__
            }
        }

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message='{self.message}', error_code='{self.error_code.value}')"


# ========================================
# Validation & Workflow Exceptions
# ========================================

class ValidationError(BaseAppException):
    """Exception raised when a required field is missing or invalid"""

    def __init__(
        self,
        message: str = "Validation failed",
        field_errors: Optional[Dict[str, List[str]]] = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        status_code: int = 422
    ):
        details = {"field_errors": field_errors} if field_errors else {}
        super().__init__(message, error_code, details, status_code)
        self.field_errors = field_errors or {}


class StateError(BaseAppException):
    """Exception raised when a complaint cannot move to the requested state"""

    def __init__(
        self,
        message: str = "Invalid status transition",
        current_status: Optional[str] = None,
        requested_status: Optional[str] = None,
    ):
        details = {
            "current_status": current_status,
            "requested_status": requested_status,
        }
        super().__init__(message, ErrorCode.INVALID_STATE_TRANSITION, details, 409)
        self.current_status = current_status
        self.requested_status = requested_status


# ========================================
# Resource Not Found Exceptions
# ========================================

class NotFoundError(BaseAppException):
    """Exception raised when a requested resource is not found"""

    def __init__(
        self,
        resource_type: str = "Resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None
    ):
        if not message:
            message = f"{resource_type} not found"
            if resource_id:
                message += f" (ID: {resource_id})"

        details = {
            "resource_type": resource_type,
            "resource_id": resource_id
        }
        super().__init__(message, ErrorCode.RESOURCE_NOT_FOUND, details, 404)


class ComplaintNotFoundError(NotFoundError):
    """Exception raised when a complaint is not found"""

    def __init__(
        self,
        complaint_id: Optional[str] = None,
        message: Optional[str] = None
    ):
        super().__init__("Complaint", complaint_id, message)


# ========================================
# Authentication & Authorization Exceptions
# ========================================

class AuthenticationError(BaseAppException):
    """Exception raised when an operation needs a signed-in user"""

    def __init__(
        self,
        message: str = "Sign in required",
        details: Optional[Dict[str, Any]] = None,
        error_code: ErrorCode = ErrorCode.AUTHENTICATION_FAILED
    ):
        super().__init__(message, error_code, details, 401)


class TokenExpiredError(AuthenticationError):
    """Exception raised when an access token has expired"""

    def __init__(self, message: str = "Token has expired"):
        super().__init__(message, error_code=ErrorCode.TOKEN_EXPIRED)


class InvalidTokenError(AuthenticationError):
    """Exception raised when an access token is malformed or badly signed"""

    def __init__(self, message: str = "Invalid token", reason: Optional[str] = None):
        details = {"reason": reason} if reason else None
        super().__init__(message, details, error_code=ErrorCode.TOKEN_INVALID)


class AuthorizationError(BaseAppException):
    """Exception raised when the acting user may not perform an action"""

    def __init__(
        self,
        message: str = "Not authorized",
        required_permission: Optional[str] = None,
        user_id: Optional[str] = None,
        role: Optional[str] = None,
    ):
        details: Dict[str, Any] = {}
        if required_permission:
            details["required_permission"] = required_permission
        if user_id:
            details["user_id"] = user_id
        if role:
            details["role"] = role
        super().__init__(message, ErrorCode.AUTHORIZATION_FAILED, details, 403)


# ========================================
# Persistence Exceptions
# ========================================

class PersistenceError(BaseAppException):
    """Opaque failure reported by a persistence gateway"""

    def __init__(
        self,
        message: str = "Storage operation failed",
        operation: Optional[str] = None,
        original_error: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.DATABASE_ERROR,
        status_code: int = 503
    ):
        details: Dict[str, Any] = {}
        if operation:
            details["operation"] = operation
        if original_error:
            details["original_error"] = original_error
        super().__init__(message, error_code, details, status_code)


class ReconciliationError(PersistenceError):
    """
    Raised when a complaint was saved but neither its audit entry nor the
    previous complaint state could be written back.
    """

    def __init__(
        self,
        complaint_id: str,
        update_id: str,
        original_error: Optional[str] = None,
    ):
        super().__init__(
            message=(
                f"Complaint {complaint_id} was updated but audit entry "
                f"{update_id} could not be recorded; manual reconciliation required"
            ),
            operation="commit_change",
            original_error=original_error,
            error_code=ErrorCode.RECONCILIATION_REQUIRED,
            status_code=500,
        )
        self.details.update({"complaint_id": complaint_id, "update_id": update_id})
        self.complaint_id = complaint_id
        self.update_id = update_id


# ========================================
# Utility Functions
# ========================================

def handle_database_exception(exc: Exception, operation: str) -> PersistenceError:
    """Convert a storage-layer exception into a PersistenceError"""
    if isinstance(exc, PersistenceError):
        return exc
    return PersistenceError(
        message=f"Failed to {operation}",
        operation=operation,
        original_error=str(exc),
    )


def create_validation_error(field_errors: Dict[str, List[str]]) -> ValidationError:
    """Create a validation error from field errors"""
    messages = [msg for errors in field_errors.values() for msg in errors]
    message = messages[0] if len(messages) == 1 else "Validation failed"
    return ValidationError(message, field_errors)


# Export all exception classes
__all__ = [
    # Enums
    'ErrorCode',

    # Base exceptions
    'BaseAppException',

    # Validation & workflow exceptions
    'ValidationError',
    'StateError',

    # Resource Not Found exceptions
    'NotFoundError',
    'ComplaintNotFoundError',

    # Auth exceptions
    'AuthenticationError',
    'TokenExpiredError',
    'InvalidTokenError',
    'AuthorizationError',

    # Persistence exceptions
    'PersistenceError',
    'ReconciliationError',

    # Utility functions
    'handle_database_exception',
    'create_validation_error',
]
