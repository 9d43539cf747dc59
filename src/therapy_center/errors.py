# src/therapy_center/errors.py
"""
Domain errors raised by services and store adapters.

Each error carries an ErrorCode; the API layer maps codes to HTTP statuses
and renders the standard error envelope (see api/responses.py).
"""

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    """
    Standardized error codes for API responses.
    Format: {CATEGORY}_{SPECIFIC_ERROR}
    """
    # Validation errors (4xx)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    ALREADY_EXISTS = "ALREADY_EXISTS"

    # Authentication/Authorization (401/403)
    AUTH_REQUIRED = "AUTH_REQUIRED"
    AUTH_INVALID = "AUTH_INVALID"
    PERMISSION_DENIED = "PERMISSION_DENIED"

    # Resource errors (404)
    NOT_FOUND = "NOT_FOUND"

    # Server errors (5xx)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"


class TherapyCenterError(Exception):
    """Base class for all domain errors."""

    default_code = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        detail: Optional[str] = None,
        code: Optional[ErrorCode] = None,
    ):
        super().__init__(message)
        self.message = message
        self.detail = detail
        self.code = code or self.default_code


class NotFoundError(TherapyCenterError):
    """An entity required by the operation does not exist."""

    default_code = ErrorCode.NOT_FOUND

    def __init__(self, resource: str, identifier: object, detail: Optional[str] = None):
        super().__init__(
            f"{resource} not found",
            detail=detail or f"No {resource.lower()} with identifier: {identifier}",
        )
        self.resource = resource
        self.identifier = identifier


class ValidationFailedError(TherapyCenterError):
    """Malformed input, invalid reference or disallowed state change."""

    default_code = ErrorCode.VALIDATION_ERROR

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        detail: Optional[str] = None,
        code: Optional[ErrorCode] = None,
    ):
        super().__init__(message, detail=detail, code=code)
        self.field = field


class UnauthorizedError(TherapyCenterError):
    """Caller does not own the entity, or could not be authenticated."""

    default_code = ErrorCode.PERMISSION_DENIED


class StoreUnavailableError(TherapyCenterError):
    """The underlying document store call failed."""

    default_code = ErrorCode.DATABASE_ERROR
