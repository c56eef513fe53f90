"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API."""

    # Authentication errors (401)
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"

    # Not found errors (404)
    USER_NOT_FOUND = "USER_NOT_FOUND"

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NO_FILE_PROVIDED = "NO_FILE_PROVIDED"
    INVALID_FILE = "INVALID_FILE"

    # Conflict errors (409)
    VERSION_CONFLICT = "VERSION_CONFLICT"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Server errors (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DEPENDENCY_ERROR = "DEPENDENCY_ERROR"
    PERSISTENCE_ERROR = "PERSISTENCE_ERROR"


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Any | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class AuthenticationError(AppException):
    """Authentication failed."""

    def __init__(
        self,
        message: str = "Authentication required",
        error_code: ErrorCode = ErrorCode.UNAUTHORIZED,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=401,
        )


class UserNotFoundError(AppException):
    """User profile not found."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.USER_NOT_FOUND,
            message="User not found",
            status_code=404,
            details={"user_id": user_id},
        )


class NoFileProvidedError(AppException):
    """Request carried no file to use as avatar."""

    def __init__(self) -> None:
        super().__init__(
            error_code=ErrorCode.NO_FILE_PROVIDED,
            message="No file was uploaded",
            status_code=400,
        )


class InvalidFileError(AppException):
    """Uploaded file was rejected before reaching storage."""

    def __init__(self, message: str, filename: str | None = None) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_FILE,
            message=message,
            status_code=400,
            details={"filename": filename} if filename else None,
        )


class DependencyError(AppException):
    """Remote object storage was unreachable or rejected the request."""

    def __init__(self, message: str, details: Any | None = None) -> None:
        super().__init__(
            error_code=ErrorCode.DEPENDENCY_ERROR,
            message=message,
            status_code=500,
            details=details,
        )


class PersistenceError(AppException):
    """Profile could not be written."""

    def __init__(self, message: str = "Failed to save avatar", details: Any | None = None) -> None:
        super().__init__(
            error_code=ErrorCode.PERSISTENCE_ERROR,
            message=message,
            status_code=500,
            details=details,
        )


class VersionConflictError(AppException):
    """Profile was modified concurrently since it was read."""

    def __init__(self, user_id: str, expected_version: int) -> None:
        super().__init__(
            error_code=ErrorCode.VERSION_CONFLICT,
            message="Profile was modified concurrently",
            status_code=409,
            details={"user_id": user_id, "expected_version": expected_version},
        )
