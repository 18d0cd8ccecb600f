"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API."""

    # Authentication errors (401)
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    USER_NOT_FOUND = "USER_NOT_FOUND"

    # Not found errors (404)
    PROFILE_NOT_FOUND = "PROFILE_NOT_FOUND"

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    DUPLICATE_USER = "DUPLICATE_USER"
    INVALID_PROFILE_NAME = "INVALID_PROFILE_NAME"
    PROFILE_LIMIT_REACHED = "PROFILE_LIMIT_REACHED"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Transport errors (client side)
    TIMEOUT = "TIMEOUT"
    UPSTREAM_UNAVAILABLE = "UPSTREAM_UNAVAILABLE"

    # Server errors (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"


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


class InvalidCredentialsError(AppException):
    """Username unknown or password mismatch.

    The message is identical for both cases so callers cannot tell whether
    the username exists.
    """

    def __init__(self) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_CREDENTIALS,
            message="Invalid credentials",
            status_code=401,
        )


class UserNotFoundError(AppException):
    """The user referenced by a session no longer exists."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.USER_NOT_FOUND,
            message="User not found",
            status_code=401,
            details={"user_id": user_id},
        )


class DuplicateUserError(AppException):
    """Username is already registered."""

    def __init__(self, username: str) -> None:
        super().__init__(
            error_code=ErrorCode.DUPLICATE_USER,
            message="User already exists",
            status_code=400,
            details={"username": username},
        )


class ProfileNotFoundError(AppException):
    """Profile not found in the user's profile list."""

    def __init__(self, profile_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.PROFILE_NOT_FOUND,
            message=f"Profile not found: {profile_id}",
            status_code=404,
            details={"profile_id": profile_id},
        )


class InvalidProfileNameError(AppException):
    """Profile name is empty or whitespace-only."""

    def __init__(self, message: str = "Profile name cannot be empty") -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_PROFILE_NAME,
            message=message,
            status_code=400,
        )


class ProfileLimitReachedError(AppException):
    """User already has the maximum number of profiles."""

    def __init__(self, limit: int) -> None:
        super().__init__(
            error_code=ErrorCode.PROFILE_LIMIT_REACHED,
            message=f"Profile limit reached: at most {limit} profiles per account",
            status_code=400,
            details={"limit": limit},
        )


class RequestTimeoutError(AppException):
    """A call to the identity service did not complete in time."""

    def __init__(self, timeout: float) -> None:
        super().__init__(
            error_code=ErrorCode.TIMEOUT,
            message="The server took too long to respond",
            status_code=504,
            details={"timeout": timeout},
        )


class UpstreamUnavailableError(AppException):
    """The identity service could not be reached."""

    def __init__(self, message: str = "Service unavailable") -> None:
        super().__init__(
            error_code=ErrorCode.UPSTREAM_UNAVAILABLE,
            message=message,
            status_code=503,
        )


class InvalidFieldError(AppException):
    """A submitted value failed a domain rule that schema validation does not cover."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(
            error_code=ErrorCode.VALIDATION_ERROR,
            message=message,
            status_code=422,
            details={"field": field},
        )
