"""
Memos Backend - Custom Exception Hierarchy
===========================================

What:  Application-specific exceptions for the different error scenarios.
How:   Each exception class carries a message and an optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with the right status code.
Who:   Raised by services and dependencies; caught by global handlers.

Exception Hierarchy:
    MemosError (base)
    ├── ValidationError          → 400 Bad Request
    ├── AuthenticationError      → 401 Unauthorized
    ├── PermissionDeniedError    → 403 Forbidden
    ├── NotFoundError            → 404 Not Found
    ├── ConflictError            → 409 Conflict
    ├── PayloadTooLargeError     → 413 Payload Too Large
    ├── RateLimitExceededError   → 429 Too Many Requests
    ├── StorageError             → 500 Internal Server Error
    └── DatabaseError            → 500 Internal Server Error

Token verification itself never raises: the codec returns None for every
defect, and only the request dependency turns that into AuthenticationError.
"""

from typing import Any, Dict, Optional


class MemosError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only where a handler opts in)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(MemosError):
    """
    Raised when client input fails a business rule.

    When:    Missing content, content over the length limit, unknown setting name.
    HTTP:    400 Bad Request (FastAPI keeps 422 for schema-level errors)
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class AuthenticationError(MemosError):
    """
    Raised when a request carries no usable credential.

    Every token defect (malformed, bad signature, expired, unparsable claims)
    and every failed sign-in produce the same message, so callers cannot
    tell which check failed.
    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "Unauthorized",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PermissionDeniedError(MemosError):
    """
    Raised when an authenticated user may not touch a resource.

    When:    Editing another user's memo, listing users without HOST role,
             signing up after the first account exists.
    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = "Forbidden",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(MemosError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing rows; services convert that None
    into this exception so routes stay free of status-code logic.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(MemosError):
    """
    Raised when a write collides with an existing unique value.

    When:    Username already taken.
    HTTP:    409 Conflict
    """

    def __init__(
        self,
        message: str = "Resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PayloadTooLargeError(MemosError):
    """
    Raised when an uploaded blob exceeds the configured size limit.

    HTTP:    413 Payload Too Large
    """

    def __init__(
        self,
        max_size: int,
        actual_size: int,
        context: Optional[Dict[str, Any]] = None,
    ):
        if max_size >= 1024 * 1024:
            limit = f"{max_size / (1024 * 1024):.0f}MB"
        else:
            limit = f"{max_size / 1024:.0f}KB"
        message = f"File too large. Maximum upload size is {limit}."
        ctx = context or {}
        ctx["max_size"] = max_size
        ctx["actual_size"] = actual_size
        super().__init__(message=message, context=ctx)
        self.max_size = max_size


class StorageError(MemosError):
    """
    Raised when the object store rejects or fails an operation.

    When:    Disk full, permission denied, S3 endpoint error.
    HTTP:    500 Internal Server Error (generic message, details logged)
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(MemosError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic; SQL details are
    only logged server-side.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(MemosError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP:    429 Too Many Requests, with a Retry-After header
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
