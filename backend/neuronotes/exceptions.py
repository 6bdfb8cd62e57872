"""
NeuroNotes Backend: Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions for each error scenario.
How:   Each exception carries a user-safe message and an optional context
       dict. Global handlers (registered in main.py) map them to HTTP status
       codes and structured JSON bodies.
Who:   Raised by services, the auth guard and middleware; caught by handlers.

Exception Hierarchy:
    NeuroNotesError (base)       → 500
    ├── ValidationError          → 400 Bad Request
    │   └── DuplicateUserError   → 400 Bad Request
    ├── AuthenticationError      → 401 Unauthorized
    ├── NotFoundError            → 404 Not Found
    ├── RateLimitExceededError   → 429 Too Many Requests
    ├── LLMServiceError          → 500 Internal Server Error
    └── DatabaseError            → 500 Internal Server Error

The `context` dict is logged server-side and never returned for 5xx errors.
"""

from typing import Any, Dict, Optional


class NeuroNotesError(Exception):
    """
    Base exception for all NeuroNotes application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, not returned for server errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(NeuroNotesError):
    """
    Raised when client input fails validation.

    When:    Missing or blank required fields, malformed email, bad payload.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Title is required",
            "details": {"field": "title"}
        }
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


class DuplicateUserError(ValidationError):
    """Raised at signup when the email is already registered."""

    def __init__(self, email: Optional[str] = None):
        super().__init__(message="User already exists", field="email")
        self.email = email


class AuthenticationError(NeuroNotesError):
    """
    Raised when a request has no valid session or credentials are wrong.

    HTTP:    401 Unauthorized

    The message never distinguishes "unknown email" from "wrong password".
    """

    def __init__(
        self,
        message: str = "Unauthorized",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(NeuroNotesError):
    """
    Raised when a requested resource does not exist for the caller.

    When:    Unknown note id, or a note owned by another user.
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
            message = f"{resource.capitalize()} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class LLMServiceError(NeuroNotesError):
    """
    Raised when the hosted text-generation API call fails.

    When:    Any provider error, timeout, blocked or empty response.
    HTTP:    500 Internal Server Error (no retry is attempted)
    """

    def __init__(
        self,
        message: str = "Failed to generate text",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(NeuroNotesError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    The client always receives a generic message; SQL details are logged only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(NeuroNotesError):
    """
    Raised when a client exceeds the per-IP AI request rate limit.

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
