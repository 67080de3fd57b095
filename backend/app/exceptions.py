"""
Blog API — Custom Exception Hierarchy
=======================================

What:  Application-specific exceptions for each failure class.
How:   Each exception carries a client-safe message and an optional context
       dict. Global exception handlers (registered in main.py) map them to
       HTTP status codes and a uniform JSON error envelope.
Who:   Raised by services, the authenticator and middleware.

Exception Hierarchy:
    BlogAPIError (base)
    ├── ValidationError          → 400 Bad Request
    │   └── AlreadyExistsError   → 400 Bad Request (uniqueness violated)
    ├── AuthenticationError      → 401 Unauthorized
    ├── AuthorizationError       → 403 Forbidden
    ├── NotFoundError            → 404 Not Found
    ├── RateLimitExceededError   → 429 Too Many Requests
    └── StorageError             → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class BlogAPIError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned for 401/500)
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(BlogAPIError):
    """
    Raised when client input fails validation.

    When:    Malformed or missing fields, out-of-range values, business-rule
             violations the client can correct.
    HTTP:    400 Bad Request
    """

    status_code = 400
    error_code = "validation_error"

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


class AlreadyExistsError(ValidationError):
    """
    Raised when a uniqueness rule would be violated.

    When:    Duplicate username/email at signup, duplicate post slug,
             a second like by the same user on the same post.
    HTTP:    400 Bad Request
    """

    error_code = "already_exists"

    def __init__(
        self,
        resource: str = "resource",
        field: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        super().__init__(
            message=message or f"This {resource} already exists",
            field=field,
            context=ctx,
        )


class AuthenticationError(BlogAPIError):
    """
    Raised when the caller cannot be authenticated.

    When:    Missing/malformed/expired token, bad signature, token subject with
             no stored user, unknown email or wrong password at login.
    HTTP:    401 Unauthorized

    The message is deliberately uniform across causes. The specific cause goes
    into `context["reason"]`, which is logged server-side only.
    """

    status_code = 401
    error_code = "unauthenticated"

    def __init__(
        self,
        reason: str = "unauthenticated",
        message: str = "Invalid or expired credentials",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["reason"] = reason
        super().__init__(message=message, context=ctx)
        self.reason = reason


class AuthorizationError(BlogAPIError):
    """
    Raised when an authenticated identity may not act on a resource.

    When:    Updating or deleting a post/comment owned by someone else.
    HTTP:    403 Forbidden
    """

    status_code = 403
    error_code = "forbidden"

    def __init__(
        self,
        resource: str = "resource",
        action: str = "modify",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        ctx["action"] = action
        super().__init__(
            message=f"You are not allowed to {action} this {resource}",
            context=ctx,
        )
        self.action = action


class NotFoundError(BlogAPIError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing rows; services convert that into this
    exception so routes never deal with status codes themselves.
    HTTP:    404 Not Found
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id is not None:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = str(resource_id)
        super().__init__(message=message, context=ctx)


class StorageError(BlogAPIError):
    """
    Raised when the backing store fails unexpectedly.

    When:    Connection lost mid-query, deadlock, unexpected constraint failure.
    HTTP:    500 Internal Server Error

    The client always receives a generic message; the original exception type
    and identifiers are logged server-side only.
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "A storage error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(BlogAPIError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP:    429 Too Many Requests (with a Retry-After header)
    """

    status_code = 429
    error_code = "rate_limit_exceeded"

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
