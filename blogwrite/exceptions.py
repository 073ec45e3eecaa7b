"""
Blogwrite Backend — Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions, one per error class the API exposes.
How:   Each exception carries a user-facing message and an optional context
       dict. Global handlers (registered in main.py) map them to HTTP status
       codes and a uniform JSON body.

Exception Hierarchy:
    BlogwriteError (base)
    ├── ValidationError       → 400 Bad Request (field-level messages)
    ├── ConflictError         → 400 Bad Request (duplicate username/email)
    ├── UnauthenticatedError  → 401 Unauthorized
    ├── ForbiddenError        → 403 Forbidden (authenticated, not the owner)
    ├── NotFoundError         → 404 Not Found
    └── DatabaseError         → 500 Internal Server Error
"""

from typing import Any, Dict, List, Optional


class BlogwriteError(Exception):
    """
    Base exception for all Blogwrite application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
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


class ValidationError(BlogwriteError):
    """
    Raised when client input fails validation. Request schema failures are
    converted to this exception by the RequestValidationError handler.

    `errors` is a list of {"field": ..., "message": ...} entries, returned to
    the client as-is.
    """

    status_code = 400
    error_code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        errors: Optional[List[Dict[str, str]]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.errors = list(errors or [])


class ConflictError(BlogwriteError):
    """Raised when a unique attribute (username, email) is already taken."""

    status_code = 400
    error_code = "conflict"

    def __init__(
        self,
        message: str = "Resource already exists",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class UnauthenticatedError(BlogwriteError):
    """Missing, invalid or expired credentials."""

    status_code = 401
    error_code = "unauthenticated"

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(BlogwriteError):
    """
    Raised when an authenticated identity may not act on a resource.

    Always raised after the resource was found; a missing resource is a
    NotFoundError regardless of who asks.
    """

    status_code = 403
    error_code = "forbidden"

    def __init__(
        self,
        action: str = "modify",
        resource: str = "resource",
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"Not authorized to {action} this {resource}"
        ctx = context or {}
        ctx.update({"action": action, "resource": resource})
        super().__init__(message=message, context=ctx)
        self.action = action
        self.resource = resource


class NotFoundError(BlogwriteError):
    """Raised when a requested resource does not exist."""

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource


class DatabaseError(BlogwriteError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic; details go to the
    server log only.
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
