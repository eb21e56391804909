"""
NoteDesk Backend — Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions, one per failure kind a caller can see.
How:   Each exception carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by repositories, routers and the auth client; caught by handlers.

Exception Hierarchy:
    NoteDeskError (base)
    ├── UnauthorizedError       → 401 (no/invalid session on a protected procedure)
    ├── ValidationError         → 400 (input failed schema rules, per-field messages)
    ├── NotFoundError           → 404 (row absent OR owned by someone else)
    ├── MethodNotAllowedError   → 405 (query over POST, mutation over GET)
    ├── AuthProviderError       → 502 (hosted auth provider rejected/unreachable)
    └── DatabaseError           → 500 (any other storage failure, opaque)

Every handler answers with the same envelope:
    {"error": <kind>, "message": <text>, "details": {...}, "request_id": <id>}
"""

from typing import Any, Dict, List, Optional


class NoteDeskError(Exception):
    """
    Base exception for all NoteDesk application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged; only some handlers return it)
    """

    # Machine-readable kind, used as the "error" field of the response
    code = "internal_server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class UnauthorizedError(NoteDeskError):
    """
    Raised when a protected procedure runs without an authenticated user.

    When:    No session cookie, expired session that could not be refreshed,
             or wrong credentials on sign-in.
    HTTP:    401 Unauthorized
    """

    code = "unauthorized"

    def __init__(
        self,
        message: str = "You must be signed in to do that",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ValidationError(NoteDeskError):
    """
    Raised when client input fails validation.

    What:    The input can be corrected by the client; `field_errors` maps
             each offending field to its messages.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Invalid input for note.create",
            "details": {"fields": {"title": ["String should have at least 1 character"]}}
        }
    """

    code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        field_errors: Optional[Dict[str, List[str]]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        self.field_errors = field_errors or {}
        if self.field_errors:
            ctx["fields"] = self.field_errors
        super().__init__(message=message, context=ctx)


class NotFoundError(NoteDeskError):
    """
    Raised when a requested row does not exist for the caller.

    A row owned by another user is reported exactly like a missing row,
    so a caller cannot probe other users' note ids.
    HTTP:    404 Not Found
    """

    code = "not_found"

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


class MethodNotAllowedError(NoteDeskError):
    """Raised when a query is sent as a mutation or the reverse. HTTP 405."""

    code = "method_not_supported"

    def __init__(self, path: str, expected: str):
        super().__init__(
            message=f"'{path}' is a {expected} and must be called with "
                    f"{'GET' if expected == 'query' else 'POST'}",
            context={"path": path, "kind": expected},
        )


class AuthProviderError(NoteDeskError):
    """
    Raised when the hosted auth provider rejects a request or cannot be reached.

    When:    Sign-up/password-reset rejected, or transport failures after
             tenacity retries are exhausted.
    HTTP:    502 Bad Gateway
    """

    code = "auth_provider_error"

    def __init__(
        self,
        message: str = "The authentication service is unavailable. Please try again later.",
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if status_code is not None:
            ctx["status_code"] = status_code
        super().__init__(message=message, context=ctx)
        self.status_code = status_code


class DatabaseError(NoteDeskError):
    """
    Raised when database operations fail unexpectedly.

    What:    A query, insert, update or delete failed for a reason other
             than "row not found" (connection lost, constraint violation...).
    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic.
        The driver error and operation are logged server-side only.
    """

    code = "server_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
