"""
NotaryPro Backend — Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for the error taxonomy of the API.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services, repositories, and access control; caught by global handlers.

Exception Hierarchy:
    NotaryProError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── AuthenticationError      → 401 Unauthorized (no identity)
    ├── AuthorizationError       → 403 Forbidden (wrong role / not owner)
    ├── NotFoundError            → 404 Not Found
    ├── StateConflictError       → 409 Conflict (invalid transition / already handled)
    ├── RateLimitExceededError   → 429 Too Many Requests
    └── DependencyError          → 503 Service Unavailable (store unreachable)

None of these are retried automatically; each maps to a distinct status code.
"""

from typing import Any, Dict, Optional


class NotaryProError(Exception):
    """
    Base exception for all NotaryPro application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged; only returned for 4xx errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(NotaryProError):
    """
    Raised when client input fails a business validation rule.

    HTTP: 400 Bad Request. Schema-level problems (wrong types, missing
    fields) are still answered by FastAPI with 422 before reaching services.
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


class AuthenticationError(NotaryProError):
    """Raised when the request carries no valid identity. HTTP 401."""

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthorizationError(NotaryProError):
    """
    Raised when an authenticated caller lacks the role or ownership an action needs.

    HTTP: 403 Forbidden
    """

    def __init__(
        self,
        message: str = "You are not allowed to perform this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(NotaryProError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing records; services convert that into
    this exception so the global handler can answer 404.
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


class StateConflictError(NotaryProError):
    """
    Raised when an action does not fit the current state of a record.

    When:  A document transition that is not in the lifecycle graph, a
           certify/reject on a document that is no longer pending
           certification, paying an already-paid commission.
    HTTP:  409 Conflict
    """

    def __init__(
        self,
        message: str = "The resource is not in a state that allows this action",
        current_state: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if current_state:
            ctx["current_state"] = current_state
        super().__init__(message=message, context=ctx)
        self.current_state = current_state


class RateLimitExceededError(NotaryProError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP: 429 Too Many Requests, with a Retry-After header.
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


class DependencyError(NotaryProError):
    """
    Raised when the database cannot be reached.

    HTTP: 503 Service Unavailable

    The message returned to the client is always generic; connection
    details are logged server-side only.
    """

    def __init__(
        self,
        message: str = "The data store is temporarily unavailable. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
