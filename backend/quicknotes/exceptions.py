"""
QuickNotes Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for every failure a caller can observe.
How:   Each exception carries a user-safe message and an optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by the connection manager, validators and services.

Exception Hierarchy:
    QuickNotesError (base)
    ├── ConfigurationError       → 500 (MONGODB_URI missing)
    ├── StoreConnectionError     → 503 (store unreachable, bad auth, ...)
    ├── ValidationError          → 400 (client can fix)
    ├── NotFoundError            → 404
    └── OperationFailedError     → 500 (anything else during a store call)

The message is always safe to show to a user. Raw driver text only ever
lands in `context` or in the server log.
"""

import enum
from typing import Any, Dict, List, Optional


class QuickNotesError(Exception):
    """
    Base exception for all QuickNotes application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ConfigurationError(QuickNotesError):
    """
    Raised when the store connection string is not configured.

    Not retried automatically: nothing changes until the environment does.
    """

    def __init__(
        self,
        message: str = "Missing MONGODB_URI configuration",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ConnectionErrorKind(str, enum.Enum):
    """Categories a low-level connection failure is sorted into."""

    AUTHENTICATION = "authentication"
    UNREACHABLE = "unreachable"
    TIMEOUT = "timeout"
    ACCESS_RESTRICTED = "access_restricted"
    INVALID_ADDRESS = "invalid_address"
    GENERIC = "generic"

    @property
    def message(self) -> str:
        return _CONNECTION_ERROR_MESSAGES[self]


_CONNECTION_ERROR_MESSAGES = {
    ConnectionErrorKind.AUTHENTICATION: "Authentication failed",
    ConnectionErrorKind.UNREACHABLE: "Cannot reach MongoDB server",
    ConnectionErrorKind.TIMEOUT: "Connection timeout",
    ConnectionErrorKind.ACCESS_RESTRICTED: "IP address not whitelisted",
    ConnectionErrorKind.INVALID_ADDRESS: "Invalid connection string format",
    ConnectionErrorKind.GENERIC: "MongoDB connection error",
}


class StoreConnectionError(QuickNotesError):
    """
    Raised when opening a connection to MongoDB fails.

    What:    A categorized, user-safe view of a driver failure.
    When:    Only from ConnectionManager.acquire(); the in-flight attempt is
             already cleared when this propagates, so the next call retries.
    HTTP:    503 Service Unavailable

    Named StoreConnectionError so it does not shadow the builtin
    ConnectionError.
    """

    def __init__(
        self,
        kind: ConnectionErrorKind = ConnectionErrorKind.GENERIC,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["kind"] = kind.value
        super().__init__(message=message or kind.message, context=ctx)
        self.kind = kind


class ValidationError(QuickNotesError):
    """
    Raised when caller input violates a declared constraint.

    Never reaches the store layer. `errors` holds one entry per violated
    field so a form can render the failure next to the right input:

        {"field": "title", "constraint": "max_length", "message": "Title too long"}

    `field` and `constraint` mirror the first entry for convenience.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        constraint: Optional[str] = None,
        errors: Optional[List[Dict[str, str]]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if errors is None:
            errors = [{"field": field or "", "constraint": constraint or "", "message": message}]
        ctx = context or {}
        ctx["errors"] = errors
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field
        self.constraint = constraint
        self.errors = errors


class NotFoundError(QuickNotesError):
    """
    Raised when an identifier matches no document.

    What:    Update or delete targeted a note that does not exist.
    HTTP:    404 Not Found

    Kept distinct from OperationFailedError so callers can say "not found"
    rather than "something went wrong".
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
        self.resource = resource
        self.resource_id = resource_id


class OperationFailedError(QuickNotesError):
    """
    Raised when a store operation fails unexpectedly.

    Security Note:
        The message returned to the client is always generic.
        The driver error is logged server-side only.
    """

    def __init__(
        self,
        message: str = "The operation failed. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
