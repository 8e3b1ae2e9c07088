"""
Storefront Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions, one per failure tier.
How:   Each exception carries a client-facing `message`, an optional `detail`
       (the stringified underlying error, returned as the response `message`
       field when the endpoint exposes it) and a `context` dict that is only
       logged. Global handlers registered in main.py turn these into JSON.

Exception Hierarchy:
    StorefrontError (base)
    ├── ValidationError      → 400 Bad Request (malformed/missing input)
    ├── NotFoundError        → 404 Not Found (no row, absent file)
    ├── DatabaseError        → 500 Internal Server Error
    ├── FileStorageError     → 500 Internal Server Error
    ├── ServerError          → 500 Internal Server Error (other unexpected faults)
    ├── MailDeliveryError    → raised by mail transports; the mail service
    │                          records it on the log instead of propagating
    └── ConfigurationError   → startup only; aborts the lifespan
"""

from typing import Any, Dict, Optional


class StorefrontError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  Client-facing error description (the response `error` field)
        detail:   Optional diagnostic string (the response `message` field)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        detail: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.detail = detail
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(StorefrontError):
    """
    Raised when client input fails validation.

    When:    Non-numeric ids, blank or disallowed slugs, missing required fields.
    HTTP:    400 Bad Request. No side effect has been performed.
    """

    status_code = 400

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


class NotFoundError(StorefrontError):
    """
    Raised when a requested resource does not exist.

    When:    No matching (or a soft-deleted) row, absent page file, unknown log id.
    HTTP:    404 Not Found

    SQLAlchemy returns None for missing rows and the filesystem raises
    FileNotFoundError; services convert both into this exception.
    """

    status_code = 404

    def __init__(
        self,
        resource: str = "Resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=f"{resource} not found", context=ctx)
        self.resource = resource
        self.resource_id = resource_id


class DatabaseError(StorefrontError):
    """
    Raised when a database operation fails unexpectedly.

    When:    Store unreachable, query or serialization failure.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "A database error occurred",
        detail: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, detail=detail, context=context)


class FileStorageError(StorefrontError):
    """
    Raised when a file system operation fails for a reason other than absence.

    When:    Permission denied, disk full, corrupt JSON in a stored document.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        detail: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, detail=detail, context=context)


class ServerError(StorefrontError):
    """Any other unexpected failure inside a service operation (HTTP 500)."""

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        detail: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, detail=detail, context=context)


class MailDeliveryError(StorefrontError):
    """
    Raised by a MailTransport when a message could not be handed off.

    The mail service catches it, marks the log FAILED and reports
    `success: False` to its caller; it never reaches an HTTP handler directly.
    """

    def __init__(
        self,
        message: str = "Email delivery failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ConfigurationError(StorefrontError):
    """
    Raised when required configuration is missing or malformed.

    When:    Startup, while loading database credentials.
    Effect:  The lifespan re-raises it and the server refuses to start.
    """

    def __init__(self, message: str = "Invalid configuration"):
        super().__init__(message=message)
