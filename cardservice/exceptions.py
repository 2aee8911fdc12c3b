"""
Card Service — Custom Exception Hierarchy
===========================================

What:  Defines application-specific exceptions for every failure the service
       can report.
Why:   Each error is a structured value (kind + message + context). It only
       becomes wire format (`{"error": "<message>"}`) inside the exception
       handlers registered in main.py.
How:   Services and the store adapter raise these; FastAPI exception handlers
       map them to HTTP status codes. The two fatal errors never reach HTTP:
       the server entry point turns them into process exit codes.

Exception Hierarchy:
    CardServiceError (base)
    ├── InputParseError        → 400 Bad Request (malformed id or body)
    ├── ValidationError        → 400 Bad Request (short/missing field on create)
    ├── NotFoundError          → 404 Not Found
    ├── StoreOperationError    → 400 Bad Request (query/insert/update/delete failed)
    ├── StoreConnectionError   → fatal at startup, exit status 5
    └── ListenerFatalError     → fatal after startup, exit status 6
"""

from typing import Any, Dict, Optional


class CardServiceError(Exception):
    """
    Base exception for all Card Service errors.

    Attributes:
        kind:     Machine-readable error category
        message:  Client-facing description (becomes the "error" field)
        context:  Additional debug info (logged, never returned to the client)
    """

    kind = "card_service_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)

    def to_response(self) -> Dict[str, str]:
        """Wire representation used by every error response body."""
        return {"error": self.message}


class InputParseError(CardServiceError):
    """
    Raised when a path identifier or request body cannot be decoded.

    When:    `{id}` is not a 24-character hex string, or the JSON body is
             empty, malformed, or has a non-string field value.
    HTTP:    400 Bad Request

    Always raised before the store is touched.
    """

    kind = "input_parse_error"

    def __init__(
        self,
        message: str = "Malformed input",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class ValidationError(CardServiceError):
    """
    Raised when a decoded card fails the create-time length checks.

    HTTP:    400 Bad Request
    Note:    Only create validates. Update skips this gate.
    """

    kind = "validation_error"

    def __init__(
        self,
        message: str = "card validation failed, missing fields in insert",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(CardServiceError):
    """
    Raised when a read finds nothing (or finds something it cannot decode).

    HTTP:    404 Not Found

    Also raised by the list operation when the collection is empty, with the
    fixed message "No records found".
    """

    kind = "not_found"

    def __init__(
        self,
        resource: str = "card",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found"
            if resource_id:
                message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class StoreOperationError(CardServiceError):
    """
    Raised when a document store call fails or exceeds its time budget.

    HTTP:    400 Bad Request (reads translate it to 404 where a lookup failed)

    No retries: the driver's message is surfaced to the client as-is.
    """

    kind = "store_operation_error"

    def __init__(
        self,
        message: str = "store operation failed",
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if operation:
            ctx["operation"] = operation
        super().__init__(message=message, context=ctx)
        self.operation = operation


class StoreConnectionError(CardServiceError):
    """
    Raised when the startup connection probe fails.

    The message is fixed and the driver's cause is discarded: operators only
    need to know that the store was unreachable within the timeout.
    """

    kind = "store_connection_error"
    exit_code = 5

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Connect to db failed", context=context)


class ListenerFatalError(CardServiceError):
    """
    Raised when the HTTP listener cannot bind or dies after startup.

    Terminates the process with a status distinct from StoreConnectionError.
    """

    kind = "listener_fatal_error"
    exit_code = 6

    def __init__(
        self,
        message: str = "HTTP listener failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
