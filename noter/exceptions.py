"""
Noter Backend: Exception Hierarchy
====================================

What:  Application-specific exceptions tagged with an error kind.
How:   Each exception carries a message, an ErrorKind, the operation that was
       being attempted, an optional wrapped cause, and a context dict.
       Global exception handlers (registered in main.py) and the route
       handlers branch on the kind to pick an HTTP status.
Who:   Raised by config, database and repository code; caught by handlers.

Exception Hierarchy:
    NoterError (base)
    ├── ValidationError      → 400 Bad Request
    ├── NotFoundError        → 404 Not Found
    ├── DatabaseError        → 500 (503 on the DB health probe)
    └── ConfigurationError   → fatal at startup
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """What went wrong, independent of the message text."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONNECTION = "connection"
    QUERY = "query"
    TRANSACTION = "transaction"
    MIGRATION = "migration"
    CONFIG = "config"


class NoterError(Exception):
    """
    Base exception for all Noter application errors.

    Attributes:
        message:    Human-readable description.
        kind:       ErrorKind tag used by callers to branch.
        operation:  What was being attempted ("create note", "ping", ...).
        cause:      The underlying exception, if any.
        context:    Extra debug info (logged, not returned to clients).
    """

    default_kind = ErrorKind.QUERY

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        kind: Optional[ErrorKind] = None,
        operation: Optional[str] = None,
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.kind = kind or self.default_kind
        self.operation = operation
        self.cause = cause
        self.context = context or {}
        super().__init__(self.message)

    @property
    def is_not_found(self) -> bool:
        return self.kind is ErrorKind.NOT_FOUND

    def __str__(self) -> str:
        detail = str(self.cause) if self.cause is not None else ""
        if detail:
            return f"{self.message}: {detail}"
        return self.message


class ValidationError(NoterError):
    """
    Raised when client input fails validation.

    When:  Empty title, malformed note identifier.
    HTTP:  400 Bad Request (plain-text body)
    """

    default_kind = ErrorKind.VALIDATION

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


class NotFoundError(NoterError):
    """
    Raised when a requested resource does not exist.

    When:  GET /notes/{id} with an id that was never created.
    HTTP:  404 Not Found

    SQLAlchemy returns None for a missing row; the repository converts that
    None into this exception so the route can answer 404.
    """

    default_kind = ErrorKind.NOT_FOUND

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
        super().__init__(message=message, operation=f"get {resource}", context=ctx)


class DatabaseError(NoterError):
    """
    Raised when a store operation fails.

    The kind distinguishes connection problems, failed queries, transaction
    handling and migrations. For a failed rollback, `cause` holds the error
    raised by the transaction body and `rollback_error` the rollback failure,
    so neither is lost.
    """

    def __init__(
        self,
        message: str = "A database error occurred",
        kind: ErrorKind = ErrorKind.QUERY,
        operation: Optional[str] = None,
        cause: Optional[BaseException] = None,
        rollback_error: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            kind=kind,
            operation=operation,
            cause=cause,
            context=context,
        )
        self.rollback_error = rollback_error

    def __str__(self) -> str:
        if self.rollback_error is not None:
            return (
                f"{self.message}: {self.rollback_error} "
                f"(original error: {self.cause})"
            )
        return super().__str__()


class ConfigurationError(NoterError):
    """Raised when settings cannot be loaded from the environment."""

    default_kind = ErrorKind.CONFIG
