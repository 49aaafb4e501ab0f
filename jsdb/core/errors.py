"""Error Hierarchy — typed, categorized exceptions for every JSDB failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Request errors (validation, protection, clauses) are recoverable by the caller;
      storage errors (IO, format) are critical
    - to_response() produces the error block of the response envelope
    - TableAbsent is a soft condition and has no exception class

Design Decisions:
    - Single hierarchy with JsdbError base: the dispatcher catches one type
    - ErrorContext as dataclass: rich observability without coupling to logging
    - StorageIOError instead of IOError: the builtin name stays untouched
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    PERMISSION = "permission"
    QUERY = "query"
    STORAGE = "storage"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    table: str | None = None
    command: str | None = None
    field: str | None = None
    debug_info: dict[str, Any] | None = None


class JsdbError(Exception):
    """Base exception for all JSDB errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()

    def to_response(self) -> dict:
        """Convert to the error block of a response envelope."""
        return {
            "code": self.code,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "timestamp": self.context.timestamp.isoformat(),
            "context": {
                "table": self.context.table,
                "command": self.context.command,
                "field": self.context.field,
            },
        }


# ─── Request Errors ─────────────────────────────────────────────

class ValidationError(JsdbError):
    """Incoming command has a malformed shape."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.field = field
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, ctx,
        )
        self.field = field


class ProtectedTableError(JsdbError):
    """Read or write access to a protected table."""
    def __init__(self, table: str, access: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.table = table
        super().__init__(
            f"Table {table} is {access} protected.",
            "PROTECTED_TABLE", ErrorCategory.PERMISSION,
            ErrorSeverity.ERROR, ctx,
        )
        self.table = table
        self.access = access


class InvalidClauseError(JsdbError):
    """Where-clause has the wrong arity or an unknown join."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_CLAUSE", ErrorCategory.QUERY,
            ErrorSeverity.ERROR, context,
        )


class InvalidOperatorError(JsdbError):
    """Where-clause uses an unsupported comparison or join operator."""
    def __init__(self, operator: Any, context: ErrorContext | None = None):
        super().__init__(
            f"Invalid Operator {operator}",
            "INVALID_OPERATOR", ErrorCategory.QUERY,
            ErrorSeverity.ERROR, context,
        )
        self.operator = operator


class BuilderConsumedError(JsdbError):
    """A terminal method was called on an already executed query."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Query already executed; build a new query per command.",
            "BUILDER_CONSUMED", ErrorCategory.INTERNAL,
            ErrorSeverity.ERROR, context,
        )


# ─── Storage Errors ─────────────────────────────────────────────

class StorageIOError(JsdbError):
    """Backing file or lock marker could not be read, written or removed."""
    def __init__(self, message: str, path: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.debug_info = {**(ctx.debug_info or {}), "path": path}
        super().__init__(
            message, "STORAGE_IO_ERROR", ErrorCategory.STORAGE,
            ErrorSeverity.CRITICAL, ctx,
        )
        self.path = path


class FormatError(JsdbError):
    """Persisted content is not a valid table-to-rows mapping."""
    def __init__(self, message: str, path: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.debug_info = {**(ctx.debug_info or {}), "path": path}
        super().__init__(
            message, "FORMAT_ERROR", ErrorCategory.STORAGE,
            ErrorSeverity.CRITICAL, ctx,
        )
        self.path = path
