"""Error Hierarchy — typed, categorized exceptions for all sync failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - SyncDisabledError is a precondition short-circuit, not a failure (severity INFO)
    - "Not found" on pull is never an exception; the client returns None
    - to_response() produces the flat wire envelope {"error": message, "code": ...}

Design Decisions:
    - Single hierarchy with ChartSyncError base: coordinator catches one type,
      the reference endpoint's global handler maps all of them
    - SyncServerError subclassed per operation so callers can tell a failed
      push from a failed list without parsing messages
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    DECODE = "decode"
    CONFLICT = "conflict"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    diagram_id: str | None = None
    operation: str | None = None
    status_code: int | None = None
    debug_info: dict[str, Any] | None = None


class ChartSyncError(Exception):
    """Base exception for all sync errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to the wire error envelope."""
        return {
            "error": self.message,
            "code": self.code,
            "category": self.category.value,
            "severity": self.severity.value,
            "timestamp": self.context.timestamp.isoformat(),
            "diagram_id": self.context.diagram_id,
        }


# ─── Client-side Errors ─────────────────────────────────────────

class SyncDisabledError(ChartSyncError):
    """Sync is not configured (no endpoint or disabled flag)."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Sync service is not enabled",
            "SYNC_DISABLED", ErrorCategory.CONFIGURATION,
            ErrorSeverity.INFO, context, 503,
        )


class SyncTransportError(ChartSyncError):
    """Network-level failure before a response was received."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Sync transport failure: {message}",
            "TRANSPORT_FAILURE", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, context, 503,
        )


class SyncServerError(ChartSyncError):
    """Remote endpoint answered with a non-success status."""
    def __init__(
        self,
        message: str,
        status_code: int,
        error_code: str | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.status_code = status_code
        super().__init__(
            message, "SERVER_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, ctx, 502,
        )
        self.status_code = status_code
        self.error_code = error_code


class SyncPushError(SyncServerError):
    """Push rejected by the remote endpoint."""


class SyncPullError(SyncServerError):
    """Pull failed with a status other than 404."""


class SyncListError(SyncServerError):
    """Diagram listing failed."""


class SyncDecodeError(ChartSyncError):
    """Payload did not match the wire schema."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Malformed sync payload: {message}",
            "DECODE_FAILURE", ErrorCategory.DECODE,
            ErrorSeverity.ERROR, context, 400,
        )


# ─── Endpoint Errors ────────────────────────────────────────────

class ResourceNotFoundError(ChartSyncError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


class StaleDiagramError(ChartSyncError):
    """Incoming diagram is older than the stored version."""
    def __init__(self, diagram_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.diagram_id = diagram_id
        super().__init__(
            f"Diagram '{diagram_id}' has a newer version on the server",
            "STALE_DIAGRAM", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, ctx, 409,
        )


class DatabaseError(ChartSyncError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
