"""Error Handlers — render every failure as the flat sync error envelope.

Invariants:
    - Body is always {"error": <message>, "code": <CODE>, "category", "severity", ...}
    - ChartSyncError → its own http_status and to_response()
    - RequestValidationError → 400 VALIDATION_ERROR plus per-field details
    - Anything else → 500 INTERNAL_ERROR; the exception text is logged, never returned

Design Decisions:
    - Flat "error" string rather than a nested object: RemoteSyncClient reads
      "error" and "code" straight off the body
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from chartdb_sync.core.errors import ChartSyncError, ErrorCategory, ErrorSeverity

logger = logging.getLogger(__name__)


def _envelope(
    message: str, code: str, category: ErrorCategory, severity: ErrorSeverity,
    **extra,
) -> dict:
    return {
        "error": message,
        "code": code,
        "category": category.value,
        "severity": severity.value,
        **extra,
    }


async def handle_sync_error(request: Request, exc: ChartSyncError) -> JSONResponse:
    logger.warning(
        f"{exc.code} on {request.method} {request.url.path}: {exc.message}",
        extra={
            "error_code": exc.code,
            "path": request.url.path,
            "diagram_id": exc.context.diagram_id,
        },
    )
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


async def handle_validation_error(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(part) for part in err["loc"]),
            "message": err["msg"],
            "type": err["type"],
        }
        for err in exc.errors()
    ]
    logger.warning(
        f"Rejected request body on {request.url.path}",
        extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_envelope(
            "Invalid request data", "VALIDATION_ERROR",
            ErrorCategory.VALIDATION, ErrorSeverity.ERROR, details=details,
        ),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled exception on {request.url.path}: {exc}",
        extra={"path": request.url.path},
        exc_info=True,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_envelope(
            "An unexpected error occurred", "INTERNAL_ERROR",
            ErrorCategory.INTERNAL, ErrorSeverity.CRITICAL,
        ),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ChartSyncError, handle_sync_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
