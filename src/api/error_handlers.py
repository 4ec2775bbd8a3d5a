"""Error handlers for CardSheet API.

Every failure leaves the API in the same envelope:

    {"error": {"code": ..., "message": ..., "request_id": ..., "details": ...}}

The request id is the one assigned by the request-id middleware, so a client
can quote it when a dashboard or preview call fails.
"""

from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from src.api.exceptions import (
    CardSheetException,
    ConfigNotFoundError,
    InvalidInputError,
    SnapshotNotReadyError,
)
from src.utils.logging import get_logger

logger = get_logger("api.errors")

STATUS_BY_EXCEPTION = {
    ConfigNotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidInputError: status.HTTP_400_BAD_REQUEST,
    SnapshotNotReadyError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def get_request_id(request: Request) -> str:
    """Return the middleware-assigned request id, then the header, else "unknown"."""
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        return request_id

    return request.headers.get("X-Request-ID", "unknown")


def create_error_response(
    status_code: int,
    error_code: str,
    message: str,
    request_id: str,
    details: Optional[Dict[str, Any]] = None
) -> JSONResponse:
    """Build the error envelope. ``details`` is omitted when empty."""
    error: Dict[str, Any] = {
        "code": error_code,
        "message": message,
        "request_id": request_id,
    }
    if details:
        error["details"] = details

    return JSONResponse(status_code=status_code, content={"error": error})


def _details_for(exc: CardSheetException) -> Optional[Dict[str, Any]]:
    if isinstance(exc, SnapshotNotReadyError):
        return {"load_status": exc.status}
    if isinstance(exc, ConfigNotFoundError):
        return {"config_id": exc.config_id}
    if isinstance(exc, InvalidInputError) and exc.field:
        return {"field": exc.field}
    return None


async def cardsheet_exception_handler(request: Request, exc: CardSheetException) -> JSONResponse:
    """Handle CardSheet exceptions raised by the route handlers.

    Fetch and transport errors never reach here: the snapshot store turns
    them into an ``error`` load status, which routes then report as
    SnapshotNotReadyError. Anything unmapped is answered with 500.

    Args:
        request: FastAPI request object
        exc: CardSheetException instance

    Returns:
        JSONResponse with error details
    """
    status_code = STATUS_BY_EXCEPTION.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    if status_code == status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(f"Unmapped {type(exc).__name__} on {request.url.path}: {exc.message}")

    return create_error_response(
        status_code=status_code,
        error_code=exc.error_code,
        message=exc.message,
        request_id=get_request_id(request),
        details=_details_for(exc)
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed query or path parameters as VALIDATION_ERROR (422)."""
    errors = []
    for error in exc.errors():
        loc = [str(part) for part in error["loc"]]
        errors.append({
            "location": loc[0] if loc else "",
            "parameter": ".".join(loc[1:]),
            "message": error["msg"],
            "type": error["type"]
        })

    return create_error_response(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        error_code="VALIDATION_ERROR",
        message="Invalid request parameters",
        request_id=get_request_id(request),
        details={"validation_errors": errors}
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log an unexpected exception with its request id and answer 500."""
    request_id = get_request_id(request)
    logger.error(
        f"Unhandled {type(exc).__name__} on {request.method} {request.url.path} "
        f"(request {request_id}): {exc}",
        exc_info=True,
    )

    return create_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code="INTERNAL_SERVER_ERROR",
        message="An unexpected error occurred",
        request_id=request_id
    )
