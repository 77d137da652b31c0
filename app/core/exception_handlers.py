"""Centralized exception handlers for the FastAPI app.

Register with register_exception_handlers(app). Maps domain and framework
exceptions to HTTP responses. 5xx responses never carry backend detail.
"""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.domain.exceptions import DmsException, StorageException
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

# Map domain error_code to HTTP status when applicable
_ERROR_CODE_STATUS: dict[str, int] = {
    "VALIDATION_ERROR": 400,
    "RESOURCE_NOT_FOUND": 404,
    "STORAGE_NOT_FOUND": 404,
    "STORAGE_KEY_CONFLICT": 409,
    "PERSISTENCE_ERROR": 500,
    "SERVICE_UNAVAILABLE": 503,
}

_STORAGE_UNAVAILABLE_STATUS = 503
_GENERIC_ERROR_MESSAGE = "Internal server error"
_GENERIC_MESSAGES: dict[int, str] = {
    500: _GENERIC_ERROR_MESSAGE,
    503: "Service temporarily unavailable",
}


def status_for(exc: DmsException) -> int:
    """HTTP status for a domain exception. Unmapped storage errors are 503, others 500."""
    status = _ERROR_CODE_STATUS.get(exc.error_code)
    if status is not None:
        return status
    if isinstance(exc, StorageException):
        return _STORAGE_UNAVAILABLE_STATUS
    return 500


def _dms_exception_handler(request: Request, exc: DmsException) -> JSONResponse:
    """Return JSON from DmsException.to_dict() with the mapped status code.

    5xx bodies carry only the error code and a generic message; backend
    detail (reason, storage key, backend codes) goes to the log.
    """
    status = status_for(exc)
    if status >= 500:
        logger.error(
            "%s on %s %s: %s",
            exc.error_code,
            request.method,
            request.url.path,
            exc.details,
        )
        return JSONResponse(
            status_code=status,
            content={
                "error": exc.error_code,
                "message": _GENERIC_MESSAGES.get(status, _GENERIC_ERROR_MESSAGE),
            },
        )
    if isinstance(exc, StorageException):
        return JSONResponse(
            status_code=status, content=exc.to_dict(include_details=False)
        )
    return JSONResponse(status_code=status, content=exc.to_dict())


def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return 422 with validation error details."""
    return JSONResponse(
        status_code=422,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Request validation failed",
            "details": exc.errors(),
        },
    )


def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Return JSON for Starlette HTTP exceptions (status + detail)."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "HTTP_ERROR", "message": exc.detail},
    )


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500; include detail only when debug is True."""
    logger.exception("Unhandled exception: %s", exc)
    settings = get_settings()
    detail: Any = str(exc) if settings.debug else _GENERIC_ERROR_MESSAGE
    return JSONResponse(
        status_code=500,
        content={"error": "INTERNAL_ERROR", "message": detail},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app.

    Call once after creating the app. Handlers: DmsException (and
    subclasses), RequestValidationError, StarletteHTTPException, generic Exception.
    """
    app.add_exception_handler(DmsException, _dms_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
