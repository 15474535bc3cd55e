import logging
import traceback
from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError
from auto_api.utils.exceptions import AppException, ErrorCode

logger = logging.getLogger(__name__)


def _error_response(
    status_code: int,
    message: str,
    code: str,
    details: list | None = None,
    field: str | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "message": message,
            "error": {"code": code, "details": details, "field": field},
        },
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Render AppException subclasses raised by the services."""
    error = exc.detail.get("error") or {}
    logger.debug(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    return _error_response(
        exc.status_code,
        exc.detail.get("message", "An error occurred"),
        error.get("code", ErrorCode.INTERNAL_SERVER_ERROR),
        error.get("details"),
        error.get("field"),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Pydantic validation errors (422), flattened to field/message pairs.
    """
    details = []
    for error in exc.errors():
        # loc is a tuple like ("body", "modell", "modell")
        loc = error.get("loc", [])
        field = ".".join(str(part) for part in loc if part != "body") if loc else "unknown"
        details.append({"field": field, "message": error.get("msg", "Invalid value")})

    return _error_response(
        422,
        "Validation error. Please check your input.",
        ErrorCode.VALIDATION_ERROR,
        details,
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """Constraint violations that were not translated by a service."""
    logger.warning(f"IntegrityError on {request.method} {request.url.path}: {exc.orig}")
    return _error_response(
        status.HTTP_409_CONFLICT,
        "A record with this data already exists.",
        ErrorCode.DUPLICATE_ENTRY,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Catch-all: logs the traceback, returns a safe 500 response.
    """
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}\n"
        f"{traceback.format_exc()}"
    )
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "An unexpected error occurred. Please try again later.",
        ErrorCode.INTERNAL_SERVER_ERROR,
    )
