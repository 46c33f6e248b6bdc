"""
FastAPI exception handlers for structured error responses.

This module provides exception handlers that convert SynergyException instances
into properly formatted ErrorResponse objects.
"""

import logging
import traceback

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from synergy_backend.exceptions.exceptions import (
    BadRequestException,
    ConflictException,
    ForbiddenException,
    InternalServerException,
    NotFoundException,
    ServiceUnavailableException,
    SynergyException,
    UnauthorizedException,
)
from synergy_backend.settings import settings


logger = logging.getLogger(__name__)


def _build_response_data(error_response, include_debug: bool) -> dict:
    # Minimal payload: severity and category stay server side
    response_data = {
        "error_code": error_response.error_code,
        "message": error_response.message,
    }
    if error_response.details:
        response_data["details"] = error_response.details
    if include_debug and error_response.debug:
        response_data["debug"] = error_response.debug.model_dump(exclude_none=True)
    return response_data


async def synergy_exception_handler(request: Request, exc: SynergyException) -> JSONResponse:
    """
    Handle SynergyException instances.

    SECURITY NOTE: Debug information (file paths, function names, line numbers)
    is ONLY included when DEBUG_MODE is 'dev', 'development', or 'local'.
    """
    include_debug = settings.include_debug_info

    error_response = exc.to_error_response(include_debug=include_debug)

    log_error(request, exc)

    return JSONResponse(
        status_code=exc.status_code,
        content=_build_response_data(error_response, include_debug),
        headers=exc.headers or {},
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Convert pydantic request validation errors into a VAL_001 response."""
    errors = []
    for error in exc.errors():
        field = " -> ".join(str(x) for x in error["loc"][1:])  # Skip 'body' prefix
        errors.append({
            "field": field,
            "message": error["msg"],
            "type": error["type"],
        })

    exception = BadRequestException(
        error_code="VAL_001",
        detail="Request validation failed",
        context={"validation_errors": errors}
    )

    include_debug = settings.include_debug_info
    error_response = exception.to_error_response(include_debug=include_debug)

    logger.warning(
        f"Validation error on {request.method} {request.url.path}",
        extra={"validation_errors": errors}
    )

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_build_response_data(error_response, include_debug),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Handle standard HTTPException from Starlette/FastAPI (e.g. unknown routes).

    Converts to appropriate SynergyException type based on status code.
    """
    exception_map = {
        status.HTTP_400_BAD_REQUEST: BadRequestException,
        status.HTTP_401_UNAUTHORIZED: UnauthorizedException,
        status.HTTP_403_FORBIDDEN: ForbiddenException,
        status.HTTP_404_NOT_FOUND: NotFoundException,
        status.HTTP_405_METHOD_NOT_ALLOWED: BadRequestException,
        status.HTTP_409_CONFLICT: ConflictException,
        status.HTTP_503_SERVICE_UNAVAILABLE: ServiceUnavailableException,
    }

    exception_class = exception_map.get(exc.status_code, InternalServerException)

    synergy_exc = exception_class(
        detail=exc.detail,
        headers=getattr(exc, "headers", None),
    )

    return await synergy_exception_handler(request, synergy_exc)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions.

    Logs the full traceback and returns a generic internal server error.
    """
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}",
        exc_info=exc,
    )

    exception = InternalServerException(
        error_code="INT_001",
        detail="An unexpected error occurred",
        context={
            "exception_type": type(exc).__name__,
            "exception_message": str(exc),
        }
    )

    include_debug = settings.include_debug_info
    if include_debug:
        exception.context["traceback"] = traceback.format_exc()

    error_response = exception.to_error_response(include_debug=include_debug)

    response_data = {
        "error_code": error_response.error_code,
        "message": error_response.message,
    }
    if include_debug and error_response.debug:
        response_data["debug"] = error_response.debug.model_dump(exclude_none=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=response_data,
    )


def log_error(request: Request, exception: SynergyException) -> None:
    """Log a handled exception at a level matching its status code."""
    log_data = {
        "error_code": exception.error_code,
        "status_code": exception.status_code,
        "method": request.method,
        "path": request.url.path,
        "user_id": exception.user_id,
        "function": exception.function_name,
    }

    if exception.status_code >= 500:
        logger.error(f"Server error: {exception.error_code}", extra=log_data)
    elif exception.status_code >= 400:
        logger.warning(f"Client error: {exception.error_code}", extra=log_data)
    else:
        logger.info(f"Error: {exception.error_code}", extra=log_data)


def register_exception_handlers(app) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(SynergyException, synergy_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    # Catch-all
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.info("Registered custom exception handlers")
