"""
Error handling package for the Synergy backend.

This package provides:
- Custom exception classes with error codes
- Error registry management
- FastAPI exception handlers
- Structured error responses

Usage:
    from synergy_backend.exceptions import (
        NotFoundException,
        ForbiddenException,
        register_exception_handlers,
    )
"""

from synergy_backend.exceptions.exceptions import (
    # Base exception
    SynergyException,

    # Authentication exceptions (401)
    UnauthorizedException,
    InvalidTokenException,
    InvalidLoginException,

    # Authorization exceptions (403)
    ForbiddenException,
    ProjectAccessDeniedException,

    # Validation exceptions (400)
    BadRequestException,
    ProjectFullException,

    # Not found exceptions (404)
    NotFoundException,
    UserNotFoundException,
    ProjectNotFoundException,
    JoinRequestNotFoundException,

    # Conflict exceptions (409)
    ConflictException,

    # Server errors (500, 503)
    InternalServerException,
    ServiceUnavailableException,
)

from synergy_backend.exceptions.error_registry import (
    load_error_registry,
    get_error_definition,
    get_all_error_codes,
    get_errors_by_http_status,
    get_registry_version,
    validate_error_registry,
)

from synergy_backend.exceptions.error_handlers import (
    register_exception_handlers,
)

__all__ = [
    "SynergyException",
    "UnauthorizedException",
    "InvalidTokenException",
    "InvalidLoginException",
    "ForbiddenException",
    "ProjectAccessDeniedException",
    "BadRequestException",
    "ProjectFullException",
    "NotFoundException",
    "UserNotFoundException",
    "ProjectNotFoundException",
    "JoinRequestNotFoundException",
    "ConflictException",
    "InternalServerException",
    "ServiceUnavailableException",
    "load_error_registry",
    "get_error_definition",
    "get_all_error_codes",
    "get_errors_by_http_status",
    "get_registry_version",
    "validate_error_registry",
    "register_exception_handlers",
]
