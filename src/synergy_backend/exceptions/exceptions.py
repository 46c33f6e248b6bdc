"""
Exception handling with error codes and rich metadata.

This module provides custom HTTP exceptions that integrate with the error registry
to provide consistent, informative error responses with unique error codes.
"""

import inspect
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import HTTPException, status

from synergy_types.errors import ErrorDebugInfo, ErrorResponse


class SynergyException(HTTPException):
    """
    Base exception class for all REST errors of the Synergy backend.

    Provides:
    - Unique error codes from registry
    - Structured error responses
    - Debug information in development mode
    - Context metadata for logging and debugging
    """

    def __init__(
        self,
        error_code: str,
        detail: Any = None,
        headers: Optional[Dict[str, str]] = None,
        context: Optional[Dict[str, Any]] = None,
        user_id: Optional[str] = None,
    ):
        """
        Initialize exception with error code and metadata.

        Args:
            error_code: Error code from error registry (e.g., "AUTH_001")
            detail: Additional detail message (overrides registry message if provided)
            headers: HTTP response headers
            context: Additional context for debugging
            user_id: User ID if available
        """
        self.error_code = error_code
        self.custom_detail = detail
        self.context = context or {}
        self.user_id = user_id

        # Caller information for debugging, skipping this __init__ and the subclass __init__
        self.function_name = None
        self.file_name = None
        self.line_number = None
        frame = inspect.currentframe()
        if frame and frame.f_back:
            caller_frame = frame.f_back.f_back
            if caller_frame:
                self.function_name = caller_frame.f_code.co_name
                self.file_name = caller_frame.f_code.co_filename
                self.line_number = caller_frame.f_lineno

        # The actual status_code is set by subclasses. Starlette replaces a None
        # detail with the status phrase, so the registry check uses custom_detail.
        super().__init__(status_code=500, detail=detail, headers=headers)

    def to_error_response(self, include_debug: bool = False) -> ErrorResponse:
        """
        Convert exception to structured ErrorResponse.

        Args:
            include_debug: Whether to include debug information (dev mode only)
        """
        from synergy_backend.exceptions.error_registry import get_error_definition

        error_def = get_error_definition(self.error_code)

        debug_info = None
        if include_debug:
            debug_info = ErrorDebugInfo(
                timestamp=datetime.now(timezone.utc).isoformat(),
                function=self.function_name,
                file=self.file_name,
                line=self.line_number,
                user_id=self.user_id,
                additional_context=self.context,
            )

        # Use detail if it's a string, otherwise use default message
        message = error_def.message.plain
        details = self.context if self.context else None
        detail = self.custom_detail

        if detail:
            if isinstance(detail, str):
                message = detail
            elif isinstance(detail, dict):
                details = detail
                if "message" in detail and isinstance(detail["message"], str):
                    message = detail["message"]

        return ErrorResponse(
            error_code=self.error_code,
            message=message,
            details=details,
            severity=error_def.severity,
            category=error_def.category,
            retry_after=error_def.retry_after,
            debug=debug_info,
        )


# ============================================================================
# AUTHENTICATION EXCEPTIONS (401)
# ============================================================================


class UnauthorizedException(SynergyException):
    """Authentication required - 401"""

    def __init__(
        self,
        error_code: str = "AUTH_001",
        detail: Any = None,
        headers: Optional[Dict[str, str]] = None,
        **kwargs,
    ):
        super().__init__(error_code=error_code, detail=detail, headers=headers, **kwargs)
        self.status_code = status.HTTP_401_UNAUTHORIZED


class InvalidTokenException(SynergyException):
    """Bearer token malformed, badly signed or expired - 401"""

    def __init__(
        self,
        error_code: str = "AUTH_002",
        detail: Any = None,
        headers: Optional[Dict[str, str]] = None,
        **kwargs,
    ):
        super().__init__(error_code=error_code, detail=detail, headers=headers, **kwargs)
        self.status_code = status.HTTP_401_UNAUTHORIZED


class InvalidLoginException(SynergyException):
    """Wrong e-mail or password - 401"""

    def __init__(
        self,
        error_code: str = "AUTH_003",
        detail: Any = None,
        headers: Optional[Dict[str, str]] = None,
        **kwargs,
    ):
        super().__init__(error_code=error_code, detail=detail, headers=headers, **kwargs)
        self.status_code = status.HTTP_401_UNAUTHORIZED


# ============================================================================
# AUTHORIZATION EXCEPTIONS (403)
# ============================================================================


class ForbiddenException(SynergyException):
    """Insufficient permissions - 403"""

    def __init__(
        self,
        error_code: str = "AUTHZ_001",
        detail: Any = None,
        headers: Optional[Dict[str, str]] = None,
        **kwargs,
    ):
        super().__init__(error_code=error_code, detail=detail, headers=headers, **kwargs)
        self.status_code = status.HTTP_403_FORBIDDEN


class ProjectAccessDeniedException(SynergyException):
    """Caller is neither owner nor member of the project - 403"""

    def __init__(
        self,
        error_code: str = "AUTHZ_002",
        detail: Any = None,
        headers: Optional[Dict[str, str]] = None,
        **kwargs,
    ):
        super().__init__(error_code=error_code, detail=detail, headers=headers, **kwargs)
        self.status_code = status.HTTP_403_FORBIDDEN


# ============================================================================
# VALIDATION EXCEPTIONS (400)
# ============================================================================


class BadRequestException(SynergyException):
    """Invalid request - 400"""

    def __init__(
        self,
        error_code: str = "VAL_001",
        detail: Any = None,
        headers: Optional[Dict[str, str]] = None,
        **kwargs,
    ):
        super().__init__(error_code=error_code, detail=detail, headers=headers, **kwargs)
        self.status_code = status.HTTP_400_BAD_REQUEST


class ProjectFullException(SynergyException):
    """Project reached its member limit - 400"""

    def __init__(
        self,
        error_code: str = "VAL_002",
        detail: Any = None,
        headers: Optional[Dict[str, str]] = None,
        **kwargs,
    ):
        super().__init__(error_code=error_code, detail=detail, headers=headers, **kwargs)
        self.status_code = status.HTTP_400_BAD_REQUEST


# ============================================================================
# NOT FOUND EXCEPTIONS (404)
# ============================================================================


class NotFoundException(SynergyException):
    """Resource not found - 404"""

    def __init__(
        self,
        error_code: str = "NF_001",
        detail: Any = None,
        headers: Optional[Dict[str, str]] = None,
        **kwargs,
    ):
        super().__init__(error_code=error_code, detail=detail, headers=headers, **kwargs)
        self.status_code = status.HTTP_404_NOT_FOUND


class UserNotFoundException(SynergyException):
    """User not found - 404"""

    def __init__(
        self,
        error_code: str = "NF_002",
        detail: Any = None,
        headers: Optional[Dict[str, str]] = None,
        **kwargs,
    ):
        super().__init__(error_code=error_code, detail=detail, headers=headers, **kwargs)
        self.status_code = status.HTTP_404_NOT_FOUND


class ProjectNotFoundException(SynergyException):
    """Project not found - 404"""

    def __init__(
        self,
        error_code: str = "NF_003",
        detail: Any = None,
        headers: Optional[Dict[str, str]] = None,
        **kwargs,
    ):
        super().__init__(error_code=error_code, detail=detail, headers=headers, **kwargs)
        self.status_code = status.HTTP_404_NOT_FOUND


class JoinRequestNotFoundException(SynergyException):
    """Join request not found - 404"""

    def __init__(
        self,
        error_code: str = "NF_004",
        detail: Any = None,
        headers: Optional[Dict[str, str]] = None,
        **kwargs,
    ):
        super().__init__(error_code=error_code, detail=detail, headers=headers, **kwargs)
        self.status_code = status.HTTP_404_NOT_FOUND


# ============================================================================
# CONFLICT EXCEPTIONS (409)
# ============================================================================


class ConflictException(SynergyException):
    """Resource conflict - 409"""

    def __init__(
        self,
        error_code: str = "CONFLICT_001",
        detail: Any = None,
        headers: Optional[Dict[str, str]] = None,
        **kwargs,
    ):
        super().__init__(error_code=error_code, detail=detail, headers=headers, **kwargs)
        self.status_code = status.HTTP_409_CONFLICT


# ============================================================================
# INTERNAL SERVER ERRORS (500, 503)
# ============================================================================


class InternalServerException(SynergyException):
    """Internal server error - 500"""

    def __init__(
        self,
        error_code: str = "INT_001",
        detail: Any = None,
        headers: Optional[Dict[str, str]] = None,
        **kwargs,
    ):
        super().__init__(error_code=error_code, detail=detail, headers=headers, **kwargs)
        self.status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class ServiceUnavailableException(SynergyException):
    """Transient capacity issue (e.g. database pool exhausted) - 503"""

    def __init__(
        self,
        error_code: str = "INT_002",
        detail: Any = None,
        headers: Optional[Dict[str, str]] = None,
        **kwargs,
    ):
        super().__init__(error_code=error_code, detail=detail, headers=headers, **kwargs)
        self.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
