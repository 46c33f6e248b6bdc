"""
Error taxonomy of the realtime chat channel.

Admission errors are fatal to a connection attempt: the client receives a
single ``error`` frame and the socket is closed with ``close_code``.
In-session send failures are not exceptions: the channel returns a
``SendFailed`` result that is reported through the acknowledgment.
"""

from typing import Optional


class ChatError(Exception):
    """Base class for chat channel errors."""

    code: str = "CHAT_ERROR"
    default_message: str = "Chat error"
    close_code: Optional[int] = 1011

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AdmissionError(ChatError):
    """Raised while a connection is being authenticated or authorized."""


# ============================================================================
# AUTHENTICATION (close 4001)
# ============================================================================


class AuthenticationRequired(AdmissionError):
    code = "AUTHENTICATION_REQUIRED"
    default_message = "Authentication required"
    close_code = 4001


class InvalidCredential(AdmissionError):
    code = "INVALID_CREDENTIAL"
    default_message = "Invalid or expired token"
    close_code = 4001


class IdentityNotFound(AdmissionError):
    code = "IDENTITY_NOT_FOUND"
    default_message = "User not found"
    close_code = 4001


# ============================================================================
# AUTHORIZATION (close 4003 / 4004)
# ============================================================================


class ProjectNotFound(AdmissionError):
    code = "PROJECT_NOT_FOUND"
    default_message = "Project not found"
    close_code = 4004


class ProjectIdRequired(ProjectNotFound):
    default_message = "Project ID required"


class NotAuthorized(AdmissionError):
    code = "NOT_AUTHORIZED"
    default_message = "Not authorized to access this project chat"
    close_code = 4003

