"""
Signed access tokens (JWT) for REST and realtime authentication.

The subject (``sub``) is the user id. ``userId`` is carried as well so
tokens issued by older clients of the platform keep decoding.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from synergy_backend.settings import settings


class InvalidTokenError(Exception):
    """Token is malformed, badly signed, expired or has no subject."""


class TokenService:

    def __init__(self, secret: str, algorithm: str = "HS256", expire_minutes: int = 60 * 24 * 7):
        self._secret = secret
        self._algorithm = algorithm
        self._expire_minutes = expire_minutes

    @classmethod
    def from_settings(cls) -> "TokenService":
        return cls(
            secret=settings.JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
            expire_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
        )

    @property
    def expires_in(self) -> int:
        """Token lifetime in seconds."""
        return self._expire_minutes * 60

    def issue(self, user_id: str, expires_delta: Optional[timedelta] = None) -> str:
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta if expires_delta is not None else timedelta(minutes=self._expire_minutes))
        payload = {
            "sub": user_id,
            "userId": user_id,
            "iat": now,
            "exp": expire,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def decode_subject(self, token: str) -> str:
        """
        Verify signature and expiry and return the user id.

        Raises:
            InvalidTokenError: For any token that must not be trusted
        """
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError as e:
            raise InvalidTokenError(str(e)) from e

        subject = payload.get("sub") or payload.get("userId")
        if not subject or not isinstance(subject, str):
            raise InvalidTokenError("Token has no subject")
        return subject
