"""
REST authentication dependency.

Accepts ``Authorization: Bearer <token>`` and, as a fallback for older
clients, the ``x-auth-token`` header. Tokens are checked by the same
``SessionAuthenticator`` the realtime channel uses.
"""

import logging
from typing import Optional

from fastapi import Depends, Header, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from synergy_types.auth import Identity
from synergy_backend.exceptions import InvalidTokenException, UnauthorizedException, UserNotFoundException
from synergy_backend.websocket.errors import AuthenticationRequired, IdentityNotFound, InvalidCredential

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    x_auth_token: Optional[str] = Header(None),
) -> Identity:
    token = credentials.credentials if credentials is not None else x_auth_token

    try:
        return await request.app.state.chat.authenticator.authenticate(token)
    except AuthenticationRequired:
        raise UnauthorizedException(headers={"WWW-Authenticate": "Bearer"})
    except InvalidCredential:
        raise InvalidTokenException(headers={"WWW-Authenticate": "Bearer"})
    except IdentityNotFound:
        raise UserNotFoundException()
