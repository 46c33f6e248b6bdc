"""
WebSocket authentication module.

Resolves the token presented at connection time to an identity. The REST
bearer dependency uses the same authenticator.
"""

import logging
from typing import Optional

from synergy_types.auth import Identity
from synergy_backend.utils.tokens import InvalidTokenError, TokenService
from synergy_backend.websocket.errors import AuthenticationRequired, IdentityNotFound, InvalidCredential
from synergy_backend.websocket.stores import IdentityDirectory

logger = logging.getLogger(__name__)


class SessionAuthenticator:

    def __init__(self, token_service: TokenService, identities: IdentityDirectory):
        self._token_service = token_service
        self._identities = identities

    async def authenticate(self, token: Optional[str]) -> Identity:
        """
        Authenticate a token.

        Raises:
            AuthenticationRequired: No token presented
            InvalidCredential: Malformed, badly signed or expired token
            IdentityNotFound: Token subject no longer resolves to a user
        """
        if not token or not token.strip():
            raise AuthenticationRequired()

        try:
            user_id = self._token_service.decode_subject(token.strip())
        except InvalidTokenError as e:
            logger.debug(f"Token rejected: {e}")
            raise InvalidCredential() from e

        identity = await self._identities.get_identity(user_id)
        if identity is None:
            raise IdentityNotFound()

        return identity
