"""Business logic for registration and login."""

import logging

from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from synergy_types.auth import LoginResponse, UserGet, UserLogin, UserRegister
from synergy_types.password_utils import hash_password, needs_rehash, verify_password
from synergy_backend.exceptions import ConflictException, InvalidLoginException, UserNotFoundException
from synergy_backend.model.auth import User
from synergy_backend.repositories import UserRepository
from synergy_backend.utils.tokens import TokenService

logger = logging.getLogger(__name__)


async def register_user(payload: UserRegister, db: Session) -> UserGet:
    # Argon2 hashing and the queries block; keep them off the event loop
    return await run_in_threadpool(_register_user, payload, db)


def _register_user(payload: UserRegister, db: Session) -> UserGet:
    repo = UserRepository(db)

    if repo.find_by_email(payload.email) is not None:
        raise ConflictException(detail="User already exists")

    user = repo.create(User(
        name=payload.name,
        email=payload.email,
        password=hash_password(payload.password),
        college=payload.college,
        education=payload.education,
        skills=list(payload.skills),
        about=payload.about,
    ))

    logger.info(f"Registered user {user.id}")
    return UserGet.model_validate(user)


async def login_user(payload: UserLogin, db: Session, token_service: TokenService) -> LoginResponse:
    """
    Verify credentials and issue an access token.

    Unknown e-mail and wrong password produce the same error.
    """
    return await run_in_threadpool(_login_user, payload, db, token_service)


def _login_user(payload: UserLogin, db: Session, token_service: TokenService) -> LoginResponse:
    repo = UserRepository(db)
    user = repo.find_by_email(payload.email)

    if user is None or not verify_password(payload.password, user.password):
        raise InvalidLoginException()

    if needs_rehash(user.password):
        repo.update(user, password=hash_password(payload.password))

    return LoginResponse(
        token=token_service.issue(user.id),
        expires_in=token_service.expires_in,
        user=UserGet.model_validate(user),
    )


async def get_user(user_id: str, db: Session) -> UserGet:
    return await run_in_threadpool(_get_user, user_id, db)


def _get_user(user_id: str, db: Session) -> UserGet:
    user = UserRepository(db).get_by_id_optional(user_id)
    if user is None:
        raise UserNotFoundException()
    return UserGet.model_validate(user)
